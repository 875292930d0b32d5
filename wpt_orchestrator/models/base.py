"""Base model configuration for validated input documents."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen model that keeps unknown keys from upstream documents."""

    model_config = ConfigDict(frozen=True, extra="allow")
