"""Configuration for the HTTP runner."""

from pydantic import BaseModel, SecretStr


class HttpRunnerConfig(BaseModel):
    """Configuration for a remote test execution service."""

    api_base_url: str
    run_path: str = "/run"
    token: SecretStr | None = None
