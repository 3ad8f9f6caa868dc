from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_files() -> list[str]:
    """Repository-root .env first, then the working directory's."""
    base = Path(__file__).resolve().parents[3]
    return [str(base / ".env"), ".env"]


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    secret: str = "change-me"
    algorithm: str = "HS256"
    issuer: str = "bonsai-auth"
    audience: str = "bonsai-services"
    # Clock skew tolerated on exp / iat between the auth service and this one
    leeway_seconds: int = 30
