from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional

class Settings(BaseSettings):
    """
    Application-wide settings managed by Pydantic.
    Reads configuration from environment variables and .env files.
    """
    # General project metadata
    PROJECT_NAME: str = "Registry Viewer"
    API_V1_STR: str = "/api/v1"

    # Logging level for the root logger (DEBUG, INFO, WARNING, ...)
    LOG_LEVEL: str = "INFO"

    # Upstream Registry Configuration
    # Base URL of the registry implementing the distribution HTTP API,
    # e.g. https://registry.example.com (without the /v2 suffix)
    REGISTRY_URL: str
    # Pre-encoded Authorization header value forwarded on every upstream call.
    # Either a full header value ("Basic dXNlcjpwYXNz") or the bare base64 credential.
    BASIC_AUTH: str

    # Maximum number of upstream requests in flight per enrichment batch
    REGISTRY_MAX_CONCURRENCY: int = Field(default=16, ge=1)

    @field_validator("REGISTRY_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are joined as f"{REGISTRY_URL}/v2/...", so drop any trailing slash."""
        return v.rstrip("/")

    @field_validator("BASIC_AUTH")
    @classmethod
    def ensure_auth_scheme(cls, v: str) -> str:
        """
        Accept a bare base64 credential as well as a full header value.

        "dXNlcjpwYXNz" -> "Basic dXNlcjpwYXNz"
        "Bearer abc"   -> "Bearer abc"
        """
        v = v.strip()
        if " " not in v:
            return f"Basic {v}"
        return v

    # Authentication for the UI
    # Single user whose password is stored as a bcrypt hash
    USERNAME: Optional[str] = None
    HASHED_PASSWORD: Optional[str] = None
    # Secret used to sign the HS256 access tokens
    SECRET: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Directory holding the built frontend; mounted at / when it exists
    STATIC_DIR: str = "static"

    CORS_ORIGINS: List[str] = ["*"]

    # Pydantic Configuration
    model_config = SettingsConfigDict(
        env_file=".env",              # Load variables from .env file
        env_file_encoding="utf-8",    # Ensure correct encoding
        case_sensitive=True,          # Environment variables are case-sensitive
        extra="ignore"                # Ignore extra fields in .env not defined here
    )

# Instantiate the settings object to be imported elsewhere
settings = Settings()
