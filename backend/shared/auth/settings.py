"""Auth settings for the hub server and account tooling."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shared.auth.password import DEFAULT_BCRYPT_ROUNDS

# Fallback values that earlier deployments used in place of a real secret.
_INSECURE_SECRETS = {"secret", "changeme"}


class AuthSettings(BaseSettings):
    model_config = {"env_prefix": "AUTH_"}

    # HMAC secret for session tokens -- required, no default.
    # The application fails to start if AUTH_TOKEN_SECRET is not set.
    token_secret: str = Field(min_length=1, repr=False)

    # SQLite database file path
    database_path: str = "backend/storage.db"

    password_hasher: Literal["bcrypt", "simple"] = "bcrypt"
    bcrypt_rounds: int = Field(default=DEFAULT_BCRYPT_ROUNDS, ge=4, le=31)

    @field_validator("token_secret")
    @classmethod
    def reject_insecure_secret(cls, v: str) -> str:
        if v.strip().lower() in _INSECURE_SECRETS:
            raise ValueError("token_secret must not be a well-known placeholder value")
        return v
