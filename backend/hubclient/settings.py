"""Client configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    model_config = {"env_prefix": "HUBCLIENT_"}

    api_base: str = "http://localhost:5002"
    timeout_seconds: float = Field(default=10.0, gt=0)

    # JSON file standing in for browser local storage
    storage_path: str = "hubclient-storage.json"
