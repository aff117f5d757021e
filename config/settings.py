from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Offline mode rejects every endpoint that needs the node
    MODE: Literal["online", "offline"] = "online"
    NETWORK: str = "kava_2222-10"
    PORT: int = Field(8000, gt=0)

    # Node endpoints (defaults match a local kava node)
    NODE_RPC_URL: str = "http://localhost:26657"
    NODE_API_URL: str = "http://localhost:1317"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Chain parameters
    BECH32_PREFIX: str = "kava"
    STAKING_DENOM: str = "ukava"
    FEE_DENOM: str = "ukava"

    # App
    APP_NAME: str = "Rosetta Kava"
    LOG_LEVEL: str = "INFO"


settings = Settings()
