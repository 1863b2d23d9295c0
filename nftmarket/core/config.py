from enum import StrEnum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    development = "development"
    production = "production"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NFTMARKET_", env_file=".env")

    ENV: Environment = Environment.development
    LOG_LEVEL: str = "INFO"

    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8080
    # Default window for the for-sale listing endpoint
    PAGE_SIZE: int = 20

    # Dev-only credit endpoint, never exposed in production
    FAUCET_ENABLED: bool = True

    @property
    def is_production(self) -> bool:
        return self.ENV == Environment.production

    @property
    def faucet_enabled(self) -> bool:
        return self.FAUCET_ENABLED and not self.is_production


settings = Settings()
