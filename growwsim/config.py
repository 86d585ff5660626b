# growwsim/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    APP_NAME: str = "Groww Simulator"

    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "groww-clone"
    MONGO_TIMEOUT_MS: int = 5000

    API_PREFIX: str = "/api"
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 5001
    # comma separated
    CORS_ORIGINS: str = "*"

    STARTING_BALANCE: float = 1000.0
    BASE_CURRENCY: str = "INR"

    SECRET_KEY: str = "your-secret-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    MAX_LOGIN_ATTEMPTS: int = 5
    LOCK_MINUTES: int = 120

    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    SEED_ON_STARTUP: bool = True
    SEED_HISTORY_DAYS: int = 365

    MARKET_SIMULATION_ENABLED: bool = False
    # "hour minute day_of_week"
    PRICE_TICK_CRON: str = "9-15 */5 mon-fri"
    MARKET_TIMEZONE: str = "Asia/Kolkata"

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
