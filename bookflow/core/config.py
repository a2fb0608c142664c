from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    API_BASE_URL: str = "http://localhost:3000"
    API_ACCESS_TOKEN: str | None = None
    GRAPHQL_ENDPOINT: str = "http://localhost:4000/graphql"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    BOOKING_API_PROVIDER: str = "mock"  # "mock" or "rest"
    PROVIDER_SOURCE: str = "static"  # "static" or "graphql"
    FAVORITES_STORE: str = "memory"  # "memory" or "json"
    FAVORITES_DATA_DIR: str = "./data/favorites"

    # Test/staging only: treat every request as a signed-in fake user
    AUTH_BYPASS_ENABLED: bool = False

    SPECIAL_REQUESTS_LIMIT: int = 500
    PROMO_DISCOUNT_RATE: float = 0.1
    LOGIN_PATH: str = "/login"


settings = Settings()
