from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Property Listings"
    debug: bool = False
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Required. Startup fails when this is left empty.
    database_url: str = ""

    cors_origins: str = "http://localhost:3000"

    default_page_size: int = 9
    max_page_size: int = 100

    model_config = {"env_file": ".env"}


settings = Settings()
