from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    database_url: str = "sqlite:///./catalog.db"
    default_page_size: int = 50
    max_page_size: int = 500
    store_timeout_ms: int = 5000
    permalink_template: str = "/products/{slug}/"
    date_format: str = "%B %d, %Y"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
