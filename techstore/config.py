from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./techstore.db"
    DATABASE_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_CONNECT_TIMEOUT: int = 10

    # Application
    APP_NAME: str = "TechStore Inventory"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]  # Restrict in production

    # Reports
    LOW_STOCK_THRESHOLD: int = 5
    RECENT_MOVEMENTS_LIMIT: int = 10
    TOP_SELLERS_LIMIT: int = 3
    CSV_DELIMITER: str = ";"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
