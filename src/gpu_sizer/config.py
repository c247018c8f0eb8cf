from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Catalog service
    CATALOG_BASE_URL: str = "http://localhost:8080"
    CATALOG_TIMEOUT_S: float = 10.0

    # Sizing
    HYDRATION_WIDTH: int = 8
    DEFAULT_MAX_GROUP_SIZE: int = 0

    # Logging
    LOG_LEVEL: str = "INFO"

    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    class Config:
        env_file = ".env"
        env_prefix = "GPU_SIZER_"
        case_sensitive = True


settings = Settings()
