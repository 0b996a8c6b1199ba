"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://noctura:noctura_dev_password@db:5432/noctura"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:4200",
        "https://noctura.netlify.app",
    ]

    # Pagination
    default_page: int = 1
    default_page_size: int = 6

    # Request limits
    max_request_body_bytes: int = 10 * 1024 * 1024
    max_upload_file_bytes: int = 5 * 1024 * 1024
    upload_field_name: str = "images"

    # Object store (Cloudinary-compatible unsigned upload)
    object_store_url: str = "https://api.cloudinary.com/v1_1"
    object_store_cloud_name: str = "noctura"
    object_store_upload_preset: str = "noctura_products"
    object_store_folder: str | None = "products"
    object_store_timeout: float | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
