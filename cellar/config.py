from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cellar.models.upload import ImageMimeType, ImageUploadConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Wine Cellar API"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    log_dir: str | None = None
    database_url: str = "sqlite:///./cellar.db"
    cors_origins: str = "*"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    upload_dir: str = "uploads/wines"
    max_file_size: int = Field(default=5 * 1024 * 1024, ge=1)
    max_image_width: int = Field(default=1200, ge=1)
    image_quality: int = Field(default=85, ge=1, le=100)
    allowed_mime_types: list[ImageMimeType] = Field(
        default_factory=lambda: [ImageMimeType.JPEG, ImageMimeType.PNG, ImageMimeType.WEBP],
        min_length=1,
    )

    @property
    def upload_path(self) -> Path:
        return Path(self.upload_dir)

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def upload_config(self) -> ImageUploadConfig:
        return ImageUploadConfig(
            upload_dir=self.upload_path,
            max_file_size=self.max_file_size,
            max_image_width=self.max_image_width,
            image_quality=self.image_quality,
            allowed_mime_types=frozenset(self.allowed_mime_types),
        )


settings = Settings()
