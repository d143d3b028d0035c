"""
Configuration loader for the image resize service.

Environment variables are centralized here to keep the rest of the code
focused on the pipeline and to make operational tuning clear.
"""

from functools import lru_cache
import logging
from typing import Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # S3-compatible storage. The bucket is not checked up front; a missing
    # value surfaces as a store error on the first write.
    bucket_name: Optional[str] = Field(None, description="BUCKET_NAME")
    s3_endpoint_url: Optional[str] = Field(None, description="S3_ENDPOINT_URL")
    aws_region: Optional[str] = Field(None, description="AWS_REGION")
    aws_access_key_id: Optional[str] = Field(None, description="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(None, description="AWS_SECRET_ACCESS_KEY")
    signed_url_expires_seconds: int = Field(60, description="SIGNED_URL_EXPIRES_SECONDS")

    # Fetch
    request_timeout_seconds: Optional[float] = Field(None, description="REQUEST_TIMEOUT_SECONDS")

    # Transform tunables
    jpeg_quality: int = Field(90, description="JPEG_QUALITY")
    sharpen_radius: float = Field(1.0, description="SHARPEN_RADIUS")
    sharpen_percent: int = Field(80, description="SHARPEN_PERCENT")
    sharpen_threshold: int = Field(2, description="SHARPEN_THRESHOLD")
    brightness: float = Field(1.0, description="BRIGHTNESS")
    saturation: float = Field(1.0, description="SATURATION")
    keep_metadata: bool = Field(True, description="KEEP_METADATA")
    flatten_background: str = Field("#000000", description="FLATTEN_BACKGROUND")

    log_level: str = Field("INFO", description="LOG_LEVEL")

    @field_validator("jpeg_quality")
    @classmethod
    def validate_quality(cls, v: int) -> int:
        if not 1 <= v <= 95:
            raise ValueError("JPEG_QUALITY must be between 1 and 95")
        return v

    @field_validator("signed_url_expires_seconds")
    @classmethod
    def validate_expiry(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("SIGNED_URL_EXPIRES_SECONDS must be positive")
        return v

    @field_validator("brightness", "saturation")
    @classmethod
    def validate_multiplier(cls, v: float) -> float:
        if v < 0:
            raise ValueError("BRIGHTNESS and SATURATION must not be negative")
        return v

    @field_validator("flatten_background")
    @classmethod
    def validate_background(cls, v: str) -> str:
        if parse_hex_color(v) is None:
            raise ValueError("FLATTEN_BACKGROUND must be a #RRGGBB color")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if not isinstance(logging.getLevelName(v.upper()), int):
            raise ValueError(f"Unknown LOG_LEVEL {v!r}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()


def parse_hex_color(value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    if not value:
        return None
    raw = value.strip()
    if raw.startswith("#"):
        raw = raw[1:]
    if len(raw) != 6:
        return None
    try:
        r = int(raw[0:2], 16)
        g = int(raw[2:4], 16)
        b = int(raw[4:6], 16)
        return (r, g, b)
    except ValueError:
        return None


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply `LOG_LEVEL` to the root logger for process entry points."""
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
