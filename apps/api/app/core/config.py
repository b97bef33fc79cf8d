"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    auth_provider: Literal["mock", "firebase"] = "firebase"
    firebase_project_id: str | None = None
    firebase_audience: str | None = None

    store_backend: Literal["memory", "firestore"] = "firestore"
    store_timeout_seconds: float = 10.0

    payment_provider: Literal["mock", "razorpay"] = "razorpay"
    razorpay_key_id: str | None = None
    razorpay_key_secret: str | None = None
    razorpay_api_base_url: str = "https://api.razorpay.com/v1"
    gateway_timeout_seconds: float = 10.0
    webhook_secret: str

    job_price_minor_units: int = 900
    currency: str = "INR"

    model_config = SettingsConfigDict(env_prefix="UNLOCKER_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
