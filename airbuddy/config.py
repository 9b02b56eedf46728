import os
from functools import lru_cache
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict

DEFAULT_LOCATION = "Government Engineering College Palakkad, Kerala, India"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    aqi_api_key: Optional[str] = None
    locationiq_api_key: Optional[str] = None
    port: int = 3000
    environment: str = "development"
    waqi_base_url: str = "https://api.waqi.info"
    locationiq_base_url: str = "https://us1.locationiq.com/v1"
    http_timeout: float = 10.0
    default_location: str = DEFAULT_LOCATION

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and ``.env``, if present)."""
        load_dotenv(find_dotenv(usecwd=True))
        values = {
            "aqi_api_key": os.getenv("AQI_API_KEY") or None,
            "locationiq_api_key": os.getenv("LOCATIONIQ_API_KEY") or None,
            "port": os.getenv("PORT"),
            "environment": os.getenv("ENVIRONMENT"),
            "waqi_base_url": os.getenv("WAQI_BASE_URL"),
            "locationiq_base_url": os.getenv("LOCATIONIQ_BASE_URL"),
            "http_timeout": os.getenv("HTTP_TIMEOUT"),
            "default_location": os.getenv("DEFAULT_LOCATION"),
        }
        # unset variables keep the field defaults
        return cls(**{k: v for k, v in values.items() if v is not None})


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
