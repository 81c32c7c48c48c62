"""Application settings loaded from environment variables.

Defines all environment-driven configuration used by the app.
"""

import sys
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration model for the application."""

    # LLM parameters
    OPENAI_API_KEY: Optional[str] = None
    LLM_MODEL: str = "openai/gpt-oss-120b"
    LLM_BASE_URL: Optional[str] = "https://api.groq.com/openai/v1"

    # Page loading
    PAGE_LOADER: Literal["browser", "http"] = "browser"
    HEADLESS: bool = True
    PAGE_LOAD_TIMEOUT_SECONDS: float = 60
    SELECTOR_TIMEOUT_SECONDS: float = 10
    SETTLE_DELAY_SECONDS: float = 3
    HTTP_TIMEOUT_SECONDS: float = 15
    SOURCE_TIMEOUT_SECONDS: float = 90

    # Extraction process
    EXTRACTION_SERVER_COMMAND: str = sys.executable
    TOOL_CALL_TIMEOUT_SECONDS: float = 120

    # API parameters
    ROOT_PATH_BACKEND: str = ""
    ALLOWED_ORIGINS: list[str] = ["http://localhost:5173"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
