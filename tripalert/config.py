from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, List

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from .storage import STORAGE_FILE

load_dotenv()

KNOWN_SOURCES = ("skyscanner", "kiwi", "amadeus", "googleflights")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_token: str = Field("", alias="TRIPALERT_TELEGRAM_BOT_TOKEN")
    telegram_chat_id: str = Field("", alias="TRIPALERT_TELEGRAM_CHAT")
    whatsapp_number: str = Field("000000", alias="TRIPALERT_WHATSAPP_NUMBER")
    poll_interval_h: float = Field(24, alias="POLL_INTERVAL_H")
    storage_path: str = Field(STORAGE_FILE, alias="TRIPALERT_STORAGE")
    log_file: str = Field("tripalert.log", alias="TRIPALERT_LOG_FILE")
    sources: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(KNOWN_SOURCES), alias="TRIPALERT_SOURCES"
    )

    skyscanner_api_key: str = Field("", alias="SKYSCANNER_API_KEY")
    skyscanner_base_url: str = Field(
        "https://partners.api.skyscanner.net/apiservices/v3",
        alias="SKYSCANNER_BASE_URL",
    )

    smtp_host: str = Field("", alias="SMTP_HOST")
    smtp_port: int = Field(465, alias="SMTP_PORT")
    smtp_user: str = Field("", alias="SMTP_USER")
    smtp_pass: str = Field("", alias="SMTP_PASS")
    smtp_starttls: bool = Field(False, alias="SMTP_STARTTLS")
    email_to: str = Field("", alias="EMAIL_TO")

    @field_validator("poll_interval_h")
    @classmethod
    def _poll_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("POLL_INTERVAL_H must be greater than 0")
        return v

    @field_validator("sources", mode="before")
    @classmethod
    def _split_sources(cls, v):
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("sources")
    @classmethod
    def _known_sources(cls, v: List[str]) -> List[str]:
        names = [s.strip().lower() for s in v]
        unknown = sorted(set(names) - set(KNOWN_SOURCES))
        if unknown:
            raise ValueError(
                f"Unknown sources: {', '.join(unknown)}. "
                f"Expected any of: {', '.join(KNOWN_SOURCES)}"
            )
        return names

    @property
    def has_telegram(self) -> bool:
        return bool(self.telegram_token.strip() and self.telegram_chat_id.strip())

    @property
    def has_email(self) -> bool:
        return bool(self.smtp_host.strip() and self.email_to.strip())


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


__all__ = ["KNOWN_SOURCES", "Settings", "get_settings"]
