from datetime import tzinfo
from functools import lru_cache
from typing import Literal
from urllib.parse import urlsplit

from croniter import croniter
from dateutil import tz
from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.news import SelectorConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    http_timeout: float = Field(10.0, gt=0, alias="HTTP_TIMEOUT")
    http_max_connections: int = Field(20, ge=1, alias="HTTP_MAX_CONNECTIONS")
    http_max_keepalive: int = Field(10, ge=1, alias="HTTP_MAX_KEEPALIVE")
    http_user_agent: str = Field(
        "newsharvest/0.1 (+https://example.com; contact=admin@example.com)",
        alias="HTTP_USER_AGENT",
    )

    news_site_url: HttpUrl = Field("https://news.example", alias="NEWS_SITE_URL")
    news_site_base_url: HttpUrl | None = Field(default=None, alias="NEWS_SITE_BASE_URL")
    item_selector: str = Field("article", alias="NEWS_ITEM_SELECTOR")
    headline_selector: str = Field("h1", alias="NEWS_HEADLINE_SELECTOR")
    description_selector: str = Field(
        "article p", alias="NEWS_DESCRIPTION_SELECTOR"
    )
    publication_time_selector: str = Field(
        "time", alias="NEWS_PUBLICATION_TIME_SELECTOR"
    )
    publication_time_attribute: str = Field(
        "datetime", min_length=1, alias="NEWS_PUBLICATION_TIME_ATTRIBUTE"
    )

    sink_backend: Literal["http", "memory"] = Field("http", alias="SINK_BACKEND")
    news_api_url: HttpUrl = Field("http://localhost:8080/news", alias="NEWS_API_URL")

    ingest_concurrency: int = Field(4, ge=1, alias="INGEST_CONCURRENCY")
    item_timeout: float = Field(30.0, gt=0, alias="ITEM_TIMEOUT")
    fetch_attempts: int = Field(2, ge=1, alias="FETCH_ATTEMPTS")
    ingest_dedupe: bool = Field(True, alias="INGEST_DEDUPE")
    timezone: str = Field("", alias="TIMEZONE")

    ingest_cron: str = Field("*/15 * * * *", alias="INGEST_CRON")
    retention_cron: str = Field("0 0 * * *", alias="RETENTION_CRON")
    scheduler_enabled: bool = Field(True, alias="SCHEDULER_ENABLED")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: Literal["text", "json"] = Field("text", alias="LOG_FORMAT")

    @field_validator("ingest_cron", "retention_cron")
    @classmethod
    def _check_cron(cls, value: str) -> str:
        if not croniter.is_valid(value):
            raise ValueError(f"invalid cron expression: {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        if value and tz.gettz(value) is None:
            raise ValueError(f"unknown timezone: {value!r}")
        return value

    def local_tz(self) -> tzinfo:
        if self.timezone:
            return tz.gettz(self.timezone)
        return tz.tzlocal()

    def selector_config(self) -> SelectorConfig:
        listing_url = str(self.news_site_url)
        if self.news_site_base_url is not None:
            base_url = str(self.news_site_base_url)
        else:
            parts = urlsplit(listing_url)
            base_url = f"{parts.scheme}://{parts.netloc}"
        return SelectorConfig(
            listing_url=listing_url,
            base_url=base_url,
            item_selector=self.item_selector,
            headline_selector=self.headline_selector,
            description_selector=self.description_selector,
            publication_time_selector=self.publication_time_selector,
            publication_time_attribute=self.publication_time_attribute,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
