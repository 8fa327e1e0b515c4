from datetime import datetime

import pytest
from dateutil import tz

from newsharvest.config import Settings
from newsharvest.models import SelectorConfig

BERLIN = tz.gettz("Europe/Berlin")
SITE = "https://news.example"
LISTING_URL = f"{SITE}/latest"
API_URL = "http://store.example/news"


def listing_page(*hrefs: str | None) -> str:
    items = []
    for href in hrefs:
        anchor = f'<a href="{href}">Read more</a>' if href is not None else "<span>No link</span>"
        items.append(f'<div class="news-item">{anchor}</div>')
    return f"<html><body><main>{''.join(items)}</main></body></html>"


def detail_page(
    headline: str = "Council approves new tram line",
    description: str = "The route will connect the river port with the university.",
    published: str | None = "2026-10-19T09:00:00+02:00",
) -> str:
    time_tag = (
        f'<time datetime="{published}">19 October</time>'
        if published is not None
        else "<time>19 October</time>"
    )
    return f"""
    <html>
      <body>
        <article>
          <h1>{headline}</h1>
          <div class="lead"><p>{description}</p></div>
          {time_tag}
        </article>
      </body>
    </html>
    """


@pytest.fixture
def settings() -> Settings:
    return Settings(
        NEWS_SITE_URL=LISTING_URL,
        NEWS_SITE_BASE_URL=SITE,
        NEWS_ITEM_SELECTOR="div.news-item",
        NEWS_HEADLINE_SELECTOR="h1",
        NEWS_DESCRIPTION_SELECTOR="div.lead p",
        NEWS_PUBLICATION_TIME_SELECTOR="time",
        NEWS_API_URL=API_URL,
        FETCH_ATTEMPTS=1,
        ITEM_TIMEOUT=5,
        INGEST_CONCURRENCY=2,
        TIMEZONE="Europe/Berlin",
    )


@pytest.fixture
def selector_config() -> SelectorConfig:
    return SelectorConfig(
        listing_url=LISTING_URL,
        base_url=SITE,
        item_selector="div.news-item",
        headline_selector="h1",
        description_selector="div.lead p",
        publication_time_selector="time",
    )


@pytest.fixture
def noon() -> datetime:
    return datetime(2026, 10, 19, 12, 0, tzinfo=BERLIN)
