import httpx
import pytest
import respx

from conftest import LISTING_URL, listing_page
from newsharvest.exceptions import FetchError
from newsharvest.services.discovery import ListingDiscoverer, resolve_href
from newsharvest.services.fetcher import DocumentFetcher


def test_resolve_href_joins_relative_paths_onto_site() -> None:
    assert resolve_href("https://news.example", "/articles/42") == (
        "https://news.example/articles/42"
    )
    assert resolve_href("https://news.example", "articles/42") == (
        "https://news.example/articles/42"
    )


def test_resolve_href_passes_absolute_urls_through() -> None:
    href = "https://other.example/story?id=3"
    assert resolve_href("https://news.example", href) == href


@pytest.mark.asyncio
async def test_discover_resolves_and_collapses_duplicates(settings, selector_config) -> None:
    html = listing_page(
        "/articles/42",
        "https://other.example/story",
        "/articles/42",
        None,
        "",
    )
    async with httpx.AsyncClient() as client:
        discoverer = ListingDiscoverer(
            fetcher=DocumentFetcher(settings=settings, client=client)
        )
        with respx.mock(assert_all_called=True) as mock:
            mock.get(LISTING_URL).respond(200, text=html)
            urls = await discoverer.discover(selector_config)

    assert urls == {
        "https://news.example/articles/42",
        "https://other.example/story",
    }
    assert len(urls) <= 5


@pytest.mark.asyncio
async def test_discover_reads_href_of_anchor_item_nodes(settings, selector_config) -> None:
    config = selector_config.model_copy(update={"item_selector": "a.headline"})
    html = '<a class="headline" href="/a/1">One</a><a class="headline" href="/a/2">Two</a>'
    async with httpx.AsyncClient() as client:
        discoverer = ListingDiscoverer(
            fetcher=DocumentFetcher(settings=settings, client=client)
        )
        with respx.mock(assert_all_called=True) as mock:
            mock.get(LISTING_URL).respond(200, text=html)
            urls = await discoverer.discover(config)

    assert urls == {"https://news.example/a/1", "https://news.example/a/2"}


@pytest.mark.asyncio
async def test_discover_selector_matching_nothing_is_empty(settings, selector_config) -> None:
    config = selector_config.model_copy(update={"item_selector": "li.nothing-here"})
    async with httpx.AsyncClient() as client:
        discoverer = ListingDiscoverer(
            fetcher=DocumentFetcher(settings=settings, client=client)
        )
        with respx.mock(assert_all_called=True) as mock:
            mock.get(LISTING_URL).respond(200, text=listing_page("/a/1"))
            urls = await discoverer.discover(config)

    assert urls == set()


@pytest.mark.asyncio
async def test_discover_propagates_listing_failure(settings, selector_config) -> None:
    async with httpx.AsyncClient() as client:
        discoverer = ListingDiscoverer(
            fetcher=DocumentFetcher(settings=settings, client=client)
        )
        with respx.mock(assert_all_called=True) as mock:
            mock.get(LISTING_URL).respond(500)
            with pytest.raises(FetchError):
                await discoverer.discover(selector_config)
