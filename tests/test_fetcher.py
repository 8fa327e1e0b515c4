import httpx
import pytest
import respx

from newsharvest.exceptions import FetchError
from newsharvest.services.fetcher import DocumentFetcher


@pytest.mark.asyncio
async def test_fetch_returns_queryable_document(settings) -> None:
    async with httpx.AsyncClient() as client:
        fetcher = DocumentFetcher(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("https://news.example/a").respond(
                200, text="<html><body><h1>Hello</h1></body></html>"
            )
            document = await fetcher.fetch("https://news.example/a")

    assert document.select_one("h1").get_text() == "Hello"


@pytest.mark.asyncio
async def test_fetch_wraps_non_2xx_status(settings) -> None:
    async with httpx.AsyncClient() as client:
        fetcher = DocumentFetcher(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("https://news.example/missing").respond(404)
            with pytest.raises(FetchError) as excinfo:
                await fetcher.fetch("https://news.example/missing")

    assert excinfo.value.url == "https://news.example/missing"
    assert isinstance(excinfo.value.cause, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_fetch_wraps_transport_errors(settings) -> None:
    async with httpx.AsyncClient() as client:
        fetcher = DocumentFetcher(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("https://news.example/slow").mock(
                side_effect=httpx.ReadTimeout("timed out")
            )
            with pytest.raises(FetchError):
                await fetcher.fetch("https://news.example/slow")


@pytest.mark.asyncio
async def test_fetch_retries_transport_errors(settings) -> None:
    settings = settings.model_copy(update={"fetch_attempts": 2})
    async with httpx.AsyncClient() as client:
        fetcher = DocumentFetcher(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            route = mock.get("https://news.example/flaky")
            route.side_effect = [
                httpx.ConnectError("refused"),
                httpx.Response(200, text="<p>ok</p>"),
            ]
            document = await fetcher.fetch("https://news.example/flaky")

    assert route.call_count == 2
    assert document.select_one("p").get_text() == "ok"


@pytest.mark.asyncio
async def test_fetch_does_not_retry_status_errors(settings) -> None:
    settings = settings.model_copy(update={"fetch_attempts": 3})
    async with httpx.AsyncClient() as client:
        fetcher = DocumentFetcher(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            route = mock.get("https://news.example/down").respond(503)
            with pytest.raises(FetchError):
                await fetcher.fetch("https://news.example/down")

    assert route.call_count == 1
