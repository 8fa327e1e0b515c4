import asyncio
import logging

from .config import get_settings
from .http_client import get_http_client, shutdown_http_client
from .log_config import setup_logging
from .pipeline import Pipeline

logger = logging.getLogger("newsharvest")


async def main() -> None:
    settings = get_settings()
    pipeline = Pipeline(settings=settings, client=await get_http_client())
    scheduler = pipeline.scheduler()
    scheduler.start()
    try:
        await scheduler.wait()
    finally:
        pipeline.cancel_runs()
        await scheduler.stop()
        await shutdown_http_client()


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted, scheduler stopped")
