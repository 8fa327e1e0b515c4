from .discovery import ListingDiscoverer
from .extractor import ItemExtractor
from .fetcher import DocumentFetcher
from .ingestion import IngestionService
from .retention import RetentionSweeper
from .sink import HttpNewsSink, InMemoryNewsSink, NewsSink, build_sink
from .window import AcceptanceWindow, accept

__all__ = [
    "AcceptanceWindow",
    "DocumentFetcher",
    "HttpNewsSink",
    "InMemoryNewsSink",
    "IngestionService",
    "ItemExtractor",
    "ListingDiscoverer",
    "NewsSink",
    "RetentionSweeper",
    "accept",
    "build_sink",
]
