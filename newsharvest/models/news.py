from __future__ import annotations

from dataclasses import dataclass

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from ..exceptions import FetchError


class SelectorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    listing_url: str = Field(description="Absolute URL of the listing page")
    base_url: str = Field(description="Site root that relative hrefs resolve against")
    item_selector: str = Field(description="CSS selector for item nodes on the listing")
    headline_selector: str
    description_selector: str
    publication_time_selector: str
    publication_time_attribute: str = Field(
        default="datetime",
        description="Attribute of the publication-time node holding the timestamp",
    )


class NewsRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None = Field(default=None, description="Assigned by the sink on create")
    headline: str = Field(min_length=1)
    description: str = Field(min_length=1)
    publication_time: AwareDatetime = Field(
        description="Publication timestamp normalized to local time"
    )


@dataclass(frozen=True, slots=True)
class Accepted:
    url: str
    record: NewsRecord


@dataclass(frozen=True, slots=True)
class Rejected:
    url: str
    reason: str


@dataclass(frozen=True, slots=True)
class Failed:
    url: str
    error: FetchError | Exception


ExtractionOutcome = Accepted | Rejected | Failed

MISSING_FIELD = "missing field"
BAD_TIMESTAMP = "bad timestamp"
OUTSIDE_WINDOW = "outside window"
