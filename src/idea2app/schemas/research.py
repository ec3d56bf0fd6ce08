"""Pydantic models for competitor search and page extraction results."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Competitor(BaseModel):
    """A competitor candidate returned by the reasoning-search provider."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    why_competes: str = Field(default="", alias="whyCompetes")
    url: str = ""


class CompetitorSearchResult(BaseModel):
    """Competitors parsed from the search reply, plus the raw reply text."""

    competitors: list[Competitor] = []
    raw_response: str = ""


class ExtractedPage(BaseModel):
    """Raw text content fetched for one URL."""

    url: str
    # The extraction API calls this ``raw_content``; older payloads use ``content``.
    content: str = Field(default="", validation_alias=AliasChoices("content", "raw_content"))
    title: str | None = None


class FailedExtraction(BaseModel):
    """A URL the extraction provider could not fetch."""

    url: str
    error: str = ""


class ExtractionResult(BaseModel):
    """Output of one extraction batch."""

    results: list[ExtractedPage] = []
    failed: list[FailedExtraction] = Field(
        default=[], validation_alias=AliasChoices("failed", "failed_results")
    )
