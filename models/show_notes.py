from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


class Chapter(BaseModel):
    """A chapter marker, timestamp formatted as MM:SS."""
    timestamp: str = "00:00"
    title: str = ""
    description: str = ""

    @field_validator("timestamp", "title", "description", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)


class Quote(BaseModel):
    text: str = ""
    speaker: str = ""
    timestamp: str = ""

    @field_validator("text", "speaker", "timestamp", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)


FULL_EPISODE_CHAPTER = {
    "title": "Full Episode",
    "timestamp": "00:00",
    "description": "Complete episode content",
}

FALLBACK_SUMMARY = (
    "Analysis completed successfully. The transcript has been processed and is ready for review.")

FALLBACK_KEY_TAKEAWAYS = [
    "Transcript available for review",
    "Content processed successfully",
]


class ShowNotes(BaseModel):
    """
    Structured show notes derived from a transcript.

    Serialized with the camelCase field names the dashboard reads
    (keyTakeaways, socialCaptions). Every list field repairs its items
    instead of rejecting the document: nulls are dropped, scalars become
    strings and chapters/quotes that are not objects are discarded.
    """
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    key_takeaways: List[str] = Field(alias="keyTakeaways")
    chapters: List[Chapter] = Field(
        default_factory=lambda: [Chapter(**FULL_EPISODE_CHAPTER)])
    quotes: List[Quote] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    social_captions: List[str] = Field(
        default_factory=list, alias="socialCaptions")

    @field_validator("key_takeaways", mode="before")
    @classmethod
    def repair_key_takeaways(cls, value: Any) -> List[str]:
        items = _text_items(value)
        # A completed record always carries at least one takeaway
        return items or list(FALLBACK_KEY_TAKEAWAYS)

    @field_validator("resources", "social_captions", mode="before")
    @classmethod
    def repair_text_list(cls, value: Any) -> List[str]:
        return _text_items(value)

    @field_validator("chapters", mode="before")
    @classmethod
    def repair_chapters(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return [dict(FULL_EPISODE_CHAPTER)]
        return [item for item in value if isinstance(item, (dict, Chapter))]

    @field_validator("quotes", mode="before")
    @classmethod
    def repair_quotes(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        quotes = []
        for item in value:
            if isinstance(item, (dict, Quote)):
                quotes.append(item)
            elif isinstance(item, str) and item.strip():
                quotes.append({"text": item})
        return quotes

    def to_json(self) -> str:
        """Serialize for the show_notes column."""
        return self.model_dump_json(by_alias=True)

    def chapter_dicts(self) -> List[dict]:
        return [chapter.model_dump() for chapter in self.chapters]


def _text_items(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [_as_text(item) for item in value if item is not None and not isinstance(item, (dict, list))]


def fallback_show_notes(title: str) -> ShowNotes:
    """Generic show notes used when the model output cannot be trusted."""
    return ShowNotes(
        summary=FALLBACK_SUMMARY,
        key_takeaways=list(FALLBACK_KEY_TAKEAWAYS),
        chapters=[Chapter(**FULL_EPISODE_CHAPTER)],
        quotes=[],
        resources=[],
        social_captions=[
            f'Check out this episode: "{title}"',
            "New podcast episode available now!",
        ],
    )


def failed_show_notes() -> ShowNotes:
    """Placeholder persisted alongside a failed run."""
    return ShowNotes(
        summary="Processing failed. Please try uploading again or check your audio file format.",
        key_takeaways=["Upload failed - please retry"],
        chapters=[],
        quotes=[],
        resources=[],
        social_captions=[],
    )
