"""Content models for bulletin generation."""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ArticleRecord(BaseModel):
    """A single article selected for the bulletin."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = Field(None, description="Opaque, stable identifier")
    title: str = Field(..., min_length=1, description="Article title")
    description: Optional[str] = Field(None, description="Summary text")
    content: Optional[str] = Field(None, description="Alternative body text")
    url: Optional[str] = Field(None, description="Original article URL")
    image: Optional[str] = Field(None, description="Known image URL")
    source: Optional[str] = Field(None, description="Source display name")
    topic: Optional[str] = Field(None, description="Topic display name")
    published_at: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("publishedAt", "published_at"),
        description="Publication date as supplied",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        if value is None:
            return None
        return str(value)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("url", "image", "source", "topic", "published_at", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def body_text(self) -> Optional[str]:
        """Text for the article body, or None when the record has none."""
        for text in (self.description, self.content):
            if text and text.strip():
                return text.strip()
        return None


class BulletinRequest(BaseModel):
    """Payload posted by the selection UI."""

    news: Optional[List[ArticleRecord]] = Field(None, description="Articles")
