
from datetime import date, datetime
from pydantic import Field, field_validator
from docmanager.models.tag import TAG_NAME_MAX_LENGTH
from docmanager.schemas.common import CamelModel, not_blank, tag_names_fit

class DocumentCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    extracted_text: str | None = None
    document_date: date | None = None
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        return not_blank(value)

    @field_validator("tags")
    @classmethod
    def _tags_fit(cls, value: list[str] | None) -> list[str] | None:
        return tag_names_fit(value, TAG_NAME_MAX_LENGTH)

class DocumentUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    extracted_text: str | None = None
    document_date: date | None = None
    # None keeps the current tags; an empty list clears them
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str | None) -> str | None:
        return not_blank(value)

    @field_validator("tags")
    @classmethod
    def _tags_fit(cls, value: list[str] | None) -> list[str] | None:
        return tag_names_fit(value, TAG_NAME_MAX_LENGTH)

class DocumentOwnerIn(CamelModel):
    user_id: int

class OwnerInfo(CamelModel):
    id: int
    username: str
    full_name: str

class DocumentOut(CamelModel):
    id: int
    title: str
    category: str | None = None
    file_path: str | None = None
    file_type: str | None = None
    file_size: int | None = None
    extracted_text: str | None = None
    document_date: date | None = None
    user: OwnerInfo = Field(validation_alias="owner")
    tags: list[str] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tag_names(cls, value):
        return sorted(getattr(t, "name", t) for t in value or [])

class DocumentStats(CamelModel):
    total_documents: int
