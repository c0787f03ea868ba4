
from datetime import datetime
from pydantic import Field, field_validator
from docmanager.models.tag import TAG_NAME_MAX_LENGTH
from docmanager.schemas.common import CamelModel, MessageOut, not_blank, tag_names_fit

class TagIn(CamelModel):
    name: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        tag_names_fit([value], TAG_NAME_MAX_LENGTH)
        return not_blank(value)

class TagOut(CamelModel):
    id: int
    name: str
    document_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

class TagStats(CamelModel):
    total_tags: int
    used_tags: int
    unused_tags: int

class SweepOut(MessageOut):
    deleted: int
