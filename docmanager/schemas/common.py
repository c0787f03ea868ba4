
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

def not_blank(value: str | None) -> str | None:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value

class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class MessageOut(CamelModel):
    message: str
    success: bool = True

EMAIL_MAX_LENGTH = 100

def email_fits(value: str | None) -> str | None:
    if value is not None and len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"must be at most {EMAIL_MAX_LENGTH} characters")
    return value

def tag_names_fit(names: list[str] | None, limit: int) -> list[str] | None:
    """Tag names are stored trimmed, so the limit applies after trimming."""
    for name in names or ():
        if len(name.strip()) > limit:
            raise ValueError(f"tag names must be at most {limit} characters")
    return names
