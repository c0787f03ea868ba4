
from datetime import datetime
from pydantic import EmailStr, Field, field_validator
from docmanager.models.user import Role
from docmanager.schemas.common import CamelModel, email_fits, not_blank

class UserCreate(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    roles: list[Role] = [Role.USER]

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, value: str) -> str:
        return not_blank(value)

    @field_validator("email")
    @classmethod
    def _email_fits(cls, value):
        return email_fits(value)

class UserUpdate(CamelModel):
    username: str | None = Field(default=None, min_length=3, max_length=50)
    email: EmailStr | None = None
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    # admin only
    enabled: bool | None = None
    roles: list[Role] | None = None

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, value: str | None) -> str | None:
        return not_blank(value)

    @field_validator("email")
    @classmethod
    def _email_fits(cls, value):
        return email_fits(value)

class UserOut(CamelModel):
    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    full_name: str
    roles: list[Role]
    enabled: bool
    document_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
