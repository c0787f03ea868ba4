
from pydantic import EmailStr, Field, field_validator
from docmanager.models.user import Role
from docmanager.schemas.common import CamelModel, email_fits, not_blank

class RegisterIn(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, value: str) -> str:
        return not_blank(value)

    @field_validator("email")
    @classmethod
    def _email_fits(cls, value: str) -> str:
        return email_fits(value)

class LoginIn(CamelModel):
    username_or_email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("username_or_email", "password")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return not_blank(value)

class RefreshIn(CamelModel):
    refresh_token: str = Field(min_length=1)

class ChangePasswordIn(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=256)

class UserInfo(CamelModel):
    id: int
    username: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    roles: list[Role]

class TokenOut(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserInfo
