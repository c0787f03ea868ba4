
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from docmanager.auth.deps import get_db, require
from docmanager.auth.principal import Principal
from docmanager.auth.service import (
    AuthResult,
    change_password,
    current_user,
    login_user,
    refresh_tokens,
    register_user,
)
from docmanager.config import settings
from docmanager.schemas.auth import ChangePasswordIn, LoginIn, RefreshIn, RegisterIn, TokenOut, UserInfo
from docmanager.schemas.common import MessageOut

router = APIRouter(prefix="/auth", tags=["auth"])

def set_auth_cookie(response: Response, token: str, max_age: int):
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        samesite="Lax",
        secure=settings.app_env == "prod",
        path="/",
        max_age=max_age,
    )

def _token_out(result: AuthResult, response: Response) -> TokenOut:
    set_auth_cookie(response, result.access_token, result.expires_in)
    return TokenOut(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
        user=UserInfo.model_validate(result.user),
    )

@router.post("/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, response: Response, db: Session = Depends(get_db)):
    return _token_out(register_user(db, body), response)

@router.post("/login", response_model=TokenOut)
def login(body: LoginIn, response: Response, db: Session = Depends(get_db)):
    return _token_out(login_user(db, body.username_or_email, body.password), response)

@router.post("/refresh", response_model=TokenOut)
def refresh(body: RefreshIn, response: Response, db: Session = Depends(get_db)):
    return _token_out(refresh_tokens(db, body.refresh_token), response)

@router.post("/logout", response_model=MessageOut)
def logout(response: Response, principal: Principal = Depends(require("auth:logout"))):
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return MessageOut(message="Logged out successfully")

@router.put("/change-password", response_model=MessageOut)
def update_password(
    body: ChangePasswordIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("auth:change_password")),
):
    change_password(db, principal, body.current_password, body.new_password)
    return MessageOut(message="Password changed successfully")

@router.get("/me", response_model=UserInfo)
def me(db: Session = Depends(get_db), principal: Principal = Depends(require("auth:me"))):
    return current_user(db, principal)

@router.get("/validate", response_model=MessageOut)
def validate(principal: Principal = Depends(require("auth:me"))):
    return MessageOut(message="Token is valid")
