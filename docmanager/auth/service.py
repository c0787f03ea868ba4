
import logging
from dataclasses import dataclass
from sqlalchemy.orm import Session
from docmanager.auth.principal import Principal
from docmanager.errors import InvalidCredentials, NotFound
from docmanager.models.user import Role, User
from docmanager.schemas.auth import RegisterIn
from docmanager.users.service import create_user, find_by_email, find_by_username
from docmanager.utils.security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    dummy_verify,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

@dataclass
class AuthResult:
    user: User
    access_token: str
    refresh_token: str
    expires_in: int

def _issue(user: User) -> AuthResult:
    principal = Principal.from_user(user)
    access_token, expires_in = create_access_token(principal)
    return AuthResult(
        user=user,
        access_token=access_token,
        refresh_token=create_refresh_token(principal),
        expires_in=expires_in,
    )

def _find_account(db: Session, identifier: str) -> User | None:
    return find_by_username(db, identifier) or find_by_email(db, identifier)

def authenticate(db: Session, identifier: str, password: str) -> Principal:
    """Username first, then email. Every failure raises the same InvalidCredentials."""
    if not identifier or not identifier.strip() or not password:
        raise InvalidCredentials()

    user = _find_account(db, identifier)
    if user is None:
        dummy_verify()
        logger.warning("Invalid credentials for user: %s", identifier)
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash) or not user.is_active:
        logger.warning("Invalid credentials for user: %s", identifier)
        raise InvalidCredentials()

    return Principal.from_user(user)

def register_user(db: Session, body: RegisterIn) -> AuthResult:
    user = create_user(
        db,
        username=body.username,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        roles=(Role.USER,),
    )
    logger.info("New user registered: %s", user.username)
    return _issue(user)

def login_user(db: Session, identifier: str, password: str) -> AuthResult:
    principal = authenticate(db, identifier, password)
    return _issue(db.get(User, principal.id))

def refresh_tokens(db: Session, refresh_token: str) -> AuthResult:
    """Mint a new pair from the user's current record, not from the old claims."""
    payload = decode_token(refresh_token, REFRESH)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidCredentials("Invalid refresh token")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise InvalidCredentials("Invalid refresh token")
    return _issue(user)

def current_user(db: Session, principal: Principal) -> User:
    user = db.get(User, principal.id)
    if user is None:
        raise NotFound.for_resource("User", "id", principal.id)
    return user

def change_password(db: Session, principal: Principal, current_password: str, new_password: str) -> None:
    user = current_user(db, principal)
    if not verify_password(current_password, user.password_hash):
        raise InvalidCredentials("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Password changed for user: %s", user.username)
