
import uuid
from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from docmanager.config import settings
from docmanager.errors import InvalidToken

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt_sha256__rounds=settings.bcrypt_rounds,
    bcrypt__rounds=settings.bcrypt_rounds,
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)

def dummy_verify() -> None:
    """Spend the time of a real verification when there is no hash to check."""
    pwd_context.dummy_verify()

def access_token_expires_in() -> int:
    return settings.access_token_expire_minutes * 60

def _encode(principal, kind: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": str(principal.id),
        "username": principal.username,
        "roles": sorted(r.value for r in principal.roles),
        "type": kind,
        "iat": now,
        "exp": now + lifetime,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)

def create_access_token(principal) -> tuple[str, int]:
    """Returns the signed token and its lifetime in seconds."""
    expires_in = access_token_expires_in()
    return _encode(principal, ACCESS, timedelta(seconds=expires_in)), expires_in

def create_refresh_token(principal) -> str:
    return _encode(principal, REFRESH, timedelta(days=settings.refresh_token_expire_days))

def decode_token(token: str, kind: str | None = None) -> dict:
    """Verify signature and expiry, optionally the token kind. Raises InvalidToken."""
    if not token:
        raise InvalidToken()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise InvalidToken()
    if payload.get("sub") is None:
        raise InvalidToken()
    if kind is not None and payload.get("type") != kind:
        raise InvalidToken()
    return payload

def validate_token(token: str, kind: str | None = None) -> bool:
    try:
        decode_token(token, kind)
    except InvalidToken:
        return False
    return True

def decode_subject(token: str) -> str:
    return str(decode_token(token)["sub"])
