
from functools import lru_cache
from fastapi import Request, Depends
from docmanager.db.session import SessionLocal
from docmanager.config import settings
from docmanager.auth.principal import Principal
from docmanager.auth.policy import authorize_route
from docmanager.errors import InvalidToken
from docmanager.uploads.storage import FileStorage
from docmanager.utils.security import ACCESS, decode_token


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@lru_cache
def _default_storage() -> FileStorage:
    return FileStorage(settings.upload_dir)

def get_storage() -> FileStorage:
    return _default_storage()

def get_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip()
    return request.cookies.get(settings.auth_cookie_name)

def get_optional_principal(request: Request) -> Principal | None:
    token = get_token(request)
    if not token:
        return None

    payload = decode_token(token, ACCESS)
    try:
        return Principal.from_claims(payload)
    except (KeyError, TypeError, ValueError):
        raise InvalidToken()

def require(operation: str):
    """Dependency factory: authenticate, then apply the role part of ``operation``'s policy."""
    def _dependency(principal: Principal | None = Depends(get_optional_principal)) -> Principal:
        authorize_route(principal, operation)
        return principal
    return _dependency
