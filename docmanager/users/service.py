
import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from docmanager.auth.policy import authorize
from docmanager.auth.principal import Principal
from docmanager.errors import Conflict, Forbidden, NotFound
from docmanager.models.user import Role, User
from docmanager.schemas.user import UserCreate, UserUpdate
from docmanager.uploads.storage import FileStorage
from docmanager.utils.security import hash_password

logger = logging.getLogger(__name__)

def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound.for_resource("User", "id", user_id)
    return user

def find_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()

def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()

def username_taken(db: Session, username: str) -> bool:
    return find_by_username(db, username) is not None

def email_taken(db: Session, email: str) -> bool:
    return find_by_email(db, email) is not None

def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.username).all()

def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    roles=(Role.USER,),
) -> User:
    """Single write path for new accounts (registration, admin creation, seeding)."""
    if username_taken(db, username):
        raise Conflict("Username is already taken!")
    if email_taken(db, email):
        raise Conflict("Email is already in use!")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        enabled=True,
        account_non_expired=True,
        account_non_locked=True,
        credentials_non_expired=True,
    )
    user.set_roles(roles or (Role.USER,))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username or email is already in use!")
    db.refresh(user)
    return user

def create_user_as_admin(db: Session, principal: Principal, data: UserCreate) -> User:
    authorize(principal, "user:create")
    user = create_user(
        db,
        username=data.username,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        roles=data.roles,
    )
    logger.info("User %s created by %s", user.username, principal.username)
    return user

def update_user(db: Session, principal: Principal, user_id: int, data: UserUpdate) -> User:
    authorize(principal, "user:update", target_id=user_id)
    user = get_user(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    if ("enabled" in changes or "roles" in changes) and not principal.is_admin:
        raise Forbidden("Only administrators can change account status or roles")

    username = changes.get("username")
    if username is not None and username != user.username and username_taken(db, username):
        raise Conflict("Username is already taken!")
    email = changes.get("email")
    if email is not None and email != user.email and email_taken(db, email):
        raise Conflict("Email is already in use!")

    for field in ("username", "email", "first_name", "last_name", "enabled"):
        if field in changes and (changes[field] is not None or field in ("first_name", "last_name")):
            setattr(user, field, changes[field])
    if changes.get("roles") is not None:
        user.set_roles(changes["roles"])

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username or email is already in use!")
    db.refresh(user)
    return user

def delete_user(db: Session, storage: FileStorage, principal: Principal, user_id: int) -> None:
    """Delete the account, its documents and their stored files."""
    authorize(principal, "user:delete")
    user = get_user(db, user_id)
    stored = [doc.file_path for doc in user.documents if doc.file_path]

    db.delete(user)
    db.commit()
    logger.info("Deleted user %s with %d stored files", user.username, len(stored))

    for name in stored:
        storage.delete(name)
