
import logging
from typing import Iterable
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from docmanager.errors import Conflict, NotFound, ValidationFailed
from docmanager.models.document import Document
from docmanager.models.tag import TAG_NAME_MAX_LENGTH, Tag

logger = logging.getLogger(__name__)

CREATE_ATTEMPTS = 3

def normalize_tag_name(name: str) -> str:
    return name.strip().lower()

def _fits(name: str) -> str:
    if len(name) > TAG_NAME_MAX_LENGTH:
        raise ValidationFailed(f"Tag name must be at most {TAG_NAME_MAX_LENGTH} characters")
    return name

def normalize_tag_names(names: Iterable[str] | None) -> set[str]:
    return {_fits(n) for n in (normalize_tag_name(name) for name in names or ()) if n}

def _find_by_names(db: Session, names: set[str]) -> list[Tag]:
    return db.query(Tag).filter(Tag.name.in_(names)).all()

def _find_by_name(db: Session, name: str) -> Tag | None:
    return db.query(Tag).filter(Tag.name == name).first()

def _create_or_fetch(db: Session, name: str) -> Tag:
    """Insert ``name`` inside a savepoint; if another writer got there first, use theirs."""
    for attempt in range(1, CREATE_ATTEMPTS + 1):
        try:
            with db.begin_nested():
                tag = Tag(name=name)
                db.add(tag)
                db.flush()
            logger.info("Created new tag: %s", name)
            return tag
        except IntegrityError:
            logger.info("Tag %r created concurrently (attempt %d), re-fetching", name, attempt)
            existing = _find_by_name(db, name)
            if existing is not None:
                return existing
    raise Conflict(f"Could not create tag '{name}'")

def reconcile_tags(db: Session, names: Iterable[str] | None) -> set[Tag]:
    """Map free-text names to canonical tags, creating only the missing ones.

    Flushes but does not commit; the caller owns the transaction.
    """
    wanted = normalize_tag_names(names)
    if not wanted:
        return set()

    found = {tag.name: tag for tag in _find_by_names(db, wanted)}
    for name in sorted(wanted - found.keys()):
        found[name] = _create_or_fetch(db, name)
    return set(found.values())

def list_tags(db: Session) -> list[Tag]:
    return db.query(Tag).order_by(Tag.name).all()

def get_tag(db: Session, tag_id: int) -> Tag:
    tag = db.get(Tag, tag_id)
    if tag is None:
        raise NotFound.for_resource("Tag", "id", tag_id)
    return tag

def get_tag_by_name(db: Session, name: str) -> Tag | None:
    return _find_by_name(db, normalize_tag_name(name))

def tag_exists(db: Session, name: str) -> bool:
    return get_tag_by_name(db, name) is not None

def search_tags(db: Session, query: str) -> list[Tag]:
    needle = normalize_tag_name(query)
    return db.query(Tag).filter(Tag.name.contains(needle, autoescape=True)).order_by(Tag.name).all()

def tags_for_user(db: Session, user_id: int) -> list[Tag]:
    return (
        db.query(Tag)
        .join(Tag.documents)
        .filter(Document.user_id == user_id)
        .distinct()
        .order_by(Tag.name)
        .all()
    )

def create_tag(db: Session, name: str) -> Tag:
    normalized = _fits(normalize_tag_name(name))
    if _find_by_name(db, normalized) is not None:
        raise Conflict(f"Tag already exists with name: '{normalized}'")

    tag = Tag(name=normalized)
    db.add(tag)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"Tag already exists with name: '{normalized}'")
    db.refresh(tag)
    logger.info("Created new tag: %s", tag.name)
    return tag

def rename_tag(db: Session, tag_id: int, new_name: str) -> Tag:
    tag = get_tag(db, tag_id)
    normalized = _fits(normalize_tag_name(new_name))
    if tag.name != normalized and _find_by_name(db, normalized) is not None:
        raise Conflict(f"Tag already exists with name: '{normalized}'")

    old_name = tag.name
    tag.name = normalized
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"Tag already exists with name: '{normalized}'")
    db.refresh(tag)
    logger.info("Updated tag: %s to %s", old_name, tag.name)
    return tag

def delete_tag(db: Session, tag_id: int) -> None:
    tag = get_tag(db, tag_id)
    if tag.documents:
        logger.warning("Deleting tag '%s' that is associated with %d documents", tag.name, len(tag.documents))
    db.delete(tag)
    db.commit()
    logger.info("Deleted tag: %s", tag.name)

def _unused_query(db: Session):
    return db.query(Tag).filter(~Tag.documents.any())

def delete_unused_tags(db: Session) -> int:
    """Remove every tag with no documents right now; a later write may recreate any of them."""
    unused = _unused_query(db).all()
    for tag in unused:
        db.delete(tag)
    db.commit()
    if unused:
        logger.info("Deleted %d unused tags", len(unused))
    return len(unused)

def tag_stats(db: Session) -> dict:
    total = db.query(Tag).count()
    unused = _unused_query(db).count()
    return {"total_tags": total, "used_tags": total - unused, "unused_tags": unused}
