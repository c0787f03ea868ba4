
import logging
from sqlalchemy.orm import Session
from docmanager.auth.policy import authorize
from docmanager.auth.principal import Principal
from docmanager.errors import NotFound
from docmanager.models.document import Document
from docmanager.schemas.document import DocumentCreate, DocumentUpdate
from docmanager.tags.service import reconcile_tags
from docmanager.uploads.storage import FileStorage, StoredFile
from docmanager.users.service import get_user

logger = logging.getLogger(__name__)

def _own_documents(db: Session, user_id: int):
    return db.query(Document).filter(Document.user_id == user_id)

def _newest_first(query):
    return query.order_by(Document.created_at.desc(), Document.id.desc())

def list_documents(db: Session, principal: Principal, category: str | None = None) -> list[Document]:
    query = _own_documents(db, principal.id)
    if category:
        query = query.filter(Document.category == category)
    return _newest_first(query).all()

def search_documents(db: Session, principal: Principal, text: str) -> list[Document]:
    """Case-insensitive title search; administrators search every user's documents."""
    query = db.query(Document) if principal.is_admin else _own_documents(db, principal.id)
    query = query.filter(Document.title.icontains(text, autoescape=True))
    return _newest_first(query).all()

def count_documents(db: Session, principal: Principal) -> int:
    return _own_documents(db, principal.id).count()

def get_document(db: Session, principal: Principal, doc_id: int, operation: str = "document:read") -> Document:
    doc = db.get(Document, doc_id)
    if doc is None:
        raise NotFound.for_resource("Document", "id", doc_id)
    authorize(principal, operation, owner_id=doc.user_id, resource="Document", resource_id=doc_id)
    return doc

def create_document(
    db: Session,
    principal: Principal,
    body: DocumentCreate,
    stored: StoredFile | None = None,
) -> Document:
    authorize(principal, "document:create")
    doc = Document(
        user_id=principal.id,
        title=body.title,
        category=body.category,
        extracted_text=body.extracted_text,
        document_date=body.document_date,
    )
    if stored is not None:
        doc.file_path = stored.name
        doc.file_type = stored.content_type
        doc.file_size = stored.size
    doc.tags = reconcile_tags(db, body.tags)

    db.add(doc)
    db.commit()
    db.refresh(doc)
    return doc

def update_document(db: Session, principal: Principal, doc_id: int, body: DocumentUpdate) -> Document:
    doc = get_document(db, principal, doc_id, "document:update")
    changes = body.model_dump(exclude_unset=True, exclude={"tags"})
    for field, value in changes.items():
        if field == "title" and value is None:
            continue
        setattr(doc, field, value)

    if body.tags is not None:
        doc.tags = reconcile_tags(db, body.tags)

    db.commit()
    db.refresh(doc)
    return doc

def set_document_owner(db: Session, principal: Principal, doc_id: int, new_owner_id: int) -> Document:
    """Reassign ownership as one column update."""
    authorize(principal, "document:reassign")
    doc = db.get(Document, doc_id)
    if doc is None:
        raise NotFound.for_resource("Document", "id", doc_id)
    get_user(db, new_owner_id)

    previous = doc.user_id
    doc.user_id = new_owner_id
    db.commit()
    db.refresh(doc)
    logger.info("Document %d reassigned from user %d to user %d", doc.id, previous, new_owner_id)
    return doc

def delete_document(db: Session, storage: FileStorage, principal: Principal, doc_id: int) -> None:
    doc = get_document(db, principal, doc_id, "document:delete")
    file_path = doc.file_path

    db.delete(doc)
    db.commit()

    if file_path:
        storage.delete(file_path)
