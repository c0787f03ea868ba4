
import logging
from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from docmanager.auth.deps import get_db, get_storage, require
from docmanager.auth.principal import Principal
from docmanager.config import settings
from docmanager.documents import service
from docmanager.errors import NotFound, PayloadTooLarge, ValidationFailed
from docmanager.models.tag import TAG_NAME_MAX_LENGTH
from docmanager.schemas.document import (
    DocumentCreate,
    DocumentOut,
    DocumentOwnerIn,
    DocumentStats,
    DocumentUpdate,
)
from docmanager.uploads.extract import extract_text
from docmanager.uploads.storage import FileStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

def _split_tags(raw: str | None) -> list[str] | None:
    if raw is None or not raw.strip():
        return None
    names = [t.strip() for t in raw.split(",") if t.strip()]
    too_long = [n for n in names if len(n) > TAG_NAME_MAX_LENGTH]
    if too_long:
        raise ValidationFailed(f"Tag names must be at most {TAG_NAME_MAX_LENGTH} characters")
    return names

def _store_upload(
    db: Session,
    storage: FileStorage,
    principal: Principal,
    file_name: str | None,
    content_type: str | None,
    data: bytes,
    title: str,
    category: str | None,
    tags: list[str] | None,
):
    """Extract, store and record an upload. Blocking; runs in the threadpool."""
    body = DocumentCreate(
        title=title,
        category=category,
        extracted_text=extract_text(data, content_type, file_name),
        tags=tags,
    )

    # file first: a record must never point at a file that was not written
    stored = storage.store(file_name, data)
    try:
        doc = service.create_document(db, principal, body, stored=stored)
    except Exception:
        db.rollback()
        storage.delete(stored.name)
        raise

    logger.info("File uploaded successfully: %s by user: %s", stored.name, principal.username)
    return doc

@router.get("", response_model=list[DocumentOut])
def list_documents(
    category: str | None = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("document:list")),
):
    return service.list_documents(db, principal, category)

@router.get("/search", response_model=list[DocumentOut])
def search_documents(
    query: str = Query(min_length=1),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("document:search")),
):
    return service.search_documents(db, principal, query)

@router.get("/stats", response_model=DocumentStats)
def document_stats(db: Session = Depends(get_db), principal: Principal = Depends(require("document:stats"))):
    return DocumentStats(total_documents=service.count_documents(db, principal))

@router.post("", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
def create_document(
    body: DocumentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("document:create")),
):
    return service.create_document(db, principal, body)

@router.post("/upload", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    title: str = Form(..., min_length=1, max_length=255),
    category: str | None = Form(None, max_length=100),
    tags: str | None = Form(None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    principal: Principal = Depends(require("document:create")),
):
    if not title.strip():
        raise ValidationFailed("title must not be blank")

    data = await file.read()
    if not data:
        raise ValidationFailed(f"Uploaded file '{file.filename}' is empty")
    if len(data) > settings.max_upload_mb * 1024 * 1024:
        raise PayloadTooLarge(f"{file.filename} is larger than {settings.max_upload_mb}MB")

    tag_names = _split_tags(tags)
    return await run_in_threadpool(
        _store_upload,
        db,
        storage,
        principal,
        file.filename,
        file.content_type,
        data,
        title,
        category,
        tag_names,
    )

@router.get("/{doc_id}", response_model=DocumentOut)
def get_document(doc_id: int, db: Session = Depends(get_db), principal: Principal = Depends(require("document:read"))):
    return service.get_document(db, principal, doc_id)

@router.get("/{doc_id}/download")
def download_document(
    doc_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    principal: Principal = Depends(require("document:download")),
):
    doc = service.get_document(db, principal, doc_id, "document:download")
    if not doc.file_path:
        raise NotFound("No file associated with this document")
    if not storage.exists(doc.file_path):
        logger.error("Stored file missing for document %d: %s", doc.id, doc.file_path)
        raise NotFound(f"File not found for document {doc.id}")

    return FileResponse(
        storage.path_for(doc.file_path),
        media_type=storage.content_type(doc.file_path),
        filename=doc.title,
    )

@router.put("/{doc_id}", response_model=DocumentOut)
def update_document(
    doc_id: int,
    body: DocumentUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("document:update")),
):
    return service.update_document(db, principal, doc_id, body)

@router.put("/{doc_id}/owner", response_model=DocumentOut)
def reassign_owner(
    doc_id: int,
    body: DocumentOwnerIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("document:reassign")),
):
    return service.set_document_owner(db, principal, doc_id, body.user_id)

@router.delete("/{doc_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    doc_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    principal: Principal = Depends(require("document:delete")),
):
    service.delete_document(db, storage, principal, doc_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
