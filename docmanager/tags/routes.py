
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from docmanager.auth.deps import get_db, require
from docmanager.auth.principal import Principal
from docmanager.schemas.tag import SweepOut, TagIn, TagOut, TagStats
from docmanager.tags import service

router = APIRouter(prefix="/tags", tags=["tags"])

@router.get("", response_model=list[TagOut])
def list_tags(db: Session = Depends(get_db), principal: Principal = Depends(require("tag:list"))):
    return service.list_tags(db)

@router.get("/my", response_model=list[TagOut])
def my_tags(db: Session = Depends(get_db), principal: Principal = Depends(require("tag:list"))):
    return service.tags_for_user(db, principal.id)

@router.get("/search", response_model=list[TagOut])
def search_tags(
    query: str = Query(min_length=1),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("tag:list")),
):
    return service.search_tags(db, query)

@router.get("/check/{name}", response_model=bool)
def check_tag(name: str, db: Session = Depends(get_db), principal: Principal = Depends(require("tag:read"))):
    return service.tag_exists(db, name)

@router.get("/stats", response_model=TagStats)
def tag_stats(db: Session = Depends(get_db), principal: Principal = Depends(require("tag:stats"))):
    return TagStats(**service.tag_stats(db))

@router.delete("/unused", response_model=SweepOut)
def delete_unused(db: Session = Depends(get_db), principal: Principal = Depends(require("tag:sweep"))):
    deleted = service.delete_unused_tags(db)
    return SweepOut(message="Unused tags deleted successfully", deleted=deleted)

@router.get("/{tag_id}", response_model=TagOut)
def get_tag(tag_id: int, db: Session = Depends(get_db), principal: Principal = Depends(require("tag:read"))):
    return service.get_tag(db, tag_id)

@router.post("", response_model=TagOut, status_code=status.HTTP_201_CREATED)
def create_tag(body: TagIn, db: Session = Depends(get_db), principal: Principal = Depends(require("tag:create"))):
    return service.create_tag(db, body.name)

@router.put("/{tag_id}", response_model=TagOut)
def rename_tag(
    tag_id: int,
    body: TagIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("tag:update")),
):
    return service.rename_tag(db, tag_id, body.name)

@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(tag_id: int, db: Session = Depends(get_db), principal: Principal = Depends(require("tag:delete"))):
    service.delete_tag(db, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
