
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from docmanager.auth.deps import get_db, get_storage, require
from docmanager.auth.principal import Principal
from docmanager.schemas.user import UserCreate, UserOut, UserUpdate
from docmanager.uploads.storage import FileStorage
from docmanager.users import service

router = APIRouter(prefix="/users", tags=["users"])

@router.get("", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db), principal: Principal = Depends(require("user:list"))):
    return service.list_users(db)

@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, db: Session = Depends(get_db), principal: Principal = Depends(require("user:create"))):
    return service.create_user_as_admin(db, principal, body)

@router.get("/check-username/{username}", response_model=bool)
def check_username(username: str, db: Session = Depends(get_db)):
    return service.username_taken(db, username)

@router.get("/check-email/{email}", response_model=bool)
def check_email(email: str, db: Session = Depends(get_db)):
    return service.email_taken(db, email)

@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db), principal: Principal = Depends(require("user:read"))):
    return service.get_user(db, user_id)

@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    body: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require("user:update")),
):
    return service.update_user(db, principal, user_id, body)

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    principal: Principal = Depends(require("user:delete")),
):
    service.delete_user(db, storage, principal, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
