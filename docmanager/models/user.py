
import enum
from sqlalchemy import Boolean, Column, Integer, String, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import relationship
from docmanager.db.session import Base

class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"

class UserRole(Base):
    __tablename__ = "user_roles"
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role = Column(Enum(Role, native_enum=False, length=20), primary_key=True)

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    enabled = Column(Boolean, nullable=False, default=True)
    account_non_expired = Column(Boolean, nullable=False, default=True)
    account_non_locked = Column(Boolean, nullable=False, default=True)
    credentials_non_expired = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    role_links = relationship("UserRole", cascade="all, delete-orphan", lazy="selectin")
    documents = relationship(
        "Document",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def roles(self) -> list[Role]:
        return sorted({link.role for link in self.role_links}, key=lambda r: r.value)

    def set_roles(self, roles) -> None:
        wanted = set(roles)
        self.role_links = [link for link in self.role_links if link.role in wanted]
        held = {link.role for link in self.role_links}
        for role in sorted(wanted - held, key=lambda r: r.value):
            self.role_links.append(UserRole(role=role))

    @property
    def is_active(self) -> bool:
        return bool(
            self.enabled
            and self.account_non_expired
            and self.account_non_locked
            and self.credentials_non_expired
        )

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.username

    @property
    def document_count(self) -> int:
        return len(self.documents)
