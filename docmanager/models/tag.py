
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from docmanager.db.session import Base
from docmanager.models.document import document_tags

TAG_NAME_MAX_LENGTH = 100

class Tag(Base):
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True, index=True)
    # always stored normalized: see tags.service.normalize_tag_name
    name = Column(String(TAG_NAME_MAX_LENGTH), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    documents = relationship("Document", secondary=document_tags, back_populates="tags", collection_class=set)

    @property
    def document_count(self) -> int:
        return len(self.documents)
