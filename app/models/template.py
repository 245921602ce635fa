from sqlalchemy import Boolean, Column, DateTime, Integer, String, false, func

from app.db.base import Base


class Template(Base):
    __tablename__ = "template_metadata"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    storage_key = Column(String(500), nullable=False, unique=True)
    bucket = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false(), index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
