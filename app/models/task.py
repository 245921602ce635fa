from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, false, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.db.base import Base


class Task(Base):
    __tablename__ = "task_metadata"
    __table_args__ = (
        # At most one live task per (asset, template); tombstoned rows do not count.
        Index(
            "uq_task_metadata_asset_template_live",
            "asset_id",
            "template_id",
            unique=True,
            postgresql_where=text("is_deleted = false"),
            sqlite_where=text("is_deleted = 0"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(
        Integer,
        ForeignKey("template_metadata.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    asset_id = Column(
        Integer,
        ForeignKey("asset_metadata.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    metadata_ = Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false(), index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    template = relationship("Template")
    asset = relationship("Asset")
