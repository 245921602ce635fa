from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String, false, func

from app.db.base import Base

ASSET_STATUS_UPLOADED = "uploaded"
ASSET_STATUS_PROCESSED = "processed"
ASSET_STATUSES = {ASSET_STATUS_UPLOADED, ASSET_STATUS_PROCESSED}


class Asset(Base):
    __tablename__ = "asset_metadata"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    content_type = Column(String(100), nullable=False)
    input_key = Column(String(500), nullable=False, unique=True)
    output_key = Column(String(500), nullable=True)
    bucket = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, default=ASSET_STATUS_UPLOADED, server_default=ASSET_STATUS_UPLOADED)

    uploaded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    processed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false(), index=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
