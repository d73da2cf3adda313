"""Account model - one tenant operating a delivery round."""

from sqlalchemy import Column, DateTime, String, Text, func

from milkbook.core.database import Base
from milkbook.models.shared import UUIDType, generate_uuid


class Account(Base):
    __tablename__ = "accounts"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, index=True, nullable=False)
    fullname = Column(String(100), nullable=False)
    address = Column(Text, nullable=False)
    password_hash = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
