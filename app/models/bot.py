"""Bot model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


class Bot(Base):
    __tablename__ = "bots"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    api_key_hash = Column(String, unique=True, nullable=False, index=True)  # SHA-256 de la clé brute
    api_key_prefix = Column(String, nullable=False)
    webhook_url = Column(String, nullable=True)
    webhook_secret = Column(String, nullable=True)

    permissions = Column(String, default="tasks:read", nullable=False)  # "tasks:read,tasks:write"
    project_ids = Column(JSON, default=list)  # vide = tous les projets du owner
    rate_limit_per_minute = Column(Integer, default=60, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    last_used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User")
