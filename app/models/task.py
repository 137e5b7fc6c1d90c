"""Task model"""

from sqlalchemy import Column, Integer, String, DateTime, Date, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


class Task(Base):
    __tablename__ = "tasks"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    priority = Column(String, nullable=True)  # quadrant : DO_FIRST, SCHEDULE, DELEGATE, ELIMINATE
    status = Column(String, default="TODO")
    progress = Column(Integer, default=0)

    completed = Column(Boolean, default=False, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True, index=True)

    start_date = Column(Date, nullable=True)
    start_time = Column(String, nullable=True)  # "HH:MM"
    due_date = Column(Date, nullable=True, index=True)
    due_time = Column(String, nullable=True)

    is_recurring = Column(Boolean, default=False, nullable=False)
    assigned_to_bot_id = Column(Integer, ForeignKey("bots.id"), nullable=True, index=True)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project")
    comments = relationship("TaskComment", back_populates="task", cascade="all, delete-orphan")
    artifacts = relationship("TaskArtifact", back_populates="task", cascade="all, delete-orphan")
