from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base
from app.core.security import hash_secret, verify_secret

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)  # toujours en minuscules
    password_hash = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)

    # Rétention des tâches terminées (jours), None = valeur par défaut
    completed_task_retention_days = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    subscription = relationship("Subscription", back_populates="user", uselist=False)

    def set_password(self, password: str):
        self.password_hash = hash_secret(password)

    def verify_password(self, password: str) -> bool:
        return verify_secret(password, self.password_hash)
