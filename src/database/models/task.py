from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..database import Base

class Task(Base):
    """애플리케이션의 droplet으로 한 번 실행되고 끝나는 작업입니다."""
    __tablename__ = "tasks"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    command = Column(String, nullable=False)
    memory = Column(Integer, nullable=False)
    disk_quota = Column(Integer, nullable=False)
    log_rate_limit = Column(Integer, nullable=False)
    user = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)
    app = relationship("App", back_populates="tasks")
