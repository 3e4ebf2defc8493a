from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..database import Base

class Build(Base):
    """패키지 하나를 스테이징하는 작업입니다. 상태는 STAGING, STAGED, FAILED 중 하나입니다."""
    __tablename__ = "builds"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    state = Column(String, nullable=False)
    package_guid = Column(String, nullable=True)
    error_id = Column(String, nullable=True)
    error_description = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)
    app = relationship("App", back_populates="builds")
