from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from ..database import Base

class Revision(Base):
    """
    환경 변수와 droplet 참조의 불변 스냅샷입니다.
    프로세스가 revision을 가리키면 애플리케이션이 바뀌어도 실행 중인 인스턴스는 고정됩니다.
    """
    __tablename__ = "revisions"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    droplet_guid = Column(String, nullable=True)
    environment_variables = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, server_default=func.now())

    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)
    app = relationship("App", back_populates="revisions")
