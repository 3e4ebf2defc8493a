from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from ..database import Base

class Sidecar(Base):
    """
    애플리케이션의 프로세스 컨테이너 안에서 함께 실행되는 보조 프로세스입니다.
    process_types에 나열된 프로세스 타입에만 붙으며, 지정한 메모리는
    해당 프로세스의 메모리 할당 안에서 나누어 씁니다.
    """
    __tablename__ = "sidecars"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    command = Column(String, nullable=False)
    memory = Column(Integer, nullable=True)
    process_types = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, server_default=func.now())

    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)
    app = relationship("App", back_populates="sidecars")
