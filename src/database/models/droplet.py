from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from ..database import Base

class Droplet(Base):
    """
    스테이징이 끝난 실행 가능한 산출물입니다. STAGED 이후에는 변경되지 않습니다.
    execution_metadata는 빌드 파이프라인이 남긴 원본 문서(JSON 문자열)이며,
    process_types는 프로세스 타입별로 감지된 시작 명령입니다.
    """
    __tablename__ = "droplets"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    state = Column(String, nullable=False)
    execution_metadata = Column(Text, nullable=True)
    process_types = Column(JSON, nullable=True)
    image_receipt = Column(String, nullable=True)
    buildpack_receipt_name = Column(String, nullable=True)
    buildpack_receipt_guid = Column(String, nullable=True)
    error_id = Column(String, nullable=True)
    error_description = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)
    app = relationship("App", back_populates="droplets")
