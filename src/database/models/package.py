from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..database import Base

class Package(Base):
    """
    빌드를 기다리는 업로드된 소스(bits) 또는 컨테이너 이미지 참조입니다.
    bits 패키지는 업로드가 끝나기 전까지 checksum이 비어 있습니다.
    """
    __tablename__ = "packages"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    checksum = Column(String, nullable=True)
    image = Column(String, nullable=True)
    image_username = Column(String, nullable=True)
    image_password = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)
    app = relationship("App", back_populates="packages")
