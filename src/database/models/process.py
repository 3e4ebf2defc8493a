from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from ..database import Base

class Process(Base):
    """
    애플리케이션의 실행 단위 하나(예: 'web', 'worker')를 나타냅니다.
    인스턴스 수, 메모리/디스크/로그 전송률 제한, 헬스 체크 설정, 실행 사용자,
    원하는 실행 상태(STARTED/STOPPED), 재배포 판단용 버전 토큰을 가집니다.
    """
    __tablename__ = "processes"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    type = Column(String, nullable=False)
    instances = Column(Integer, nullable=False, default=1)
    memory = Column(Integer, nullable=False)
    disk_quota = Column(Integer, nullable=False)
    log_rate_limit = Column(Integer, nullable=False)
    file_descriptors = Column(Integer, nullable=False)
    state = Column(String, nullable=False, default="STOPPED")
    ports = Column(JSON, nullable=True)
    health_check_type = Column(String, nullable=False, default="port")
    health_check_http_endpoint = Column(String, nullable=True)
    health_check_timeout = Column(Integer, nullable=True)
    health_check_invocation_timeout = Column(Integer, nullable=True)
    readiness_health_check_type = Column(String, nullable=False, default="process")
    readiness_health_check_http_endpoint = Column(String, nullable=True)
    readiness_health_check_invocation_timeout = Column(Integer, nullable=True)
    user = Column(String, nullable=True)
    command = Column(String, nullable=True)
    version = Column(String, nullable=False)
    # console/debug 등 보조 메타데이터 ('metadata'는 declarative Base의 예약어)
    process_metadata = Column("metadata", JSON, nullable=False, default=dict)
    revision_guid = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)
    app = relationship("App", back_populates="processes")
