from sqlalchemy import Column, Integer, String, DateTime, func
from ..database import Base

class UsageEvent(Base):
    """
    과금/사용량 집계를 위한 프로세스 사용량 이벤트입니다.
    시작/중지 전환, 실행 중 스케일/메모리 변경, 실행 중 삭제 시 기록됩니다.
    프로세스가 삭제된 뒤에도 남아야 하므로 FK 없이 guid로만 참조합니다.
    """
    __tablename__ = "usage_events"
    id = Column(Integer, primary_key=True, index=True)
    process_guid = Column(String, nullable=False, index=True)
    process_type = Column(String, nullable=False)
    app_guid = Column(String, nullable=False)
    app_name = Column(String, nullable=False)
    state = Column(String, nullable=False)
    previous_state = Column(String, nullable=True)
    instances = Column(Integer, nullable=False)
    previous_instances = Column(Integer, nullable=True)
    memory = Column(Integer, nullable=False)
    previous_memory = Column(Integer, nullable=True)
    buildpack_name = Column(String, nullable=True)
    buildpack_guid = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
