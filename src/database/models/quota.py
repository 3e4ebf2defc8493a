from sqlalchemy import Column, Integer, String
from ..database import Base

class QuotaDefinition(Base):
    """
    조직(Organization) 또는 스페이스(Space)에 적용되는 리소스 상한 정의입니다.
    총 메모리, 인스턴스당 메모리, 앱 인스턴스 수, 로그 전송률을 제한하며
    -1은 무제한을 의미합니다 (memory_limit 제외).
    """
    __tablename__ = "quota_definitions"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    memory_limit = Column(Integer, nullable=False)
    instance_memory_limit = Column(Integer, nullable=False, default=-1)
    app_instance_limit = Column(Integer, nullable=False, default=-1)
    log_rate_limit = Column(Integer, nullable=False, default=-1)
