from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base

class RouteMapping(Base):
    """
    외부 라우트와 프로세스 타입 사이의 연결입니다.
    app_port가 -1이면 대상 포트가 지정되지 않은 것으로, 프로세스 기본 포트를 사용합니다.
    """
    __tablename__ = "route_mappings"
    id = Column(Integer, primary_key=True, index=True)
    process_type = Column(String, nullable=False)
    app_port = Column(Integer, nullable=False, default=-1)
    route_url = Column(String, nullable=True)

    app_id = Column(Integer, ForeignKey("apps.id"), nullable=False)
    app = relationship("App", back_populates="route_mappings")
