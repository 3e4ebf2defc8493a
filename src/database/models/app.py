from sqlalchemy import Boolean, Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from ..database import Base

class App(Base):
    """
    사용자가 배포한 애플리케이션입니다.
    하나 이상의 프로세스(web, worker 등)를 소유하며, 현재 droplet과
    환경 변수, 라이프사이클 종류(buildpack 또는 image)를 가집니다.
    """
    __tablename__ = "apps"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    lifecycle_type = Column(String, nullable=False, default="buildpack")
    buildpacks = Column(JSON, nullable=True)
    stack = Column(String, nullable=True)
    environment_variables = Column(JSON, nullable=False, default=dict)
    revisions_enabled = Column(Boolean, nullable=False, default=True)
    # 현재 droplet은 guid로만 참조합니다 (droplets.app_id와의 순환 FK 방지)
    droplet_guid = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    space_id = Column(Integer, ForeignKey("spaces.id"), nullable=False)
    space = relationship("Space", back_populates="apps")

    processes = relationship("Process", back_populates="app", cascade="all, delete-orphan")
    packages = relationship("Package", back_populates="app", cascade="all, delete-orphan")
    builds = relationship("Build", back_populates="app", cascade="all, delete-orphan")
    droplets = relationship("Droplet", back_populates="app", cascade="all, delete-orphan")
    revisions = relationship("Revision", back_populates="app", cascade="all, delete-orphan")
    route_mappings = relationship("RouteMapping", back_populates="app", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="app", cascade="all, delete-orphan")
    sidecars = relationship("Sidecar", back_populates="app", cascade="all, delete-orphan")
