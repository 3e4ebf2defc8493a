from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base

class Organization(Base):
    """
    하나의 테넌트를 나타내는 최상위 범위입니다.
    조직 쿼터는 조직 안의 모든 스페이스, 모든 프로세스에 함께 적용됩니다.
    """
    __tablename__ = "organizations"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, unique=True, nullable=False)
    quota_definition_id = Column(Integer, ForeignKey("quota_definitions.id"), nullable=True)

    quota_definition = relationship("QuotaDefinition")
    spaces = relationship("Space", back_populates="organization", cascade="all, delete-orphan")


class Space(Base):
    """조직 안의 작업 공간. 선택적으로 별도의 스페이스 쿼터를 가집니다."""
    __tablename__ = "spaces"
    id = Column(Integer, primary_key=True, index=True)
    guid = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False)
    space_quota_definition_id = Column(Integer, ForeignKey("quota_definitions.id"), nullable=True)

    organization = relationship("Organization", back_populates="spaces")
    space_quota_definition = relationship("QuotaDefinition")
    apps = relationship("App", back_populates="space", cascade="all, delete-orphan")
