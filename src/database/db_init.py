import logging
import uuid

from src.config import get_config
from .database import engine, SessionLocal, Base
from .models import *

logger = logging.getLogger(__name__)


def initialize_db():
    """
    DB와 테이블을 생성하고, 기본 쿼터/조직/스페이스를 삽입합니다.
    SQLAlchemy 모델을 사용하여 모든 작업을 수행합니다.
    """
    logger.info("Initializing database...")

    # 모든 테이블을 생성합니다. (이미 존재하면 생성하지 않음)
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created.")

    db = SessionLocal()
    try:
        # 기본 데이터가 이미 있는지 확인
        if db.query(Organization).first():
            logger.info("Seed data already present; skipping.")
            return

        config = get_config()
        default_quota = QuotaDefinition(
            name='default',
            memory_limit=10240,
            instance_memory_limit=-1,
            app_instance_limit=-1,
            log_rate_limit=-1,
        )
        db.add(default_quota)

        # 변경사항을 커밋하여 각 객체의 id를 할당받습니다.
        db.commit()

        default_org = Organization(guid=str(uuid.uuid4()), name='default', quota_definition_id=default_quota.id)
        db.add(default_org)
        db.commit()

        default_space = Space(guid=str(uuid.uuid4()), name='default', organization_id=default_org.id)
        db.add(default_space)
        db.commit()
        logger.info("Seeded default quota (%s MB), organization and space. Default app memory: %s MB.",
                    default_quota.memory_limit, config.default_app_memory)

    except Exception:
        logger.exception("Database initialization failed.")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == '__main__':
    logging.basicConfig(level=get_config().log_level)
    initialize_db()
