"""
logging.py

애플리케이션 로깅 설정 파일.

서비스 계층은 모듈마다 logging.getLogger(__name__) 로거를 사용하고,
이 파일은 앱 시작 시 한 번만 루트 로거 포맷/레벨을 구성한다.

"""

import logging
import logging.config

from app.core.config import settings


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "handlers": ["console"],
                "level": (level or settings.LOG_LEVEL).upper(),
            },
            # SQL 로그는 DEBUG 에서도 기본적으로 조용히
            "loggers": {
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
