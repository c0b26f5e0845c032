"""
로깅 설정 모듈

[환경별 설정]
- local : DEBUG, 텍스트
- dev   : DEBUG, JSON
- prod  : INFO, JSON
"""
import json
import logging
from datetime import datetime, timezone

from .constants import ENV_LOCAL, ENV_DEV, ENV_PROD


# 로그에 추가로 노출할 extra 필드
EXTRA_FIELDS = (
    "request_id", "method", "path", "remote_addr", "user_agent",
    "status", "duration_ms", "iin", "error_code",
)


class JSONFormatter(logging.Formatter):
    """JSON 한 줄 포맷터"""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logger(name: str = None, env: str = ENV_LOCAL) -> logging.Logger:
    """로거 설정 및 반환 (name이 None이면 루트 로거)"""

    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    level = logging.INFO if env == ENV_PROD else logging.DEBUG
    logger.setLevel(level)

    # 콘솔 핸들러
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    if env in (ENV_DEV, ENV_PROD):
        console_handler.setFormatter(JSONFormatter())
    else:
        # local 및 알 수 없는 환경
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    logger.addHandler(console_handler)

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """로거 가져오기 (핸들러 설정은 setup_logger에서 한 번만)"""
    return logging.getLogger(name)
