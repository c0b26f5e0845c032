"""
개인 정보 웹서비스 실행

    CONFIG_PATH=config/local.env python main.py
"""
import logging
import os
import sys

import uvicorn

from api import create_app
from core import Config, ConfigError, PersonStorage, StorageError
from utils import setup_logger

logger = logging.getLogger("citizens")


def main() -> int:
    # 1. 설정
    try:
        config = Config.from_env()
    except ConfigError as e:
        print(f"설정 오류: {e}", file=sys.stderr)
        return 1

    # 2. 로거
    setup_logger(env=config.env)
    logger.info(f"서비스 시작: {config!r}")
    logger.debug("디버그 로그 활성화")

    # 3. 저장소
    storage_dir = os.path.dirname(config.storage_path)
    if storage_dir:
        os.makedirs(storage_dir, exist_ok=True)
    try:
        storage = PersonStorage(config.storage_path)
    except StorageError as e:
        logger.error(f"저장소 초기화 실패: {e}")
        return 1

    # 4. 서버 (종료 시그널 처리는 uvicorn)
    app = create_app(config, storage)
    logger.info(f"서버 시작: {config.http_address}")
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        timeout_keep_alive=config.keep_alive_seconds,
        log_config=None,
    )
    logger.info("서버 종료")
    return 0


if __name__ == "__main__":
    sys.exit(main())
