"""
설정 로더

[우선순위]
1. CONFIG_PATH 가 가리키는 .env 파일 (있으면 먼저 로드, 기존 환경변수는 유지)
2. 환경변수

[필수] STORAGE_PATH, HTTP_SERVER_USER, HTTP_SERVER_PASSWORD
"""
import os
import re
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from utils.constants import (
    ENV_LOCAL,
    SUPPORTED_ENVS,
    DEFAULT_HTTP_ADDRESS,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_HTTP_IDLE_TIMEOUT,
)


class ConfigError(Exception):
    """설정 오류 (누락, 형식 오류)"""


# 단위별 초 환산
_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
}

_DURATION_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$')


def parse_duration(value: str) -> float:
    """
    기간 문자열 → 초

    "4s" → 4.0, "500ms" → 0.5, "1m" → 60.0, 단위 없으면 초
    """
    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ConfigError(f"잘못된 기간 형식: {value!r}")

    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit or "s"]


def parse_address(value: str) -> Tuple[str, int]:
    """
    "host:port" → (host, port)

    host 생략 시 (":8080") 모든 인터페이스
    """
    host, sep, port = str(value).rpartition(":")
    if not sep or not (port.isascii() and port.isdigit()) or not 0 < int(port) < 65536:
        raise ConfigError(f"HTTP_SERVER_ADDRESS 형식 오류 (host:port): {value!r}")
    return host or "0.0.0.0", int(port)


class Config:
    """애플리케이션 설정"""

    def __init__(
        self,
        storage_path: str,
        http_user: str,
        http_password: str,
        env: str = ENV_LOCAL,
        http_address: str = DEFAULT_HTTP_ADDRESS,
        http_timeout: float = parse_duration(DEFAULT_HTTP_TIMEOUT),
        http_idle_timeout: float = parse_duration(DEFAULT_HTTP_IDLE_TIMEOUT),
    ):
        if env not in SUPPORTED_ENVS:
            raise ConfigError(f"ENV는 {SUPPORTED_ENVS} 중 하나여야 함: {env!r}")

        self.env = env
        self.storage_path = storage_path
        self.http_user = http_user
        self.http_password = http_password
        self.http_address = http_address
        self.host, self.port = parse_address(http_address)
        self.http_timeout = http_timeout
        self.http_idle_timeout = http_idle_timeout

    @property
    def keep_alive_seconds(self) -> int:
        """uvicorn keep-alive (정수 초, 최소 1초)"""
        return max(1, round(self.http_idle_timeout))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """환경변수에서 설정 로드"""
        if environ is None:
            config_path = os.environ.get("CONFIG_PATH")
            if config_path:
                if not os.path.exists(config_path):
                    raise ConfigError(f"설정 파일 없음: {config_path}")
                load_dotenv(config_path, override=False)
            environ = os.environ

        def required(key: str) -> str:
            value = environ.get(key, "")
            if not value:
                raise ConfigError(f"필수 설정 누락: {key}")
            return value

        return cls(
            storage_path=required("STORAGE_PATH"),
            http_user=required("HTTP_SERVER_USER"),
            http_password=required("HTTP_SERVER_PASSWORD"),
            env=environ.get("ENV", ENV_LOCAL),
            http_address=environ.get("HTTP_SERVER_ADDRESS", DEFAULT_HTTP_ADDRESS),
            http_timeout=parse_duration(environ.get("HTTP_SERVER_TIMEOUT", DEFAULT_HTTP_TIMEOUT)),
            http_idle_timeout=parse_duration(
                environ.get("HTTP_SERVER_IDLE_TIMEOUT", DEFAULT_HTTP_IDLE_TIMEOUT)
            ),
        )

    def __repr__(self) -> str:
        # 비밀번호는 출력하지 않음
        return (
            f"Config(env={self.env!r}, storage_path={self.storage_path!r}, "
            f"http_address={self.http_address!r}, http_user={self.http_user!r})"
        )
