"""
핵심 비즈니스 로직 패키지
"""
from .config import Config, ConfigError, parse_address, parse_duration
from .storage import (
    PersonInfo,
    PersonStorage,
    StorageError,
    IINNotFoundError,
    IINExistsError,
    NameNotFoundError,
    PhoneNumberExistsError,
    StorageTimeoutError,
    Deadline,
)

__all__ = [
    'Config',
    'ConfigError',
    'parse_duration',
    'parse_address',
    'PersonInfo',
    'PersonStorage',
    'StorageError',
    'IINNotFoundError',
    'IINExistsError',
    'NameNotFoundError',
    'PhoneNumberExistsError',
    'StorageTimeoutError',
    'Deadline',
]
