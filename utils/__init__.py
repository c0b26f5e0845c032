"""
Utils 패키지
"""
from .logger import setup_logger, get_logger, JSONFormatter
from .constants import *

__all__ = ['setup_logger', 'get_logger', 'JSONFormatter']
