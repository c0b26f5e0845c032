"""
API 패키지

- app             : 웹서비스 (FastAPI)
- citizens_client : 웹서비스 클라이언트 (requests)
"""
from .app import create_app
from .citizens_client import CitizensClient, CitizensApiError

__all__ = ['create_app', 'CitizensClient', 'CitizensApiError']
