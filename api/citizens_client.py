"""
개인 정보 웹서비스 API 클라이언트

Basic 인증으로 api.app 의 엔드포인트를 호출
"""
import json
import logging
from typing import Any, Dict, Optional

import requests

from utils.constants import (
    ROUTE_DELETE_PERSON,
    ROUTE_IIN_CHECK,
    ROUTE_PEOPLE_BY_IIN_PREFIX,
    ROUTE_PEOPLE_BY_NAME,
    ROUTE_PERSON_BY_IIN,
    ROUTE_SAVE_PERSON,
)

logger = logging.getLogger(__name__)


class CitizensApiError(Exception):
    """웹서비스 호출 관련 예외"""

    def __init__(self, code: str, message: str, response: dict = None):
        self.code = code
        self.message = message
        self.response = response or {}
        super().__init__(f"[{code}] {message}")


class CitizensClient:
    """개인 정보 웹서비스 클라이언트"""

    def __init__(
        self,
        base_url: str,
        user: str,
        password: str,
        timeout: float = 10
    ):
        """
        Args:
            base_url: 서비스 주소 (예: http://localhost:8080)
            user: Basic 인증 사용자
            password: Basic 인증 비밀번호
            timeout: 요청 타임아웃 (초)
        """
        self.base_url = base_url.rstrip("/")
        self.auth = (user, password)
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        API 요청 실행

        4xx/5xx 응답도 본문(JSON)을 그대로 반환
        (status_code 키로 HTTP 상태 추가)

        Raises:
            CitizensApiError: 타임아웃, 네트워크 오류, 인증 실패, JSON 파싱 실패
        """
        url = f"{self.base_url}{path}"

        try:
            response = requests.request(
                method,
                url,
                auth=self.auth,
                json=payload,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.error("API 요청 타임아웃")
            raise CitizensApiError("TIMEOUT", "API 요청 시간 초과")
        except requests.exceptions.RequestException as e:
            logger.error(f"API 요청 오류: {str(e)}")
            raise CitizensApiError("NETWORK_ERROR", f"네트워크 오류: {str(e)}")

        if response.status_code == 401:
            raise CitizensApiError("UNAUTHORIZED", "인증 실패")

        try:
            result = response.json()
        except (json.JSONDecodeError, ValueError):
            logger.error("API 응답 파싱 오류")
            raise CitizensApiError(
                "PARSE_ERROR",
                f"API 응답 파싱 실패 (HTTP {response.status_code})",
                {"text": response.text},
            )

        result["status_code"] = response.status_code
        return result

    def check_iin(self, iin: str) -> Dict[str, Any]:
        """
        IIN 검증

        Returns:
            {"correct": bool, "sex": str, "date_of_birth": "DD.MM.YYYY", ...}
        """
        return self._request("GET", ROUTE_IIN_CHECK.format(iin=_quote(iin)))

    def save_person(self, iin: str, name: str, phone: str) -> Dict[str, Any]:
        logger.info(f"개인 정보 저장 요청: {iin[:6]}******")
        return self._request(
            "POST",
            ROUTE_SAVE_PERSON,
            {"iin": iin, "name": name, "phone": phone}
        )

    def get_person_by_iin(self, iin: str) -> Dict[str, Any]:
        return self._request("GET", ROUTE_PERSON_BY_IIN.format(iin=_quote(iin)))

    def get_people_by_name(self, name: str) -> Dict[str, Any]:
        return self._request("GET", ROUTE_PEOPLE_BY_NAME.format(name=_quote(name)))

    def get_people_by_iin_prefix(self, prefix: str) -> Dict[str, Any]:
        return self._request("GET", ROUTE_PEOPLE_BY_IIN_PREFIX.format(prefix=_quote(prefix)))

    def delete_person(self, iin: str) -> Dict[str, Any]:
        return self._request("DELETE", ROUTE_DELETE_PERSON.format(iin=_quote(iin)))


def _quote(value: str) -> str:
    """경로 파라미터 인코딩 ('/', '?', '#' 포함)"""
    return requests.utils.quote(str(value), safe="")
