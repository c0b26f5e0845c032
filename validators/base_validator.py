"""
검증기 기본 클래스

[역할]
- 고정 길이 숫자열 구조 검증 (길이, ASCII 숫자)
- 공통 인터페이스 정의
"""
import re
from abc import ABC, abstractmethod

from .errors import MalformedInputError


class BaseValidator(ABC):
    """검증기 기본 클래스"""

    # 하위 클래스에서 정의 (고정 자릿수)
    LENGTH = 0

    # ASCII 숫자만 허용 (str.isdigit()은 '²', '٣' 등도 통과시킴)
    DIGITS_PATTERN = re.compile(r'[0-9]+')

    @classmethod
    def is_ascii_digits(cls, value: str) -> bool:
        """ASCII 숫자로만 이루어졌는지 확인"""
        return bool(cls.DIGITS_PATTERN.fullmatch(value))

    def check_structure(self, value) -> str:
        """
        구조 검증 (길이 + 문자 종류)

        Returns:
            검증된 문자열 그대로

        Raises:
            MalformedInputError: 길이 또는 숫자 외 문자 오류
        """
        if not isinstance(value, str):
            raise MalformedInputError(
                f"문자열이 아님: {type(value).__name__}",
                MalformedInputError.REASON_NON_DIGIT,
            )

        if len(value) != self.LENGTH:
            raise MalformedInputError(
                f"{self.LENGTH}자리여야 함 (입력 {len(value)}자리)",
                MalformedInputError.REASON_LENGTH,
                value,
            )

        if not self.is_ascii_digits(value):
            raise MalformedInputError(
                "숫자만 허용됨",
                MalformedInputError.REASON_NON_DIGIT,
                value,
            )

        return value

    def check_prefix(self, value, size: int) -> str:
        """앞 size 자리가 존재하고 모두 숫자인지 확인 (단독 호출용)"""
        if not isinstance(value, str) or len(value) < size:
            raise MalformedInputError(
                f"최소 {size}자리 필요",
                MalformedInputError.REASON_LENGTH,
                value if isinstance(value, str) else None,
            )

        if not self.is_ascii_digits(value[:size]):
            raise MalformedInputError(
                f"앞 {size}자리는 숫자만 허용됨",
                MalformedInputError.REASON_NON_DIGIT,
                value,
            )

        return value[:size]

    @abstractmethod
    def validate(self, value: str, context: str = "") -> bool:
        """
        기본 검증

        Args:
            value: 검증할 값
            context: 주변 컨텍스트 (참고용)

        Returns:
            bool: 검증 통과 시 True
        """
        pass
