"""
IIN 디코딩 예외

[분류]
- bad_input   : 형식 오류 (길이, 숫자 외 문자) → 디코딩 시도 안 함
- invalid_iin : 형식은 맞지만 의미상 무효 (세기/성별 코드, 날짜, 체크섬)

모든 예외는 분류 결과이며 시스템 장애가 아님 (재시도 없음)
"""
from datetime import date
from typing import Optional


CATEGORY_BAD_INPUT = "bad_input"
CATEGORY_INVALID_IIN = "invalid_iin"


class IINDecodeError(ValueError):
    """IIN 디코딩 실패 기본 예외"""

    code = "DECODE_ERROR"
    category = CATEGORY_INVALID_IIN

    def __init__(self, message: str, iin: Optional[str] = None):
        self.message = message
        self.iin = iin
        super().__init__(f"[{self.code}] {message}")


class MalformedInputError(IINDecodeError):
    """길이 또는 숫자 외 문자 오류"""

    code = "MALFORMED_INPUT"
    category = CATEGORY_BAD_INPUT

    REASON_LENGTH = "length"
    REASON_NON_DIGIT = "non_digit"

    def __init__(self, message: str, reason: str, iin: Optional[str] = None):
        self.reason = reason
        super().__init__(message, iin)


class InvalidCenturySexDigitError(IINDecodeError):
    """7번째 자리가 1-6 범위 밖"""

    code = "INVALID_CENTURY_SEX_DIGIT"

    def __init__(self, digit, iin: Optional[str] = None):
        self.digit = digit
        super().__init__(f"7번째 자리는 1-6 이어야 함: {digit!r}", iin)


class InvalidCalendarDateError(IINDecodeError):
    """1-6번째 자리가 실제 날짜가 아님"""

    code = "INVALID_CALENDAR_DATE"


class FutureBirthDateError(IINDecodeError):
    """생년월일이 검증 기준일 이후"""

    code = "FUTURE_BIRTH_DATE"

    def __init__(self, birth_date: date, today: date, iin: Optional[str] = None):
        self.birth_date = birth_date
        self.today = today
        super().__init__(
            f"생년월일 {birth_date.isoformat()}이(가) 기준일 {today.isoformat()} 이후임", iin
        )


class ChecksumMismatchError(IINDecodeError):
    """12번째 자리 체크섬 불일치 (또는 두 알고리즘 모두 10)"""

    code = "CHECKSUM_MISMATCH"

    def __init__(self, expected: int, actual: int, iin: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        if expected == 10:
            message = "두 알고리즘 모두 10 → 표현 불가능한 체크섬"
        else:
            message = f"체크섬 불일치: 예상 {expected}, 실제 {actual}"
        super().__init__(message, iin)
