"""
개인식별번호(IIN) 검증기

[구조] 12자리 숫자
- 1-6  : 생년월일 (YYMMDD)
- 7    : 세기 + 성별 코드 (1-6)
- 8-11 : 일련번호 (체크섬 계산에만 사용)
- 12   : 체크섬

[검증 순서] 형식 → 생년월일 → 성별 → 체크섬 (첫 실패에서 즉시 중단)

[체크섬]
- 알고리즘 A 결과가 10이면 알고리즘 B로 재계산 (불일치 시 재시도 아님)
- B 결과도 10이면 무효
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Sequence, Tuple

from .base_validator import BaseValidator
from .errors import (
    ChecksumMismatchError,
    FutureBirthDateError,
    IINDecodeError,
    InvalidCalendarDateError,
    InvalidCenturySexDigitError,
)

logger = logging.getLogger(__name__)


ALGORITHM_A = 1
ALGORITHM_B = 2


class Sex(str, Enum):
    """성별"""
    MALE = "male"
    FEMALE = "female"


class CenturySex(Enum):
    """7번째 자리 코드 → (세기, 성별)"""

    MALE_19TH = (1, 19, Sex.MALE)
    FEMALE_19TH = (2, 19, Sex.FEMALE)
    MALE_20TH = (3, 20, Sex.MALE)
    FEMALE_20TH = (4, 20, Sex.FEMALE)
    MALE_21ST = (5, 21, Sex.MALE)
    FEMALE_21ST = (6, 21, Sex.FEMALE)

    def __init__(self, digit: int, century: int, sex: Sex):
        self.digit = digit
        self.century = century
        self.sex = sex

    @classmethod
    def from_digit(cls, digit) -> "CenturySex":
        """코드 조회 (1-6 이외는 InvalidCenturySexDigitError)"""
        if isinstance(digit, int) and not isinstance(digit, bool):
            for member in cls:
                if member.digit == digit:
                    return member
        raise InvalidCenturySexDigitError(digit)


@dataclass(frozen=True)
class ValidatedIIN:
    """전체 검증 통과 결과"""
    iin: str
    birth_date: date
    sex: Sex
    century: int
    checksum_algorithm: int


class IINValidator(BaseValidator):
    """IIN 검증기 (상태 없음, 인스턴스 공유 가능)"""

    LENGTH = 12

    # 7번째 자리 위치 (0-based)
    CENTURY_SEX_INDEX = 6

    # 체크섬 계산 대상 자릿수 (1-11)
    CHECKSUM_SPAN = 11

    # 체크섬 가중치
    WEIGHTS_A = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11)
    WEIGHTS_B = (3, 4, 5, 6, 7, 8, 9, 10, 11, 1, 2)

    # 알고리즘 전환 조건 (A 결과가 정확히 이 값일 때만)
    FALLBACK_TRIGGER = 10

    # =========================================================
    # 전체 검증
    # =========================================================

    def decode(self, value: str, today: Optional[date] = None) -> ValidatedIIN:
        """
        전체 검증 (형식 → 생년월일 → 성별 → 체크섬)

        Args:
            value: 12자리 IIN
            today: 검증 기준일 (None이면 호출 시점의 오늘)

        Returns:
            ValidatedIIN

        Raises:
            IINDecodeError: 첫 번째로 실패한 단계의 예외
        """
        today = _reference_date(today)

        try:
            iin = self.check_structure(value)
            birth_date = self.get_birth_date(iin, today)
            code = CenturySex.from_digit(int(iin[self.CENTURY_SEX_INDEX]))
            sex = self.get_sex(code.digit)
            algorithm = self.verify_checksum(iin)
        except IINDecodeError as e:
            if e.iin is None and isinstance(value, str):
                e.iin = value
            logger.debug(f"IIN 검증 실패 ({e.code}): {e.message}")
            raise

        return ValidatedIIN(
            iin=iin,
            birth_date=birth_date,
            sex=sex,
            century=code.century,
            checksum_algorithm=algorithm,
        )

    def validate(self, value: str, context: str = "") -> bool:
        """IIN 유효 여부 (예외 대신 bool)"""
        return self.is_valid(value)

    def is_valid(self, value: str, today: Optional[date] = None) -> bool:
        try:
            self.decode(value, today)
        except IINDecodeError:
            return False
        return True

    # =========================================================
    # 생년월일 / 성별
    # =========================================================

    def get_birth_date(self, value: str, today: Optional[date] = None) -> date:
        """
        생년월일 추출

        연도 = (세기 - 1) * 100 + YY
        """
        today = _reference_date(today)

        prefix = self.check_prefix(value, self.CENTURY_SEX_INDEX + 1)

        try:
            code = CenturySex.from_digit(int(prefix[self.CENTURY_SEX_INDEX]))
        except InvalidCenturySexDigitError as e:
            e.iin = value
            raise

        year = (code.century - 1) * 100 + int(prefix[0:2])
        month = int(prefix[2:4])
        day = int(prefix[4:6])

        try:
            birth_date = date(year, month, day)
        except ValueError as e:
            raise InvalidCalendarDateError(
                f"{year:04d}-{month:02d}-{day:02d}은(는) 유효한 날짜가 아님: {e}", value
            ) from e

        if birth_date > today:
            raise FutureBirthDateError(birth_date, today, value)

        return birth_date

    def get_sex(self, digit: int) -> Sex:
        """7번째 자리 → 성별"""
        return CenturySex.from_digit(digit).sex

    # =========================================================
    # 체크섬
    # =========================================================

    def calculate_checksum(self, value: str, weights: Sequence[int]) -> int:
        """Σ(자리 × 가중치) % 11"""
        digits = self.check_prefix(value, self.CHECKSUM_SPAN)

        total = 0
        for digit, weight in zip(digits, weights):
            total += int(digit) * weight

        return total % 11

    def resolve_checksum(self, value: str) -> Tuple[int, int]:
        """
        최종 체크섬 계산

        Returns:
            (체크섬, 사용된 알고리즘)
            B 결과가 10이면 10 그대로 반환 (표현 불가능 → 검증 시 무효)
        """
        checksum = self.calculate_checksum(value, self.WEIGHTS_A)
        if checksum != self.FALLBACK_TRIGGER:
            return checksum, ALGORITHM_A

        return self.calculate_checksum(value, self.WEIGHTS_B), ALGORITHM_B

    def verify_checksum(self, value: str) -> int:
        """
        12번째 자리 검증

        Returns:
            일치한 알고리즘 (ALGORITHM_A / ALGORITHM_B)

        Raises:
            ChecksumMismatchError: 불일치 또는 B 결과도 10
        """
        iin = self.check_structure(value)
        expected, algorithm = self.resolve_checksum(iin)
        actual = int(iin[-1])

        if expected == self.FALLBACK_TRIGGER or expected != actual:
            raise ChecksumMismatchError(expected, actual, iin)

        return algorithm


def _reference_date(today: Optional[date]) -> date:
    """기준일 (None이면 오늘, datetime은 날짜 부분만)"""
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return today.date()
    return today


# 공유 인스턴스 (상태 없음)
_validator = IINValidator()


def validate(iin: str, today: Optional[date] = None) -> ValidatedIIN:
    """전체 검증"""
    return _validator.decode(iin, today)


def is_valid(iin: str, today: Optional[date] = None) -> bool:
    return _validator.is_valid(iin, today)


def decode_birth_date(iin: str, today: Optional[date] = None) -> date:
    """생년월일만 추출 (체크섬 미검증)"""
    return _validator.get_birth_date(iin, today)


def decode_sex(digit: int) -> Sex:
    """7번째 자리 값으로 성별 조회"""
    return _validator.get_sex(digit)


def checksum_digit(iin: str) -> int:
    """진단용 체크섬 계산 (A 결과가 10이면 B)"""
    return _validator.resolve_checksum(iin)[0]
