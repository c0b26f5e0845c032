"""
검증기 패키지

[사용법]
    from validators import validate, decode_birth_date, decode_sex, checksum_digit

    result = validate("830218350074")
    result.birth_date, result.sex

[요청 처리 계층에서]
    from validators import IINValidator, IINDecodeError

    try:
        result = IINValidator().decode(value)
    except IINDecodeError as e:
        e.category   # 'bad_input' / 'invalid_iin'
"""
from .base_validator import BaseValidator
from .errors import (
    CATEGORY_BAD_INPUT,
    CATEGORY_INVALID_IIN,
    IINDecodeError,
    MalformedInputError,
    InvalidCenturySexDigitError,
    InvalidCalendarDateError,
    FutureBirthDateError,
    ChecksumMismatchError,
)
from .iin_validator import (
    ALGORITHM_A,
    ALGORITHM_B,
    Sex,
    CenturySex,
    ValidatedIIN,
    IINValidator,
    validate,
    is_valid,
    decode_birth_date,
    decode_sex,
    checksum_digit,
)

__all__ = [
    # ============================================
    # 검증기
    # ============================================
    'BaseValidator',
    'IINValidator',
    'Sex',
    'CenturySex',
    'ValidatedIIN',
    'ALGORITHM_A',
    'ALGORITHM_B',

    # ============================================
    # 함수형 인터페이스
    # ============================================
    'validate',
    'is_valid',
    'decode_birth_date',
    'decode_sex',
    'checksum_digit',

    # ============================================
    # 예외
    # ============================================
    'CATEGORY_BAD_INPUT',
    'CATEGORY_INVALID_IIN',
    'IINDecodeError',
    'MalformedInputError',
    'InvalidCenturySexDigitError',
    'InvalidCalendarDateError',
    'FutureBirthDateError',
    'ChecksumMismatchError',
]
