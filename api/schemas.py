"""
요청/응답 모델
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from validators import validate


# Request model
class SavePersonRequest(BaseModel):
    """개인 정보 저장 요청"""
    iin: str = Field(..., description="12자리 IIN (체크섬 포함 전체 검증)")
    name: str = Field(..., min_length=1, description="성명")
    phone: str = Field(..., min_length=1, description="전화번호 (중복 불가)")

    @field_validator('iin')
    @classmethod
    def validate_iin(cls, v):
        # IINDecodeError는 ValueError 하위 클래스 → pydantic 검증 오류로 변환됨
        validate(v)
        return v


# Response models
class IINCheckResponse(BaseModel):
    """IIN 검증 결과"""
    correct: bool
    sex: str = ""
    date_of_birth: str = ""
    error: Optional[str] = None
    category: Optional[str] = None


class StatusResponse(BaseModel):
    status: str
    error: Optional[str] = None


class SaveResponse(BaseModel):
    success: bool
    errors: Optional[List[str]] = None


class PersonResponse(BaseModel):
    success: bool
    errors: Optional[List[str]] = None
    iin: str = ""
    name: str = ""
    phone: str = ""


class PersonItem(BaseModel):
    iin: str
    name: str
    phone: str


class PeopleResponse(BaseModel):
    success: bool
    errors: Optional[List[str]] = None
    people: List[PersonItem] = Field(default_factory=list)
