"""
개인 정보 웹서비스 (FastAPI)

[엔드포인트] 모두 Basic 인증 필요
- GET    /iin_check/{iin}                 IIN 검증 + 성별/생년월일
- POST   /people/info                     개인 정보 저장
- GET    /people/info/iin/{iin}           IIN으로 조회
- GET    /people/info/name/{name}         이름 부분 일치 조회
- GET    /people/info/iin_prefix/{prefix} IIN 접두어 조회
- DELETE /people/delete/{iin}             삭제

[오류 매핑]
- 형식 오류(bad_input) / 의미 오류(invalid_iin) → /iin_check 는 항상 200 + correct=false
- 요청 본문 검증 실패 → 400
- 중복 IIN / 전화번호 → 409
- 저장소 오류, 처리되지 않은 예외 → 500
- 처리 시간 초과 (HTTP_SERVER_TIMEOUT) → 503
"""
import asyncio
import logging
import secrets
import time
import uuid
from functools import partial

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from core.config import Config
from core.storage import (
    Deadline,
    IINExistsError,
    IINNotFoundError,
    NameNotFoundError,
    PersonStorage,
    PhoneNumberExistsError,
    StorageError,
    StorageTimeoutError,
)
from utils.constants import (
    BASIC_AUTH_REALM,
    OUTPUT_DATE_FORMAT,
    REQUEST_ID_HEADER,
    ROUTE_DELETE_PERSON,
    ROUTE_IIN_CHECK,
    ROUTE_PEOPLE_BY_IIN_PREFIX,
    ROUTE_PEOPLE_BY_NAME,
    ROUTE_PERSON_BY_IIN,
    ROUTE_SAVE_PERSON,
    STATUS_ERROR,
    STATUS_OK,
)
from validators import IINDecodeError, IINValidator

from .schemas import (
    IINCheckResponse,
    PeopleResponse,
    PersonItem,
    PersonResponse,
    SavePersonRequest,
    SaveResponse,
    StatusResponse,
)

logger = logging.getLogger(__name__)

API_TITLE = "Citizens Data Webservice"
API_VERSION = "1.0.0"


class RequestTimeoutError(Exception):
    """요청 처리 기한 (HTTP_SERVER_TIMEOUT) 초과"""


def mask_iin(iin: str) -> str:
    """로그용 마스킹 (생년월일 6자리만 노출)"""
    return f"{iin[:6]}******" if len(iin) > 6 else "******"


def create_app(config: Config, storage: PersonStorage) -> FastAPI:
    """애플리케이션 생성"""

    codec = IINValidator()
    security = HTTPBasic(realm=BASIC_AUTH_REALM)

    def require_auth(credentials: HTTPBasicCredentials = Depends(security)):
        user_ok = secrets.compare_digest(
            credentials.username.encode(), config.http_user.encode()
        )
        password_ok = secrets.compare_digest(
            credentials.password.encode(), config.http_password.encode()
        )
        if not (user_ok and password_ok):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="invalid credentials",
                headers={"WWW-Authenticate": f'Basic realm="{BASIC_AUTH_REALM}"'},
            )

    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        dependencies=[Depends(require_auth)],
    )

    # =========================================================
    # 미들웨어 / 예외 처리
    # =========================================================

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()
        extra = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "remote_addr": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
        }

        try:
            response = await call_next(request)
        except Exception:
            extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 3)
            logger.exception("요청 처리 중 예외", extra=extra)
            raise

        extra["status"] = response.status_code
        extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 3)
        logger.info("요청 완료", extra=extra)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            errors.append(f"Validation failed: {loc}: {err.get('msg')}" if loc
                          else f"Validation failed: {err.get('msg')}")
        logger.info(f"요청 검증 실패: {errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=SaveResponse(success=False, errors=errors).model_dump(),
        )

    @app.exception_handler(RequestTimeoutError)
    async def timeout_error_handler(request: Request, exc: RequestTimeoutError):
        logger.warning("요청 타임아웃")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=StatusResponse(status=STATUS_ERROR, error="request timeout").model_dump(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=StatusResponse(status=STATUS_ERROR, error="internal error").model_dump(),
        )

    async def run_storage(func, *args):
        """
        저장소 작업을 작업 스레드에서 실행 (HTTP_SERVER_TIMEOUT 적용)

        기한 내 커밋이 확정되지 않으면 롤백 후 RequestTimeoutError.
        커밋이 이미 확정된 경우에는 결과를 기다려 그대로 반환
        """
        deadline = Deadline(config.http_timeout)
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, partial(storage.run_bounded, deadline, func, *args))
        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout=config.http_timeout)
        except asyncio.TimeoutError:
            if deadline.expire():
                # 남은 작업은 롤백으로 끝남 (결과 폐기)
                future.add_done_callback(lambda f: f.exception())
                raise RequestTimeoutError()
        except StorageTimeoutError:
            raise RequestTimeoutError()
        return await future

    # =========================================================
    # IIN 검증
    # =========================================================

    @app.get(ROUTE_IIN_CHECK, response_model=IINCheckResponse, response_model_exclude_none=True)
    def iin_check(iin: str):
        try:
            result = codec.decode(iin)
        except IINDecodeError as e:
            logger.info(
                f"IIN 검증 실패: {e.message}",
                extra={"iin": mask_iin(iin), "error_code": e.code},
            )
            return IINCheckResponse(correct=False, error=e.code, category=e.category)

        date_of_birth = result.birth_date.strftime(OUTPUT_DATE_FORMAT)
        logger.info(
            f"IIN 검증 완료: {result.sex.value}, {date_of_birth}",
            extra={"iin": mask_iin(iin)},
        )
        return IINCheckResponse(
            correct=True,
            sex=result.sex.value,
            date_of_birth=date_of_birth,
        )

    # =========================================================
    # 개인 정보
    # =========================================================

    @app.post(ROUTE_SAVE_PERSON, response_model=SaveResponse)
    async def save_person(req: SavePersonRequest):
        try:
            await run_storage(storage.save_person, req.iin, req.name, req.phone)
        except (IINExistsError, PhoneNumberExistsError) as e:
            logger.info(f"중복 저장 요청: {e}", extra={"iin": mask_iin(req.iin)})
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content=SaveResponse(
                    success=False, errors=[f"Failed to save person: {e}"]
                ).model_dump(),
            )
        except StorageError as e:
            logger.error(f"저장 실패: {e}", extra={"iin": mask_iin(req.iin)})
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=SaveResponse(success=False, errors=["Failed to save person"]).model_dump(),
            )

        logger.info("개인 정보 저장 완료", extra={"iin": mask_iin(req.iin)})
        return SaveResponse(success=True)

    @app.get(ROUTE_PERSON_BY_IIN, response_model=PersonResponse)
    async def get_person_by_iin(iin: str):
        try:
            codec.decode(iin)
        except IINDecodeError as e:
            logger.info(f"IIN 검증 실패: {e.message}", extra={"iin": mask_iin(iin)})
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=PersonResponse(success=False, errors=["failed to validate IIN"]).model_dump(),
            )

        try:
            person = await run_storage(storage.get_person_by_iin, iin)
        except IINNotFoundError:
            logger.info("IIN 없음", extra={"iin": mask_iin(iin)})
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=PersonResponse(success=False, errors=["iin not found"]).model_dump(),
            )
        except StorageError as e:
            logger.error(f"조회 실패: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=PersonResponse(success=False, errors=["failed to get person"]).model_dump(),
            )

        return PersonResponse(success=True, **person.to_dict())

    @app.get(ROUTE_PEOPLE_BY_NAME, response_model=PeopleResponse)
    async def get_people_by_name(name: str):
        try:
            people = await run_storage(storage.get_people_by_name, name)
        except NameNotFoundError:
            logger.info(f"이름 없음: {name}")
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=PeopleResponse(success=False, errors=["name not found"]).model_dump(),
            )
        except StorageError as e:
            logger.error(f"조회 실패: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=PeopleResponse(success=False, errors=["failed to retrieve people"]).model_dump(),
            )

        logger.info(f"이름 검색 {len(people)}건: {name}")
        return PeopleResponse(
            success=True,
            people=[PersonItem(**p.to_dict()) for p in people],
        )

    @app.get(ROUTE_PEOPLE_BY_IIN_PREFIX, response_model=PeopleResponse)
    async def get_people_by_iin_prefix(prefix: str):
        if len(prefix) > IINValidator.LENGTH or not IINValidator.is_ascii_digits(prefix):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=PeopleResponse(
                    success=False,
                    errors=[f"prefix must be 1-{IINValidator.LENGTH} digits"],
                ).model_dump(),
            )

        try:
            people = await run_storage(storage.get_people_by_iin_prefix, prefix)
        except StorageError as e:
            logger.error(f"조회 실패: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=PeopleResponse(success=False, errors=["failed to retrieve people"]).model_dump(),
            )

        logger.info(f"IIN 접두어 검색 {len(people)}건: {prefix}")
        return PeopleResponse(
            success=True,
            people=[PersonItem(**p.to_dict()) for p in people],
        )

    @app.delete(ROUTE_DELETE_PERSON, response_model=StatusResponse, response_model_exclude_none=True)
    async def delete_person(iin: str):
        try:
            await run_storage(storage.delete_person_by_iin, iin)
        except IINNotFoundError:
            logger.info("삭제 대상 IIN 없음", extra={"iin": mask_iin(iin)})
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=StatusResponse(status=STATUS_ERROR, error="iin not found").model_dump(),
            )
        except StorageError as e:
            logger.error(f"삭제 실패: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=StatusResponse(status=STATUS_ERROR, error="failed to delete person").model_dump(),
            )

        logger.info("개인 정보 삭제 완료", extra={"iin": mask_iin(iin)})
        return StatusResponse(status=STATUS_OK)

    return app
