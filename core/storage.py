"""
개인 정보 저장소 (SQLite)

[테이블] users
- iin   : 기본키
- name  : 필수
- phone : 필수, 중복 불가

IIN 검증은 요청 처리 계층 책임 (저장소는 원본 문자열을 키로만 사용)
"""
import logging
import sqlite3
import threading
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonInfo:
    """저장 레코드"""
    iin: str
    name: str
    phone: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


# =========================================================
# 예외
# =========================================================

class StorageError(Exception):
    """저장소 예외 기본 클래스"""

    def __init__(self, op: str, message: str):
        self.op = op
        self.message = message
        super().__init__(f"{op}: {message}")


class IINNotFoundError(StorageError):
    def __init__(self, op: str):
        super().__init__(op, "IIN not found")


class IINExistsError(StorageError):
    def __init__(self, op: str):
        super().__init__(op, "IIN already exists")


class NameNotFoundError(StorageError):
    def __init__(self, op: str):
        super().__init__(op, "name not found")


class PhoneNumberExistsError(StorageError):
    def __init__(self, op: str):
        super().__init__(op, "phone number already exists")


class StorageTimeoutError(StorageError):
    """요청 처리 기한 초과 (트랜잭션 롤백됨)"""

    def __init__(self, op: str):
        super().__init__(op, "deadline exceeded")


# =========================================================
# 처리 기한
# =========================================================

class Deadline:
    """
    요청 처리 기한

    - 기한이 지나면 실행 중인 SQL 문장을 중단
    - 커밋 직전 claim_commit() 으로 커밋 여부를 확정
    - expire() 이후에는 커밋하지 않음 (요청 측은 503 응답)
    """

    def __init__(self, seconds: float):
        self.expires_at = time.monotonic() + seconds
        self._lock = threading.Lock()
        self._committed = False
        self._expired = False

    def exceeded(self) -> bool:
        return self._expired or time.monotonic() >= self.expires_at

    def claim_commit(self) -> bool:
        """커밋 확정. 기한이 지났으면 False"""
        with self._lock:
            if self.exceeded():
                self._expired = True
                return False
            self._committed = True
            return True

    def expire(self) -> bool:
        """기한 만료 처리. 이미 커밋이 확정되었으면 False"""
        with self._lock:
            if self._committed:
                return False
            self._expired = True
            return True


class PersonStorage:
    """users 테이블 CRUD"""

    def __init__(self, storage_path: str):
        self.storage_path = storage_path
        self._local = threading.local()
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.storage_path)
        # SQLite 기본 lower()/LIKE 는 ASCII 만 대소문자 변환
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    @contextmanager
    def _session(self, op: str):
        """연결 + 트랜잭션 (현재 스레드의 처리 기한 적용)"""
        deadline = getattr(self._local, "deadline", None)
        if deadline is not None and deadline.exceeded():
            raise StorageTimeoutError(op)

        conn = self._connect()
        if deadline is not None:
            conn.set_progress_handler(deadline.exceeded, 1000)
        try:
            try:
                yield conn
            except sqlite3.OperationalError as e:
                # progress handler 에 의한 중단 ("interrupted")
                if deadline is not None and deadline.exceeded():
                    raise StorageTimeoutError(op) from e
                raise
            if deadline is not None and not deadline.claim_commit():
                raise StorageTimeoutError(op)
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def run_bounded(self, deadline: Deadline, func: Callable, *args):
        """처리 기한을 걸고 저장소 작업 실행 (작업 스레드에서 호출)"""
        self._local.deadline = deadline
        try:
            return func(*args)
        finally:
            self._local.deadline = None

    def _init_database(self):
        """테이블이 없으면 생성"""
        op = "storage.sqlite.init"
        try:
            with self._session(op) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS users (
                        iin VARCHAR(14) PRIMARY KEY,
                        name VARCHAR(255) NOT NULL,
                        phone VARCHAR(30) NOT NULL UNIQUE
                    )
                """)
        except sqlite3.Error as e:
            raise StorageError(op, str(e)) from e

        logger.debug(f"저장소 초기화: {self.storage_path}")

    def save_person(self, iin: str, name: str, phone: str):
        """레코드 추가"""
        op = "storage.sqlite.SavePerson"
        try:
            with self._session(op) as conn:
                conn.execute(
                    "INSERT INTO users(iin, name, phone) VALUES(?, ?, ?)",
                    (iin, name, phone),
                )
        except sqlite3.IntegrityError as e:
            # 메시지 예: "UNIQUE constraint failed: users.phone"
            message = str(e)
            if "users.iin" in message:
                raise IINExistsError(op) from e
            if "users.phone" in message:
                raise PhoneNumberExistsError(op) from e
            raise StorageError(op, message) from e
        except sqlite3.Error as e:
            raise StorageError(op, str(e)) from e

    def get_person_by_iin(self, iin: str) -> PersonInfo:
        op = "storage.sqlite.GetPersonByIIN"
        try:
            with self._session(op) as conn:
                row = conn.execute(
                    "SELECT iin, name, phone FROM users WHERE iin = ? LIMIT 1",
                    (iin,),
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(op, str(e)) from e

        if row is None:
            raise IINNotFoundError(op)
        return PersonInfo(*row)

    def get_people_by_name(self, name: str) -> List[PersonInfo]:
        """이름 부분 일치 검색 (유니코드 대소문자 무시, 예: Айгерим / АЙГЕРИМ)"""
        op = "storage.sqlite.GetPersonByName"
        try:
            with self._session(op) as conn:
                rows = conn.execute(
                    "SELECT iin, name, phone FROM users WHERE instr(casefold(name), casefold(?)) > 0",
                    (name,),
                ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(op, str(e)) from e

        if not rows:
            raise NameNotFoundError(op)
        return [PersonInfo(*row) for row in rows]

    def get_people_by_iin_prefix(self, prefix: str) -> List[PersonInfo]:
        """IIN 접두어 검색 (예: 생년월일 앞자리)"""
        op = "storage.sqlite.GetPeopleByIINPrefix"
        try:
            with self._session(op) as conn:
                rows = conn.execute(
                    "SELECT iin, name, phone FROM users WHERE iin LIKE ? ESCAPE '\\' ORDER BY iin",
                    (f"{_escape_like(prefix)}%",),
                ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(op, str(e)) from e

        return [PersonInfo(*row) for row in rows]

    def delete_person_by_iin(self, iin: str):
        op = "storage.sqlite.DeletePersonByIIN"
        try:
            with self._session(op) as conn:
                cursor = conn.execute("DELETE FROM users WHERE iin = ?", (iin,))
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            raise StorageError(op, str(e)) from e

        if deleted == 0:
            raise IINNotFoundError(op)


def _escape_like(value: str) -> str:
    """LIKE 와일드카드 이스케이프"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None
