"""
상수 정의
"""

# =========================================================
# 실행 환경
# =========================================================
ENV_LOCAL = "local"
ENV_DEV = "dev"
ENV_PROD = "prod"

SUPPORTED_ENVS = [ENV_LOCAL, ENV_DEV, ENV_PROD]

# =========================================================
# HTTP 서버
# =========================================================
DEFAULT_HTTP_ADDRESS = "localhost:8080"
DEFAULT_HTTP_TIMEOUT = "4s"
DEFAULT_HTTP_IDLE_TIMEOUT = "60s"

BASIC_AUTH_REALM = "citizen_website"

# 응답의 생년월일 형식 (DD.MM.YYYY)
OUTPUT_DATE_FORMAT = "%d.%m.%Y"

# 응답 상태
STATUS_OK = "OK"
STATUS_ERROR = "Error"

# =========================================================
# 엔드포인트
# =========================================================
ROUTE_IIN_CHECK = "/iin_check/{iin}"
ROUTE_SAVE_PERSON = "/people/info"
ROUTE_PERSON_BY_IIN = "/people/info/iin/{iin}"
ROUTE_PEOPLE_BY_NAME = "/people/info/name/{name}"
ROUTE_PEOPLE_BY_IIN_PREFIX = "/people/info/iin_prefix/{prefix}"
ROUTE_DELETE_PERSON = "/people/delete/{iin}"

REQUEST_ID_HEADER = "X-Request-ID"
