"""
웹서비스 엔드포인트 테스트 (FastAPI TestClient)
"""
import os
import tempfile
import threading
import time
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from api.app import create_app, mask_iin
from core.config import Config
from core.storage import PersonStorage, StorageError


AUTH = ("user", "password")


class AppTestCase(unittest.TestCase):
    """공통 설정"""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.storage = PersonStorage(os.path.join(self.tmpdir.name, "storage.db"))
        self.config = Config(
            storage_path=self.storage.storage_path,
            http_user="user",
            http_password="password",
        )
        self.app = create_app(self.config, self.storage)
        self.client = TestClient(self.app)

    def tearDown(self):
        self.tmpdir.cleanup()

    def save(self, iin, name="Test Name", phone="1234567890"):
        return self.client.post(
            "/people/info",
            auth=AUTH,
            json={"iin": iin, "name": name, "phone": phone},
        )


class TestAuth(AppTestCase):
    """Basic 인증 테스트"""

    def test_missing_credentials(self):
        response = self.client.get("/iin_check/600426400918")
        self.assertEqual(response.status_code, 401)
        self.assertIn("Basic", response.headers["WWW-Authenticate"])

    def test_wrong_password(self):
        response = self.client.get("/iin_check/600426400918", auth=("user", "wrong"))
        self.assertEqual(response.status_code, 401)

    def test_wrong_user(self):
        response = self.client.get("/iin_check/600426400918", auth=("admin", "password"))
        self.assertEqual(response.status_code, 401)


class TestIINCheck(AppTestCase):
    """GET /iin_check/{iin}"""

    def test_valid(self):
        cases = [
            ("600426400918", "female", "26.04.1960"),
            ("790708301327", "male", "08.07.1979"),
            ("990109300285", "male", "09.01.1999"),
        ]
        for iin, sex, dob in cases:
            with self.subTest(iin=iin):
                response = self.client.get(f"/iin_check/{iin}", auth=AUTH)
                self.assertEqual(response.status_code, 200)
                self.assertEqual(
                    response.json(),
                    {"correct": True, "sex": sex, "date_of_birth": dob},
                )

    def test_invalid(self):
        """잘못된 IIN도 200 + correct=false"""
        cases = [
            ("600426400919", "CHECKSUM_MISMATCH", "invalid_iin"),
            ("600", "MALFORMED_INPUT", "bad_input"),
            ("asdasd", "MALFORMED_INPUT", "bad_input"),
            ("990230350074", "INVALID_CALENDAR_DATE", "invalid_iin"),
            ("830218950074", "INVALID_CENTURY_SEX_DIGIT", "invalid_iin"),
        ]
        for iin, code, category in cases:
            with self.subTest(iin=iin):
                response = self.client.get(f"/iin_check/{iin}", auth=AUTH)
                self.assertEqual(response.status_code, 200)
                body = response.json()
                self.assertFalse(body["correct"])
                self.assertEqual(body["sex"], "")
                self.assertEqual(body["date_of_birth"], "")
                self.assertEqual(body["error"], code)
                self.assertEqual(body["category"], category)

    def test_request_id_header(self):
        """요청 ID 헤더 (전달된 값 유지)"""
        response = self.client.get("/iin_check/600426400918", auth=AUTH)
        self.assertTrue(response.headers.get("X-Request-ID"))

        response = self.client.get(
            "/iin_check/600426400918", auth=AUTH, headers={"X-Request-ID": "abc-123"}
        )
        self.assertEqual(response.headers["X-Request-ID"], "abc-123")


class TestSavePerson(AppTestCase):
    """POST /people/info"""

    def test_empty_body(self):
        response = self.client.post("/people/info", auth=AUTH, json={})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertTrue(body["errors"])

    def test_no_body(self):
        response = self.client.post("/people/info", auth=AUTH)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_invalid_iin(self):
        response = self.save("1234")
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertTrue(any("iin" in e for e in body["errors"]))

    def test_bad_checksum(self):
        response = self.save("600426400919")
        self.assertEqual(response.status_code, 400)

    def test_empty_name(self):
        response = self.save("980301450725", name="")
        self.assertEqual(response.status_code, 400)

    def test_save_success(self):
        response = self.save("980301450725")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "errors": None})

    def test_duplicate_iin(self):
        self.save("980301450725")

        response = self.save("980301450725", phone="1234567891")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {
            "success": False,
            "errors": ["Failed to save person: storage.sqlite.SavePerson: IIN already exists"],
        })

    def test_duplicate_phone(self):
        self.save("980301450725")

        response = self.save("600426400918")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {
            "success": False,
            "errors": ["Failed to save person: storage.sqlite.SavePerson: phone number already exists"],
        })

    def test_storage_failure(self):
        with patch.object(self.storage, "save_person",
                          side_effect=StorageError("storage.sqlite.SavePerson", "disk I/O error")):
            response = self.save("980301450725")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "errors": ["Failed to save person"]})


class TestGetPerson(AppTestCase):
    """GET /people/info/..."""

    def test_empty_iin(self):
        response = self.client.get("/people/info/iin/", auth=AUTH)
        self.assertEqual(response.status_code, 404)

    def test_invalid_iin(self):
        response = self.client.get("/people/info/iin/1234", auth=AUTH)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"], ["failed to validate IIN"])

    def test_not_found(self):
        response = self.client.get("/people/info/iin/980301450725", auth=AUTH)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["errors"], ["iin not found"])

    def test_found(self):
        self.save("980301450725")

        response = self.client.get("/people/info/iin/980301450725", auth=AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "success": True,
            "errors": None,
            "iin": "980301450725",
            "name": "Test Name",
            "phone": "1234567890",
        })

    def test_by_name(self):
        self.save("980301450725", name="Sally", phone="1234567890")

        response = self.client.get("/people/info/name/ll", auth=AUTH)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(len(body["people"]), 1)

        self.save("790708301327", name="Lilly", phone="1234567891")

        response = self.client.get("/people/info/name/l", auth=AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            sorted(p["name"] for p in response.json()["people"]),
            ["Lilly", "Sally"],
        )

    def test_by_name_not_found(self):
        response = self.client.get("/people/info/name/zzz", auth=AUTH)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {
            "success": False,
            "errors": ["name not found"],
            "people": [],
        })

    def test_by_name_empty(self):
        response = self.client.get("/people/info/name/", auth=AUTH)
        self.assertEqual(response.status_code, 404)

    def test_by_iin_prefix(self):
        self.save("980301450725", phone="1")
        self.save("990109300285", phone="2")
        self.save("600426400918", phone="3")

        response = self.client.get("/people/info/iin_prefix/9", auth=AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [p["iin"] for p in response.json()["people"]],
            ["980301450725", "990109300285"],
        )

        response = self.client.get("/people/info/iin_prefix/11", auth=AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["people"], [])

    def test_by_iin_prefix_invalid(self):
        for prefix in ["abc", "1234567890123"]:
            with self.subTest(prefix=prefix):
                response = self.client.get(f"/people/info/iin_prefix/{prefix}", auth=AUTH)
                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.json()["success"])

    def test_unhandled_error(self):
        """처리되지 않은 예외는 500 + 내부 정보 비노출"""
        client = TestClient(self.app, raise_server_exceptions=False)
        with patch.object(self.storage, "get_people_by_name", side_effect=RuntimeError("boom")):
            response = client.get("/people/info/name/Sally", auth=AUTH)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"status": "Error", "error": "internal error"})


class TestDeletePerson(AppTestCase):
    """DELETE /people/delete/{iin}"""

    def test_delete(self):
        self.save("980301450725")

        response = self.client.delete("/people/delete/980301450725", auth=AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "OK"})

        response = self.client.get("/people/info/iin/980301450725", auth=AUTH)
        self.assertEqual(response.status_code, 404)

    def test_delete_missing(self):
        response = self.client.delete("/people/delete/980301450725", auth=AUTH)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"status": "Error", "error": "iin not found"})


class TestRequestTimeout(AppTestCase):
    """HTTP_SERVER_TIMEOUT 초과 시 503"""

    def setUp(self):
        super().setUp()
        self.config.http_timeout = 0.2
        self.app = create_app(self.config, self.storage)
        self.client = TestClient(self.app)
        self.release = threading.Event()
        self.finished = threading.Event()

    def tearDown(self):
        self.release.set()
        self.finished.wait(5)
        super().tearDown()

    def test_slow_storage_returns_503_within_timeout(self):
        def slow_delete(iin):
            try:
                self.release.wait(5)
            finally:
                self.finished.set()

        with patch.object(self.storage, "delete_person_by_iin", side_effect=slow_delete):
            started = time.monotonic()
            response = self.client.delete("/people/delete/600426400918", auth=AUTH)
            elapsed = time.monotonic() - started

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json(), {"status": "Error", "error": "request timeout"})
        self.assertLess(elapsed, 2)

    def test_timed_out_save_is_not_committed(self):
        """503 응답 후 늦게 도착한 저장은 롤백"""
        save_person = self.storage.save_person

        def late_save(iin, name, phone):
            try:
                self.release.wait(5)
                save_person(iin, name, phone)
            finally:
                self.finished.set()

        with patch.object(self.storage, "save_person", side_effect=late_save):
            response = self.save("980301450725")
        self.assertEqual(response.status_code, 503)

        self.release.set()
        self.assertTrue(self.finished.wait(5))

        response = self.client.get("/people/info/iin/980301450725", auth=AUTH)
        self.assertEqual(response.status_code, 404)

    def test_committed_save_is_reported(self):
        """커밋 확정 후 지연되면 기다렸다가 성공 응답"""
        save_person = self.storage.save_person

        def save_then_stall(iin, name, phone):
            try:
                save_person(iin, name, phone)
                time.sleep(0.4)
            finally:
                self.finished.set()

        with patch.object(self.storage, "save_person", side_effect=save_then_stall):
            response = self.save("980301450725")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "errors": None})


class TestMaskIIN(unittest.TestCase):

    def test_mask(self):
        self.assertEqual(mask_iin("980301450725"), "980301******")
        self.assertEqual(mask_iin("600"), "******")


if __name__ == "__main__":
    unittest.main(verbosity=2)
