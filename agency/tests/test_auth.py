import time
import unittest

import jwt

from agency.accounts import set_admin_password
from agency.db import ADMINS, InMemoryDocumentStore
from agency.errors import TokenExpired, TokenInvalid, Unauthenticated
from agency.security import (
    bearer_token,
    check_password,
    hash_password,
    issue_token,
    verify_token,
)
from agency.tests.support import TEST_SECRET, ApiHarness


class LoginTests(unittest.TestCase):
    def setUp(self):
        self.h = ApiHarness()
        self.client = self.h.client
        self.admin, _ = set_admin_password(self.h.store, "admin", "correct horse")

    def test_login_issues_usable_token(self):
        response = self.client.post(
            "/api/auth/login", json={"username": "admin", "password": "correct horse"}
        )
        self.assertEqual(response.status_code, 200)
        token = response.json()["token"]
        self.assertEqual(verify_token(token, TEST_SECRET), self.admin["id"])

        response = self.client.get("/api/bookings", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 200)

    def test_bad_credentials(self):
        for username, password in (("admin", "wrong"), ("ghost", "correct horse")):
            with self.subTest(username=username):
                response = self.client.post(
                    "/api/auth/login", json={"username": username, "password": password}
                )
                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json()["message"], "Invalid credentials")

    def test_missing_field(self):
        response = self.client.post("/api/auth/login", json={"username": "admin"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Password is required", "field": "password"})

    def test_expired_token_is_rejected(self):
        token = issue_token(self.admin["id"], TEST_SECRET, expires_in=-10)
        response = self.client.get("/api/bookings", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Token expired")


class TokenTests(unittest.TestCase):
    def test_token_lifetime_is_one_hour(self):
        token = issue_token("abc", "s3cret")
        claims = jwt.decode(token, "s3cret", algorithms=["HS256"])
        self.assertEqual(claims["id"], "abc")
        self.assertEqual(claims["exp"] - claims["iat"], 3600)
        self.assertLessEqual(abs(claims["iat"] - time.time()), 5)

    def test_verify_errors(self):
        with self.assertRaises(Unauthenticated):
            verify_token(None, "s3cret")
        with self.assertRaises(TokenInvalid):
            verify_token(issue_token("abc", "other"), "s3cret")
        with self.assertRaises(TokenInvalid):
            verify_token("not.a.token", "s3cret")
        with self.assertRaises(TokenExpired):
            verify_token(issue_token("abc", "s3cret", expires_in=-1), "s3cret")
        with self.assertRaises(TokenInvalid):
            verify_token(issue_token("abc", "s3cret"), None)

    def test_bearer_header_parsing(self):
        self.assertEqual(bearer_token("Bearer abc"), "abc")
        self.assertIsNone(bearer_token(None))
        self.assertIsNone(bearer_token("Bearer "))
        self.assertEqual(bearer_token("abc"), "abc")

    def test_password_hashing(self):
        hashed = hash_password("pa55word")
        self.assertTrue(check_password("pa55word", hashed))
        self.assertFalse(check_password("other", hashed))
        self.assertFalse(check_password("pa55word", "not-a-hash"))


class AdminAccountTests(unittest.TestCase):
    def test_create_then_reset(self):
        store = InMemoryDocumentStore()
        admin, created = set_admin_password(store, "admin", "first-password")
        self.assertTrue(created)

        again, created = set_admin_password(store, "admin", "second-password")
        self.assertFalse(created)
        self.assertEqual(again["id"], admin["id"])
        self.assertEqual(len(store.find(ADMINS)), 1)
        self.assertTrue(check_password("second-password", again["passwordHash"]))


if __name__ == "__main__":
    unittest.main()
