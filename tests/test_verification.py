"""Unit tests for app.services.verification: code format, expiry, lookup and invalidation."""

import unittest
from datetime import timedelta
from unittest.mock import patch

from app.core.clock import as_utc
from app.core.config import get_settings
from app.models import VerificationCode
from app.services.verification import CODE_MAX, CODE_MIN, VerificationCodeIssuer, generate_code
from support import FixedClock, create_user, make_session_factory


class TestGenerateCode(unittest.TestCase):
    def test_bounds(self) -> None:
        with patch("app.services.verification.secrets.randbelow", return_value=0):
            self.assertEqual(generate_code(), str(CODE_MIN))
        with patch(
            "app.services.verification.secrets.randbelow",
            return_value=CODE_MAX - CODE_MIN,
        ):
            self.assertEqual(generate_code(), str(CODE_MAX))

    def test_always_six_digits(self) -> None:
        for _ in range(200):
            code = generate_code()
            self.assertRegex(code, r"^\d{6}$")
            self.assertTrue(CODE_MIN <= int(code) <= CODE_MAX)


class TestVerificationCodeIssuer(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.user = create_user(self.db, verified=False)
        self.clock = FixedClock()
        self.issuer = VerificationCodeIssuer(self.db, get_settings(), self.clock)

    def tearDown(self) -> None:
        self.db.close()

    def test_issue_sets_ten_minute_expiry(self) -> None:
        code = self.issuer.issue(self.user.id)
        self.assertEqual(as_utc(code.expiry_time), self.clock.now + timedelta(minutes=10))
        self.assertEqual(code.user_id, self.user.id)

    def test_issuing_again_keeps_earlier_codes(self) -> None:
        with patch("app.services.verification.generate_code", side_effect=["111111", "222222"]):
            self.issuer.issue(self.user.id)
            self.issuer.issue(self.user.id)
        count = self.db.query(VerificationCode).filter_by(user_id=self.user.id).count()
        self.assertEqual(count, 2)
        self.assertIsNotNone(self.issuer.consume(self.user.id, "111111"))
        self.assertIsNotNone(self.issuer.consume(self.user.id, "222222"))

    def test_consume_requires_exact_match(self) -> None:
        with patch("app.services.verification.generate_code", return_value="123456"):
            self.issuer.issue(self.user.id)
        self.assertIsNone(self.issuer.consume(self.user.id, "123457"))
        self.assertIsNone(self.issuer.consume(self.user.id, "12345"))
        self.assertIsNotNone(self.issuer.consume(self.user.id, "123456"))

    def test_consume_is_scoped_to_user(self) -> None:
        other = create_user(self.db, email="b@x.com", verified=False)
        with patch("app.services.verification.generate_code", return_value="123456"):
            self.issuer.issue(self.user.id)
        self.assertIsNone(self.issuer.consume(other.id, "123456"))

    def test_consume_does_not_check_expiry(self) -> None:
        with patch("app.services.verification.generate_code", return_value="123456"):
            self.issuer.issue(self.user.id)
        self.clock.advance(hours=1)
        self.assertIsNotNone(self.issuer.consume(self.user.id, "123456"))

    def test_invalidate_all(self) -> None:
        self.issuer.issue(self.user.id)
        self.issuer.issue(self.user.id)
        self.assertEqual(self.issuer.invalidate_all(self.user.id), 2)
        self.assertEqual(
            self.db.query(VerificationCode).filter_by(user_id=self.user.id).count(), 0
        )


if __name__ == "__main__":
    unittest.main()
