"""Tests for the create_user admin script."""

import contextlib
import io
import unittest
from unittest.mock import patch

from app.core.security import verify_password
from app.models import User, UserRole
from app.scripts import create_user as script
from support import make_session_factory


class TestCreateUserScript(unittest.TestCase):
    def setUp(self) -> None:
        self.Session = make_session_factory()
        patcher = patch.object(script, "SessionLocal", self.Session)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = script.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_creates_verified_administrator(self) -> None:
        code, out, _ = self._run("Site Admin", "Admin@Example.com", "secret1", "Administrator")
        self.assertEqual(code, 0)
        self.assertIn("admin@example.com", out)
        with self.Session() as db:
            user = db.query(User).one()
            self.assertEqual(user.role, UserRole.ADMINISTRATOR)
            self.assertTrue(user.is_email_verified)
            self.assertTrue(verify_password("secret1", user.password_hash))

    def test_duplicate_email_fails(self) -> None:
        self._run("Alice", "a@x.com", "secret1")
        code, _, err = self._run("Alice", "a@x.com", "secret1")
        self.assertEqual(code, 1)
        self.assertIn("already exists", err)

    def test_short_password_fails(self) -> None:
        code, _, err = self._run("Alice", "a@x.com", "123")
        self.assertEqual(code, 1)
        self.assertIn("Password", err)
        with self.Session() as db:
            self.assertEqual(db.query(User).count(), 0)


if __name__ == "__main__":
    unittest.main()
