"""Every ErrorKind maps to one HTTP status; VerificationPending exposes the user id."""

import json
import unittest
import uuid

from app.api.errors import STATUS_BY_KIND, describe_validation_errors, error_response
from app.services import errors


class TestErrorMapping(unittest.TestCase):
    def test_every_kind_has_a_status(self) -> None:
        self.assertEqual(set(STATUS_BY_KIND), set(errors.ErrorKind))

    def test_every_error_class_pins_its_kind(self) -> None:
        classes = [
            errors.DuplicateEmailError,
            errors.InvalidCredentialsError,
            errors.AccountLockedError,
            errors.InvalidOrExpiredCodeError,
            errors.MissingTokenError,
            errors.InvalidOrExpiredTokenError,
            errors.NotFoundError,
            errors.ForbiddenError,
            errors.ValidationFailedError,
        ]
        kinds = {cls.kind for cls in classes} | {errors.VerificationPendingError.kind}
        self.assertEqual(kinds, set(errors.ErrorKind))

    def test_statuses(self) -> None:
        self.assertEqual(error_response(errors.AccountLockedError()).status_code, 423)
        self.assertEqual(error_response(errors.DuplicateEmailError()).status_code, 400)
        self.assertEqual(error_response(errors.NotFoundError()).status_code, 404)

    def test_unauthorized_carries_bearer_challenge(self) -> None:
        resp = error_response(errors.InvalidOrExpiredTokenError())
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers["www-authenticate"], "Bearer")

    def test_verification_pending_body(self) -> None:
        user_id = uuid.uuid4()
        resp = error_response(errors.VerificationPendingError(user_id))
        self.assertEqual(resp.status_code, 403)
        body = json.loads(resp.body)
        self.assertEqual(body["error"], "VerificationPending")
        self.assertEqual(body["user_id"], str(user_id))

    def test_other_bodies_omit_user_id(self) -> None:
        body = json.loads(error_response(errors.InvalidCredentialsError()).body)
        self.assertEqual(body, {"error": "InvalidCredentials", "detail": "Invalid email or password."})

    def test_validation_detail_lists_fields(self) -> None:
        detail = describe_validation_errors(
            [
                {"loc": ("body", "email"), "msg": "value is not a valid email address"},
                {"loc": ("query", "is_verified"), "msg": "Field required"},
            ]
        )
        self.assertEqual(
            detail, "email: value is not a valid email address; is_verified: Field required"
        )
        self.assertEqual(describe_validation_errors([]), "Invalid input.")


if __name__ == "__main__":
    unittest.main()
