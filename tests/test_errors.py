"""
Error taxonomy and store-error translation.
"""

from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError

from club_api.errors import (
    InvalidFileType,
    NotFound,
    PayloadTooLarge,
    PersistenceError,
    Unauthorized,
    translate_db_error,
)


class TestTranslateDbError:

    def test_no_row_becomes_not_found(self):
        error = translate_db_error(NoResultFound(), "Event")

        assert isinstance(error, NotFound)
        assert error.message == "Event not found"

    def test_other_failures_become_generic_persistence_error(self):
        exc = OperationalError("SELECT * FROM events", {}, Exception("server closed the connection"))

        error = translate_db_error(exc, "Event")

        assert isinstance(error, PersistenceError)
        assert error.to_dict() == {"error": "Database error", "details": None, "code": "DATABASE_ERROR"}

    def test_constraint_violation_is_persistence_error(self):
        exc = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed"))

        assert isinstance(translate_db_error(exc), PersistenceError)


class TestStatusCodes:

    def test_codes(self):
        assert (NotFound.status_code, NotFound.code) == (404, "NOT_FOUND")
        assert (PayloadTooLarge.status_code, PayloadTooLarge.code) == (413, "FILE_TOO_LARGE")
        assert (InvalidFileType.status_code, InvalidFileType.code) == (400, "INVALID_FILE_TYPE")
        assert (Unauthorized.status_code, Unauthorized.code) == (401, "UNAUTHORIZED")
