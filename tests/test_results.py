"""Tests for structured results and the mutation decorator."""

import logging

from catalog.results import UNEXPECTED_ERROR, Result, mutation
from config.exceptions import ConflictError, DatabaseError


class TestResult:
    def test_shapes(self):
        assert Result.ok().to_dict() == {"success": True}
        assert Result.ok({"id": "a1"}).to_dict() == {"success": True, "data": {"id": "a1"}}
        assert Result.fail("nope").to_dict() == {"success": False, "error": "nope"}


class TestMutationDecorator:
    def test_wraps_plain_return(self):
        @mutation
        def op():
            return {"id": "x"}

        assert op() == Result.ok({"id": "x"})

    def test_business_error_message_verbatim(self, caplog):
        @mutation
        def op():
            raise ConflictError('Slug already exists: "x"', {"id": "1"})

        with caplog.at_level(logging.WARNING):
            result = op()
        assert result.to_dict() == {"success": False, "error": 'Slug already exists: "x"'}
        assert "op rejected" in caplog.text

    def test_infrastructure_error_logged_as_error(self, caplog):
        @mutation
        def op():
            raise DatabaseError("Failed to write novels", {"error": "locked"})

        with caplog.at_level(logging.ERROR):
            result = op()
        assert result.error == "Failed to write novels"
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    def test_unexpected_error_is_generic(self, caplog):
        @mutation
        def op():
            raise KeyError("secret internals")

        result = op()
        assert result.error == UNEXPECTED_ERROR
        assert "secret" not in result.error

    def test_preserves_name(self):
        @mutation
        def create_thing():
            """Doc."""

        assert create_thing.__name__ == "create_thing"
        assert create_thing.__doc__ == "Doc."
