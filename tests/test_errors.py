"""Tests for uipatch error types."""

import asyncio

from uipatch.errors import Error, ErrorCode, ErrorContext, TransportError


class TestError:
    def test_default_context(self):
        error = Error("no adapter", ErrorCode.NO_ADAPTER)
        assert error.code == ErrorCode.NO_ADAPTER
        assert error.context.code == ErrorCode.NO_ADAPTER
        assert error.context.line_count == 0
        assert error.timestamp > 0

    def test_repr(self):
        error = Error("boom", ErrorCode.TRANSPORT_ERROR)
        assert repr(error) == "Error(code='TRANSPORT_ERROR', message='boom')"

    def test_detailed_string(self):
        context = ErrorContext(
            code=ErrorCode.TRANSPORT_STATUS,
            session_id="abc",
            line_count=3,
            status_code=500,
            metadata={"endpoint": "x"},
        )
        text = Error("HTTP error: 500", ErrorCode.TRANSPORT_STATUS, context).to_detailed_string()
        assert "[TRANSPORT_STATUS]" in text
        assert "Session: abc" in text
        assert "Lines applied: 3" in text
        assert "Status code: 500" in text
        assert "Metadata:" in text

    def test_is_cancellation(self):
        assert Error.is_cancellation(asyncio.CancelledError())
        assert Error.is_cancellation(Error("x", ErrorCode.SESSION_CANCELLED))
        assert not Error.is_cancellation(Error("x", ErrorCode.TRANSPORT_ERROR))
        assert not Error.is_cancellation(ValueError("x"))


class TestTransportError:
    def test_from_status(self):
        error = TransportError.from_status(404)
        assert str(error) == "HTTP error: 404"
        assert error.status_code == 404
        assert error.code == ErrorCode.TRANSPORT_STATUS
        assert error.context.status_code == 404

    def test_without_status(self):
        error = TransportError("connection reset")
        assert error.status_code is None
        assert error.code == ErrorCode.TRANSPORT_ERROR

    def test_is_error(self):
        assert isinstance(TransportError("x"), Error)
