"""Tests for MpesaError and ErrorKind."""

import pytest

from daraja.errors import ErrorKind, MpesaError


class TestMpesaError:
    def test_carries_kind_and_message(self):
        err = MpesaError("bad token", kind=ErrorKind.AUTH)
        assert err.kind is ErrorKind.AUTH
        assert err.message == "bad token"
        assert str(err) == "bad token"

    def test_codes_are_stable(self):
        assert MpesaError("x", kind=ErrorKind.AUTH).code == "MPESA_AUTH_ERROR"
        assert MpesaError("x", kind=ErrorKind.REQUEST).code == "MPESA_REQUEST_ERROR"
        assert MpesaError("x", kind=ErrorKind.VALIDATION).code == "MPESA_VALIDATION_ERROR"
        assert MpesaError("x", kind=ErrorKind.CALLBACK).code == "MPESA_CALLBACK_ERROR"

    def test_request_error_keeps_status_and_body(self):
        body = {"errorMessage": "Invalid Access Token"}
        err = MpesaError(
            "Invalid Access Token", kind=ErrorKind.REQUEST, status_code=401, response_body=body
        )
        assert err.status_code == 401
        assert err.response_body == body

    def test_defaults_are_none(self):
        err = MpesaError("x", kind=ErrorKind.VALIDATION)
        assert err.status_code is None
        assert err.response_body is None

    def test_kind_is_required(self):
        with pytest.raises(TypeError):
            MpesaError("x")  # type: ignore[call-arg]

    def test_repr_includes_status(self):
        err = MpesaError("nope", kind=ErrorKind.REQUEST, status_code=500)
        assert "REQUEST" in repr(err)
        assert "500" in repr(err)

    def test_is_an_exception(self):
        with pytest.raises(MpesaError) as exc_info:
            raise MpesaError("boom", kind=ErrorKind.CALLBACK)
        assert exc_info.value.kind is ErrorKind.CALLBACK
