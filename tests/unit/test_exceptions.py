"""Tests for the exception hierarchy."""

from respstream._exceptions import (
    STATUS_MAP,
    APIError,
    AuthenticationError,
    ConflictError,
    DecodeError,
    FrameTooLargeError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    RespStreamError,
    TransportError,
    ValidationError,
)


class TestHierarchy:
    def test_all_inherit_from_base(self):
        for cls in (
            APIError,
            AuthenticationError,
            ConflictError,
            DecodeError,
            NotFoundError,
            PermissionDeniedError,
            RateLimitError,
            TransportError,
            ValidationError,
        ):
            assert issubclass(cls, RespStreamError)

    def test_frame_too_large_is_transport_error(self):
        assert issubclass(FrameTooLargeError, TransportError)

    def test_status_map(self):
        assert STATUS_MAP[400] is ValidationError
        assert STATUS_MAP[401] is AuthenticationError
        assert STATUS_MAP[403] is PermissionDeniedError
        assert STATUS_MAP[404] is NotFoundError
        assert STATUS_MAP[409] is ConflictError
        assert STATUS_MAP[422] is ValidationError
        assert STATUS_MAP[429] is RateLimitError
        assert 500 not in STATUS_MAP


class TestAttributes:
    def test_base_fields(self):
        err = NotFoundError(
            "gone", status_code=404, request_id="req_1", method="GET", path="/responses/x"
        )
        assert str(err) == "gone"
        assert err.message == "gone"
        assert err.status_code == 404
        assert err.request_id == "req_1"
        assert err.method == "GET"
        assert err.path == "/responses/x"

    def test_decode_error_keeps_payload_and_cause(self):
        cause = ValueError("bad")
        err = DecodeError("cannot decode", payload="{x", cause=cause)
        assert err.payload == "{x"
        assert err.cause is cause
        assert err.status_code is None

    def test_frame_too_large_frames_default(self):
        assert FrameTooLargeError("too big").frames == []
        assert FrameTooLargeError("too big", frames=["data: 1"]).frames == ["data: 1"]
