"""Tests for session payload encoding."""

from __future__ import annotations

import base64
import zlib

import pytest

from cookie_session import SessionDecodeError, decode, encode, hash_data


class TestEncode:
    """Tests for encode()."""

    def test_encodes_compact_json_as_base64(self) -> None:
        """Test that output is base64 of JSON without whitespace."""
        assert encode({"a": 1}) == base64.b64encode(b'{"a":1}').decode()

    def test_keeps_unicode_as_utf8(self) -> None:
        """Test that non-ASCII text is encoded as UTF-8, not escaped."""
        token = encode({"name": "ñandú"})
        assert base64.b64decode(token).decode("utf-8") == '{"name":"ñandú"}'

    def test_unserializable_value_raises(self) -> None:
        """Test that values JSON cannot represent propagate an error."""
        with pytest.raises(TypeError):
            encode({"when": object()})


class TestDecode:
    """Tests for decode()."""

    def test_round_trip(self) -> None:
        """Test that decode() inverts encode() for JSON-safe data."""
        data = {
            "string": ";",
            "nested": {"list": [1, 2.5, None, True], "empty": {}},
            "unicode": "日本語",
        }
        assert decode(encode(data)) == data

    def test_invalid_base64_raises_decode_error(self) -> None:
        """Test that a garbage cookie is reported as malformed."""
        with pytest.raises(SessionDecodeError):
            decode("invalid-session")

    def test_non_json_raises_decode_error(self) -> None:
        """Test that valid base64 of non-JSON text is malformed."""
        with pytest.raises(SessionDecodeError):
            decode(base64.b64encode(b"not json").decode())

    def test_non_object_raises_decode_error(self) -> None:
        """Test that a JSON value other than an object is malformed."""
        with pytest.raises(SessionDecodeError, match="JSON object"):
            decode(base64.b64encode(b"[1, 2]").decode())

    def test_non_ascii_token_raises_decode_error(self) -> None:
        """Test that non-ASCII input is malformed rather than a crash."""
        with pytest.raises(SessionDecodeError):
            decode("ünicode")

    def test_decode_error_is_value_error(self) -> None:
        """Test that SessionDecodeError can be caught as ValueError."""
        with pytest.raises(ValueError):
            decode("%%%")


class TestHashData:
    """Tests for hash_data()."""

    def test_is_crc32_of_compact_json(self) -> None:
        assert hash_data({"a": 1}) == zlib.crc32(b'{"a":1}')

    def test_equal_data_equal_hash(self) -> None:
        assert hash_data({"a": 1, "b": [1, 2]}) == hash_data({"a": 1, "b": [1, 2]})

    def test_changed_data_changes_hash(self) -> None:
        assert hash_data({"a": 1}) != hash_data({"a": 2})
