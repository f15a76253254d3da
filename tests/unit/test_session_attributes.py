"""Unit tests for redis_session_manager.session.attributes."""
from __future__ import annotations

import pytest

from redis_session_manager.session.attributes import encode_attribute


class TestEncodeAttribute:
    def test_string_unchanged(self) -> None:
        assert encode_attribute("triangle") == "triangle"

    def test_int(self) -> None:
        assert encode_attribute(42) == "42"

    def test_float(self) -> None:
        assert encode_attribute(1.5) == "1.5"

    @pytest.mark.parametrize("value, expected", [(True, "true"), (False, "false")])
    def test_bool(self, value: bool, expected: str) -> None:
        assert encode_attribute(value) == expected

    @pytest.mark.parametrize("value", [{"a": 1}, [1, 2], object(), b"bytes"])
    def test_unsupported_types_rejected(self, value: object) -> None:
        with pytest.raises(TypeError, match="serialize"):
            encode_attribute(value)  # type: ignore[arg-type]
