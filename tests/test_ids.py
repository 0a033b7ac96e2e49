"""Unit tests for taskboard/utils/ids.py."""

import pytest

from taskboard.utils.ids import generate_object_id, is_object_id


class TestObjectIds:
    """Identifier generation and format checks."""

    def test_generated_ids_are_unique_hex(self) -> None:
        ids = {generate_object_id() for _ in range(100)}

        assert len(ids) == 100
        assert all(len(value) == 24 and is_object_id(value) for value in ids)

    @pytest.mark.parametrize("value", ["123", "z" * 24, "a" * 25, "", None, 42])
    def test_rejects_malformed_values(self, value: object) -> None:
        assert is_object_id(value) is False

    def test_accepts_hex_string(self) -> None:
        assert is_object_id("5f" + "0" * 22) is True
