"""Unit tests for Kubernetes base models and utilities."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from container_version_manager.integrations.kubernetes.models.base import (
    _format_timestamp,
    _parse_timestamp,
    _safe_get,
)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestSafeGet:
    """Test _safe_get utility function."""

    def test_safe_get_nested_attrs(self) -> None:
        """Test getting nested attributes."""
        obj = MagicMock()
        obj.metadata.name = "test-pod"
        assert _safe_get(obj, "metadata", "name") == "test-pod"

    def test_safe_get_missing_attr(self) -> None:
        """Test getting missing attribute returns default."""
        obj = SimpleNamespace(name="test")
        assert _safe_get(obj, "missing", default="default-value") == "default-value"

    def test_safe_get_none_intermediate(self) -> None:
        """Test getting through a None intermediate returns default."""
        obj = SimpleNamespace(status=None)
        assert _safe_get(obj, "status", "active", default=[]) == []


@pytest.mark.unit
@pytest.mark.kubernetes
class TestTimestamps:
    """Test timestamp parsing and formatting."""

    def test_parse_rfc3339_zulu(self) -> None:
        """Test the API server's Z suffix is parsed as UTC."""
        assert _parse_timestamp("2024-03-01T12:30:00Z") == datetime(
            2024, 3, 1, 12, 30, tzinfo=UTC
        )

    def test_parse_offset_converted_to_utc(self) -> None:
        """Test offsets are normalized to UTC."""
        parsed = _parse_timestamp("2024-03-01T14:30:00+02:00")
        assert parsed == datetime(2024, 3, 1, 12, 30, tzinfo=UTC)
        assert parsed is not None and parsed.tzinfo == UTC

    @pytest.mark.parametrize("value", [None, ""])
    def test_parse_empty(self, value: str | None) -> None:
        """Test unset timestamps parse to None."""
        assert _parse_timestamp(value) is None

    def test_parse_naive_datetime_is_utc(self) -> None:
        """Test naive datetimes are taken as UTC."""
        assert _parse_timestamp(datetime(2024, 3, 1, 12, 30)) == datetime(
            2024, 3, 1, 12, 30, tzinfo=UTC
        )

    def test_format_timestamp(self) -> None:
        """Test formatting uses whole seconds and the Z suffix."""
        value = datetime(2024, 3, 1, 14, 30, 5, 123456, tzinfo=timezone(timedelta(hours=2)))
        assert _format_timestamp(value) == "2024-03-01T12:30:05Z"
