"""Shared test fixtures for segtrace."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from segtrace.config.models import SegTraceConfig, TraceConfig
from segtrace.segments import (
    AppendableVariableSegment,
    CompositeSegment,
    LiteralSegment,
    VariableSegment,
)
from segtrace.vcs.base import RepositoryHost


def _make_class_file(attributes, *, ordered=True, body="  // custom code\n"):
    """A generated Java-like class: fixed header/footer around an attribute list.

    *attributes* is a list of (id, content) pairs, in generation order.
    """
    return CompositeSegment(
        "file",
        [
            LiteralSegment("header", "public class Widget {\n"),
            AppendableVariableSegment(
                "attributes",
                [VariableSegment(aid, content) for aid, content in attributes],
                ordered=ordered,
            ),
            VariableSegment("body", body),
            LiteralSegment("footer", "}\n"),
        ],
    )


@pytest.fixture
def class_file():
    return _make_class_file([("attr-name", "  String name;\n"), ("attr-size", "  int size;\n")])


@pytest.fixture
def sample_config():
    return SegTraceConfig()


@pytest.fixture
def trace_config():
    return TraceConfig()


@pytest.fixture
def mock_host():
    host = MagicMock(spec=RepositoryHost)
    host.repository_exists = AsyncMock(return_value=True)
    host.create_repository = AsyncMock(return_value=None)
    host.delete_repository = AsyncMock(return_value=None)
    host.create_file = AsyncMock(return_value=None)
    host.push_files = AsyncMock(return_value="abc1234def")
    host.rename_file = AsyncMock(return_value=None)
    return host
