"""Shared test fixtures and helpers for faceaffect tests."""

import importlib.util
import sys
from pathlib import Path

import pytest

# Load helpers module from the tests directory using importlib to avoid
# polluting sys.path.
_helpers_path = Path(__file__).resolve().parent / "helpers.py"
_spec = importlib.util.spec_from_file_location("helpers", _helpers_path)
_helpers = importlib.util.module_from_spec(_spec)
sys.modules["helpers"] = _helpers
_spec.loader.exec_module(_helpers)

from helpers import make_frame  # noqa: E402

from faceaffect.engine import EmotionEngine, create_default_engine  # noqa: E402
from faceaffect.observability import MemorySink, ObservabilityHub, TraceLevel  # noqa: E402


@pytest.fixture
def smile_frame():
    """Frame with a strong lip corner pull only."""
    return make_frame(AU12=0.9)


@pytest.fixture
def neutral_frame():
    return make_frame()


@pytest.fixture
def engine():
    return EmotionEngine()


@pytest.fixture
def default_engine():
    return create_default_engine()


@pytest.fixture
def memory_hub():
    """Hub at VERBOSE level with a MemorySink attached; yields (hub, sink)."""
    hub = ObservabilityHub()
    sink = MemorySink()
    hub.configure(level=TraceLevel.VERBOSE, sinks=[sink])
    yield hub, sink
    hub.shutdown()


@pytest.fixture
def trace_file(tmp_path):
    """Write JSONL trace lines to a temp file; returns a writer function."""

    def _write(lines, name="trace.jsonl"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
