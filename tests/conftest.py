"""Shared fixtures: isolate process-wide generator and metrics state."""

import pytest

from typeids.core.uuid7 import get_shared_generator, reset_default_generator
from typeids.infra.metrics import set_metrics_enabled


@pytest.fixture(autouse=True)
def _fresh_generator_state():
    """Every test starts without cached generators or metrics flag."""
    reset_default_generator()
    get_shared_generator.reset()
    set_metrics_enabled(None)
    yield
    reset_default_generator()
    get_shared_generator.reset()
    set_metrics_enabled(None)
