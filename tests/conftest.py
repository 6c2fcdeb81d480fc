"""Root conftest — isolated code registries and stack-depth restoration.

Invariants:
    - Tests never leak registrations into the process-wide default registry
    - Tests that change the default stack depth restore it
"""

import logging

import pytest

from faultchain.core import codes
from faultchain.core.codes import CodeRegistry
from faultchain.core.stack import default_depth, set_default_depth
from faultchain.infrastructure.observability import ChainTextFormatter, JSONFormatter


@pytest.fixture
def registry() -> CodeRegistry:
    return CodeRegistry()


@pytest.fixture
def default_registry(monkeypatch) -> CodeRegistry:
    """Swap the module-level registry for a fresh one."""
    fresh = CodeRegistry()
    monkeypatch.setattr(codes, "default_registry", fresh)
    return fresh


@pytest.fixture
def restore_depth():
    before = default_depth()
    yield
    set_default_depth(before)


@pytest.fixture
def restore_root_logger():
    """Remove handlers installed by setup_logging and restore the level."""
    level = logging.root.level
    yield
    for handler in list(logging.root.handlers):
        if isinstance(handler.formatter, (JSONFormatter, ChainTextFormatter)):
            logging.root.removeHandler(handler)
    logging.root.setLevel(level)
