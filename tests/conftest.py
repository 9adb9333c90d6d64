"""Pytest configuration for test discovery and shared fixtures.

This file ensures that:
- `src/` is importable without installing the package
- Tests never pick up a developer's `WIKIBASE_CONFIG_PATH`
- loguru output can be asserted on through the `log_messages` fixture
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Ensure src directory is in path for imports
repo_root = Path(__file__).parent.parent
src_path = repo_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from loguru import logger  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WIKIBASE_CONFIG_PATH", raising=False)


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Collect loguru records as ``"LEVEL message"`` strings."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(
            f"{message.record['level'].name} {message.record['message']}"
        ),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
