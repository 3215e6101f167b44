from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Iterator, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

for entry in (BASE_DIR, SRC_DIR):
    if str(entry) not in sys.path:
        sys.path.append(str(entry))

from shadowrepl.session import DEFAULT_STORE  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_default_store() -> Iterator[None]:
    """Shadows written through the process-wide store must not leak between tests."""
    yield
    for ns in DEFAULT_STORE.namespaces():
        DEFAULT_STORE.clear(ns)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Reject duplicate node IDs; parametrized shadow cases rely on unique ids."""
    del session, config

    counts: Dict[str, int] = {}
    for item in items:
        counts[item.nodeid] = counts.get(item.nodeid, 0) + 1

    duplicates = sorted(nodeid for nodeid, n in counts.items() if n > 1)
    if duplicates:
        listing = "\n".join(f"- {nodeid}" for nodeid in duplicates)
        raise pytest.UsageError(f"Duplicate pytest nodeids detected during collection:\n{listing}")
