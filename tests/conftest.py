"""Root conftest — shared test configuration.

Invariants:
    - Every test sees fresh Settings (get_settings cache cleared around it)
    - Environment pins the default dispatcher families so a developer's .env
      cannot change which methods the tests exercise
"""

import os

import pytest

from hash_commands.config import get_settings

os.environ.setdefault("HASH_COMMANDS_RUN_METHOD", "e:run")
os.environ.setdefault("HASH_COMMANDS_ROUTE_METHOD", "e:route")


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
