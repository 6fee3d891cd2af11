"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally reach real oracles
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("SIMILARITY_SERVER_URL", "")
os.environ.setdefault("EXTERNAL_SEARCH_URL", "")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
