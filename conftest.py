"""Root conftest: pins client settings before chat_client.config is imported."""
from __future__ import annotations

import os
from pathlib import Path

_TEST_DEFAULTS = {
    "API_BASE_URL": "http://api.test",
    "MEDIA_URL_TTL_SECONDS": "300",
}

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for line in _env_test.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

for key, value in _TEST_DEFAULTS.items():
    os.environ.setdefault(key, value)
