"""Root test configuration: isolate tests from the developer's config and environment"""

import os

import pytest

from helpparse.config import ENV_PREFIX


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Drop HELPPARSE_* variables and run from an empty directory so no config.yaml leaks in."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
