"""
The DRF settings import the authentication and guard classes while
rest_framework.views itself is importing, so entry points are checked in a
fresh interpreter where nothing has been imported yet.
"""
import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]


@pytest.mark.parametrize(
    "module",
    [
        "config.urls",
        "rest_framework.views",
        "clinic_core.iam.services.sessions",
        "clinic_core.common.permissions",
    ],
)
def test_entry_point_imports_cleanly(module):
    env = dict(os.environ, DJANGO_SETTINGS_MODULE="config.settings.test")
    result = subprocess.run(
        [sys.executable, "-c", f"import django; django.setup(); import {module}"],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=120,
    )
    assert result.returncode == 0, result.stderr
