from __future__ import annotations

import os

import django
import pytest


os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings")

django.setup()


@pytest.fixture()
def live_cache():
    from django.core.cache import cache

    cache.clear()
    yield cache
    cache.clear()
