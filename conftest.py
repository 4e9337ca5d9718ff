import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _disable_security_redirects(settings):
    # Prevent SecurityMiddleware from forcing https://testserver/...
    settings.SECURE_SSL_REDIRECT = False

    # Prevent "secure cookie" behavior from interfering with session auth in tests
    settings.SESSION_COOKIE_SECURE = False
    settings.CSRF_COOKIE_SECURE = False
    settings.SECURE_HSTS_SECONDS = 0


@pytest.fixture(autouse=True)
def _clear_workflow_cache():
    # workflow flags are cached in locmem; tests must not see each other's tenants
    cache.clear()
    yield
    cache.clear()
