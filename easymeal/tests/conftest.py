from __future__ import annotations

import pytest

from easymeal.app import rate_limiter


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    # The whole suite shares one client address, so start every test with a fresh window.
    rate_limiter.reset()
    yield
