from __future__ import annotations

import pytest

from vigil_commons.runtime.cancellation import CancellationToken


@pytest.fixture
def token() -> CancellationToken:
    return CancellationToken()
