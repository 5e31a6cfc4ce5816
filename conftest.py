import os

import pytest
import responses as responses_

# the server module builds its task store at import time; never reach for a real MongoDB in tests
os.environ.setdefault("TASKS_STORE", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture(autouse=True)
def responses():
    with responses_.RequestsMock() as rsps:
        yield rsps
