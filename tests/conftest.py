import pytest

import id_givers
from bindery import default


@pytest.fixture(autouse=True)
def clean_state():
    default.empty()
    id_givers.instance_counts.clear()
    yield
    default.empty()
