import pytest

from basic_compiler import run_script
from basic_runtime import RuntimeSupport


@pytest.fixture
def vm():
    return RuntimeSupport()


@pytest.fixture
def run_basic():
    def _run(source):
        return run_script(source, RuntimeSupport())
    return _run
