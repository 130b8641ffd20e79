import pytest

from plate.compiler import preprocess
from plate.engine import Engine


@pytest.fixture
def engine():
    """A fresh engine with its own cache."""
    return Engine()


@pytest.fixture
def counting_engine():
    """An engine whose preprocessor records every source it translates."""
    calls = []

    def counting(source):
        calls.append(source)
        return preprocess(source)

    eng = Engine(preprocessor=counting)
    eng.calls = calls
    return eng


@pytest.fixture
def write_template(tmp_path):
    """Write a template file under tmp_path and return its path."""

    def _write(name, content):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
