import pytest

from library import Library
from config import settings
from utils.ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture
def data_file(tmp_path, monkeypatch):
    # Each test gets its own data file; the CLI builds Library() from settings
    path = str(tmp_path / "library.txt")
    monkeypatch.setattr(settings, "data_file", path)
    return path


@pytest.fixture
def lib(data_file):
    return Library(data_file=data_file)


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)
