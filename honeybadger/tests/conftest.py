import os

import pytest

import honeybadger


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in list(os.environ):
        if name.startswith("HONEYBADGER_"):
            monkeypatch.delenv(name)
    honeybadger.reset_configuration()
    yield
    honeybadger.reset_configuration()
