"""Shared fixtures for the language server tests."""

from pathlib import Path

import pytest

from peekingduck_language_server.language_service import LanguageService
from peekingduck_language_server.models.settings import LanguageSettings, NamespaceFlags, NamespacePaths

FIXTURES_DIR = Path(__file__).parent / "fixtures"
BUILT_IN_CONFIG_DIR = FIXTURES_DIR / "peekingduck" / "configs"
CUSTOM_CONFIG_DIR = FIXTURES_DIR / "custom_nodes" / "configs"
PIPELINES_DIR = FIXTURES_DIR / "pipelines"


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def make_settings():
    """Factory for LanguageSettings pointing at the fixture configs directories."""

    def _make(built_in=True, custom=True, validate=None, complete=None, max_problems=100):
        flags = NamespaceFlags(built_in, custom)
        return LanguageSettings(
            complete=complete if complete is not None else flags,
            config_dir=NamespacePaths(
                str(BUILT_IN_CONFIG_DIR) if built_in else "",
                str(CUSTOM_CONFIG_DIR) if custom else "",
            ),
            parse_schema=flags,
            validate=validate if validate is not None else flags,
            max_problems=max_problems,
        )

    return _make


@pytest.fixture
def make_language_service(make_settings):
    """Factory for a LanguageService configured with the fixture schemas."""

    def _make(**kwargs):
        service = LanguageService()
        service.configure(make_settings(**kwargs))
        return service

    return _make


@pytest.fixture
def language_service(make_language_service):
    return make_language_service()


@pytest.fixture
def read_pipeline():
    def _read(name):
        return (PIPELINES_DIR / name).read_text(encoding="utf-8")

    return _read


class FakeHandle:
    """Timer handle returned by FakeLoop.call_later, fired by hand."""

    def __init__(self, delay, callback, args):
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        assert not self.cancelled
        self.callback(*self.args)


class FakeLoop:
    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(delay, callback, args)
        self.handles.append(handle)
        return handle
