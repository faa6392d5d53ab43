"""Tests for client settings handling."""

import asyncio
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from lsprotocol import types as lsp

from peekingduck_language_server.language_service import LanguageService
from peekingduck_language_server.server.settings_handler import (
    Settings,
    SettingsHandler,
    SettingsState,
    readable_config_dir,
)

from conftest import BUILT_IN_CONFIG_DIR, CUSTOM_CONFIG_DIR

PACKAGE_PATH = str(BUILT_IN_CONFIG_DIR.parent)
CUSTOM_NODES_PATH = str(CUSTOM_CONFIG_DIR.parent)


def make_handler(state=None):
    server = MagicMock()
    server.get_configuration_async = AsyncMock()
    server.register_capability_async = AsyncMock()
    validation_handler = MagicMock()
    handler = SettingsHandler(
        server, LanguageService(), state or SettingsState(), validation_handler, "peekingduck"
    )
    return handler


def client_capabilities(configuration=True, dynamic_registration=True):
    return lsp.ClientCapabilities(
        workspace=lsp.WorkspaceClientCapabilities(
            configuration=configuration,
            did_change_configuration=lsp.DidChangeConfigurationClientCapabilities(
                dynamic_registration=dynamic_registration
            ),
        )
    )


def test_settings_from_client():
    settings = Settings.from_client(
        {"maxNumberOfProblems": 20, "path": {"package": "/pkd", "customNodes": "/src/custom_nodes"}}
    )

    assert settings == Settings(max_problems=20, package_path="/pkd", custom_nodes_path="/src/custom_nodes")


@pytest.mark.parametrize("section", [None, [], "peekingduck", {}])
def test_settings_from_client_defaults(section):
    assert Settings.from_client(section, default_max_problems=50) == Settings(max_problems=50)


def test_invalid_settings_fall_back_to_defaults():
    settings = Settings.from_client(
        {"maxNumberOfProblems": "many", "path": {"package": 3, "customNodes": "/src/custom_nodes"}},
        default_max_problems=100,
    )

    assert settings == Settings(max_problems=100, package_path="", custom_nodes_path="/src/custom_nodes")


def test_null_paths_are_empty():
    settings = Settings.from_client({"maxNumberOfProblems": 5, "path": {"package": None}})

    assert settings == Settings(max_problems=5)


def test_readable_config_dir(tmp_path):
    (tmp_path / "configs").mkdir()

    assert readable_config_dir(str(tmp_path)) == os.path.join(str(tmp_path), "configs")
    assert readable_config_dir(str(tmp_path / "missing")) == ""
    assert readable_config_dir("") == ""


def test_update_capabilities():
    state = SettingsState()

    state.update_capabilities(client_capabilities())
    assert state.has_configuration_capability
    assert state.client_dynamic_register_support

    state.update_capabilities(lsp.ClientCapabilities())
    assert not state.has_configuration_capability
    assert not state.client_dynamic_register_support


def test_readable_dirs_enable_namespaces():
    handler = make_handler()

    handler.set_configuration(
        Settings(max_problems=7, package_path=PACKAGE_PATH, custom_nodes_path=CUSTOM_NODES_PATH)
    )

    assert handler.state.built_in_config_dir == str(BUILT_IN_CONFIG_DIR)
    assert handler.state.custom_config_dir == str(CUSTOM_CONFIG_DIR)
    settings = handler.state.to_language_settings()
    assert settings.complete.built_in and settings.complete.custom
    assert settings.validate.built_in and settings.validate.custom
    assert settings.max_problems == 7

    schema_service = handler.language_service.schema_service
    assert schema_service.built_in.node_types() == ["dabble", "model"]
    assert schema_service.custom.name == "custom_nodes"
    handler.validation_handler.validate_open_documents.assert_called_once_with()


def test_unreadable_dirs_disable_namespaces(tmp_path):
    handler = make_handler()
    handler.set_configuration(Settings(package_path=PACKAGE_PATH, custom_nodes_path=CUSTOM_NODES_PATH))

    handler.set_configuration(Settings(package_path=str(tmp_path), custom_nodes_path=""))

    settings = handler.state.to_language_settings()
    assert not settings.parse_schema.built_in
    assert not settings.validate.custom
    assert handler.language_service.schema_service.built_in.is_empty()
    assert handler.language_service.schema_service.custom.is_empty()


def test_pull_configuration_requests_section():
    state = SettingsState(has_configuration_capability=True)
    handler = make_handler(state)
    handler.server.get_configuration_async.return_value = [
        {"maxNumberOfProblems": 3, "path": {"package": PACKAGE_PATH, "customNodes": ""}}
    ]

    asyncio.run(handler.pull_configuration())

    params = handler.server.get_configuration_async.await_args.args[0]
    assert params.items[0].section == "peekingduck"
    assert state.built_in_config_dir == str(BUILT_IN_CONFIG_DIR)
    assert state.custom_config_dir == ""
    assert state.max_problems == 3


def test_pull_configuration_without_capability_uses_initialization_options():
    state = SettingsState(initialization_options={"path": {"customNodes": CUSTOM_NODES_PATH}})
    handler = make_handler(state)

    asyncio.run(handler.pull_configuration())

    handler.server.get_configuration_async.assert_not_awaited()
    assert state.custom_config_dir == str(CUSTOM_CONFIG_DIR)
    assert state.built_in_config_dir == ""


@pytest.mark.parametrize("configuration,dynamic,registered", [
    (True, True, True),
    (True, False, False),
    (False, True, False),
])
def test_register_handlers(configuration, dynamic, registered):
    state = SettingsState()
    state.update_capabilities(client_capabilities(configuration, dynamic))
    handler = make_handler(state)

    asyncio.run(handler.register_handlers())

    assert handler.server.register_capability_async.await_count == int(registered)
    if registered:
        params = handler.server.register_capability_async.await_args.args[0]
        assert params.registrations[0].method == lsp.WORKSPACE_DID_CHANGE_CONFIGURATION
