#!/usr/bin/env python3

import logging
import os
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from jsonschema import Draft7Validator
from pygls.server import LanguageServer
from lsprotocol import types as lsp

from ..language_service import LanguageService
from ..models.settings import LanguageSettings
from .validation_handler import ValidationHandler

logger = logging.getLogger(__name__)

CONFIGS_DIR = "configs"

# Shape of the "peekingduck" configuration section
SETTINGS_SCHEMA = {
    "type": "object",
    "properties": {
        "maxNumberOfProblems": {"type": "integer", "minimum": 0},
        "path": {
            "type": "object",
            "properties": {
                "package": {"type": ["string", "null"]},
                "customNodes": {"type": ["string", "null"]},
            },
        },
    },
}


@dataclass
class Settings:
    """The ``peekingduck`` configuration section of the client."""
    max_problems: int = 100
    package_path: str = ""
    custom_nodes_path: str = ""

    @classmethod
    def from_client(cls, section: Any, default_max_problems: int = 100) -> 'Settings':
        """Read ``maxNumberOfProblems``, ``path.package`` and ``path.customNodes``.

        Values which do not match SETTINGS_SCHEMA are logged and replaced by
        their defaults.
        """
        if not isinstance(section, dict):
            return cls(max_problems=default_max_problems)

        invalid = set()
        for error in Draft7Validator(SETTINGS_SCHEMA).iter_errors(section):
            path = tuple(error.absolute_path)
            logger.warning(f"Ignoring invalid setting {'.'.join(str(p) for p in path) or '<root>'}: {error.message}")
            invalid.add(path)

        def value(*path: str, default: Any) -> Any:
            if any(path[:i] in invalid for i in range(1, len(path) + 1)):
                return default
            current: Any = section
            for key in path:
                if not isinstance(current, dict) or key not in current:
                    return default
                current = current[key]
            return current if current is not None else default

        return cls(
            max_problems=value("maxNumberOfProblems", default=default_max_problems),
            package_path=value("path", "package", default=""),
            custom_nodes_path=value("path", "customNodes", default=""),
        )


@dataclass
class SettingsState:
    """Server side state derived from the client settings and capabilities."""
    built_in_config_dir: str = ""
    custom_config_dir: str = ""
    max_problems: int = 100
    has_configuration_capability: bool = False
    client_dynamic_register_support: bool = False
    initialization_options: Any = None

    def update_capabilities(self, capabilities: Optional[lsp.ClientCapabilities]):
        workspace = capabilities.workspace if capabilities else None
        self.has_configuration_capability = bool(workspace and workspace.configuration)
        did_change = workspace.did_change_configuration if workspace else None
        self.client_dynamic_register_support = bool(did_change and did_change.dynamic_registration)

    def to_language_settings(self) -> LanguageSettings:
        return LanguageSettings.from_config_dirs(
            self.built_in_config_dir, self.custom_config_dir, self.max_problems
        )


class SettingsHandler:
    """Pulls the client configuration and reconfigures the language service."""

    def __init__(
        self,
        server: LanguageServer,
        language_service: LanguageService,
        state: SettingsState,
        validation_handler: ValidationHandler,
        section: str,
    ):
        self.server = server
        self.language_service = language_service
        self.state = state
        self.validation_handler = validation_handler
        self.section = section

    async def register_handlers(self):
        """Ask the client to send configuration change notifications."""
        if not (self.state.has_configuration_capability and self.state.client_dynamic_register_support):
            return
        registration = lsp.Registration(
            id=str(uuid.uuid4()),
            method=lsp.WORKSPACE_DID_CHANGE_CONFIGURATION,
        )
        await self.server.register_capability_async(lsp.RegistrationParams(registrations=[registration]))

    async def pull_configuration(self):
        """Fetch the configuration section and apply it.

        Clients without the ``workspace/configuration`` capability are
        configured from the initialization options instead.
        """
        if self.state.has_configuration_capability:
            result = await self.server.get_configuration_async(
                lsp.ConfigurationParams(items=[lsp.ConfigurationItem(section=self.section)])
            )
            section = result[0] if result else None
        else:
            section = self.state.initialization_options
        self.set_configuration(Settings.from_client(section, self.state.max_problems))

    def set_configuration(self, settings: Settings):
        """Probe the config directories and update the settings state."""
        self.state.built_in_config_dir = readable_config_dir(settings.package_path)
        self.state.custom_config_dir = readable_config_dir(settings.custom_nodes_path)
        self.state.max_problems = settings.max_problems
        if settings.package_path and not self.state.built_in_config_dir:
            logger.warning(f"PeekingDuck configs not readable under {settings.package_path}")
        if settings.custom_nodes_path and not self.state.custom_config_dir:
            logger.warning(f"Custom node configs not readable under {settings.custom_nodes_path}")
        self.update_configuration()

    def update_configuration(self):
        """Configure the language service and re-validate open pipeline files."""
        self.language_service.configure(self.state.to_language_settings())
        self.validation_handler.validate_open_documents()


def readable_config_dir(root: str) -> str:
    """Return ``<root>/configs`` if it is a readable directory, else an empty string."""
    if not root:
        return ""
    config_dir = os.path.join(root, CONFIGS_DIR)
    if os.path.isdir(config_dir) and os.access(config_dir, os.R_OK):
        return config_dir
    return ""

