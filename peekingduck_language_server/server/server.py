#!/usr/bin/env python3

import logging
from typing import Optional

from pygls.server import LanguageServer
from lsprotocol import types as lsp

from .. import __version__
from ..config import ServerConfig, server_config
from ..language_service import SOURCE_ID, LanguageService, get_language_service
from ..utils.text_document import TextDocument
from .settings_handler import SettingsHandler, SettingsState
from .validation_handler import ValidationHandler

logger = logging.getLogger(__name__)


class PeekingDuckLanguageServer:
    """Language server for PeekingDuck pipeline files."""

    def __init__(self, config: Optional[ServerConfig] = None, language_service: Optional[LanguageService] = None):
        self.config = config if config is not None else server_config
        self.language_service = language_service if language_service is not None else get_language_service()
        self.server = LanguageServer("peekingduck-language-server", __version__)

        self.settings = SettingsState(max_problems=self.config.max_problems)
        self.validation_handler = ValidationHandler(
            self.server, self.language_service, self.config.validation_delay
        )
        self.settings_handler = SettingsHandler(
            self.server, self.language_service, self.settings, self.validation_handler, SOURCE_ID
        )

        # Register handlers
        self._register_handlers()

    def _register_handlers(self):
        """Register all LSP handlers."""

        @self.server.feature(lsp.INITIALIZE)
        def initialize(ls, params):
            self._on_initialize(ls, params)

        @self.server.feature(lsp.INITIALIZED)
        async def initialized(ls, params):
            await self._on_initialized(ls, params)

        @self.server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
        async def did_change_configuration(ls, params):
            await self.settings_handler.pull_configuration()

        @self.server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
        def did_open(ls, params):
            self.validation_handler.validate(params.text_document.uri)

        @self.server.feature(lsp.TEXT_DOCUMENT_DID_SAVE)
        def did_save(ls, params):
            self.validation_handler.validate(params.text_document.uri)

        @self.server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
        def did_close(ls, params):
            self.validation_handler.close(params.text_document.uri)

        @self.server.feature(
            lsp.TEXT_DOCUMENT_COMPLETION,
            lsp.CompletionOptions(
                trigger_characters=self.language_service.trigger_characters,
                resolve_provider=True,
            ),
        )
        def completion(ls, params):
            return self._on_completion(ls, params)

        @self.server.feature(lsp.COMPLETION_ITEM_RESOLVE)
        def completion_resolve(ls, params):
            return self.language_service.do_completion_resolve(params)

        @self.server.feature(lsp.SHUTDOWN)
        def shutdown(ls, params):
            self._on_shutdown(ls, params)

    def start_io(self):
        """Start the language server over stdio."""
        self.server.start_io()

    def start_tcp(self, host: str, port: int):
        self.server.start_tcp(host, port)

    def _on_initialize(self, ls, params: lsp.InitializeParams):
        """Record what the client supports."""
        logger.info("Initializing PeekingDuck Language Server")
        self.settings.update_capabilities(params.capabilities)
        self.settings.initialization_options = params.initialization_options

    async def _on_initialized(self, ls, params: lsp.InitializedParams):
        """Subscribe to configuration changes and load the initial configuration."""
        await self.settings_handler.register_handlers()
        await self.settings_handler.pull_configuration()

    def _on_shutdown(self, ls, params):
        """Drop pending validations, nothing is published after shutdown."""
        logger.info("Shutting down PeekingDuck Language Server")
        self.validation_handler.scheduler.cancel_all()

    def _on_completion(self, ls, params: lsp.CompletionParams) -> lsp.CompletionList:
        """Handle completion requests."""
        uri = params.text_document.uri
        if uri not in self.server.workspace.text_documents:
            return lsp.CompletionList(is_incomplete=False, items=[])

        document = TextDocument.from_workspace_document(self.server.workspace.get_text_document(uri))
        return self.language_service.do_completion(document, params.position, trigger_character_of(params))


def trigger_character_of(params: lsp.CompletionParams) -> Optional[str]:
    """The character which triggered completion, None when it was invoked."""
    context = params.context
    if context is None or context.trigger_kind != lsp.CompletionTriggerKind.TriggerCharacter:
        return None
    return context.trigger_character
