#!/usr/bin/env python3

import logging
from typing import List

from pygls.server import LanguageServer
from lsprotocol import types as lsp

from ..language_service import LanguageService
from ..utils.text_document import TextDocument
from .validation_scheduler import ValidationScheduler

logger = logging.getLogger(__name__)


class ValidationHandler:
    """Validates open documents and publishes their diagnostics."""

    def __init__(self, server: LanguageServer, language_service: LanguageService, delay: float):
        self.server = server
        self.language_service = language_service
        self.scheduler = ValidationScheduler(server.loop, delay, self.validate_text_document)

    def validate(self, uri: str):
        """Schedule a debounced validation of the document."""
        self.scheduler.schedule(uri)

    def validate_open_documents(self):
        for uri in list(self.server.workspace.text_documents):
            self.validate(uri)

    def validate_text_document(self, uri: str) -> List[lsp.Diagnostic]:
        """Validate the current text of an open document and publish the result."""
        if uri not in self.server.workspace.text_documents:
            logger.debug(f"Skipping validation of closed document {uri}")
            return []

        document = TextDocument.from_workspace_document(self.server.workspace.get_text_document(uri))
        diagnostics = self.language_service.do_validation(document)
        self.server.publish_diagnostics(uri, diagnostics)
        logger.debug(f"Published {len(diagnostics)} diagnostics for {uri}")
        return diagnostics

    def close(self, uri: str):
        """Drop the pending validation and clear diagnostics of a closed document."""
        self.scheduler.cancel(uri)
        self.server.publish_diagnostics(uri, [])
