# Copyright 2022 AI Singapore
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Language service for PeekingDuck pipeline files.

The language service is independent of the LSP transport: it takes text
documents and positions, and returns diagnostics and completion items.
"""

import logging
from typing import List, Optional

from lsprotocol import types as lsp

from .models.settings import LanguageSettings
from .parsers.schema_builder import SchemaBuilder
from .services.completion import PipelineCompletion
from .services.schema_service import SchemaService
from .services.validation import PipelineValidation
from .utils.text_document import TextDocument

logger = logging.getLogger(__name__)

SOURCE_ID = "peekingduck"


class LanguageService:
    """Facade over the schema, validation and completion services."""

    def __init__(self, builder: Optional[SchemaBuilder] = None):
        self.schema_service = SchemaService(builder)
        self.validation = PipelineValidation(self.schema_service, SOURCE_ID)
        self.completion = PipelineCompletion(self.schema_service)

    def configure(self, settings: LanguageSettings):
        """Apply new settings and rebuild the node schemas."""
        logger.info(
            f"Configuring language service: built-in configs={settings.config_dir.built_in!r}, "
            f"custom configs={settings.config_dir.custom!r}"
        )
        self.schema_service.clear_schemas()
        self.schema_service.register_schemas(settings)
        self.validation.configure(settings)
        self.completion.configure(settings)

    def do_completion(
        self, document: TextDocument, position: lsp.Position, trigger_character: Optional[str] = None
    ) -> lsp.CompletionList:
        return self.completion.do_completion(document, position, trigger_character)

    def do_completion_resolve(self, item: lsp.CompletionItem) -> lsp.CompletionItem:
        return self.completion.do_completion_resolve(item)

    def do_validation(self, document: TextDocument) -> List[lsp.Diagnostic]:
        return self.validation.do_validation(document)

    @property
    def trigger_characters(self) -> List[str]:
        return self.completion.trigger_characters


def get_language_service(builder: Optional[SchemaBuilder] = None) -> LanguageService:
    """Create an unconfigured language service."""
    return LanguageService(builder)
