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

"""Auto-completion of node definitions and node configs in pipeline files."""

import logging
from enum import IntEnum
from typing import Callable, Dict, Iterable, List, Optional

from lsprotocol import types as lsp

from ..exceptions import PipelineParseError
from ..models.schema import BUILT_IN, CUSTOM
from ..models.settings import LanguageSettings, NamespaceFlags
from ..models.types import NodeMap
from ..parsers.pipeline_parser import PipelineParser
from ..utils.indentation import guess_indentation
from ..utils.text_document import TextDocument
from .node_reference import split_node_definition
from .schema_service import SchemaService

logger = logging.getLogger(__name__)

ENTRY_MARKER = "-"
SNIPPET_LABEL = "Configuration options"
CONFIG_SUFFIX = ":"


class CompletionDataKind(IntEnum):
    """Tag stored in ``CompletionItem.data`` to resolve the item's detail."""

    BuiltInType = 0
    BuiltInNode = 1
    BuiltInConfig = 2
    CustomFolderName = 3
    CustomType = 4
    CustomNode = 5
    CustomConfig = 6


DETAILS = {
    CompletionDataKind.BuiltInType: "Built-in node type",
    CompletionDataKind.BuiltInNode: "Built-in node",
    CompletionDataKind.BuiltInConfig: "Built-in node config",
    CompletionDataKind.CustomFolderName: "Custom nodes folder name",
    CompletionDataKind.CustomType: "Custom node type",
    CompletionDataKind.CustomNode: "Custom node",
    CompletionDataKind.CustomConfig: "Custom node config",
}
DEFAULT_DETAIL = "Others"

_TYPE_DATA = {BUILT_IN: CompletionDataKind.BuiltInType, CUSTOM: CompletionDataKind.CustomType}
_NODE_DATA = {BUILT_IN: CompletionDataKind.BuiltInNode, CUSTOM: CompletionDataKind.CustomNode}
_CONFIG_DATA = {BUILT_IN: CompletionDataKind.BuiltInConfig, CUSTOM: CompletionDataKind.CustomConfig}

CompletionHandler = Callable[[TextDocument, lsp.Position], List[lsp.CompletionItem]]


class PipelineCompletion:
    """Provides completion items for pipeline documents.

    Completion is triggered by one of the characters " ", "." and ":" while a
    node definition is typed, or explicitly invoked by the user.
    """

    def __init__(self, schema_service: SchemaService):
        self.schema_service = schema_service
        self.parser = PipelineParser()
        self.should_complete = NamespaceFlags()
        self._trigger_handlers: Dict[Optional[str], CompletionHandler] = {
            " ": self._complete_new_entry,
            ".": self._complete_next_part,
            ":": self._complete_config_snippet,
            None: self._complete_invoked,
        }

    @property
    def trigger_characters(self) -> List[str]:
        return [char for char in self._trigger_handlers if char is not None]

    def configure(self, settings: LanguageSettings):
        self.should_complete = settings.complete

    def do_completion(
        self, document: TextDocument, position: lsp.Position, trigger_character: Optional[str] = None
    ) -> lsp.CompletionList:
        """Compute completion items at ``position``.

        Args:
            document: The pipeline document being edited.
            position: Cursor position in the client's position encoding. When
                triggered by a character, the cursor is right after that
                character.
            trigger_character: The character which triggered the completion,
                None when completion was invoked explicitly.

        Returns:
            A complete (non-incremental) CompletionList, possibly empty.
        """
        handler = self._trigger_handlers.get(trigger_character)
        items: List[lsp.CompletionItem] = []
        if handler is not None and position.character >= 0:
            items = handler(document, document.to_server_position(position))
        logger.debug(f"{len(items)} completion items for trigger {trigger_character!r} at {position}")
        return lsp.CompletionList(is_incomplete=False, items=items)

    def do_completion_resolve(self, item: lsp.CompletionItem) -> lsp.CompletionItem:
        """Fill in the detail of a completion item from its data tag."""
        try:
            item.detail = DETAILS.get(CompletionDataKind(item.data), DEFAULT_DETAIL)
        except (TypeError, ValueError):
            item.detail = DEFAULT_DETAIL
        return item

    @property
    def folder_name(self) -> str:
        return self.schema_service.custom.name

    def _complete_new_entry(self, document: TextDocument, position: lsp.Position) -> List[lsp.CompletionItem]:
        """Complete the first part of a node definition after "- "."""
        if _preceding_char(document, position) != ENTRY_MARKER:
            return []
        return self._first_part_items()

    def _complete_next_part(self, document: TextDocument, position: lsp.Position) -> List[lsp.CompletionItem]:
        """Complete the part after a "." in a node definition."""
        node_def = _entry_node_definition(_preceding_text(document, position, position.character - 1))
        if node_def is None:
            return []
        parts = split_node_definition(node_def)
        if len(parts) == 1:
            return self._second_part_items(parts[0])
        if len(parts) == 2:
            return self._custom_name_items(parts[0], parts[1])
        return []

    def _complete_config_snippet(self, document: TextDocument, position: lsp.Position) -> List[lsp.CompletionItem]:
        """Insert every config of the node after "<node definition>:"."""
        raw_text = _preceding_text(document, position, position.character - 1)
        node_def = _entry_node_definition(raw_text)
        if node_def is None:
            return []

        indentation = guess_indentation(document.lines)
        text_offset = " " * (len(raw_text) - len(node_def))
        prefix = f"\n{text_offset}{indentation.unit}"

        parts = split_node_definition(node_def)
        if len(parts) == 2 and self.should_complete.built_in:
            node_type, node_name = parts
            return self._config_snippet_items(BUILT_IN, node_type, node_name, prefix)
        if len(parts) == 3 and self.should_complete.custom:
            folder, node_type, node_name = parts
            if folder == self.folder_name:
                return self._config_snippet_items(CUSTOM, node_type, node_name, prefix)
        return []

    def _complete_invoked(self, document: TextDocument, position: lsp.Position) -> List[lsp.CompletionItem]:
        """Complete the node definition or node configs at the cursor."""
        node_def = _entry_node_definition(_preceding_text(document, position, position.character))
        if node_def is None:
            return self._node_config_items(document, position.line)

        parts = split_node_definition(node_def)
        if len(parts) == 1:
            return self._first_part_items()
        if len(parts) == 2:
            return self._second_part_items(parts[0])
        if len(parts) == 3:
            return self._custom_name_items(parts[0], parts[1])
        return []

    def _first_part_items(self) -> List[lsp.CompletionItem]:
        """Built-in node types and the custom nodes folder name."""
        items = []
        if self.should_complete.built_in:
            items.extend(self._node_type_items(BUILT_IN))
        if self.should_complete.custom and self.folder_name:
            items.append(lsp.CompletionItem(
                label=self.folder_name,
                kind=lsp.CompletionItemKind.Module,
                data=CompletionDataKind.CustomFolderName.value,
            ))
        return items

    def _second_part_items(self, first_part: str) -> List[lsp.CompletionItem]:
        """Built-in node names of a type, or custom node types after the folder name."""
        items = []
        if self.should_complete.built_in:
            items.extend(self._node_name_items(BUILT_IN, first_part))
        if self.should_complete.custom and first_part == self.folder_name:
            items.extend(self._node_type_items(CUSTOM))
        return items

    def _custom_name_items(self, folder: str, node_type: str) -> List[lsp.CompletionItem]:
        if not self.should_complete.custom or folder != self.folder_name:
            return []
        return self._node_name_items(CUSTOM, node_type)

    def _node_config_items(self, document: TextDocument, line: int) -> List[lsp.CompletionItem]:
        """Config keys of the closest node entry above ``line`` not declared yet."""
        try:
            node_def_map = self.parser.parse_node_def_map(document, omit_line=line)
        except PipelineParseError as exc:
            logger.debug(f"No config completion, pipeline could not be parsed: {exc}")
            return []

        while line >= 0 and line not in node_def_map:
            line -= 1
        entry = node_def_map.get(line)
        if not isinstance(entry, NodeMap):
            return []

        present = [config.value for config in entry.configs]
        parts = split_node_definition(entry.reference.value)
        if len(parts) == 2 and self.should_complete.built_in:
            node_type, node_name = parts
            return self._config_key_items(BUILT_IN, node_type, node_name, present)
        if len(parts) == 3 and self.should_complete.custom:
            folder, node_type, node_name = parts
            if folder == self.folder_name:
                return self._config_key_items(CUSTOM, node_type, node_name, present)
        return []

    def _node_type_items(self, kind: str) -> List[lsp.CompletionItem]:
        namespace = self.schema_service.catalog.namespace(kind)
        return _make_items(namespace.node_types(), lsp.CompletionItemKind.TypeParameter, _TYPE_DATA[kind])

    def _node_name_items(self, kind: str, node_type: str) -> List[lsp.CompletionItem]:
        namespace = self.schema_service.catalog.namespace(kind)
        return _make_items(namespace.node_names(node_type), lsp.CompletionItemKind.Class, _NODE_DATA[kind])

    def _config_key_items(
        self, kind: str, node_type: str, node_name: str, present: Iterable[object]
    ) -> List[lsp.CompletionItem]:
        namespace = self.schema_service.catalog.namespace(kind)
        declared = set(str(value) for value in present)
        keys = [key for key in namespace.config_keys(node_type, node_name) if key not in declared]
        return _make_items(keys, lsp.CompletionItemKind.Class, _CONFIG_DATA[kind])

    def _config_snippet_items(
        self, kind: str, node_type: str, node_name: str, prefix: str
    ) -> List[lsp.CompletionItem]:
        namespace = self.schema_service.catalog.namespace(kind)
        configs = namespace.config_keys(node_type, node_name)
        if not configs:
            return []
        text = prefix + (CONFIG_SUFFIX + prefix).join(configs) + CONFIG_SUFFIX
        return [lsp.CompletionItem(
            label=SNIPPET_LABEL,
            kind=lsp.CompletionItemKind.TypeParameter,
            data=_CONFIG_DATA[kind].value,
            insert_text_mode=lsp.InsertTextMode.AsIs,
            insert_text=text,
        )]


def _make_items(labels: Iterable[str], kind: lsp.CompletionItemKind, data: CompletionDataKind) -> List[lsp.CompletionItem]:
    return [lsp.CompletionItem(label=label, kind=kind, data=data.value) for label in labels]


def _preceding_text(document: TextDocument, position: lsp.Position, end: int) -> str:
    """Text of the cursor line from its start up to character ``end``."""
    return document.line_text(position.line)[:max(end, 0)]


def _preceding_char(document: TextDocument, position: lsp.Position) -> str:
    """The character right before the trigger character."""
    if position.character < 2:
        return ""
    return document.line_text(position.line)[position.character - 2:position.character - 1]


def _entry_node_definition(text: str) -> Optional[str]:
    """Node definition typed after "-" on a new pipeline entry, None if ``text`` is no entry."""
    text = text.strip()
    if not text.startswith(ENTRY_MARKER):
        return None
    return text[len(ENTRY_MARKER):].strip()
