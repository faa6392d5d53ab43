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

"""Validation of pipeline files against the node schema catalog."""

import logging
from dataclasses import dataclass
from typing import List

from lsprotocol import types as lsp

from ..exceptions import PipelineParseError
from ..models.schema import BUILT_IN, CUSTOM, SchemaNamespace
from ..models.settings import LanguageSettings, NamespaceFlags
from ..models.types import NodeEntry, NodeMap, NonNode, Range
from ..parsers.pipeline_parser import PipelineParser
from ..utils.text_document import TextDocument
from .node_reference import NodeReference
from .schema_service import SchemaService

logger = logging.getLogger(__name__)

# How each namespace is called in diagnostic messages
NAMESPACE_LABELS = {
    BUILT_IN: "PeekingDuck",
    CUSTOM: "custom",
}


@dataclass(frozen=True)
class OffsetDiagnostic:
    """A problem located by character offsets, converted to lines at the end."""

    range: Range
    message: str


class PipelineValidation:
    """Reports invalid node definitions and node configs in a pipeline."""

    def __init__(self, schema_service: SchemaService, source: str):
        self.schema_service = schema_service
        self.source = source
        self.parser = PipelineParser()
        self.should_validate = NamespaceFlags()
        self.max_problems = 100

    def configure(self, settings: LanguageSettings):
        self.should_validate = settings.validate
        self.max_problems = settings.max_problems

    def do_validation(self, document: TextDocument) -> List[lsp.Diagnostic]:
        """Validate the pipeline document.

        Entries are checked in pipeline order and no new entry is checked once
        ``max_problems`` problems have been found. A document which cannot be
        parsed produces a single diagnostic.

        Args:
            document: The pipeline document to validate.

        Returns:
            At most ``max_problems`` diagnostics, in document order.
        """
        if not self.should_validate.any():
            return []

        logger.debug(f"Analyzing {document.uri}")
        problems: List[OffsetDiagnostic] = []
        try:
            pipeline = self.parser.parse(document)
            for entry in pipeline:
                if len(problems) >= self.max_problems:
                    break
                problems.extend(self.validate_entry(entry))
        except PipelineParseError as exc:
            problems.append(OffsetDiagnostic(exc.range, exc.message))

        return [self._to_diagnostic(problem, document) for problem in problems[:self.max_problems]]

    def validate_entry(self, entry: NodeEntry) -> List[OffsetDiagnostic]:
        """Check a single pipeline entry.

        An invalid node definition skips the checks of the entry's configs.
        """
        if isinstance(entry, NonNode):
            return [OffsetDiagnostic(entry.item.range, "Not a node.")]

        reference = NodeReference.from_definition(entry.reference.value, entry.reference.range)
        if reference is None:
            return [OffsetDiagnostic(entry.reference.range, "Poorly formatted node definition.")]
        if not self._is_enabled(reference.namespace):
            return []

        problems = self._check_node(reference)
        if problems or not isinstance(entry, NodeMap):
            return problems
        return self._check_node_configs(reference, entry)

    def _is_enabled(self, namespace: str) -> bool:
        if namespace == BUILT_IN:
            return self.should_validate.built_in
        return self.should_validate.custom

    def _check_node(self, reference: NodeReference) -> List[OffsetDiagnostic]:
        """Check that the node definition exists in its namespace."""
        namespace = self.schema_service.catalog.namespace(reference.namespace)
        label = NAMESPACE_LABELS[reference.namespace]

        if reference.namespace == CUSTOM and reference.folder != namespace.name:
            return [OffsetDiagnostic(
                reference.folder_range,
                f"{reference.folder} is not a valid custom nodes folder.",
            )]
        if not namespace.has_type(reference.node_type):
            return [OffsetDiagnostic(
                reference.type_range,
                f"{reference.node_type} is not a valid {label} node type.",
            )]
        if not namespace.has_node(reference.node_type, reference.node_name):
            return [OffsetDiagnostic(
                reference.name_range,
                f"{reference.node_name} is not a valid {label} {reference.node_type} node.",
            )]
        return []

    def _check_node_configs(self, reference: NodeReference, entry: NodeMap) -> List[OffsetDiagnostic]:
        if not entry.configs:
            return [OffsetDiagnostic(entry.reference.range, "Missing node configs.")]

        namespace: SchemaNamespace = self.schema_service.catalog.namespace(reference.namespace)
        config_keys = namespace.config_keys(reference.node_type, reference.node_name)
        return [
            OffsetDiagnostic(config.range, "Invalid node config key.")
            for config in entry.configs
            if config.value not in config_keys
        ]

    def _to_diagnostic(self, problem: OffsetDiagnostic, document: TextDocument) -> lsp.Diagnostic:
        return lsp.Diagnostic(
            range=document.to_lsp_range(problem.range),
            message=problem.message,
            severity=lsp.DiagnosticSeverity.Error,
            source=self.source,
        )
