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

"""In-memory schema catalog of known node types, node names and config keys."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

BUILT_IN = "builtIn"
CUSTOM = "custom"


@dataclass(frozen=True)
class NodeConfig:
    """Schema of a single node parsed from its ``<node_name>.yml`` file."""

    input: Tuple[str, ...] = ()
    output: Tuple[str, ...] = ()
    # Keys of non-input/output configs, in declaration order
    configs: Tuple[str, ...] = ()


@dataclass
class SchemaNamespace:
    """Node schema of one namespace (built-in or custom).

    ``name`` is the custom nodes folder name which every custom node definition
    has to start with. It stays empty for the built-in namespace.
    """

    name: str = ""
    schema: Dict[str, Dict[str, NodeConfig]] = field(default_factory=dict)

    def node_types(self) -> List[str]:
        return list(self.schema.keys())

    def node_names(self, node_type: str) -> List[str]:
        return list(self.schema.get(node_type, {}).keys())

    def has_type(self, node_type: str) -> bool:
        return node_type in self.schema

    def has_node(self, node_type: str, node_name: str) -> bool:
        return node_name in self.schema.get(node_type, {})

    def get_node(self, node_type: str, node_name: str) -> Optional[NodeConfig]:
        return self.schema.get(node_type, {}).get(node_name)

    def config_keys(self, node_type: str, node_name: str) -> Tuple[str, ...]:
        node = self.get_node(node_type, node_name)
        return node.configs if node is not None else ()

    def is_empty(self) -> bool:
        return not self.schema


@dataclass
class SchemaCatalog:
    built_in: SchemaNamespace = field(default_factory=SchemaNamespace)
    custom: SchemaNamespace = field(default_factory=SchemaNamespace)

    def namespace(self, kind: str) -> SchemaNamespace:
        """Return the namespace for ``kind`` ("builtIn" or "custom")."""
        if kind == BUILT_IN:
            return self.built_in
        if kind == CUSTOM:
            return self.custom
        raise KeyError(f"Unknown schema namespace: {kind}")

