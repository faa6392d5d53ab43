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

"""Node definition strings and the schema namespace they refer to.

Built-in nodes are written ``<node_type>.<node_name>``, custom nodes are
written ``<custom_folder>.<node_type>.<node_name>``.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..models.schema import BUILT_IN, CUSTOM
from ..models.types import Range

SEPARATOR = "."

# Number of parts in a node definition of each namespace
SEGMENT_COUNTS = {
    2: BUILT_IN,
    3: CUSTOM,
}


def split_node_definition(value: object) -> List[str]:
    return str(value).split(SEPARATOR)


def namespace_of(parts: List[str]) -> Optional[str]:
    """Namespace addressed by a split node definition, None if malformed."""
    return SEGMENT_COUNTS.get(len(parts))


@dataclass(frozen=True)
class NodeReference:
    """A well-formed node definition and the ranges of its parts."""

    namespace: str
    folder: str
    node_type: str
    node_name: str
    range: Range

    @classmethod
    def from_definition(cls, value: object, range: Range) -> Optional["NodeReference"]:
        parts = split_node_definition(value)
        namespace = namespace_of(parts)
        if namespace is None:
            return None
        if namespace == CUSTOM:
            folder, node_type, node_name = parts
        else:
            folder = ""
            node_type, node_name = parts
        return cls(namespace, folder, node_type, node_name, range)

    @property
    def folder_range(self) -> Range:
        return Range(self.range.start, self.range.start + len(self.folder))

    @property
    def type_range(self) -> Range:
        start = self.range.start
        if self.namespace == CUSTOM:
            start += len(self.folder) + len(SEPARATOR)
        return Range(start, start + len(self.node_type))

    @property
    def name_range(self) -> Range:
        return Range(self.range.end - len(self.node_name), self.range.end)
