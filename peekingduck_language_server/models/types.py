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

"""Core data types for parsed PeekingDuck pipelines.

All positions are half-open character offset ranges into the document text.
Conversion to line/character positions only happens when results leave the
language service (see ``utils.text_document``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class Range:
    start: int  # inclusive
    end: int  # exclusive

    @classmethod
    def default(cls) -> "Range":
        """Range used when no better position can be determined."""
        return cls(0, 1)

    @classmethod
    def from_node(cls, node: Any) -> "Range":
        """Create a Range from a PyYAML node's start/end marks."""
        start_mark = getattr(node, "start_mark", None)
        end_mark = getattr(node, "end_mark", None)
        if start_mark is None or end_mark is None:
            return cls.default()
        return cls(int(start_mark.index), int(end_mark.index))

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ParsedItem:
    """A parsed value (node definition or config key) and where it was found."""

    value: Any
    range: Range


@dataclass(frozen=True)
class NodeString:
    """Pipeline entry written as a bare node definition, e.g. ``- input.visual``."""

    reference: ParsedItem


@dataclass(frozen=True)
class NodeMap:
    """Pipeline entry written as a node definition with config overrides."""

    reference: ParsedItem
    configs: Tuple[ParsedItem, ...] = ()


@dataclass(frozen=True)
class NonNode:
    """Any pipeline entry that cannot be a node, e.g. a number or a list."""

    item: ParsedItem


NodeEntry = Union[NodeString, NodeMap, NonNode]


@dataclass(frozen=True)
class Pipeline:
    nodes: Tuple[NodeEntry, ...]

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)
