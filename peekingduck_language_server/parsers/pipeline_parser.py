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

"""Parser for PeekingDuck pipeline files such as ``pipeline_config.yml``.

A pipeline file contains a single top-level ``nodes`` key mapping to a list of
node entries::

    nodes:
      - input.visual
      - model.yolo:
          iou_threshold: 0.5
      - custom_nodes.dabble.my_node

The document is composed with PyYAML (``yaml.compose``) rather than loaded so
that every entry keeps the character offsets of where it was written.
"""

import logging
from typing import Any, Dict, List

import yaml

from ..exceptions import PipelineParseError
from ..models.types import NodeEntry, NodeMap, NodeString, NonNode, ParsedItem, Pipeline, Range
from ..utils.text_document import TextDocument

logger = logging.getLogger(__name__)

STR_TAG = "tag:yaml.org,2002:str"
NODES_KEY = "nodes"


class PipelineParser:
    """Parses pipeline documents into an ordered list of node entries."""

    def parse(self, document: TextDocument, omit_line: int = -1) -> Pipeline:
        """Parse the document into a pipeline of nodes.

        Args:
            document: The pipeline document to be parsed.
            omit_line: Zero-based line to blank out before parsing. Used by
                invoked completion, where the line being edited is usually
                not valid YAML yet.

        Returns:
            A Pipeline with one NodeEntry per item of the ``nodes`` list.

        Raises:
            PipelineParseError: The document is not valid YAML or does not
                follow the pipeline grammar.
        """
        if omit_line > -1:
            document = document.omit_line(omit_line)
        root = self._compose(document.text)
        entries = self._get_pipeline_entries(root)

        nodes: List[NodeEntry] = []
        for entry in entries:
            if _is_string(entry):
                nodes.append(make_node_string(entry))
            elif isinstance(entry, yaml.MappingNode) and entry.value:
                if len(entry.value) > 1:
                    raise PipelineParseError(
                        "Each entry should only contain a single node.",
                        _key_range(entry.value[1]),
                    )
                key_node, value_node = entry.value[0]
                if _is_string(key_node):
                    nodes.append(make_node_map(key_node, value_node))
                else:
                    nodes.append(make_non_node(key_node))
            else:
                nodes.append(make_non_node(entry))

        return Pipeline(nodes=tuple(nodes))

    def parse_node_def_map(self, document: TextDocument, omit_line: int = -1) -> Dict[int, NodeEntry]:
        """Map each zero-based line to the node entry defined on it.

        Only NodeString and NodeMap entries are included, keyed by the line
        their node definition starts on.
        """
        node_def_map: Dict[int, NodeEntry] = {}
        for entry in self.parse(document, omit_line):
            if isinstance(entry, (NodeString, NodeMap)):
                line = document.position_at(entry.reference.range.start).line
                node_def_map[line] = entry
        return node_def_map

    def _compose(self, text: str) -> Any:
        try:
            return yaml.compose(text, Loader=yaml.SafeLoader)
        except yaml.MarkedYAMLError as exc:
            mark = exc.problem_mark or exc.context_mark
            message = exc.problem or exc.context or str(exc)
            if mark is None:
                raise PipelineParseError(message) from exc
            raise PipelineParseError(message, Range(mark.index, mark.index + 1)) from exc
        except yaml.YAMLError as exc:
            # Reader errors (e.g. unacceptable characters) only carry a position
            position = getattr(exc, "position", None)
            message = getattr(exc, "reason", None) or str(exc)
            if position is None:
                raise PipelineParseError(message) from exc
            raise PipelineParseError(message, Range(position, position + 1)) from exc

    def _get_pipeline_entries(self, root: Any) -> List[Any]:
        """Return the YAML nodes found under the top-level ``nodes`` key."""
        if (
            not isinstance(root, yaml.MappingNode)
            or not root.value
            or not isinstance(root.value[0][0], yaml.ScalarNode)
            or root.value[0][0].value != NODES_KEY
        ):
            raise PipelineParseError("Top level 'nodes' key not found")

        if len(root.value) > 1:
            raise PipelineParseError(
                "Pipeline should only contain a single top level 'nodes' key.",
                _key_range(root.value[1]),
            )

        node_section = root.value[0]
        node_list = node_section[1]
        if not isinstance(node_list, yaml.SequenceNode) or not node_list.value:
            raise PipelineParseError("Pipeline does not contain a list of nodes.", _key_range(node_section))
        return node_list.value


def make_node_string(node: yaml.ScalarNode) -> NodeString:
    return NodeString(reference=ParsedItem(value=node.value, range=Range.from_node(node)))


def make_node_map(key_node: yaml.ScalarNode, value_node: Any) -> NodeMap:
    """Parse a ``<node definition>: {<config>: <value>, ...}`` entry.

    Only the first level config keys are kept, their values are not checked.

    Raises:
        PipelineParseError: A config key is neither a scalar nor a sequence.
    """
    configs: List[ParsedItem] = []
    if isinstance(value_node, yaml.MappingNode):
        for config_key, _ in value_node.value:
            if not isinstance(config_key, (yaml.ScalarNode, yaml.SequenceNode)):
                raise PipelineParseError("Error parsing node entry.")
            configs.append(ParsedItem(value=_scalar_value(config_key), range=Range.from_node(config_key)))
    reference = ParsedItem(value=key_node.value, range=Range.from_node(key_node))
    return NodeMap(reference=reference, configs=tuple(configs))


def make_non_node(node: Any) -> NonNode:
    return NonNode(item=ParsedItem(value=_scalar_value(node), range=Range.from_node(node)))


def _is_string(node: Any) -> bool:
    return isinstance(node, yaml.ScalarNode) and node.tag == STR_TAG


def _key_range(pair: Any) -> Range:
    """Range of the key of a (key, value) node pair."""
    key_node = pair[0]
    if key_node is None:
        return Range.default()
    return Range.from_node(key_node)


def _scalar_value(node: Any) -> Any:
    """Python value of a scalar node, None for collections."""
    if not isinstance(node, yaml.ScalarNode):
        return None
    try:
        return yaml.constructor.SafeConstructor().construct_object(node)
    except (yaml.constructor.ConstructorError, ValueError, TypeError, AttributeError):
        logger.debug(f"Could not construct scalar value {node.value!r}")
        return node.value
