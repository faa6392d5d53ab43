"""Tests for the pipeline parser."""

import pytest

from peekingduck_language_server.exceptions import PipelineParseError
from peekingduck_language_server.models.types import NodeMap, NodeString, NonNode, Range
from peekingduck_language_server.parsers.pipeline_parser import PipelineParser
from peekingduck_language_server.utils.text_document import TextDocument


def parse(text, omit_line=-1):
    return PipelineParser().parse(TextDocument("file:///pipeline_config.yml", text), omit_line)


def range_of(text, value, start=0):
    index = text.index(value, start)
    return Range(index, index + len(value))


def test_parse_classifies_entries_in_order(read_pipeline):
    text = read_pipeline("valid_pipeline.yml")
    pipeline = parse(text)

    assert [type(entry) for entry in pipeline] == [NodeString, NodeMap, NodeString, NodeMap, NodeMap, NodeString]
    assert [entry.reference.value for entry in pipeline] == [
        "model.posenet",
        "model.yolo",
        "dabble.bbox_count",
        "dabble.fps",
        "custom_nodes.dabble.my_counter",
        "custom_nodes.model.my_model",
    ]


def test_parse_records_reference_and_config_ranges():
    text = "nodes:\n  - input.visual\n  - model.yolo:\n      iou_threshold: 0.5\n      detect: [0]\n"
    pipeline = parse(text)

    node_string, node_map = pipeline.nodes
    assert node_string.reference.range == range_of(text, "input.visual")
    assert node_map.reference.range == range_of(text, "model.yolo")
    assert [config.value for config in node_map.configs] == ["iou_threshold", "detect"]
    assert node_map.configs[0].range == range_of(text, "iou_threshold")
    assert node_map.configs[1].range == range_of(text, "detect")


def test_parse_is_idempotent(read_pipeline):
    text = read_pipeline("valid_pipeline.yml")
    assert parse(text) == parse(text)


def test_node_map_without_mapping_value_has_no_configs():
    pipeline = parse("nodes:\n  - model.yolo:\n  - model.posenet: 3\n")

    assert all(isinstance(entry, NodeMap) for entry in pipeline)
    assert [entry.configs for entry in pipeline] == [(), ()]


def test_non_node_entries():
    text = "nodes:\n  - 42\n  - true\n  - [a, b]\n  - 1: {x: 1}\n  - {}\n"
    pipeline = parse(text)

    assert all(isinstance(entry, NonNode) for entry in pipeline)
    values = [entry.item.value for entry in pipeline]
    assert values == [42, True, None, 1, None]
    assert pipeline.nodes[0].item.range == range_of(text, "42")
    assert pipeline.nodes[2].item.range == range_of(text, "[a, b]")
    assert pipeline.nodes[3].item.range == range_of(text, "1", text.index("- 1"))


def test_entries_with_unconstructable_tags():
    text = "nodes:\n  - !!int abc\n  - !!timestamp nope\n  - model.yolo:\n      !!float x: 1\n"
    pipeline = parse(text)

    assert [type(entry) for entry in pipeline] == [NonNode, NonNode, NodeMap]
    assert [entry.item.value for entry in pipeline.nodes[:2]] == ["abc", "nope"]
    assert pipeline.nodes[1].item.range == range_of(text, "!!timestamp nope")
    assert [config.value for config in pipeline.nodes[2].configs] == ["x"]


@pytest.mark.parametrize("text", ["", "foo:\n  - model.yolo\n", "- model.yolo\n", "42\n"])
def test_missing_nodes_key(text):
    with pytest.raises(PipelineParseError) as exc_info:
        parse(text)

    assert exc_info.value.message == "Top level 'nodes' key not found"
    assert exc_info.value.range == Range(0, 1)


def test_multiple_top_level_keys():
    text = "nodes:\n  - model.yolo\nother: 1\n"
    with pytest.raises(PipelineParseError) as exc_info:
        parse(text)

    assert exc_info.value.message == "Pipeline should only contain a single top level 'nodes' key."
    assert exc_info.value.range == range_of(text, "other")


@pytest.mark.parametrize("text", ["nodes:\n", "nodes: []\n", "nodes: model.yolo\n", "nodes:\n  model: yolo\n"])
def test_nodes_is_not_a_list(text):
    with pytest.raises(PipelineParseError) as exc_info:
        parse(text)

    assert exc_info.value.message == "Pipeline does not contain a list of nodes."
    assert exc_info.value.range == Range(0, 5)


def test_entry_with_multiple_nodes():
    text = "nodes:\n  - model.yolo:\n      detect: [0]\n    model.posenet:\n      score_threshold: 0.4\n"
    with pytest.raises(PipelineParseError) as exc_info:
        parse(text)

    assert exc_info.value.message == "Each entry should only contain a single node."
    assert exc_info.value.range == range_of(text, "model.posenet")


def test_config_key_which_is_a_mapping():
    text = "nodes:\n  - model.yolo:\n      ? {x: 1}\n      : 2\n"
    with pytest.raises(PipelineParseError) as exc_info:
        parse(text)

    assert exc_info.value.message == "Error parsing node entry."
    assert exc_info.value.range == Range(0, 1)


def test_invalid_yaml_is_reported_at_problem_mark():
    text = "nodes:\n  - model.yolo:\n      detect: [0\n"
    with pytest.raises(PipelineParseError) as exc_info:
        parse(text)

    assert exc_info.value.message
    assert len(exc_info.value.range) == 1
    assert 0 <= exc_info.value.range.start <= len(text)


def test_omit_line_skips_line_being_edited():
    text = "nodes:\n  - model.yolo:\n      iou_threshold: 0.5\n      scor\n"
    with pytest.raises(PipelineParseError):
        parse(text)

    pipeline = parse(text, omit_line=3)
    (entry,) = pipeline.nodes
    assert [config.value for config in entry.configs] == ["iou_threshold"]
    assert entry.reference.range == range_of(text, "model.yolo")


def test_parse_node_def_map_is_keyed_by_line():
    text = "nodes:\n  - input.visual\n  - 3\n  - model.yolo:\n      detect: [0]\n  - dabble.fps\n"
    document = TextDocument("file:///pipeline_config.yml", text)

    node_def_map = PipelineParser().parse_node_def_map(document)

    assert sorted(node_def_map) == [1, 3, 5]
    assert isinstance(node_def_map[3], NodeMap)
    assert node_def_map[5].reference.value == "dabble.fps"
