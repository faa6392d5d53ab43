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

"""Builds the node schema catalog from PeekingDuck style configs directories.

A configs directory is laid out as ``<configs>/<node_type>/<node_name>.yml``.
Each node definition file is a flat YAML mapping where ``input`` and ``output``
list the data types consumed and produced by the node, and every other key is
a config option the pipeline may override.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import yaml

from ..exceptions import SchemaError
from ..models.schema import NodeConfig, SchemaCatalog, SchemaNamespace
from ..models.settings import LanguageSettings

logger = logging.getLogger(__name__)

CONFIG_EXT = ".yml"
IO_KEYS = ("input", "output")

IgnoreConfigs = Mapping[str, Mapping[str, Iterable[str]]]

# Configs of built-in nodes which are not meant to be changed by users
BUILT_IN_IGNORE_CONFIGS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "dabble": {
        "tracking": ("optional_inputs",),
    },
    "model": {
        "csrnet": ("weights",),
        "efficientdet": ("image_size", "model_nodes", "num_classes", "weights"),
        "fairmot": ("model_type", "optional_inputs", "weights"),
        "hrnet": ("model_nodes", "model_type", "resolution", "weights"),
        "jde": ("model_type", "optional_inputs", "weights"),
        "movenet": ("weights",),
        "mtcnn": ("model_nodes", "model_type", "weights"),
        "posenet": ("model_nodes", "weights"),
        "yolo": ("input_size", "model_nodes", "num_classes", "weights"),
        "yolo_face": ("input_size", "weights"),
        "yolo_license_plate": ("input_size", "weights"),
        "yolox": ("model_size", "num_classes", "weights"),
    },
}


class SchemaBuilder:
    """Parses node definition files into SchemaNamespace objects."""

    def __init__(self, built_in_ignore_configs: Optional[IgnoreConfigs] = None):
        self.built_in_ignore_configs = (
            built_in_ignore_configs if built_in_ignore_configs is not None else BUILT_IN_IGNORE_CONFIGS
        )

    def build_catalog(self, settings: LanguageSettings) -> SchemaCatalog:
        """Build a new catalog from the configs directories in ``settings``.

        A namespace whose ``parse_schema`` flag is off is left empty.
        """
        catalog = SchemaCatalog()
        if settings.parse_schema.built_in:
            catalog.built_in = self.build_namespace(
                settings.config_dir.built_in, self.built_in_ignore_configs, with_folder_token=False
            )
            logger.info(
                f"Registered {len(catalog.built_in.schema)} built-in node type(s) "
                f"from {settings.config_dir.built_in}"
            )
        if settings.parse_schema.custom:
            catalog.custom = self.build_namespace(
                settings.config_dir.custom, {}, with_folder_token=True
            )
            logger.info(
                f"Registered {len(catalog.custom.schema)} custom node type(s) "
                f"in folder '{catalog.custom.name}' from {settings.config_dir.custom}"
            )
        return catalog

    def build_namespace(
        self,
        config_dir: str,
        ignore_configs: IgnoreConfigs,
        with_folder_token: bool = False,
    ) -> SchemaNamespace:
        """Parse every node definition file under ``config_dir``.

        Args:
            config_dir: Path to the configs directory, i.e.,
                ``</path/to/peekingduck/configs>`` or
                ``</path/to/src/custom_nodes/configs>``.
            ignore_configs: Config keys to leave out, per node type and name.
            with_folder_token: Record the name of the directory containing
                ``config_dir`` as the namespace's folder name.

        Returns:
            The parsed namespace, or an empty one if the directory or any of
            its node definition files cannot be read.
        """
        if not config_dir:
            logger.debug("No configs directory given, node schema left empty")
            return SchemaNamespace()

        try:
            schema = self._parse_config_dir(Path(config_dir), ignore_configs)
        except SchemaError as exc:
            logger.warning(f"Failed to build node schema from {config_dir!r}: {exc}")
            return SchemaNamespace()

        name = Path(config_dir).parent.name if with_folder_token else ""
        return SchemaNamespace(name=name, schema=schema)

    def _parse_config_dir(
        self, config_dir: Path, ignore_configs: IgnoreConfigs
    ) -> Dict[str, Dict[str, NodeConfig]]:
        if not config_dir.is_dir():
            raise SchemaError(f"Configs directory not found: {config_dir}")

        logger.debug(f"Iterating through {config_dir}")
        schema: Dict[str, Dict[str, NodeConfig]] = {}
        try:
            node_type_dirs = sorted(path for path in config_dir.iterdir() if path.is_dir())
        except OSError as exc:
            raise SchemaError(f"Failed to read configs directory {config_dir}: {exc}")

        for node_type_dir in node_type_dirs:
            node_type = node_type_dir.name
            try:
                config_files = sorted(
                    path for path in node_type_dir.iterdir()
                    if path.suffix == CONFIG_EXT and path.is_file()
                )
            except OSError as exc:
                raise SchemaError(f"Failed to read node type directory {node_type_dir}: {exc}")

            nodes: Dict[str, NodeConfig] = {}
            for config_file in config_files:
                node_name = config_file.stem
                ignore_keys = ignore_configs.get(node_type, {}).get(node_name, ())
                nodes[node_name] = self.parse_node_file(config_file, ignore_keys)
            if nodes:
                schema[node_type] = nodes
        return schema

    def parse_node_file(self, file_path: Path, ignore_keys: Iterable[str] = ()) -> NodeConfig:
        """Parse a single ``<node_name>.yml`` node definition file.

        Raises:
            SchemaError: If the file cannot be read or is not a YAML mapping.
        """
        try:
            content = file_path.read_text(encoding="utf-8")
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise SchemaError(f"Failed to parse node definition {file_path}: {exc}")
        except (OSError, UnicodeDecodeError) as exc:
            raise SchemaError(f"Failed to read node definition {file_path}: {exc}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise SchemaError(f"Node definition {file_path} is not a key-value map")
        return make_node_config(data, ignore_keys)


def make_node_config(data: Mapping[Any, Any], ignore_keys: Iterable[str] = ()) -> NodeConfig:
    """Split a node definition into its input/output types and config keys."""
    ignored = set(IO_KEYS) | set(ignore_keys)
    configs = tuple(str(key) for key in data.keys() if str(key) not in ignored)
    return NodeConfig(
        input=_as_type_list(data.get("input")),
        output=_as_type_list(data.get("output")),
        configs=configs,
    )


def _as_type_list(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return (str(value),)
