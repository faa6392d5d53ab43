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

"""Holds the schema catalog shared by validation and completion."""

import logging
from typing import Optional

from ..models.schema import SchemaCatalog, SchemaNamespace
from ..models.settings import LanguageSettings
from ..parsers.schema_builder import SchemaBuilder

logger = logging.getLogger(__name__)


class SchemaService:
    """Manages the built-in and custom node schemas."""

    def __init__(self, builder: Optional[SchemaBuilder] = None):
        self.builder = builder if builder is not None else SchemaBuilder()
        self.catalog = SchemaCatalog()

    @property
    def built_in(self) -> SchemaNamespace:
        return self.catalog.built_in

    @property
    def custom(self) -> SchemaNamespace:
        return self.catalog.custom

    def clear_schemas(self):
        """Reset the parsed node configs and custom folder name."""
        self.catalog = SchemaCatalog()

    def register_schemas(self, settings: LanguageSettings):
        """Rebuild the node schemas enabled in ``settings``.

        The new catalog replaces the previous one as a whole.
        """
        self.catalog = self.builder.build_catalog(settings)
        logger.debug(
            f"Schema catalog rebuilt: built-in types={self.built_in.node_types()}, "
            f"custom types={self.custom.node_types()}"
        )
