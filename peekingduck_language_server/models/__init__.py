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

"""Data models of the PeekingDuck pipeline language server."""

from .types import NodeEntry, NodeMap, NodeString, NonNode, ParsedItem, Pipeline, Range
from .schema import BUILT_IN, CUSTOM, NodeConfig, SchemaCatalog, SchemaNamespace
from .settings import LanguageSettings, NamespaceFlags, NamespacePaths

__all__ = [
    'BUILT_IN',
    'CUSTOM',
    'LanguageSettings',
    'NamespaceFlags',
    'NamespacePaths',
    'NodeConfig',
    'NodeEntry',
    'NodeMap',
    'NodeString',
    'NonNode',
    'ParsedItem',
    'Pipeline',
    'Range',
    'SchemaCatalog',
    'SchemaNamespace',
]
