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

"""Language settings consumed by the language service."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class NamespaceFlags:
    """A boolean flag for each schema namespace."""

    built_in: bool = False
    custom: bool = False

    def any(self) -> bool:
        return self.built_in or self.custom


@dataclass
class NamespacePaths:
    """Paths to the built-in and custom node configs directories."""

    built_in: str = ""
    custom: str = ""


@dataclass
class LanguageSettings:
    """Everything the language service needs to know from the client.

    Attributes:
        complete: Whether to provide auto-completion per namespace.
        config_dir: Paths to ``</path/to/peekingduck/configs>`` and
            ``</path/to/src/custom_nodes/configs>``.
        parse_schema: Whether to build the schema of each namespace.
        validate: Whether to validate node definitions per namespace.
        max_problems: Maximum number of problems reported per document.
    """

    complete: NamespaceFlags = field(default_factory=NamespaceFlags)
    config_dir: NamespacePaths = field(default_factory=NamespacePaths)
    parse_schema: NamespaceFlags = field(default_factory=NamespaceFlags)
    validate: NamespaceFlags = field(default_factory=NamespaceFlags)
    max_problems: int = 100

    @classmethod
    def from_config_dirs(
        cls, built_in_dir: str, custom_dir: str, max_problems: int = 100
    ) -> "LanguageSettings":
        """Enable every feature of a namespace whose config directory is set."""
        built_in = bool(built_in_dir)
        custom = bool(custom_dir)
        return cls(
            complete=NamespaceFlags(built_in, custom),
            config_dir=NamespacePaths(built_in_dir, custom_dir),
            parse_schema=NamespaceFlags(built_in, custom),
            validate=NamespaceFlags(built_in, custom),
            max_problems=max_problems,
        )
