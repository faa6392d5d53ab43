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

"""Custom exceptions for the PeekingDuck pipeline language server."""

from typing import Optional

from .models.types import Range


class LanguageServerError(Exception):
    """Base exception for language server related errors."""
    pass


class PipelineParseError(LanguageServerError):
    """Exception raised when a pipeline document violates the pipeline grammar.

    The error is positioned: ``range`` holds the character offsets of the
    offending text so it can be reported as a single diagnostic.
    """

    def __init__(self, message: str, range: Optional[Range] = None):
        super().__init__(message)
        self.message = message
        self.range = range if range is not None else Range.default()

    def __str__(self) -> str:
        return self.message


class SchemaError(LanguageServerError):
    """Exception raised for unreadable or malformed node definition files."""
    pass
