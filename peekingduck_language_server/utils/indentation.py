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

"""Detect the indentation used by a document."""

from dataclasses import dataclass
from typing import Iterable, List

# Largest indentation step considered a tab size
MAX_TAB_SIZE_GUESS = 8
# Order in which tab sizes win ties
_TAB_SIZE_PREFERENCE = (2, 4, 6, 8, 3, 5, 7)


@dataclass(frozen=True)
class Indentation:
    insert_spaces: bool
    tab_size: int

    @property
    def unit(self) -> str:
        """Text of a single indentation level."""
        return " " * self.tab_size if self.insert_spaces else "\t"


def _leading_whitespace(line: str) -> str:
    return line[:len(line) - len(line.lstrip(" \t"))]


def guess_indentation(
    lines: Iterable[str], default_tab_size: int = 2, default_insert_spaces: bool = True
) -> Indentation:
    """Guess whether a document indents with spaces or tabs, and by how much.

    Counts the change in leading spaces between consecutive non-blank lines and
    picks the most frequent step. A step of 2 wins over 4 as long as it occurs
    at least half as often.

    Args:
        lines: Lines of the document, without line breaks.
        default_tab_size: Tab size used when nothing can be detected.
        default_insert_spaces: Indentation kind used when nothing can be detected.

    Returns:
        The detected Indentation.
    """
    tab_lines = 0
    space_lines = 0
    spaces_diff_count: List[int] = [0] * (MAX_TAB_SIZE_GUESS + 1)
    previous_spaces = 0

    for line in lines:
        if not line.strip():
            continue
        leading = _leading_whitespace(line)
        tabs = leading.count("\t")
        spaces = len(leading) - tabs
        if tabs > 0:
            tab_lines += 1
            continue
        if spaces > 1:
            space_lines += 1
        diff = abs(spaces - previous_spaces)
        if 0 < diff <= MAX_TAB_SIZE_GUESS:
            spaces_diff_count[diff] += 1
        previous_spaces = spaces

    insert_spaces = default_insert_spaces
    if tab_lines != space_lines:
        insert_spaces = tab_lines < space_lines

    tab_size = default_tab_size
    if insert_spaces:
        best_score = 0
        for candidate in _TAB_SIZE_PREFERENCE:
            if spaces_diff_count[candidate] > best_score:
                best_score = spaces_diff_count[candidate]
                tab_size = candidate
        if (
            tab_size == 4
            and spaces_diff_count[2] > 0
            and spaces_diff_count[2] >= spaces_diff_count[4] / 2
        ):
            tab_size = 2

    return Indentation(insert_spaces=insert_spaces, tab_size=tab_size)
