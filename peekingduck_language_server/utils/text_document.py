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

"""Text document snapshot with character offset <-> line/character conversion.

Offsets and server positions count Python string characters (code points).
Positions exchanged with the client are in the client's position encoding,
UTF-16 code units unless negotiated otherwise, and are converted through the
pygls ``PositionCodec`` of the workspace document.
"""

import bisect
from typing import List, Optional

from lsprotocol import types as lsp
from pygls.workspace import PositionCodec
from pygls.workspace import TextDocument as WorkspaceDocument

from ..models.types import Range


class TextDocument:
    """Immutable snapshot of a document's text.

    Line breaks can be ``\\n``, ``\\r\\n`` or ``\\r``; a line's offset range
    excludes its line break.
    """

    def __init__(
        self,
        uri: str,
        text: str,
        version: Optional[int] = None,
        position_codec: Optional[PositionCodec] = None,
    ):
        self.uri = uri
        self.text = text
        self.version = version
        self.position_codec = position_codec if position_codec is not None else PositionCodec()
        self._line_offsets = self._compute_line_offsets(text)

    @classmethod
    def from_workspace_document(cls, document: WorkspaceDocument) -> "TextDocument":
        """Snapshot the current text of a pygls workspace document."""
        return cls(document.uri, document.source, document.version, document.position_codec)

    @staticmethod
    def _compute_line_offsets(text: str) -> List[int]:
        offsets = [0]
        i = 0
        length = len(text)
        while i < length:
            ch = text[i]
            if ch == "\r":
                if i + 1 < length and text[i + 1] == "\n":
                    i += 1
                offsets.append(i + 1)
            elif ch == "\n":
                offsets.append(i + 1)
            i += 1
        return offsets

    @property
    def line_count(self) -> int:
        return len(self._line_offsets)

    def position_at(self, offset: int) -> lsp.Position:
        """Convert a character offset to a server (code point) position."""
        offset = max(min(offset, len(self.text)), 0)
        line = bisect.bisect_right(self._line_offsets, offset) - 1
        character = min(offset, self._line_end(line)) - self._line_offsets[line]
        return lsp.Position(line=line, character=character)

    def to_client_position(self, position: lsp.Position) -> lsp.Position:
        """Convert a server position to the client's position encoding."""
        prefix = self.line_text(position.line)[:position.character]
        return lsp.Position(line=position.line, character=self.position_codec.client_num_units(prefix))

    def to_server_position(self, position: lsp.Position) -> lsp.Position:
        """Convert a client position to a server position.

        Out of range positions are clamped to the document or line bounds.
        """
        if position.line < 0:
            return lsp.Position(line=0, character=0)
        if position.line >= self.line_count:
            last = self.line_count - 1
            return lsp.Position(line=last, character=len(self.line_text(last)))

        units = 0
        character = 0
        for ch in self.line_text(position.line):
            units += self.position_codec.client_num_units(ch)
            if units > position.character:
                break
            character += 1
        return lsp.Position(line=position.line, character=character)

    def to_lsp_range(self, range: Range) -> lsp.Range:
        """Convert an offset range to a range in the client's position encoding."""
        return lsp.Range(
            start=self.to_client_position(self.position_at(range.start)),
            end=self.to_client_position(self.position_at(range.end)),
        )

    def line_text(self, line: int) -> str:
        """Return the text of ``line`` without its line break."""
        if line < 0 or line >= len(self._line_offsets):
            return ""
        return self.text[self._line_offsets[line]:self._line_end(line)]

    @property
    def lines(self) -> List[str]:
        return [self.line_text(line) for line in range(self.line_count)]

    def _line_end(self, line: int) -> int:
        """Offset of the end of ``line``, excluding the line break."""
        if line + 1 < len(self._line_offsets):
            end = self._line_offsets[line + 1]
            if end > 0 and self.text[end - 1] == "\n":
                end -= 1
                if end > 0 and self.text[end - 1] == "\r":
                    end -= 1
            elif end > 0 and self.text[end - 1] == "\r":
                end -= 1
            return end
        return len(self.text)

    def omit_line(self, line: int) -> "TextDocument":
        """Return a copy with ``line`` replaced by spaces.

        The line break is kept, so the total length and every offset outside
        the blanked line stay the same.
        """
        if line < 0 or line >= len(self._line_offsets):
            return self
        start = self._line_offsets[line]
        end = self._line_end(line)
        text = self.text[:start] + " " * (end - start) + self.text[end:]
        return TextDocument(self.uri, text, self.version, self.position_codec)
