"""
Weight-bounded, syntax-aligned splitting of source buffers.

The splitter parses a buffer with tree-sitter and walks the syntax tree top
down. A node whose text fits the weight budget becomes one chunk; a node that
does not is split into its children, whose chunks are then merged back
greedily while the merged span still fits. The weight of a span is computed by
a sizer callable, word count by default.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from tree_sitter import Language, Node, Parser  # type: ignore[import]

Sizer = Callable[[str], int]


class SplitError(Exception):
    """Raised when a buffer cannot be parsed into a syntax tree."""


def word_count(text: str) -> int:
    """Number of whitespace separated words in ``text``."""
    return len(text.split())


@dataclass(frozen=True)
class SplitChunk:
    """A contiguous byte span of the buffer together with its row span.

    ``end_row`` is exclusive: slicing the buffer's lines with
    ``lines[start_row:end_row]`` covers every line the span touches.
    """

    start_byte: int
    end_byte: int
    start_row: int
    end_row: int
    size: int


def _exclusive_end_row(node: Node) -> int:
    row, column = node.end_point
    return row + 1 if column > 0 else row


class Splitter:
    """Splits buffers of one tree-sitter language into weighted chunks."""

    DEFAULT_MAX_SIZE = 512

    def __init__(
        self,
        language: Language,
        sizer: Sizer = word_count,
        max_size: int = DEFAULT_MAX_SIZE,
    ) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.language = language
        self.sizer = sizer
        self.max_size = max_size

    def split(self, code: bytes) -> List[SplitChunk]:
        # Parsers are stateful; one per call.
        parser = Parser(self.language)
        tree = parser.parse(code)
        if tree is None:
            raise SplitError("tree-sitter returned no syntax tree")
        return self._split_node(tree.root_node, code)

    def _size(self, code: bytes, start: int, end: int) -> int:
        return self.sizer(code[start:end].decode("utf-8", errors="replace"))

    def _split_node(self, node: Node, code: bytes) -> List[SplitChunk]:
        size = self._size(code, node.start_byte, node.end_byte)
        if size == 0:
            return []
        if size <= self.max_size or not node.children:
            # Oversized leaves are kept whole rather than dropped.
            return [
                SplitChunk(
                    start_byte=node.start_byte,
                    end_byte=node.end_byte,
                    start_row=node.start_point[0],
                    end_row=_exclusive_end_row(node),
                    size=size,
                )
            ]

        pieces: List[SplitChunk] = []
        for child in node.children:
            pieces.extend(self._split_node(child, code))
        return self._merge(pieces, code)

    def _merge(self, pieces: List[SplitChunk], code: bytes) -> List[SplitChunk]:
        merged: List[SplitChunk] = []
        current: Optional[SplitChunk] = None
        for piece in pieces:
            if current is None:
                current = piece
                continue
            size = self._size(code, current.start_byte, piece.end_byte)
            if size <= self.max_size:
                current = SplitChunk(
                    start_byte=current.start_byte,
                    end_byte=piece.end_byte,
                    start_row=current.start_row,
                    end_row=max(current.end_row, piece.end_row),
                    size=size,
                )
            else:
                merged.append(current)
                current = piece
        if current is not None:
            merged.append(current)
        return merged
