"""Immutable syntax model shared by the parser adapter, the resolver and analyzers.

Every node carries *global* offsets assigned by a :class:`PositionTable`, so nodes from
different files of one snapshot can be compared on a single linear order.
"""

from __future__ import annotations

import enum
from bisect import bisect_right
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Tree


class NodeKind(enum.Enum):
    CALL = "call"
    GO = "go"
    DEFER = "defer"
    FUNC_DECL = "func_decl"
    FUNC_LIT = "func_lit"
    EXPR = "expr"
    OTHER = "other"


_EXPRESSION_KINDS = frozenset({NodeKind.CALL, NodeKind.FUNC_LIT, NodeKind.EXPR})


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    kind: NodeKind
    type: str
    start: int
    end: int
    marker: int | None = None
    call: SyntaxNode | None = None
    children: tuple[SyntaxNode, ...] = ()

    @property
    def is_expression(self) -> bool:
        return self.kind in _EXPRESSION_KINDS

    def walk(self) -> Iterator[SyntaxNode]:
        """Yield this node and its descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class FilePosition:
    path: str
    line: int
    column: int

    @property
    def is_valid(self) -> bool:
        return self.line > 0


NO_POSITION = FilePosition(path="", line=0, column=0)


@dataclass(frozen=True)
class FileRecord:
    path: str
    base: int
    size: int
    line_starts: tuple[int, ...]

    def contains(self, offset: int) -> bool:
        return self.base <= offset <= self.base + self.size


def _line_starts(source: bytes) -> tuple[int, ...]:
    starts = [0]
    idx = source.find(b"\n")
    while idx != -1:
        starts.append(idx + 1)
        idx = source.find(b"\n", idx + 1)
    return tuple(starts)


class PositionTable:
    """Maps global offsets back to (path, line, column) across all files of a snapshot.

    Bases start at 1 so that 0 never denotes a real position. A file of ``size`` bytes owns
    ``[base, base + size]``; the end-of-file offset is addressable and the next file starts
    one past it, so offsets are never shared between files.
    """

    def __init__(self) -> None:
        self._files: list[FileRecord] = []
        self._bases: list[int] = []
        self._next_base = 1

    def add_file(self, path: str, source: bytes) -> FileRecord:
        record = FileRecord(
            path=path,
            base=self._next_base,
            size=len(source),
            line_starts=_line_starts(source),
        )
        self._files.append(record)
        self._bases.append(record.base)
        self._next_base = record.base + record.size + 1
        return record

    def file_for(self, offset: int) -> FileRecord | None:
        idx = bisect_right(self._bases, offset) - 1
        if idx < 0:
            return None
        record = self._files[idx]
        if not record.contains(offset):
            return None
        return record

    def position(self, offset: int) -> FilePosition:
        record = self.file_for(offset)
        if record is None:
            return NO_POSITION
        local = offset - record.base
        line_idx = bisect_right(record.line_starts, local) - 1
        return FilePosition(
            path=record.path,
            line=line_idx + 1,
            column=local - record.line_starts[line_idx] + 1,
        )


@dataclass(frozen=True)
class SyntaxTree:
    path: str
    base: int
    source: bytes
    root: SyntaxNode
    raw: Tree | None = field(default=None, repr=False, compare=False)

    def offset_of(self, byte_offset: int) -> int:
        """Translate a file-local byte offset into this snapshot's global offset space."""
        return self.base + byte_offset


@dataclass(frozen=True)
class ProjectSnapshot:
    root_path: str
    trees: Mapping[str, SyntaxTree]
    table: PositionTable
