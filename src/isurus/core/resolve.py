"""Position resolution: map abstract offsets onto concrete syntax nodes.

All three location categories share one pruning traversal. Offsets of one file and category are
sorted once; at every node two binary searches narrow them to the sub-range ``[i, j)`` that lies
inside ``[node.start, node.end)``. An empty sub-range means no descendant can match, so the
subtree is skipped, and children only ever see the candidates of their parent. The cost is
``O(P log L)`` for ``P`` nodes and ``L`` offsets.
"""

from __future__ import annotations

import enum
import logging
from bisect import bisect_left
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from isurus.core.syntax import NodeKind, ProjectSnapshot, SyntaxNode

logger = logging.getLogger(__name__)


class Category(enum.Enum):
    CALL_SITE = "call_site"
    GENERIC_EXPRESSION = "generic_expression"
    FUNCTION_BOUNDARY = "function_boundary"


@dataclass(frozen=True)
class Location:
    offset: int
    category: Category


# A matcher inspects one node against its in-range candidates ``offsets[i:j]`` and records
# hits into ``found``. Candidates are sorted; all of them satisfy start <= offset < end.
Matcher = Callable[[SyntaxNode, list[int], int, int, dict[int, SyntaxNode]], None]


def _match_call_site(node: SyntaxNode, offsets: list[int], i: int, j: int, found: dict[int, SyntaxNode]) -> None:
    if node.kind is NodeKind.CALL:
        target = node
    elif node.kind in (NodeKind.GO, NodeKind.DEFER) and node.call is not None:
        target = node.call
    else:
        return
    marker = node.marker
    if marker is None:
        return
    # Only the invocation marker identifies the call; offsets inside its arguments do not.
    idx = bisect_left(offsets, marker, i, j)
    if idx < j and offsets[idx] == marker:
        found[marker] = target


def _match_function_boundary(
    node: SyntaxNode, offsets: list[int], i: int, j: int, found: dict[int, SyntaxNode]
) -> None:
    if node.kind not in (NodeKind.FUNC_DECL, NodeKind.FUNC_LIT):
        return
    for offset in offsets[i:j]:
        found[offset] = node


def _match_generic_expression(
    node: SyntaxNode, offsets: list[int], i: int, j: int, found: dict[int, SyntaxNode]
) -> None:
    if not node.is_expression:
        return
    for offset in offsets[i:j]:
        found[offset] = node


MATCHERS: dict[Category, Matcher] = {
    Category.CALL_SITE: _match_call_site,
    Category.GENERIC_EXPRESSION: _match_generic_expression,
    Category.FUNCTION_BOUNDARY: _match_function_boundary,
}


def detect(root: SyntaxNode, offsets: Iterable[int], matcher: Matcher, *, prune: bool = True) -> dict[int, SyntaxNode]:
    """Walk ``root`` and return the node each offset resolves to under ``matcher``.

    Nodes are visited parent before child, so a deeper match overwrites a shallower one and the
    innermost matching node wins. With ``prune=False`` every subtree is visited against the full
    candidate range; results are identical, only slower.
    """
    ordered = sorted(set(offsets))
    found: dict[int, SyntaxNode] = {}
    if not ordered:
        return found

    def visit(node: SyntaxNode, lo: int, hi: int) -> None:
        i = bisect_left(ordered, node.start, lo, hi)
        j = bisect_left(ordered, node.end, i, hi)
        if i < j:
            matcher(node, ordered, i, j, found)
        elif prune:
            return
        if prune:
            lo, hi = i, j
        for child in node.children:
            visit(child, lo, hi)

    visit(root, 0, len(ordered))
    return found


def resolve(
    snapshot: ProjectSnapshot, worklist: Iterable[Location], *, prune: bool = True
) -> dict[Location, SyntaxNode]:
    """Resolve ``worklist`` against ``snapshot``.

    Locations are partitioned by owning file and category and each partition is resolved
    independently. Locations absent from the result are unresolved: they fall in no file, in a
    file without a tree, or inside no node of their category.
    """
    partitions: dict[tuple[str, Category], set[int]] = defaultdict(set)
    locations = list(worklist)
    for location in locations:
        record = snapshot.table.file_for(location.offset)
        if record is None or record.path not in snapshot.trees:
            continue
        partitions[(record.path, location.category)].add(location.offset)

    by_partition: dict[tuple[str, Category], dict[int, SyntaxNode]] = {}
    for (path, category), offsets in partitions.items():
        tree = snapshot.trees[path]
        by_partition[(path, category)] = detect(tree.root, offsets, MATCHERS[category], prune=prune)

    resolved: dict[Location, SyntaxNode] = {}
    for location in locations:
        record = snapshot.table.file_for(location.offset)
        if record is None:
            continue
        node = by_partition.get((record.path, location.category), {}).get(location.offset)
        if node is not None:
            resolved[location] = node

    unresolved = len(set(locations)) - len(resolved)
    logger.debug("Resolved %d location(s), %d unresolved", len(resolved), unresolved)
    return resolved
