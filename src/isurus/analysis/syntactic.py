"""Syntactic stand-in for a whole-program analyzer.

It answers the same questions a type-checked call graph would (which functions exist, which
calls reach project functions, which calls issue SQL and whether they sit in a loop) using
tree-sitter queries and name matching only. Calls through interfaces, function values or
aliased imports are approximated by method name or missed.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import cast

from tree_sitter import Node, Query, QueryCursor
from tree_sitter_language_pack import SupportedLanguage, get_language

from isurus.core.findings import CallFinding, Findings, FunctionFinding, QueryFinding
from isurus.core.syntax import ProjectSnapshot, SyntaxTree
from isurus.models import QueryType

logger = logging.getLogger(__name__)

_FUNCTION_TYPES = frozenset({"function_declaration", "method_declaration", "func_literal"})
_STRING_TYPES = frozenset({"interpreted_string_literal", "raw_string_literal"})

# database/sql and sqlx entry points that take the statement text as an argument.
DB_METHODS = frozenset(
    {
        "Exec",
        "ExecContext",
        "Get",
        "GetContext",
        "MustExec",
        "MustExecContext",
        "NamedExec",
        "NamedExecContext",
        "NamedQuery",
        "NamedQueryContext",
        "Prepare",
        "PrepareContext",
        "Preparex",
        "PreparexContext",
        "Query",
        "QueryContext",
        "QueryRow",
        "QueryRowContext",
        "QueryRowx",
        "QueryRowxContext",
        "Queryx",
        "QueryxContext",
        "Select",
        "SelectContext",
    }
)

_SQL_KIND = re.compile(r"^\s*(insert|replace|update|delete|select|with)\b", re.IGNORECASE)
_IDENT = r"[`\"]?(\w+)[`\"]?"
_SQL_TABLE = {
    QueryType.INSERT: re.compile(rf"\binto\s+{_IDENT}", re.IGNORECASE),
    QueryType.UPDATE: re.compile(rf"\bupdate\s+(?:ignore\s+)?{_IDENT}", re.IGNORECASE),
    QueryType.DELETE: re.compile(rf"\bfrom\s+{_IDENT}", re.IGNORECASE),
    QueryType.SELECT: re.compile(rf"\bfrom\s+{_IDENT}", re.IGNORECASE),
}


@lru_cache(maxsize=None)
def _load_query(language: str, query_type: str) -> Query:
    queries_dir = Path(__file__).parent.parent / "queries"
    query_path = queries_dir / f"{language}_{query_type}.scm"
    if not query_path.exists():
        raise FileNotFoundError(f"Query file not found: {query_path}")
    query_text = query_path.read_text(encoding="utf-8")
    return Query(get_language(cast(SupportedLanguage, language)), query_text)


def classify_sql(sql: str) -> tuple[QueryType, str] | None:
    """Return the statement kind and target table of ``sql``, or ``None`` if it is not SQL."""
    head = _SQL_KIND.match(sql)
    if head is None:
        return None
    keyword = head.group(1).lower()
    if keyword == "replace":
        kind = QueryType.INSERT
    elif keyword == "with":
        kind = QueryType.SELECT
    else:
        kind = QueryType(keyword)
    # CTEs can front any statement; classify by the first DML keyword after them.
    if keyword == "with":
        for candidate in (QueryType.INSERT, QueryType.UPDATE, QueryType.DELETE):
            if re.search(rf"\b{candidate.value}\b", sql, re.IGNORECASE):
                kind = candidate
                break
    table = _SQL_TABLE[kind].search(sql)
    return kind, table.group(1) if table else ""


def _key(node: Node) -> tuple[int, int]:
    return node.start_byte, node.end_byte


def _text(tree: SyntaxTree, node: Node) -> str:
    return tree.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _string_value(tree: SyntaxTree, node: Node) -> str:
    text = _text(tree, node)
    if len(text) >= 2 and text[0] in "\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _enclosing_function(node: Node) -> Node | None:
    parent = node.parent
    while parent is not None:
        if parent.type in _FUNCTION_TYPES:
            return parent
        parent = parent.parent
    return None


def in_loop(node: Node, boundary: Node | None) -> bool:
    """Whether ``node`` is re-executed by a ``for`` statement below ``boundary``.

    The body, condition and post statement of a for loop repeat; its init statement and a
    range expression run once.
    """
    child, parent = node, node.parent
    while parent is not None and (boundary is None or _key(parent) != _key(boundary)):
        if parent.type == "for_statement":
            body = parent.child_by_field_name("body")
            if body is not None and _key(body) == _key(child):
                return True
        elif parent.type == "for_clause":
            for name in ("condition", "update"):
                clause = parent.child_by_field_name(name)
                if clause is not None and _key(clause) == _key(child):
                    return True
        child, parent = parent, parent.parent
    return False


def _receiver_type(tree: SyntaxTree, receiver: Node) -> tuple[str, bool]:
    for param in receiver.named_children:
        type_node = param.child_by_field_name("type")
        if type_node is None:
            continue
        pointer = type_node.type == "pointer_type"
        name = _text(tree, type_node).lstrip("*").strip()
        return name.split("[", 1)[0], pointer
    return "", False


@dataclass
class _Function:
    id: str
    name: str
    offset: int
    calls: list[CallFinding] = field(default_factory=list)
    queries: list[QueryFinding] = field(default_factory=list)
    literals: int = 0


@dataclass
class _FileScan:
    tree: SyntaxTree
    package_name: str
    package_path: str
    decls: list[tuple[Node, Node, Node | None]] = field(default_factory=list)
    literals: list[Node] = field(default_factory=list)
    calls: list[tuple[Node, Node, Node]] = field(default_factory=list)


class SyntacticAnalyzer:
    """Default :class:`~isurus.core.ports.analyzer.SemanticAnalyzer` for Go projects."""

    def __init__(self, language: str = "go") -> None:
        self._language = language

    def analyze(self, snapshot: ProjectSnapshot) -> Findings:
        scans = [self._scan(snapshot.trees[path]) for path in sorted(snapshot.trees)]

        functions: dict[tuple[str, tuple[int, int]], _Function] = {}
        package_functions: dict[str, dict[str, str]] = defaultdict(dict)
        package_paths: dict[str, set[str]] = defaultdict(set)
        methods: dict[str, list[str]] = defaultdict(list)

        for scan in scans:
            package_paths[scan.package_name].add(scan.package_path)
            for decl, name_node, receiver in scan.decls:
                name = _text(scan.tree, name_node)
                if receiver is None:
                    function_id = f"{scan.package_path}.{name}"
                    package_functions[scan.package_path][name] = function_id
                else:
                    type_name, pointer = _receiver_type(scan.tree, receiver)
                    star = "*" if pointer else ""
                    function_id = f"({star}{scan.package_path}.{type_name}).{name}"
                    methods[name].append(function_id)
                functions[(scan.tree.path, _key(decl))] = _Function(
                    id=function_id,
                    name=name,
                    offset=scan.tree.offset_of(name_node.start_byte),
                )

        for scan in scans:
            init: _Function | None = None
            for literal in sorted(scan.literals, key=lambda n: n.start_byte):
                parent_node = _enclosing_function(literal)
                if parent_node is not None:
                    parent = functions[(scan.tree.path, _key(parent_node))]
                else:
                    if init is None:
                        init = _Function(id=f"{scan.package_path}.init", name="init", offset=0)
                    parent = init
                parent.literals += 1
                function_id = f"{parent.id}${parent.literals}"
                functions[(scan.tree.path, _key(literal))] = _Function(
                    id=function_id,
                    name=function_id.rsplit(".", 1)[-1],
                    offset=scan.tree.offset_of(literal.start_byte),
                )

        for scan in scans:
            for call, callee, arguments in scan.calls:
                owner_node = _enclosing_function(call)
                if owner_node is None:
                    continue
                owner = functions[(scan.tree.path, _key(owner_node))]
                looped = in_loop(call, owner_node)
                offset = self._call_offset(scan.tree, call, arguments)
                for target in self._callees(scan, callee, package_functions, package_paths, methods):
                    owner.calls.append(CallFinding(function_id=target, offset=offset, in_loop=looped))
                query = self._query(scan.tree, callee, arguments, looped)
                if query is not None:
                    owner.queries.append(query)

        ordered = sorted(functions.items(), key=lambda item: (item[0][0], item[0][1]))
        result = tuple(
            FunctionFinding(
                id=fn.id,
                name=fn.name,
                offset=fn.offset,
                calls=tuple(fn.calls),
                queries=tuple(fn.queries),
            )
            for _, fn in ordered
        )
        logger.debug("Syntactic analysis found %d function(s)", len(result))
        return Findings(functions=result)

    def _scan(self, tree: SyntaxTree) -> _FileScan:
        if tree.raw is None:
            raise ValueError(f"Snapshot tree for {tree.path} carries no parse tree")
        cursor = QueryCursor(_load_query(self._language, "crud"))
        package_name = ""
        scan = _FileScan(tree=tree, package_name="", package_path="")
        for _, captures in cursor.matches(tree.raw.root_node):
            if "package.name" in captures:
                package_name = _text(tree, captures["package.name"][0])
            elif "function.decl" in captures:
                scan.decls.append((captures["function.decl"][0], captures["function.name"][0], None))
            elif "method.decl" in captures:
                scan.decls.append(
                    (captures["method.decl"][0], captures["method.name"][0], captures["method.receiver"][0])
                )
            elif "function.literal" in captures:
                scan.literals.append(captures["function.literal"][0])
            elif "call" in captures:
                scan.calls.append((captures["call"][0], captures["call.callee"][0], captures["call.arguments"][0]))
        directory = PurePosixPath(tree.path).parent.as_posix()
        scan.package_name = package_name
        scan.package_path = package_name if directory == "." else directory
        return scan

    @staticmethod
    def _call_offset(tree: SyntaxTree, call: Node, arguments: Node) -> int:
        parent = call.parent
        if parent is not None and parent.type in ("go_statement", "defer_statement"):
            return tree.offset_of(parent.start_byte)
        return tree.offset_of(arguments.start_byte)

    @staticmethod
    def _callees(
        scan: _FileScan,
        callee: Node,
        package_functions: dict[str, dict[str, str]],
        package_paths: dict[str, set[str]],
        methods: dict[str, list[str]],
    ) -> list[str]:
        if callee.type == "identifier":
            target = package_functions[scan.package_path].get(_text(scan.tree, callee))
            return [target] if target else []
        if callee.type != "selector_expression":
            return []
        operand = callee.child_by_field_name("operand")
        field_node = callee.child_by_field_name("field")
        if field_node is None:
            return []
        name = _text(scan.tree, field_node)
        if operand is not None and operand.type == "identifier":
            qualifier = _text(scan.tree, operand)
            targets = [
                package_functions[path][name]
                for path in sorted(package_paths.get(qualifier, ()))
                if path != scan.package_path and name in package_functions[path]
            ]
            if targets:
                return targets
        return list(methods.get(name, ()))

    @staticmethod
    def _query(tree: SyntaxTree, callee: Node, arguments: Node, looped: bool) -> QueryFinding | None:
        if callee.type != "selector_expression":
            return None
        field_node = callee.child_by_field_name("field")
        if field_node is None or _text(tree, field_node) not in DB_METHODS:
            return None
        for argument in arguments.named_children:
            if argument.type not in _STRING_TYPES:
                continue
            raw = _string_value(tree, argument)
            classified = classify_sql(raw)
            if classified is None:
                continue
            kind, table = classified
            return QueryFinding(
                table=table,
                offset=tree.offset_of(argument.start_byte),
                kind=kind,
                raw=raw,
                in_loop=looped,
            )
        return None
