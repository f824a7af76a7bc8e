import logging
from collections.abc import Mapping
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import cast

from tree_sitter import Node, Parser
from tree_sitter_language_pack import SupportedLanguage, get_parser

from isurus.core.errors import ParseError
from isurus.core.languages import detect_language_from_path, is_source_file
from isurus.core.syntax import NodeKind, PositionTable, ProjectSnapshot, SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)

# Go node types that are expressions in the Go AST sense (go/ast.Expr).
_GO_EXPRESSION_TYPES = frozenset(
    {
        "array_type",
        "binary_expression",
        "channel_type",
        "composite_literal",
        "false",
        "field_identifier",
        "float_literal",
        "function_type",
        "generic_type",
        "identifier",
        "imaginary_literal",
        "implicit_length_array_type",
        "index_expression",
        "int_literal",
        "interface_type",
        "interpreted_string_literal",
        "iota",
        "keyed_element",
        "map_type",
        "nil",
        "package_identifier",
        "parenthesized_expression",
        "parenthesized_type",
        "pointer_type",
        "qualified_type",
        "raw_string_literal",
        "rune_literal",
        "selector_expression",
        "slice_expression",
        "slice_type",
        "struct_type",
        "true",
        "type_assertion_expression",
        "type_conversion_expression",
        "type_identifier",
        "type_instantiation_expression",
        "unary_expression",
    }
)

_FUNC_DECL_TYPES = frozenset({"function_declaration", "method_declaration"})


def _convert(node: Node, base: int) -> SyntaxNode:
    children = tuple(_convert(child, base) for child in node.named_children)
    start = base + node.start_byte
    end = base + node.end_byte
    node_type = node.type

    if node_type == "call_expression":
        arguments = node.child_by_field_name("arguments")
        marker = base + (arguments.start_byte if arguments is not None else node.end_byte)
        return SyntaxNode(NodeKind.CALL, node_type, start, end, marker=marker, children=children)

    if node_type in ("go_statement", "defer_statement"):
        call = next((c for c in children if c.kind is NodeKind.CALL), None)
        if call is not None:
            kind = NodeKind.GO if node_type == "go_statement" else NodeKind.DEFER
            return SyntaxNode(kind, node_type, start, end, marker=start, call=call, children=children)
        return SyntaxNode(NodeKind.OTHER, node_type, start, end, children=children)

    if node_type in _FUNC_DECL_TYPES:
        kind = NodeKind.FUNC_DECL
    elif node_type == "func_literal":
        kind = NodeKind.FUNC_LIT
    elif node_type in _GO_EXPRESSION_TYPES:
        kind = NodeKind.EXPR
    else:
        kind = NodeKind.OTHER
    return SyntaxNode(kind, node_type, start, end, children=children)


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return node


def parse_source(parser: Parser, table: PositionTable, path: str, source: bytes) -> SyntaxTree:
    """Parse one file into a :class:`SyntaxTree` addressed through ``table``.

    Raises :class:`ParseError` when the text is not syntactically valid; the table is only
    extended for files that parse cleanly.
    """
    tree = parser.parse(source)
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root)
        detail = None
        if bad is not None:
            row, column = bad.start_point
            detail = f"syntax error at line {row + 1}, column {column + 1}"
        raise ParseError(path, detail)
    if not any(child.type == "package_clause" for child in root.named_children):
        raise ParseError(path, "expected 'package' clause")

    record = table.add_file(path, source)
    return SyntaxTree(
        path=path,
        base=record.base,
        source=source,
        root=_convert(root, record.base),
        raw=tree,
    )


def build_snapshot(root_path: str, files: Mapping[str, str]) -> ProjectSnapshot:
    """Parse every supported file of ``files`` into one snapshot sharing a position table.

    Paths are processed in sorted order, so identical inputs always yield identical offsets.
    A single unparsable file aborts the whole snapshot.
    """
    table = PositionTable()
    parsers: dict[str, Parser] = {}
    trees: dict[str, SyntaxTree] = {}

    for path in sorted(files):
        pure = PurePosixPath(path)
        if not is_source_file(pure):
            logger.debug("Skipping non-source file %s", path)
            continue
        language = detect_language_from_path(pure)
        parser = parsers.get(language)
        if parser is None:
            parser = get_parser(cast(SupportedLanguage, language))
            parsers[language] = parser
        try:
            source = files[path].encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ParseError(path, f"content is not valid UTF-8 at character {exc.start}") from exc
        trees[path] = parse_source(parser, table, path, source)

    logger.debug("Built snapshot of %d file(s) under %s", len(trees), root_path)
    return ProjectSnapshot(root_path=root_path, trees=MappingProxyType(trees), table=table)
