import logging
from collections.abc import Mapping

from isurus.core.findings import Findings
from isurus.core.resolve import Category, Location
from isurus.core.syntax import PositionTable, ProjectSnapshot, SyntaxNode
from isurus.models import Call, CrudResponse, Function, Position, Query, Range, Table

logger = logging.getLogger(__name__)


def build_worklist(findings: Findings) -> list[Location]:
    worklist: list[Location] = []
    for function in findings.functions:
        worklist.append(Location(function.offset, Category.FUNCTION_BOUNDARY))
        worklist.extend(Location(call.offset, Category.CALL_SITE) for call in function.calls)
        worklist.extend(Location(query.offset, Category.GENERIC_EXPRESSION) for query in function.queries)
    return worklist


def node_range(table: PositionTable, node: SyntaxNode) -> Range:
    start = table.position(node.start)
    end = table.position(node.end)
    return Range(
        file=start.path,
        start=Position(line=start.line, column=start.column),
        end=Position(line=end.line, column=end.column),
    )


def point_range(table: PositionTable, offset: int) -> Range:
    """Degenerate one-column range at ``offset``, used when a location did not resolve."""
    pos = table.position(offset)
    return Range(
        file=pos.path,
        start=Position(line=pos.line, column=pos.column),
        end=Position(line=pos.line, column=pos.column + 1),
    )


def _range_for(table: PositionTable, resolved: Mapping[Location, SyntaxNode], location: Location) -> Range:
    node = resolved.get(location)
    if node is None:
        return point_range(table, location.offset)
    return node_range(table, node)


def assemble_report(
    snapshot: ProjectSnapshot,
    findings: Findings,
    resolved: Mapping[Location, SyntaxNode],
) -> CrudResponse:
    """Join resolved ranges with the analyzer's semantic tags into the structural report."""
    table = snapshot.table
    functions: dict[str, Function] = {}
    tables: dict[str, Table] = {}

    for finding in findings.functions:
        calls = [
            Call(
                function_id=call.function_id,
                position=_range_for(table, resolved, Location(call.offset, Category.CALL_SITE)),
                in_loop=call.in_loop,
            )
            for call in finding.calls
        ]

        queries = []
        for query in finding.queries:
            queries.append(
                Query(
                    table_id=query.table,
                    position=_range_for(table, resolved, Location(query.offset, Category.GENERIC_EXPRESSION)),
                    type=query.kind,
                    raw=query.raw,
                    in_loop=query.in_loop,
                )
            )
            if query.table:
                tables[query.table] = Table(id=query.table, name=query.table)

        functions[finding.id] = Function(
            id=finding.id,
            position=_range_for(table, resolved, Location(finding.offset, Category.FUNCTION_BOUNDARY)),
            name=finding.name,
            calls=calls,
            queries=queries,
        )

    logger.debug("Assembled report with %d function(s) and %d table(s)", len(functions), len(tables))
    return CrudResponse(functions=list(functions.values()), tables=list(tables.values()))
