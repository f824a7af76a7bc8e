"""Semantic findings produced by an analyzer, keyed by abstract snapshot offsets."""

from __future__ import annotations

from dataclasses import dataclass, field

from isurus.models import QueryType


@dataclass(frozen=True)
class CallFinding:
    function_id: str
    offset: int
    in_loop: bool = False


@dataclass(frozen=True)
class QueryFinding:
    table: str
    offset: int
    kind: QueryType = QueryType.UNKNOWN
    raw: str = ""
    in_loop: bool = False


@dataclass(frozen=True)
class FunctionFinding:
    id: str
    name: str
    offset: int
    calls: tuple[CallFinding, ...] = ()
    queries: tuple[QueryFinding, ...] = ()


@dataclass(frozen=True)
class Findings:
    functions: tuple[FunctionFinding, ...] = field(default_factory=tuple)
