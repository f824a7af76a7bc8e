"""End-to-end tests for the CRUD pipeline over an in-memory store."""

from __future__ import annotations

from go_samples import SERVICE_GO

from isurus.analysis import SyntacticAnalyzer
from isurus.core.crud import run_crud
from isurus.core.findings import Findings
from isurus.core.store import CodeStore
from isurus.core.syntax import ProjectSnapshot


def test_sample_project_report(sample_store: CodeStore) -> None:
    report = run_crud(sample_store, SyntacticAnalyzer())
    payload = report.model_dump(by_alias=True, mode="json")

    assert payload == {
        "functions": [
            {
                "id": "main.f",
                "name": "f",
                "position": {"file": "a.go", "start": {"line": 3, "column": 1}, "end": {"line": 8, "column": 2}},
                "calls": [
                    {
                        "functionId": "main.g",
                        "position": {"file": "a.go", "start": {"line": 4, "column": 2}, "end": {"line": 4, "column": 5}},
                        "inLoop": False,
                    },
                    {
                        "functionId": "main.g",
                        "position": {"file": "a.go", "start": {"line": 6, "column": 3}, "end": {"line": 6, "column": 6}},
                        "inLoop": True,
                    },
                ],
                "queries": [],
            },
            {
                "id": "main.g",
                "name": "g",
                "position": {"file": "b.go", "start": {"line": 3, "column": 1}, "end": {"line": 3, "column": 12}},
                "calls": [],
                "queries": [],
            },
        ],
        "tables": [],
    }


def test_service_report_resolves_queries_and_go_statements(store: CodeStore) -> None:
    store.add_file("s.go", SERVICE_GO)
    report = run_crud(store, SyntacticAnalyzer())

    functions = {fn.id: fn for fn in report.functions}
    users = functions["(*main.Server).Users"]
    assert users.position.start.line == 9
    assert users.position.end.line == 20

    (notify_call,) = users.calls
    # the go statement resolves to the wrapped call, not to the keyword
    assert notify_call.position.start.line == 15
    assert notify_call.position.start.column == 5
    assert notify_call.position.end.column == 21

    update, select = users.queries
    assert update.type.value == "update"
    assert update.in_loop is True
    assert update.position.start.line == 11
    assert update.position.end.column - update.position.start.column == len('"UPDATE users SET seen = 1 WHERE id = ?"')
    assert select.raw == "SELECT name FROM users"

    literal = functions["(*main.Server).Users$1"]
    assert (literal.position.start.line, literal.position.end.line) == (16, 18)
    assert [(t.id, t.name) for t in report.tables] == [("users", "users"), ("sessions", "sessions")]


def test_empty_store_gives_empty_report(store: CodeStore) -> None:
    report = run_crud(store, SyntacticAnalyzer())
    assert report.functions == []
    assert report.tables == []


def test_custom_analyzer_is_used(sample_store: CodeStore) -> None:
    seen: list[ProjectSnapshot] = []

    class _Recording:
        def analyze(self, snapshot: ProjectSnapshot) -> Findings:
            seen.append(snapshot)
            return Findings()

    report = run_crud(sample_store, _Recording())
    assert len(seen) == 1
    assert sorted(seen[0].trees) == ["a.go", "b.go"]
    assert report.functions == []
