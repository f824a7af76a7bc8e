"""Go sources and offset helpers shared by unit tests."""

from isurus.core.syntax import SyntaxTree

# f calls g once directly and once inside a for loop.
A_GO = """package main

func f() {
\tg()
\tfor i := 0; i < 3; i++ {
\t\tg()
\t}
}
"""

B_GO = """package main

func g() {}
"""

SERVICE_GO = """package main

import "database/sql"

type Server struct {
\tdb *sql.DB
}

func (s *Server) Users(ids []int) {
\tfor _, id := range ids {
\t\ts.db.Exec("UPDATE users SET seen = 1 WHERE id = ?", id)
\t}
\trows, _ := s.db.Query(`SELECT name FROM users`)
\tdefer rows.Close()
\tgo notify(len(ids))
\thandler := func() {
\t\ts.db.Exec("DELETE FROM sessions")
\t}
\thandler()
}

func notify(n int) {}
"""


def global_offset(tree: SyntaxTree, needle: str, occurrence: int = 0, delta: int = 0) -> int:
    """Global offset of the ``occurrence``-th ``needle`` in ``tree`` plus ``delta`` bytes."""
    source = tree.source
    idx = -1
    for _ in range(occurrence + 1):
        idx = source.index(needle.encode("utf-8"), idx + 1)
    return tree.offset_of(idx + delta)
