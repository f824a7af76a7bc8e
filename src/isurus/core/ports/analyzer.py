from typing import Protocol

from isurus.core.findings import Findings
from isurus.core.syntax import ProjectSnapshot


class SemanticAnalyzer(Protocol):
    def analyze(self, snapshot: ProjectSnapshot) -> Findings: ...
