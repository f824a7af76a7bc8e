import logging

from isurus.core.assemble import assemble_report, build_worklist
from isurus.core.ports.analyzer import SemanticAnalyzer
from isurus.core.resolve import resolve
from isurus.core.store import CodeStore
from isurus.models import CrudResponse

logger = logging.getLogger(__name__)


def run_crud(store: CodeStore, analyzer: SemanticAnalyzer) -> CrudResponse:
    """Build the structural CRUD report for the current contents of ``store``.

    Snapshot and parse errors propagate unchanged; unresolved locations fall back to their
    single-point position inside the report.
    """
    snapshot = store.snapshot()
    findings = analyzer.analyze(snapshot)
    worklist = build_worklist(findings)
    logger.debug("Analyzer reported %d function(s), %d location(s)", len(findings.functions), len(worklist))
    resolved = resolve(snapshot, worklist)
    return assemble_report(snapshot, findings, resolved)
