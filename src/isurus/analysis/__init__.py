from isurus.analysis.syntactic import DB_METHODS, SyntacticAnalyzer, classify_sql, in_loop

__all__ = [
    "DB_METHODS",
    "SyntacticAnalyzer",
    "classify_sql",
    "in_loop",
]
