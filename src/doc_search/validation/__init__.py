"""
Index integrity verification.
"""

from doc_search.validation.integrity import (
    IntegrityIssue,
    IntegrityReport,
    verify_collection,
    verify_tree,
)

__all__ = [
    "IntegrityIssue",
    "IntegrityReport",
    "verify_collection",
    "verify_tree",
]
