"""
Custom exception hierarchy for doc search.

All exceptions inherit from DocSearchError base class.

Per-file errors (ParseError, SummarizerError) are collected during a rebuild.
Structural errors (DuplicatePathError, SyncMismatchError) abort the current
rebuild or query because the index cannot be trusted past that point.
"""


class DocSearchError(Exception):
    """Base exception for all doc search errors"""
    pass


class ParseError(DocSearchError):
    """File could not be decoded, or an index line is not valid JSON"""
    pass


class DuplicatePathError(DocSearchError):
    """Same relative_path appears twice within one rebuild"""
    pass


class SyncMismatchError(DocSearchError):
    """index.jsonl and sections.jsonl disagree at the same line"""
    pass


class StaleRangeError(DocSearchError):
    """Recorded offset/limit no longer fits the file on disk; rebuild needed"""
    pass


class CollectionNotFoundError(DocSearchError):
    """Collection index files are missing or incomplete"""
    pass


class IndexOutOfRangeError(DocSearchError):
    """Index number is outside the collection's line range"""
    pass


class SummarizerError(DocSearchError):
    """Summarizer failed for a file or section"""
    pass


class SummarizerTimeoutError(SummarizerError):
    """Summarizer exceeded the per-file time budget"""
    pass


class InvalidPathError(DocSearchError):
    """relative_path points outside its collection root"""
    pass


class ConfigurationError(DocSearchError):
    """Error in configuration"""
    pass
