"""Source tree and revision access."""

from .source_scanner import SourceScanner
from .git_source import RevisionReadError, read_revision_text

__all__ = ["SourceScanner", "RevisionReadError", "read_revision_text"]
