"""Module declaration extraction."""

from .declaration_extractor import (
    DeclarationExtractor, PatternDeclarationExtractor,
    ImportReference, ExportReference, ImportKind, ExportKind
)

__all__ = [
    "DeclarationExtractor", "PatternDeclarationExtractor",
    "ImportReference", "ExportReference", "ImportKind", "ExportKind",
]
