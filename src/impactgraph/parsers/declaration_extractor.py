"""Declaration Extractor - Extracts module import and export declarations.

Extraction is line-oriented pattern matching over the canonical ES module
declaration shapes. Conditional, computed, multi-line and dynamically built
declarations (``import()``, ``require``) are not recognized and yield nothing.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class ImportKind(Enum):
    """Shapes of import declarations."""
    NAMED = "named"
    DEFAULT = "default"
    NAMESPACE = "namespace"
    SIDE_EFFECT = "side-effect"


class ExportKind(Enum):
    """Kinds of exported symbols."""
    FUNCTION = "function"
    CLASS = "class"
    INTERFACE_OR_TYPE = "interface-or-type"
    CONST = "const"
    DEFAULT = "default"


@dataclass(frozen=True)
class ImportReference:
    """One import declaration of a file."""
    source_specifier: str
    import_kind: ImportKind
    source_line: int
    imported_symbols: Tuple[str, ...] = ()
    resolved_target: Optional[str] = None
    local_name: Optional[str] = None  # binding for default/namespace imports

    @property
    def is_relative(self) -> bool:
        return self.source_specifier.startswith(".")


@dataclass(frozen=True)
class ExportReference:
    """One exported symbol of a file."""
    symbol_name: str
    export_kind: ExportKind
    source_line: int
    is_re_export: bool = False
    re_export_origin: Optional[str] = None


_FROM = r"""\s*from\s*['"]([^'"]+)['"]"""

# Imports
NAMED_IMPORT = re.compile(r"^import\s+(?:type\s+)?(?:([\w$]+)\s*,\s*)?\{([^}]*)\}" + _FROM)
NAMESPACE_IMPORT = re.compile(r"^import\s+(?:type\s+)?(?:[\w$]+\s*,\s*)?\*\s*as\s+([\w$]+)" + _FROM)
DEFAULT_IMPORT = re.compile(r"^import\s+(?:type\s+)?([\w$]+)\s" + _FROM)
SIDE_EFFECT_IMPORT = re.compile(r"""^import\s*['"]([^'"]+)['"]""")

# Re-exports (recognized by both extract_imports and extract_exports)
NAMED_RE_EXPORT = re.compile(r"^export\s+(?:type\s+)?\{([^}]*)\}" + _FROM)
STAR_RE_EXPORT = re.compile(r"^export\s+(?:type\s+)?\*\s*(?:as\s+([\w$]+)\s*)?" + _FROM)

# Exports
FUNCTION_EXPORT = re.compile(r"^export\s+(?:declare\s+)?(?:async\s+)?function\s*\*?\s*([\w$]+)")
CLASS_EXPORT = re.compile(r"^export\s+(?:declare\s+)?(?:abstract\s+)?class\s+([\w$]+)")
TYPE_EXPORT = re.compile(r"^export\s+(?:declare\s+)?(?:interface|type|(?:const\s+)?enum)\s+([\w$]+)")
CONST_EXPORT = re.compile(r"^export\s+(?:declare\s+)?(?:const|let|var)\s+([\w$]+)")
NAMED_EXPORT_LIST = re.compile(r"^export\s+(?:type\s+)?\{([^}]*)\}")
DEFAULT_EXPORT = re.compile(r"^export\s+default\b")


def _split_specifiers(group: str, exported_side: bool) -> List[str]:
    """Split ``a, b as c, type d`` into names.

    ``exported_side`` picks the name after ``as`` (what the module exposes)
    instead of the one before it (what is taken from the source module).
    """
    names = []
    for part in group.split(","):
        part = part.strip()
        if part.startswith("type "):
            part = part[5:].strip()
        if not part:
            continue
        pieces = re.split(r"\s+as\s+", part)
        name = pieces[-1] if exported_side else pieces[0]
        if name:
            names.append(name.strip())
    return names


class DeclarationExtractor(ABC):
    """Extracts ordered import and export references from one file's text."""

    @abstractmethod
    def extract_imports(self, text: str) -> List[ImportReference]:
        ...

    @abstractmethod
    def extract_exports(self, text: str) -> List[ExportReference]:
        ...


class PatternDeclarationExtractor(DeclarationExtractor):
    """Regex-based extractor; one declaration per line, first match wins."""

    def extract_imports(self, text: str) -> List[ImportReference]:
        imports = []

        for line_number, raw_line in enumerate(text.splitlines(), 1):
            line = raw_line.strip()
            if not (line.startswith("import") or line.startswith("export")):
                continue

            reference = self._match_import(line, line_number)
            if reference:
                imports.append(reference)

        return imports

    def _match_import(self, line: str, line_number: int) -> Optional[ImportReference]:
        match = NAMED_IMPORT.match(line)
        if match:
            default_binding, names, specifier = match.groups()
            symbols = _split_specifiers(names, exported_side=False)
            if default_binding:
                # import Foo, { bar } from: the default export is taken too
                symbols.insert(0, "default")
            return ImportReference(
                source_specifier=specifier,
                import_kind=ImportKind.NAMED,
                source_line=line_number,
                imported_symbols=tuple(symbols),
                local_name=default_binding,
            )

        match = NAMESPACE_IMPORT.match(line)
        if match:
            return ImportReference(
                source_specifier=match.group(2),
                import_kind=ImportKind.NAMESPACE,
                source_line=line_number,
                local_name=match.group(1),
            )

        match = DEFAULT_IMPORT.match(line)
        if match:
            return ImportReference(
                source_specifier=match.group(2),
                import_kind=ImportKind.DEFAULT,
                source_line=line_number,
                imported_symbols=("default",),
                local_name=match.group(1),
            )

        match = SIDE_EFFECT_IMPORT.match(line)
        if match:
            return ImportReference(
                source_specifier=match.group(1),
                import_kind=ImportKind.SIDE_EFFECT,
                source_line=line_number,
            )

        # A re-export depends on its origin module like an import does
        match = NAMED_RE_EXPORT.match(line)
        if match:
            return ImportReference(
                source_specifier=match.group(2),
                import_kind=ImportKind.NAMED,
                source_line=line_number,
                imported_symbols=tuple(_split_specifiers(match.group(1), exported_side=False)),
            )

        match = STAR_RE_EXPORT.match(line)
        if match:
            return ImportReference(
                source_specifier=match.group(2),
                import_kind=ImportKind.NAMESPACE,
                source_line=line_number,
                local_name=match.group(1),
            )

        return None

    def extract_exports(self, text: str) -> List[ExportReference]:
        exports = []

        for line_number, raw_line in enumerate(text.splitlines(), 1):
            line = raw_line.strip()
            if not line.startswith("export"):
                continue
            exports.extend(self._match_exports(line, line_number))

        return exports

    def _match_exports(self, line: str, line_number: int) -> List[ExportReference]:
        for pattern, kind in ((FUNCTION_EXPORT, ExportKind.FUNCTION),
                              (CLASS_EXPORT, ExportKind.CLASS),
                              (TYPE_EXPORT, ExportKind.INTERFACE_OR_TYPE),
                              (CONST_EXPORT, ExportKind.CONST)):
            match = pattern.match(line)
            if match:
                return [ExportReference(match.group(1), kind, line_number)]

        # Re-exports must be tried before the plain export list they extend
        match = NAMED_RE_EXPORT.match(line)
        if match:
            return [
                ExportReference(name, ExportKind.CONST, line_number,
                                is_re_export=True, re_export_origin=match.group(2))
                for name in _split_specifiers(match.group(1), exported_side=True)
            ]

        match = STAR_RE_EXPORT.match(line)
        if match:
            if not match.group(1):
                # export * from: names unknown without reading the origin
                return []
            return [ExportReference(match.group(1), ExportKind.CONST, line_number,
                                    is_re_export=True, re_export_origin=match.group(2))]

        match = NAMED_EXPORT_LIST.match(line)
        if match:
            return [
                ExportReference(name, ExportKind.CONST, line_number)
                for name in _split_specifiers(match.group(1), exported_side=True)
            ]

        if DEFAULT_EXPORT.match(line):
            return [ExportReference("default", ExportKind.DEFAULT, line_number)]

        return []
