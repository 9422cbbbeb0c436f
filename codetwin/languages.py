"""Per-language rules for which files and symbols appear in the graph.

Supported languages form a closed set (:class:`Language`).  Each one maps to a
:class:`LanguageRules` record holding plain functions for file validity, file
titles, symbol inclusion, styling and titling.  Variants reuse the ``base_*``
functions and override only what differs.

Every rule call goes through :meth:`LanguageRules._call`, which turns any
failure into a :class:`~codetwin.errors.PolicyError` naming the language and
the rule that broke.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Callable, Dict, List, Optional, Tuple, Union

from .errors import PolicyError, UnknownLanguageError
from .lsp_types import DocumentSymbol, SymbolKind
from .models import CssClass, Style


class Language(str, Enum):
    PYTHON = "Python"
    JAVA = "Java"
    GO = "Go"
    RUST = "Rust"
    TYPESCRIPT = "TypeScript"


@dataclass(frozen=True)
class LanguageRules:
    language: Language
    extensions: Tuple[str, ...]
    excludes_file: Callable[[str], bool]
    title_for_file: Callable[[str], str]
    keeps_symbol: Callable[[DocumentSymbol], bool]
    style_for_kind: Callable[[SymbolKind], Style]
    title_for_symbol: Callable[[DocumentSymbol], str]

    @property
    def name(self) -> str:
        return self.language.value

    def _call(self, method: str, message: str, func: Callable, *args):
        try:
            return func(*args)
        except PolicyError:
            raise
        except Exception as exc:
            raise PolicyError(self.name, method, message, exc) from exc

    def is_valid_file(self, path: str) -> bool:
        return self._call("is_valid_file", "Failed to check if file is valid", self._is_valid_file, path)

    def _is_valid_file(self, path: str) -> bool:
        _require_path(path)
        if not path.endswith(self.extensions):
            return False
        return not self.excludes_file(path)

    def file_title(self, path: str) -> str:
        return self._call("file_title", "Failed to get file title", self._file_title, path)

    def _file_title(self, path: str) -> str:
        _require_path(path)
        return self.title_for_file(path)

    def include_symbol(self, symbol: DocumentSymbol) -> bool:
        return self._call("include_symbol", "Failed to filter symbol", self.keeps_symbol, symbol)

    def symbol_style(self, kind: SymbolKind) -> Style:
        return self._call("symbol_style", "Failed to get symbol style", self.style_for_kind, kind)

    def symbol_title(self, symbol: DocumentSymbol) -> str:
        return self._call("symbol_title", "Failed to get symbol title", self.title_for_symbol, symbol)


def _require_path(path: str) -> None:
    if not path:
        raise ValueError("Invalid file path: path is empty")


def _file_name(path: str) -> str:
    return PurePath(path.replace("\\", "/")).name


# ---------------------------------------------------------------------------
# Base rules
# ---------------------------------------------------------------------------

_HIDDEN_KINDS = frozenset({
    SymbolKind.CONSTANT,
    SymbolKind.VARIABLE,
    SymbolKind.FIELD,
    SymbolKind.ENUM_MEMBER,
})


def base_excludes_file(path: str) -> bool:
    return False


def base_file_title(path: str) -> str:
    return PurePath(_file_name(path)).stem


def base_keeps_symbol(symbol: DocumentSymbol) -> bool:
    return symbol.kind not in _HIDDEN_KINDS


def base_style(kind: SymbolKind) -> Style:
    if kind in (SymbolKind.MODULE, SymbolKind.PACKAGE, SymbolKind.NAMESPACE):
        return Style({CssClass.CELL, CssClass.MODULE}, rounded=True)
    if kind == SymbolKind.INTERFACE:
        return Style({CssClass.CELL, CssClass.INTERFACE, CssClass.CLICKABLE}, rounded=True, border=0)
    if kind == SymbolKind.FUNCTION:
        return Style({CssClass.CELL, CssClass.FUNCTION, CssClass.CLICKABLE}, rounded=True)
    if kind == SymbolKind.METHOD:
        return Style({CssClass.CELL, CssClass.METHOD, CssClass.CLICKABLE}, rounded=True)
    if kind == SymbolKind.CONSTRUCTOR:
        return Style({CssClass.CELL, CssClass.CONSTRUCTOR, CssClass.CLICKABLE}, rounded=True)
    if kind == SymbolKind.PROPERTY:
        return Style({CssClass.CELL, CssClass.PROPERTY, CssClass.CLICKABLE})
    if kind == SymbolKind.CLASS:
        return Style({CssClass.CELL, CssClass.TYPE}, icon="C")
    if kind == SymbolKind.ENUM:
        return Style({CssClass.CELL, CssClass.TYPE}, icon="E")
    if kind == SymbolKind.STRUCT:
        return Style({CssClass.CELL, CssClass.TYPE}, icon="S")
    return Style({CssClass.CELL})


def base_title(symbol: DocumentSymbol) -> str:
    return symbol.name


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------

def python_excludes_file(path: str) -> bool:
    name = _file_name(path).lower()
    return name.startswith("test_") or name.endswith("_test.py") or name == "__init__.py"


def python_keeps_symbol(symbol: DocumentSymbol) -> bool:
    if symbol.kind in (SymbolKind.VARIABLE, SymbolKind.CONSTANT, SymbolKind.FIELD):
        return False
    if symbol.kind in (SymbolKind.FUNCTION, SymbolKind.CLASS, SymbolKind.MODULE):
        return "test" not in symbol.name.lower()
    return True


def python_style(kind: SymbolKind) -> Style:
    if kind == SymbolKind.CLASS:
        return Style({CssClass.CELL, CssClass.TYPE}, icon="C")
    if kind == SymbolKind.PROPERTY:
        return Style({CssClass.CELL, CssClass.PROPERTY}, icon="p")
    if kind in (SymbolKind.MODULE, SymbolKind.FUNCTION, SymbolKind.METHOD, SymbolKind.CONSTRUCTOR):
        return base_style(kind)
    return Style({CssClass.CELL}, rounded=True)


def python_title(symbol: DocumentSymbol) -> str:
    if symbol.kind == SymbolKind.CLASS:
        return f"class {symbol.name}"
    if symbol.kind in (SymbolKind.FUNCTION, SymbolKind.METHOD):
        return f"def {symbol.name}"
    if symbol.kind == SymbolKind.CONSTRUCTOR:
        return "def __init__"
    return symbol.name


# ---------------------------------------------------------------------------
# Java
# ---------------------------------------------------------------------------

_JAVA_EXCLUDED_SUFFIXES = ("test.java", "tests.java", "testcase.java", "suite.java")
_JAVA_SOURCE_ROOTS = ("src", "main", "java")


def java_excludes_file(path: str) -> bool:
    name = _file_name(path).lower()
    return name.endswith(_JAVA_EXCLUDED_SUFFIXES) or name in ("package-info.java", "module-info.java")


def java_file_title(path: str) -> str:
    parts = PurePath(path.replace("\\", "/")).parts
    stem = PurePath(parts[-1]).stem
    roots = [idx for idx, part in enumerate(parts[:-1]) if part in _JAVA_SOURCE_ROOTS]
    if not roots:
        return stem
    package = ".".join(parts[roots[-1] + 1:-1])
    return f"{package}.{stem}" if package else stem


_JAVA_ACCESS = ("private", "protected", "public")


def _java_modifiers(detail: str) -> List[str]:
    access = next((m for m in _JAVA_ACCESS if m in detail), "")
    flags = [m for m in ("static", "final", "abstract") if m in detail]
    return ([access] if access else []) + flags


def java_keeps_symbol(symbol: DocumentSymbol) -> bool:
    if "private" in symbol.detail:
        return False
    if symbol.kind in (SymbolKind.VARIABLE, SymbolKind.CONSTANT, SymbolKind.ENUM_MEMBER):
        return False
    if symbol.kind in (SymbolKind.CLASS, SymbolKind.METHOD):
        name = symbol.name.lower()
        return "test" not in name and not name.endswith("suite")
    return True


def java_style(kind: SymbolKind) -> Style:
    if kind == SymbolKind.INTERFACE:
        return Style({CssClass.CELL, CssClass.INTERFACE, CssClass.CLICKABLE}, rounded=True, border=0, icon="I")
    if kind == SymbolKind.STRUCT:
        return Style({CssClass.CELL})
    return base_style(kind)


def java_title(symbol: DocumentSymbol) -> str:
    modifiers = _java_modifiers(symbol.detail)
    keyword = {
        SymbolKind.CLASS: "class",
        SymbolKind.INTERFACE: "interface",
        SymbolKind.ENUM: "enum",
    }.get(symbol.kind)
    if symbol.kind == SymbolKind.PACKAGE:
        return f"package {symbol.name}"
    if keyword:
        return " ".join(modifiers + [keyword, symbol.name])
    if symbol.kind == SymbolKind.CONSTRUCTOR:
        access = [m for m in modifiers if m in _JAVA_ACCESS]
        return " ".join(access + [symbol.name])
    if symbol.kind in (SymbolKind.METHOD, SymbolKind.FIELD):
        return " ".join(modifiers + [symbol.name])
    return symbol.name


# ---------------------------------------------------------------------------
# Go
# ---------------------------------------------------------------------------

_GO_TEST_PREFIXES = ("Test", "Benchmark", "Example", "Fuzz")


def go_excludes_file(path: str) -> bool:
    normalized = path.replace("\\", "/")
    return normalized.endswith("_test.go") or "/vendor/" in normalized or normalized.startswith("vendor/")


def go_keeps_symbol(symbol: DocumentSymbol) -> bool:
    if not base_keeps_symbol(symbol):
        return False
    if symbol.kind == SymbolKind.FUNCTION:
        return not symbol.name.startswith(_GO_TEST_PREFIXES)
    return True


def go_title(symbol: DocumentSymbol) -> str:
    if symbol.kind == SymbolKind.FUNCTION:
        return f"func {symbol.name}"
    if symbol.kind == SymbolKind.METHOD:
        receiver = f"({symbol.detail}) " if symbol.detail else ""
        return f"func {receiver}{symbol.name}"
    if symbol.kind == SymbolKind.STRUCT:
        return f"type {symbol.name} struct"
    if symbol.kind == SymbolKind.INTERFACE:
        return f"type {symbol.name} interface"
    return symbol.name


# ---------------------------------------------------------------------------
# Rust
# ---------------------------------------------------------------------------

def rust_excludes_file(path: str) -> bool:
    name = _file_name(path).lower()
    return name.startswith("test_") or name.endswith("_test.rs") or name == "lib.rs"


def rust_keeps_symbol(symbol: DocumentSymbol) -> bool:
    if not base_keeps_symbol(symbol):
        return False
    if symbol.kind in (SymbolKind.MODULE, SymbolKind.FUNCTION):
        return "test" not in symbol.name.lower()
    return True


def rust_title(symbol: DocumentSymbol) -> str:
    if symbol.kind == SymbolKind.MODULE:
        return f"mod {symbol.name}"
    if symbol.kind == SymbolKind.STRUCT:
        return f"struct {symbol.name}"
    if symbol.kind == SymbolKind.ENUM:
        return f"enum {symbol.name}"
    if symbol.kind in (SymbolKind.INTERFACE, SymbolKind.TYPE_PARAMETER):
        return f"type {symbol.name}"
    if symbol.kind == SymbolKind.FUNCTION:
        return f"fn {symbol.name}"
    if symbol.kind == SymbolKind.METHOD:
        if symbol.detail:
            return f"impl {symbol.detail} fn {symbol.name}"
        return f"fn {symbol.name}"
    return symbol.name


# ---------------------------------------------------------------------------
# TypeScript
# ---------------------------------------------------------------------------

_TS_EXCLUDED_SUFFIXES = (".test.ts", ".test.tsx", ".spec.ts", ".spec.tsx", ".d.ts")


def typescript_excludes_file(path: str) -> bool:
    return _file_name(path).lower().endswith(_TS_EXCLUDED_SUFFIXES)


def typescript_title(symbol: DocumentSymbol) -> str:
    keyword = {
        SymbolKind.CLASS: "class",
        SymbolKind.INTERFACE: "interface",
        SymbolKind.ENUM: "enum",
        SymbolKind.FUNCTION: "function",
    }.get(symbol.kind)
    return f"{keyword} {symbol.name}" if keyword else symbol.name


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_RULES: Dict[Language, LanguageRules] = {
    Language.PYTHON: LanguageRules(
        language=Language.PYTHON,
        extensions=(".py",),
        excludes_file=python_excludes_file,
        title_for_file=base_file_title,
        keeps_symbol=python_keeps_symbol,
        style_for_kind=python_style,
        title_for_symbol=python_title,
    ),
    Language.JAVA: LanguageRules(
        language=Language.JAVA,
        extensions=(".java",),
        excludes_file=java_excludes_file,
        title_for_file=java_file_title,
        keeps_symbol=java_keeps_symbol,
        style_for_kind=java_style,
        title_for_symbol=java_title,
    ),
    Language.GO: LanguageRules(
        language=Language.GO,
        extensions=(".go",),
        excludes_file=go_excludes_file,
        title_for_file=base_file_title,
        keeps_symbol=go_keeps_symbol,
        style_for_kind=base_style,
        title_for_symbol=go_title,
    ),
    Language.RUST: LanguageRules(
        language=Language.RUST,
        extensions=(".rs",),
        excludes_file=rust_excludes_file,
        title_for_file=base_file_title,
        keeps_symbol=rust_keeps_symbol,
        style_for_kind=base_style,
        title_for_symbol=rust_title,
    ),
    Language.TYPESCRIPT: LanguageRules(
        language=Language.TYPESCRIPT,
        extensions=(".ts", ".tsx"),
        excludes_file=typescript_excludes_file,
        title_for_file=base_file_title,
        keeps_symbol=base_keeps_symbol,
        style_for_kind=base_style,
        title_for_symbol=typescript_title,
    ),
}


def get_language(name: Union[str, Language]) -> LanguageRules:
    """Look up rules by enum member or case-insensitive name."""
    if isinstance(name, Language):
        return _RULES[name]
    wanted = (name or "").strip().lower()
    for language, rules in _RULES.items():
        if wanted in (language.value.lower(), language.name.lower()):
            return rules
    raise UnknownLanguageError(name)


def supported_languages() -> List[LanguageRules]:
    return list(_RULES.values())


def language_for_path(path: str) -> Optional[Language]:
    """Guess the language of a single file from its extension."""
    for language, rules in _RULES.items():
        if path.endswith(rules.extensions):
            return language
    return None
