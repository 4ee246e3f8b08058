"""Per-language regex tables for definitions, calls and built-ins.

Each LanguagePatternTable lists, in priority order, the definition patterns
tried against every line (first match on a line wins), the call patterns
applied globally to every line of a definition's extent, and the names a
call must not resolve to (shared keywords plus language built-ins).

Tables are looked up by file extension. Unknown extensions fall back to a
generic table covering ``function``, ``def`` and ``class``. A caller can
plug in a table for a new language with register_pattern_table().
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from codenav.kinds import SymbolKind

BlockStyle = Literal["brace", "indent"]


@dataclass(frozen=True, slots=True)
class DefinitionPattern:
    """Regex that recognizes a definition line and captures its name."""

    regex: re.Pattern[str]
    kind: SymbolKind
    name_group: int = 1
    # False for one-line declarations (constants, aliases) with no block
    has_body: bool = True


@dataclass(frozen=True, slots=True)
class CallPattern:
    """Regex that finds call expressions and captures the callee name."""

    regex: re.Pattern[str]
    name_group: int = 1


@dataclass(frozen=True, slots=True)
class LanguagePatternTable:
    """Heuristic parsing rules for one language.

    Attributes:
        language: Language identifier (e.g. "python").
        extensions: File extensions (without dot) served by this table.
        definitions: Definition patterns in priority order.
        calls: Call patterns.
        builtins: Language-specific names never treated as calls.
        block_style: How extents are detected ("brace" or "indent").
        container_pattern: Regex whose group 1 names the enclosing type of a
            method, searched upward from the method line.
        symbol_definitions: Patterns for the project symbol index, in
            priority order. Adds constants, variables and aliases to the
            callable definitions; empty means reuse ``definitions``.

    """

    language: str
    extensions: frozenset[str]
    definitions: tuple[DefinitionPattern, ...]
    calls: tuple[CallPattern, ...]
    builtins: frozenset[str]
    block_style: BlockStyle = "brace"
    container_pattern: re.Pattern[str] | None = None
    symbol_definitions: tuple[DefinitionPattern, ...] = ()

    def is_builtin(self, name: str) -> bool:
        """Return True if name is a keyword or a built-in of this language."""
        return name in COMMON_KEYWORDS or name in self.builtins


# =============================================================================
# Exclusion sets
# =============================================================================

COMMON_KEYWORDS: frozenset[str] = frozenset({
    "if", "else", "for", "while", "switch", "case", "return", "break", "continue",
    "new", "delete", "typeof", "instanceof", "void", "throw", "try", "catch", "finally",
    "import", "export", "from", "as", "default", "class", "extends", "super", "this",
    "null", "undefined", "true", "false", "NaN", "Infinity",
})

JS_BUILTINS: frozenset[str] = frozenset({
    "console", "Math", "JSON", "Object", "Array", "String", "Number", "Boolean",
    "Date", "RegExp", "Error", "Promise", "Map", "Set", "WeakMap", "WeakSet",
    "Symbol", "Proxy", "Reflect", "parseInt", "parseFloat", "isNaN", "isFinite",
    "encodeURI", "decodeURI", "encodeURIComponent", "decodeURIComponent",
    "setTimeout", "setInterval", "clearTimeout", "clearInterval",
    "fetch", "require", "module", "exports", "process", "Buffer",
    "log", "warn", "error", "info", "debug", "trace",
})

PYTHON_BUILTINS: frozenset[str] = frozenset({
    "print", "len", "range", "str", "int", "float", "list", "dict", "set", "tuple",
    "bool", "type", "isinstance", "hasattr", "getattr", "setattr", "delattr",
    "open", "close", "read", "write", "input", "super", "self", "cls",
})

RUST_BUILTINS: frozenset[str] = frozenset({
    "println", "print", "format", "vec", "Box", "Rc", "Arc", "RefCell", "Cell",
    "Some", "None", "Ok", "Err", "Result", "Option", "Vec", "String", "str",
    "match", "if", "else", "loop", "while", "for", "in", "return", "break", "continue",
})

GO_BUILTINS: frozenset[str] = frozenset({
    "append", "cap", "close", "complex", "copy", "delete", "imag", "len", "make",
    "new", "panic", "print", "println", "real", "recover", "string", "int",
    "byte", "rune", "float64", "error", "func", "go", "defer", "select",
})

# Statement keywords that look like "name(...) {" when indented
_NOT_A_METHOD = r"(?!(?:if|for|while|switch|catch|with|return|function)\b)"

# =============================================================================
# Tables
# =============================================================================


def _definition(pattern: str, kind: SymbolKind, has_body: bool = True) -> DefinitionPattern:
    return DefinitionPattern(regex=re.compile(pattern), kind=kind, has_body=has_body)


def _call(pattern: str) -> CallPattern:
    return CallPattern(regex=re.compile(pattern))


# JavaScript / TypeScript
_JS_FUNCTION = _definition(r"^(?:export\s+)?(?:async\s+)?function\s+(\w+)", SymbolKind.FUNCTION)
_JS_CONST_ARROW = _definition(r"^(?:export\s+)?const\s+(\w+)\s*=\s*(?:async\s+)?\(", SymbolKind.FUNCTION)
_JS_CONST_FUNCTION = _definition(r"^(?:export\s+)?const\s+(\w+)\s*=\s*(?:async\s+)?function", SymbolKind.FUNCTION)
_JS_METHOD = _definition(
    r"^\s+(?:async\s+)?" + _NOT_A_METHOD + r"(\w+)\s*\([^)]*\)\s*(?::\s*[\w<>\[\]|&\s]+)?\s*\{",
    SymbolKind.METHOD,
)
_JS_CLASS = _definition(r"^(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(\w+)", SymbolKind.CLASS)
_JS_INTERFACE = _definition(r"^(?:export\s+)?interface\s+(\w+)", SymbolKind.INTERFACE)
_JS_ENUM = _definition(r"^(?:export\s+)?(?:const\s+)?enum\s+(\w+)", SymbolKind.ENUM)
_JS_TYPE = _definition(r"^(?:export\s+)?type\s+(\w+)", SymbolKind.TYPE_PARAMETER)
# A const whose value is not a function expression
_JS_CONSTANT = _definition(
    r"^(?:export\s+)?const\s+(\w+)\s*(?::\s*[\w<>\[\]|&\s]+)?\s*=(?!\s*(?:async\s+)?\(|\s*function)",
    SymbolKind.CONSTANT,
    has_body=False,
)
_JS_LET = _definition(r"^(?:export\s+)?let\s+(\w+)", SymbolKind.VARIABLE, has_body=False)

# Python
_PY_FUNCTION = _definition(r"^(?:async\s+)?def\s+(\w+)", SymbolKind.FUNCTION)
_PY_CLASS = _definition(r"^class\s+(\w+)", SymbolKind.CLASS)
_PY_METHOD = _definition(r"^\s+(?:async\s+)?def\s+(\w+)", SymbolKind.METHOD)
_PY_VARIABLE = _definition(r"^(\w+)\s*(?::[^=]+)?=(?!=)", SymbolKind.VARIABLE, has_body=False)

# Rust
_RS_FUNCTION = _definition(
    r"^(?:pub\s+)?(?:const\s+)?(?:unsafe\s+)?(?:async\s+)?fn\s+(\w+)", SymbolKind.FUNCTION
)
_RS_STRUCT = _definition(r"^(?:pub\s+)?struct\s+(\w+)", SymbolKind.STRUCT)
_RS_IMPL = _definition(r"^(?:pub\s+)?impl(?:<[^>]+>)?\s+(\w+)", SymbolKind.CLASS)
_RS_METHOD = _definition(r"^\s+(?:pub(?:\([^)]*\))?\s+)?(?:async\s+)?fn\s+(\w+)", SymbolKind.METHOD)
_RS_ENUM = _definition(r"^(?:pub\s+)?enum\s+(\w+)", SymbolKind.ENUM)
_RS_TRAIT = _definition(r"^(?:pub\s+)?trait\s+(\w+)", SymbolKind.INTERFACE)
_RS_CONST = _definition(r"^(?:pub\s+)?const\s+(?!fn\b)(\w+)", SymbolKind.CONSTANT, has_body=False)
_RS_STATIC = _definition(r"^(?:pub\s+)?static\s+(?:mut\s+)?(\w+)", SymbolKind.CONSTANT, has_body=False)
_RS_MOD = _definition(r"^(?:pub\s+)?mod\s+(\w+)", SymbolKind.MODULE, has_body=False)
_RS_TYPE = _definition(r"^(?:pub\s+)?type\s+(\w+)", SymbolKind.TYPE_PARAMETER, has_body=False)

# Go
_GO_FUNCTION = _definition(r"^func\s+(\w+)", SymbolKind.FUNCTION)
_GO_METHOD = _definition(r"^func\s+\([^)]+\)\s+(\w+)", SymbolKind.METHOD)
_GO_STRUCT = _definition(r"^type\s+(\w+)\s+struct", SymbolKind.STRUCT)
_GO_INTERFACE = _definition(r"^type\s+(\w+)\s+interface", SymbolKind.INTERFACE)
_GO_CONST = _definition(r"^const\s+(\w+)", SymbolKind.CONSTANT, has_body=False)
_GO_VAR = _definition(r"^var\s+(\w+)", SymbolKind.VARIABLE, has_body=False)

# Generic
_ANY_FUNCTION = _definition(r"function\s+(\w+)", SymbolKind.FUNCTION)
_ANY_DEF = _definition(r"def\s+(\w+)", SymbolKind.FUNCTION)
_ANY_CLASS = _definition(r"class\s+(\w+)", SymbolKind.CLASS)
_ANY_CONST = _definition(r"const\s+(\w+)", SymbolKind.CONSTANT, has_body=False)


JAVASCRIPT_TABLE = LanguagePatternTable(
    language="javascript",
    extensions=frozenset({"ts", "tsx", "js", "jsx", "mts", "cts", "mjs", "cjs"}),
    definitions=(
        _JS_FUNCTION,
        _JS_CONST_ARROW,
        _JS_CONST_FUNCTION,
        _JS_METHOD,
        _JS_CLASS,
        _JS_INTERFACE,
        _JS_ENUM,
        _JS_TYPE,
    ),
    calls=(
        _call(r"(?<!function\s)(?<!const\s)(?<![.])(\b[a-zA-Z_]\w*)\s*\("),
        _call(r"\.(\w+)\s*\("),
    ),
    builtins=JS_BUILTINS,
    container_pattern=re.compile(r"class\s+(\w+)"),
    symbol_definitions=(
        _JS_CLASS,
        _JS_INTERFACE,
        _JS_TYPE,
        _JS_ENUM,
        _JS_FUNCTION,
        _JS_CONST_ARROW,
        _JS_CONST_FUNCTION,
        _JS_METHOD,
        _JS_CONSTANT,
        _JS_LET,
    ),
)

PYTHON_TABLE = LanguagePatternTable(
    language="python",
    extensions=frozenset({"py", "pyw", "pyi"}),
    definitions=(_PY_FUNCTION, _PY_CLASS, _PY_METHOD),
    calls=(
        _call(r"(?<!def\s)(\b[a-zA-Z_]\w*)\s*\("),
    ),
    builtins=PYTHON_BUILTINS,
    block_style="indent",
    container_pattern=re.compile(r"^class\s+(\w+)"),
    symbol_definitions=(_PY_CLASS, _PY_FUNCTION, _PY_METHOD, _PY_VARIABLE),
)

RUST_TABLE = LanguagePatternTable(
    language="rust",
    extensions=frozenset({"rs"}),
    definitions=(_RS_FUNCTION, _RS_STRUCT, _RS_IMPL, _RS_METHOD, _RS_ENUM, _RS_TRAIT),
    calls=(
        _call(r"(?<!fn\s)(?<!::)(\b[a-zA-Z_]\w*)\s*\("),
        _call(r"::(\w+)\s*\("),
    ),
    builtins=RUST_BUILTINS,
    container_pattern=re.compile(r"^(?:pub\s+)?impl(?:<[^>]+>)?\s+(?:\w+\s+for\s+)?(\w+)"),
    symbol_definitions=(
        _RS_STRUCT,
        _RS_ENUM,
        _RS_TRAIT,
        _RS_FUNCTION,
        _RS_METHOD,
        _RS_CONST,
        _RS_STATIC,
        _RS_MOD,
        _RS_TYPE,
    ),
)

GO_TABLE = LanguagePatternTable(
    language="go",
    extensions=frozenset({"go"}),
    definitions=(_GO_FUNCTION, _GO_METHOD, _GO_STRUCT, _GO_INTERFACE),
    calls=(
        _call(r"(?<!func\s)(\b[a-zA-Z_]\w*)\s*\("),
    ),
    builtins=GO_BUILTINS,
    # The receiver type sits on the method line itself; the receiver name is optional
    container_pattern=re.compile(r"^func\s+\(\s*(?:\w+\s+)?\*?(\w+)"),
    symbol_definitions=(_GO_STRUCT, _GO_INTERFACE, _GO_FUNCTION, _GO_METHOD, _GO_CONST, _GO_VAR),
)

GENERIC_TABLE = LanguagePatternTable(
    language="generic",
    extensions=frozenset(),
    definitions=(_ANY_FUNCTION, _ANY_DEF, _ANY_CLASS),
    calls=(
        _call(r"(\b[a-zA-Z_]\w*)\s*\("),
    ),
    builtins=JS_BUILTINS,
    container_pattern=re.compile(r"class\s+(\w+)"),
    symbol_definitions=(_ANY_CLASS, _ANY_FUNCTION, _ANY_DEF, _ANY_CONST),
)

_TABLES: dict[str, LanguagePatternTable] = {}


def register_pattern_table(table: LanguagePatternTable) -> None:
    """Register table for each of its extensions, replacing earlier entries."""
    for ext in table.extensions:
        _TABLES[ext.lower().lstrip(".")] = table


for _table in (JAVASCRIPT_TABLE, PYTHON_TABLE, RUST_TABLE, GO_TABLE):
    register_pattern_table(_table)


def normalize_language(language: str) -> str:
    """Reduce an extension, ".ext", or file path to a bare lowercase extension."""
    name = language.replace("\\", "/").rsplit("/", 1)[-1]
    if "." in name:
        name = name.rsplit(".", 1)[-1]
    return name.lower()


def get_pattern_table(language: str) -> LanguagePatternTable:
    """Return the pattern table for an extension (or path), generic if unknown."""
    return _TABLES.get(normalize_language(language), GENERIC_TABLE)
