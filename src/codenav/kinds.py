"""Symbol kind enumeration shared by symbol search and call hierarchy.

Numeric codes follow the Language Server Protocol SymbolKind table (1-26).
"""

from __future__ import annotations

from enum import Enum


class SymbolKind(str, Enum):
    """Kind of a named code entity."""

    FILE = "file"
    MODULE = "module"
    NAMESPACE = "namespace"
    PACKAGE = "package"
    CLASS = "class"
    METHOD = "method"
    PROPERTY = "property"
    FIELD = "field"
    CONSTRUCTOR = "constructor"
    ENUM = "enum"
    INTERFACE = "interface"
    FUNCTION = "function"
    VARIABLE = "variable"
    CONSTANT = "constant"
    # Literal-value kinds
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    KEY = "key"
    NULL = "null"
    ENUM_MEMBER = "enumMember"
    STRUCT = "struct"
    EVENT = "event"
    OPERATOR = "operator"
    TYPE_PARAMETER = "typeParameter"


# Declaration order above matches the LSP numbering
_KIND_BY_NUMBER: dict[int, SymbolKind] = {
    number: kind for number, kind in enumerate(SymbolKind, start=1)
}
_NUMBER_BY_KIND: dict[SymbolKind, int] = {
    kind: number for number, kind in _KIND_BY_NUMBER.items()
}

DEFAULT_KIND = SymbolKind.FUNCTION


def kind_from_number(number: int) -> SymbolKind:
    """Map an LSP numeric kind to SymbolKind.

    Args:
        number: LSP SymbolKind code.

    Returns:
        Matching SymbolKind, or FUNCTION for unknown codes.

    """
    return _KIND_BY_NUMBER.get(number, DEFAULT_KIND)


def number_from_kind(kind: SymbolKind | str) -> int:
    """Map a SymbolKind (or its string value) to its LSP numeric code.

    Unknown kind strings map to the FUNCTION code.
    """
    try:
        return _NUMBER_BY_KIND[SymbolKind(kind)]
    except ValueError:
        return _NUMBER_BY_KIND[DEFAULT_KIND]
