"""Heuristic source analysis: pattern tables and function extraction.

Pipeline: get_pattern_table() → extract_functions() → FunctionDefinition[]
"""

from codenav.analysis.extractor import (
    extract_functions,
    extract_symbols,
    find_container_name,
    find_definition_end,
    split_lines,
)
from codenav.analysis.patterns import (
    GENERIC_TABLE,
    CallPattern,
    DefinitionPattern,
    LanguagePatternTable,
    get_pattern_table,
    register_pattern_table,
)

__all__ = [
    "extract_functions",
    "extract_symbols",
    "find_container_name",
    "find_definition_end",
    "split_lines",
    "GENERIC_TABLE",
    "CallPattern",
    "DefinitionPattern",
    "LanguagePatternTable",
    "get_pattern_table",
    "register_pattern_table",
]
