"""Function extraction from raw source text.

Two passes over the file's lines:

1. Definition pass: each line is tested against the language's definition
   patterns (first match wins); each definition's extent is found by brace
   balancing or by indentation.
2. Call pass: every line inside each extent is scanned with every call
   pattern; self-calls and keywords/built-ins are dropped.

Lines that match nothing are skipped, so the worst case for garbage input
is an empty result, never an exception.
"""

from __future__ import annotations

import logging

from codenav.analysis.patterns import (
    BlockStyle,
    DefinitionPattern,
    LanguagePatternTable,
    get_pattern_table,
)
from codenav.types import CallSite, FunctionDefinition, Position

logger = logging.getLogger(__name__)

# Extent cap for brace languages when braces never balance
MAX_UNBALANCED_EXTENT = 50


def split_lines(content: str) -> list[str]:
    """Split content on newlines, dropping carriage returns."""
    return [line.rstrip("\r") for line in content.split("\n")]


def extract_functions(content: str, language: str) -> list[FunctionDefinition]:
    """Extract definitions and the calls inside them.

    Args:
        content: Source text.
        language: File extension (``"py"``, ``".ts"``) or a file path.

    Returns:
        Definitions in line order, each with its call sites in source order.

    """
    table = get_pattern_table(language)
    lines = split_lines(content)

    definitions = _find_definitions(lines, table, table.definitions)
    for definition in definitions:
        definition.calls.extend(_find_calls(lines, definition, table))

    logger.debug(
        "Extracted %d definitions (%s table, %d lines)",
        len(definitions),
        table.language,
        len(lines),
    )
    return definitions


def extract_symbols(content: str, language: str) -> list[FunctionDefinition]:
    """Extract every named declaration for the project symbol index.

    Uses the table's symbol patterns, which also cover constants,
    variables and type aliases. No call pass is made. Declarations without
    a body span only their own line.
    """
    table = get_pattern_table(language)
    lines = split_lines(content)
    return _find_definitions(lines, table, table.symbol_definitions or table.definitions)


def _find_definitions(
    lines: list[str],
    table: LanguagePatternTable,
    patterns: tuple[DefinitionPattern, ...],
) -> list[FunctionDefinition]:
    definitions: list[FunctionDefinition] = []

    for line_index, line in enumerate(lines):
        for pattern in patterns:
            match = pattern.regex.search(line)
            if match is None:
                continue

            name = match.group(pattern.name_group)
            # One-letter and underscore-prefixed names are noise
            if name and len(name) > 1 and not name.startswith("_"):
                if pattern.has_body:
                    end_line = find_definition_end(lines, line_index, table.block_style)
                    end_column = len(lines[end_line])
                else:
                    end_line, end_column = line_index, match.end()
                definitions.append(
                    FunctionDefinition(
                        name=name,
                        kind=pattern.kind,
                        start_line=line_index,
                        start_column=match.start(),
                        end_line=end_line,
                        end_column=end_column,
                        name_column=match.start(pattern.name_group),
                    )
                )
            break

    return definitions


def _find_calls(
    lines: list[str],
    definition: FunctionDefinition,
    table: LanguagePatternTable,
) -> list[CallSite]:
    calls: list[CallSite] = []
    last_line = min(definition.end_line, len(lines) - 1)

    for line_index in range(definition.start_line, last_line + 1):
        line = lines[line_index]
        line_calls: list[CallSite] = []
        for pattern in table.calls:
            for match in pattern.regex.finditer(line):
                name = match.group(pattern.name_group)
                if not name or name == definition.name or table.is_builtin(name):
                    continue
                line_calls.append(
                    CallSite(
                        name=name,
                        start=Position(line_index, match.start(pattern.name_group)),
                        end=Position(line_index, match.end(pattern.name_group)),
                    )
                )
        # Several patterns may hit one line; keep column order
        line_calls.sort(key=lambda call: call.start.character)
        calls.extend(line_calls)

    return calls


def find_definition_end(lines: list[str], start_line: int, block_style: BlockStyle) -> int:
    """Find the last line of the definition starting at start_line.

    Brace style: the first line where, after at least one ``{``, the running
    brace balance returns to zero; capped at start_line + 50 (or EOF) when
    the braces never balance.

    Indent style: the line before the first later non-blank line indented no
    deeper than the definition line; EOF if there is none.

    Args:
        lines: File lines.
        start_line: 0-indexed definition line.
        block_style: "brace" or "indent".

    Returns:
        0-indexed last line of the extent.

    """
    if block_style == "indent":
        start_indent = _indent_width(lines[start_line])
        for line_index in range(start_line + 1, len(lines)):
            line = lines[line_index]
            if not line.strip():
                continue
            if _indent_width(line) <= start_indent:
                return line_index - 1
        return len(lines) - 1

    balance = 0
    seen_open = False
    for line_index in range(start_line, len(lines)):
        for char in lines[line_index]:
            if char == "{":
                balance += 1
                seen_open = True
            elif char == "}":
                balance -= 1
                if seen_open and balance == 0:
                    return line_index

    return min(start_line + MAX_UNBALANCED_EXTENT, len(lines) - 1)


def find_container_name(lines: list[str], line_index: int, table: LanguagePatternTable) -> str | None:
    """Scan upward from line_index for the nearest container declaration.

    Args:
        lines: File lines.
        line_index: 0-indexed line of a method definition (scanned too).
        table: Pattern table providing the container regex.

    Returns:
        Container name, or None if no line matches.

    """
    if table.container_pattern is None:
        return None
    for index in range(line_index, -1, -1):
        match = table.container_pattern.search(lines[index])
        if match:
            return match.group(1)
    return None


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())
