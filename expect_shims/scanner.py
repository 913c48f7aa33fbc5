"""
expect_shims/scanner.py — extract ``$ExpectType`` / ``$ExpectError`` directives
===============================================================================

A directive is a single-line comment that is exactly one of::

    // $ExpectType <text>
    // $ExpectError

Directives are found by a lexical scan, not a regex over lines, so that
``//`` inside string literals and block comments is never mistaken for a
comment.  The scan only needs the C-family lexical skeleton (whitespace,
newlines, comments, strings, everything else), described by a parsimonious
PEG grammar that accepts every input.

Which line a directive applies to depends on where it sits:

* first token on its line → the **next** line::

      // $ExpectType number
      const x = 1;

* after other tokens → its **own** line::

      const x = 1; // $ExpectType number
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NamedTuple, Set

from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from .source import SourceText

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1: LEXICAL GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

LEXICAL_GRAMMAR = Grammar(r'''
    tokens        = token*
    token         = newline / whitespace / line_comment / block_comment
                  / string / word / other

    newline       = ~r"\r\n|\r|\n"
    whitespace    = ~r"[ \t\f\v\u00a0\ufeff]+"
    line_comment  = ~r"//[^\r\n]*"
    block_comment = ~r"/\*[\s\S]*?(?:\*/|\Z)"

    # Unterminated literals run to the end of their line (or file).
    string        = dq_string / sq_string / template
    dq_string     = ~r'"(?:[^"\\\r\n]|\\[\s\S])*"?'
    sq_string     = ~r"'(?:[^'\\\r\n]|\\[\s\S])*'?"
    template      = ~r"`(?:[^`\\]|\\[\s\S])*`?"

    word          = ~r"[\w$]+"
    other         = ~r"[\s\S]"
''')


class TokenKind(enum.Enum):
    END_OF_FILE = "eof"
    WHITESPACE = "whitespace"
    NEWLINE = "newline"
    LINE_COMMENT = "lineComment"
    BLOCK_COMMENT = "blockComment"
    STRING = "string"
    OTHER = "other"


class Token(NamedTuple):
    kind: TokenKind
    start: int
    text: str


class _TokenCollector(NodeVisitor):
    """Flattens the parse tree of :data:`LEXICAL_GRAMMAR` into tokens."""

    grammar = LEXICAL_GRAMMAR

    def visit_tokens(self, node: Node, visited_children: list) -> List[Token]:
        return visited_children

    def visit_token(self, node: Node, visited_children: list) -> Token:
        return visited_children[0]

    def visit_string(self, node: Node, visited_children: list) -> Token:
        return Token(TokenKind.STRING, node.start, node.text)

    def visit_newline(self, node: Node, _: list) -> Token:
        return Token(TokenKind.NEWLINE, node.start, node.text)

    def visit_whitespace(self, node: Node, _: list) -> Token:
        return Token(TokenKind.WHITESPACE, node.start, node.text)

    def visit_line_comment(self, node: Node, _: list) -> Token:
        return Token(TokenKind.LINE_COMMENT, node.start, node.text)

    def visit_block_comment(self, node: Node, _: list) -> Token:
        return Token(TokenKind.BLOCK_COMMENT, node.start, node.text)

    def visit_word(self, node: Node, _: list) -> Token:
        return Token(TokenKind.OTHER, node.start, node.text)

    def visit_other(self, node: Node, _: list) -> Token:
        return Token(TokenKind.OTHER, node.start, node.text)

    def generic_visit(self, node: Node, visited_children: list) -> Node:
        # dq_string / sq_string / template: folded by visit_string
        return node


def scan_tokens(text: str) -> Iterator[Token]:
    """Yield the tokens of *text*, then one END_OF_FILE token."""
    yield from _TokenCollector().parse(text)
    yield Token(TokenKind.END_OF_FILE, len(text), "")


# ═══════════════════════════════════════════════════════════════════
#  PART 2: DIRECTIVES
# ═══════════════════════════════════════════════════════════════════

DIRECTIVE_RE = re.compile(r"// \$Expect(?:Type (?P<type>.*)|(?P<error>Error))")
_ANY_DIRECTIVE_RE = re.compile(r"\$Expect(?:Type|Error)")

EXPECT_TYPE = "ExpectType"
EXPECT_ERROR = "ExpectError"


def has_directives(text: str) -> bool:
    """Cheap pre-check: does *text* mention a directive anywhere?"""
    return _ANY_DIRECTIVE_RE.search(text) is not None


class Duplicate(NamedTuple):
    """A line carrying two directives of the same kind."""
    line: int
    directive: str


@dataclass
class AssertionTable:
    """
    Directives of one file, keyed by the zero-based line they apply to.

    Attributes
    ----------
    error_lines     : Lines with an ``$ExpectError``
    type_assertions : line → expected type text, verbatim
    duplicates      : Lines with two directives of one kind, in scan order
    """
    error_lines: Set[int] = field(default_factory=set)
    type_assertions: Dict[int, str] = field(default_factory=dict)
    duplicates: List[Duplicate] = field(default_factory=list)

    def duplicate_lines(self, directive: str) -> Set[int]:
        return {d.line for d in self.duplicates if d.directive == directive}

    def _flag(self, line: int, directive: str) -> None:
        dup = Duplicate(line, directive)
        if dup not in self.duplicates:
            self.duplicates.append(dup)

    def add_error(self, line: int) -> None:
        if line in self.error_lines:
            self._flag(line, EXPECT_ERROR)
        self.error_lines.add(line)

    def add_type(self, line: int, expected: str) -> None:
        # Two assertions on one line verify neither of them.
        if self.type_assertions.pop(line, None) is not None:
            self._flag(line, EXPECT_TYPE)
        elif line not in self.duplicate_lines(EXPECT_TYPE):
            self.type_assertions[line] = expected

    def __bool__(self) -> bool:
        return bool(self.error_lines or self.type_assertions or self.duplicates)


def parse_assertions(source: SourceText) -> AssertionTable:
    """Scan *source* once and collect its directives."""
    table = AssertionTable()
    line_starts = source.line_starts
    prev_token_pos = -1
    cur_line = 0

    def applicable_line(pos: int) -> int:
        nonlocal cur_line
        while cur_line + 1 < len(line_starts) and line_starts[cur_line + 1] <= pos:
            cur_line += 1
        first_on_line = line_starts[cur_line] > prev_token_pos
        return cur_line + 1 if first_on_line else cur_line

    for tok in scan_tokens(source.text):
        if tok.kind is TokenKind.END_OF_FILE:
            break
        if tok.kind is TokenKind.WHITESPACE:
            continue
        if tok.kind is TokenKind.LINE_COMMENT:
            m = DIRECTIVE_RE.fullmatch(tok.text)
            if m:
                line = applicable_line(tok.start)
                if m.group("error"):
                    table.add_error(line)
                else:
                    table.add_type(line, m.group("type"))
            continue
        prev_token_pos = tok.start

    logger.debug(
        "scanned %d error line(s), %d type assertion(s), %d duplicate(s)",
        len(table.error_lines), len(table.type_assertions), len(table.duplicates),
    )
    return table


__all__ = [
    "LEXICAL_GRAMMAR",
    "TokenKind",
    "Token",
    "scan_tokens",
    "DIRECTIVE_RE",
    "EXPECT_TYPE",
    "EXPECT_ERROR",
    "has_directives",
    "Duplicate",
    "AssertionTable",
    "parse_assertions",
]
