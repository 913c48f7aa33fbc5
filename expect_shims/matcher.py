"""Match ``$ExpectType`` assertions to syntax nodes and compare types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from .checker_api import CheckerInstance, SyntaxNode, is_expression_statement
from .normalize import normalize_type_text
from .source import SourceText


@dataclass(frozen=True)
class UnmetExpectation:
    node: Any
    expected: str
    actual: str


@dataclass
class ExpectTypeFailures:
    """
    Attributes
    ----------
    unmet  : Lines whose first node has a different type
    unused : Lines with an assertion but no node at all
    """
    unmet: List[UnmetExpectation] = field(default_factory=list)
    unused: List[int] = field(default_factory=list)


def match_type_assertions(
    root: SyntaxNode,
    type_assertions: Mapping[int, str],
    checker: CheckerInstance,
    source: SourceText,
) -> ExpectTypeFailures:
    """
    Check every type assertion against the first node starting on its line.

    The tree is walked in pre-order, so the outermost node on a line is
    seen before its children.  An assertion is consumed by that node
    whether or not the types agree.  *checker* must be the instance that
    produced *root*.
    """
    pending: Dict[int, str] = dict(type_assertions)
    result = ExpectTypeFailures()
    if not pending:
        return result

    stack: List[SyntaxNode] = list(reversed(list(root.children())))
    while stack and pending:
        node = stack.pop()
        line = source.line_of(node.start)
        expected = pending.pop(line, None)
        if expected is not None:
            target = node.expression if is_expression_statement(node) else node
            rendered = checker.render_type(checker.type_of(target), truncate=False)
            actual = normalize_type_text(rendered)
            if normalize_type_text(expected) != actual:
                result.unmet.append(UnmetExpectation(target, expected, actual))
        stack.extend(reversed(list(node.children())))

    result.unused = sorted(pending)
    return result


__all__ = ["UnmetExpectation", "ExpectTypeFailures", "match_type_assertions"]
