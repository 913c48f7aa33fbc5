# tests/conftest.py
"""
Shared fakes for expect-shims tests.

``ToyChecker`` is a line-oriented stand-in for a real type checker.  It
understands just enough of a C-family toy language to produce syntax
trees, rendered types and diagnostics:

    const x = 1;          // VariableStatement → number
    let s = "hi";         // VariableStatement → string
    f();                  // ExpressionStatement(CallExpression)
    x;                    // ExpressionStatement(Identifier)

Calls to functions not listed in ``functions`` and unknown identifiers
produce a "Cannot find name" diagnostic and the type ``any``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pytest

from expect_shims.checker_api import CheckerDiagnostic
from expect_shims.config import ExpectOptions, VersionInstall

_STMT_RE = re.compile(r"[^;]+;")
_DECL_RE = re.compile(r"(?P<kw>const|let)\s+(?P<name>\w+)\s*=\s*(?P<init>.+)$")
_CALL_RE = re.compile(r"(?P<callee>\w+)\((?P<args>.*)\)$")
_NUM_RE = re.compile(r"\d+(?:\.\d+)?$")
_STR_RE = re.compile(r'"[^"]*"$')
_IDENT_RE = re.compile(r"\w+$")


class ToyNode:
    """Syntax node satisfying the SyntaxNode protocol."""

    def __init__(
        self,
        owner: "ToyChecker",
        kind: str,
        start: int,
        end: int,
        children: Sequence["ToyNode"] = (),
        expression: Optional["ToyNode"] = None,
    ) -> None:
        self.owner = owner
        self.kind = kind
        self.start = start
        self.end = end
        self._children = list(children)
        self.expression = expression

    def children(self) -> List["ToyNode"]:
        return list(self._children)

    def __repr__(self) -> str:
        return f"<ToyNode {self.kind} {self.start}:{self.end}>"


class ToyChecker:
    """A CheckerInstance over the toy language."""

    def __init__(
        self,
        files: Mapping[str, str],
        functions: Optional[Mapping[str, str]] = None,
        declaration_files: Iterable[str] = (),
        extra_diagnostics: Iterable[CheckerDiagnostic] = (),
        label: str = "",
    ) -> None:
        self.files = dict(files)
        self.functions = dict(functions or {})
        self.declaration_files = set(declaration_files)
        self.extra_diagnostics = list(extra_diagnostics)
        self.label = label
        self.type_queries: List[ToyNode] = []
        self._types: Dict[int, str] = {}
        self._trees: Dict[str, ToyNode] = {}
        self._diagnostics: Dict[str, List[CheckerDiagnostic]] = {}
        for name, text in self.files.items():
            self._build(name, text)

    # ── CheckerInstance protocol ─────────────────────────────────────

    def source_text(self, file_name: str) -> str:
        return self.files[file_name]

    def is_declaration_file(self, file_name: str) -> bool:
        return file_name in self.declaration_files

    def syntax_tree(self, file_name: str) -> ToyNode:
        return self._trees[file_name]

    def diagnostics(self, file_name: str) -> List[CheckerDiagnostic]:
        return list(self._diagnostics[file_name]) + list(self.extra_diagnostics)

    def type_of(self, node: ToyNode) -> ToyNode:
        if node.owner is not self:
            raise AssertionError("node queried through a foreign checker")
        self.type_queries.append(node)
        return node

    def render_type(self, type_: ToyNode, *, truncate: bool = True) -> str:
        text = self._types[id(type_)]
        if truncate and len(text) > 20:
            return text[:17] + "..."
        return text

    # ── Toy front end ────────────────────────────────────────────────

    def _node(self, kind: str, start: int, end: int, type_text: str, **kw: Any) -> ToyNode:
        node = ToyNode(self, kind, start, end, **kw)
        self._types[id(node)] = type_text
        return node

    def _build(self, file_name: str, text: str) -> None:
        diags: List[CheckerDiagnostic] = []
        variables: Dict[str, str] = {}
        statements: List[ToyNode] = []
        offset = 0
        for raw_line in text.splitlines(keepends=True):
            code = raw_line.split("//", 1)[0]
            for m in _STMT_RE.finditer(code):
                stmt = self._statement(file_name, m, offset, variables, diags)
                if stmt is not None:
                    statements.append(stmt)
            offset += len(raw_line)
        self._trees[file_name] = self._node(
            "SourceFile", 0, len(text), "typeof import", children=statements
        )
        self._diagnostics[file_name] = diags

    def _statement(self, file_name, m, offset, variables, diags) -> Optional[ToyNode]:
        body = m.group(0)[:-1]
        stripped = body.strip()
        if not stripped:
            return None
        start = offset + m.start() + (len(body) - len(body.lstrip()))
        end = offset + m.end()
        decl = _DECL_RE.match(stripped)
        if decl:
            init_start = start + decl.start("init")
            init = self._expression(
                file_name, decl.group("init").strip(), init_start, variables, diags
            )
            name_start = start + decl.start("name")
            ident = self._node(
                "Identifier", name_start, name_start + len(decl.group("name")),
                self._types[id(init)],
            )
            variables[decl.group("name")] = self._types[id(init)]
            return self._node(
                "VariableStatement", start, end, self._types[id(init)],
                children=[ident, init],
            )
        expr = self._expression(file_name, stripped, start, variables, diags)
        return self._node(
            "ExpressionStatement", start, end, "void",
            children=[expr], expression=expr,
        )

    def _expression(self, file_name, text, start, variables, diags) -> ToyNode:
        end = start + len(text)
        if _NUM_RE.match(text):
            return self._node("NumericLiteral", start, end, "number")
        if _STR_RE.match(text):
            return self._node("StringLiteral", start, end, "string")
        call = _CALL_RE.match(text)
        if call:
            callee_name = call.group("callee")
            callee = self._node(
                "Identifier", start, start + len(callee_name), "any"
            )
            if callee_name in self.functions:
                result = self.functions[callee_name]
                self._types[id(callee)] = f"() => {result}"
            else:
                result = "any"
                diags.append(self._cannot_find(file_name, callee_name, start))
            return self._node("CallExpression", start, end, result, children=[callee])
        if _IDENT_RE.match(text):
            if text in variables:
                return self._node("Identifier", start, end, variables[text])
            diags.append(self._cannot_find(file_name, text, start))
            return self._node("Identifier", start, end, "any")
        return self._node("UnknownExpression", start, end, "unknown")

    @staticmethod
    def _cannot_find(file_name: str, name: str, start: int) -> CheckerDiagnostic:
        return CheckerDiagnostic(
            message=f"Cannot find name '{name}'.",
            file_name=file_name,
            start=start,
            length=len(name),
        )


class RecordingProvider:
    """CheckerProvider that builds ToyCheckers per version and records calls."""

    def __init__(self, functions_by_version: Mapping[str, Mapping[str, str]], files: Mapping[str, str]) -> None:
        self.functions_by_version = dict(functions_by_version)
        self.files = dict(files)
        self.calls: List[tuple] = []
        self.built: Dict[str, List[ToyChecker]] = {}

    def construct(self, config_path: str, install: VersionInstall) -> ToyChecker:
        self.calls.append((config_path, install.version_name, install.path))
        checker = ToyChecker(
            self.files,
            functions=self.functions_by_version[install.version_name],
            label=install.version_name,
        )
        self.built.setdefault(install.version_name, []).append(checker)
        return checker

    @property
    def versions_built(self) -> List[str]:
        return [version for _, version, _ in self.calls]


def make_options(*versions: str, label: str = "TypeScript") -> ExpectOptions:
    return ExpectOptions(
        config_path="project/tsconfig.json",
        next_path="/checkers/next",
        older_installs=tuple(VersionInstall(v, f"/checkers/{v}") for v in versions),
        checker_label=label,
    )


@pytest.fixture
def toy_checker():
    """Factory fixture: ``toy_checker(text, **kwargs)`` → (checker, file name)."""
    def _make(text: str, file_name: str = "test.ts", **kwargs: Any):
        return ToyChecker({file_name: text}, **kwargs), file_name
    return _make
