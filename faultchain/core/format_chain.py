"""Chain Formatting — render an error chain under a verbosity directive.

Invariants:
    - Rendering never raises and never mutates a node
    - Terse output shows only registered user-safe text
    - DETAIL or TRACE expose internal text and call sites; only TRACE walks
      past the nearest node
    - Unregistered codes render with the unknown descriptor
    - Same node + same directive → byte-identical output

Design Decisions:
    - One flatten-then-render pass; records are ChainRecord models so the
      text, structured and logging paths share one shape
    - Directive characters follow printf flags: `-` detail, `+` trace,
      `#` structured
"""

import json
from enum import Flag

from faultchain.core import codes as _codes
from faultchain.core.chain import (
    ChainError, CodeWrap, StackWrap, code_of, iter_chain,
)
from faultchain.core.codes import Coder, CodeRegistry
from faultchain.core.stack import resolve
from faultchain.schemas.record import ChainRecord


class Verbosity(Flag):
    """Combinable rendering flags. TERSE is the empty set."""
    TERSE = 0
    DETAIL = 1
    TRACE = 2
    STRUCTURED = 4

    @classmethod
    def parse(cls, directive: str) -> "Verbosity":
        """Build flags from directive characters, e.g. "-+" or "#+"."""
        flags = cls.TERSE
        for ch in directive:
            try:
                flags |= _DIRECTIVES[ch]
            except KeyError:
                raise ValueError(
                    f"Unknown verbosity directive {ch!r} in {directive!r}",
                ) from None
        return flags

    @property
    def detailed(self) -> bool:
        return bool(self & (Verbosity.DETAIL | Verbosity.TRACE))


_DIRECTIVES = {
    "-": Verbosity.DETAIL,
    "+": Verbosity.TRACE,
    "#": Verbosity.STRUCTURED,
}


def flatten(err: BaseException | None) -> list[BaseException]:
    """Chain as a list, nearest (index 0) to root (index n-1)."""
    return list(iter_chain(err))


def _internal_text(node: BaseException) -> str:
    if isinstance(node, ChainError):
        return node.internal_message
    return str(node)


def build_record(
    node: BaseException,
    ordinal: int,
    registry: CodeRegistry | None = None,
    coder: Coder | None = None,
) -> ChainRecord:
    """`coder` is the node's enclosing descriptor; looked up when omitted."""
    if coder is None:
        coder = code_of(node, registry)
    internal = _internal_text(node)
    fields = {}
    stack = node.stack if isinstance(node, ChainError) else None
    if stack is not None and stack.first is not None:
        info = resolve(stack.first)
        fields = {"file": info.file, "line": info.line, "function": info.function}
    return ChainRecord(
        ordinal=ordinal,
        code=coder.code,
        external_message=coder.external_text or internal,
        internal_message=internal,
        **fields,
    )


def render_records(
    err: BaseException | None,
    verbosity: Verbosity = Verbosity.TERSE,
    registry: CodeRegistry | None = None,
) -> list[ChainRecord]:
    nodes = flatten(err)
    total = len(nodes)
    if Verbosity.TRACE not in verbosity:
        return [build_record(node, total - 1, registry) for node in nodes[:1]]
    coders = _enclosing_coders(nodes, registry)
    return [
        build_record(node, total - i - 1, registry, coders[i])
        for i, node in enumerate(nodes)
    ]


def _enclosing_coders(
    nodes: list[BaseException], registry: CodeRegistry | None,
) -> list[Coder]:
    """Nearest enclosing descriptor per node, in one pass from the root up."""
    if registry is None:
        registry = _codes.default_registry
    coders: list[Coder] = [registry.unknown] * len(nodes)
    current = registry.unknown
    for i in range(len(nodes) - 1, -1, -1):
        if isinstance(nodes[i], CodeWrap):
            current = registry.lookup(nodes[i].code)
        coders[i] = current
    return coders


def render(
    err: BaseException | None,
    verbosity: Verbosity = Verbosity.TERSE,
    registry: CodeRegistry | None = None,
) -> str | list[dict]:
    """Text line, or a list of maps when STRUCTURED is set."""
    records = render_records(err, verbosity, registry)
    detailed = verbosity.detailed
    if Verbosity.STRUCTURED in verbosity:
        return [r.to_map(detailed) for r in records]
    return ";".join(r.to_line(detailed) for r in records).strip("\r\n\t")


def render_json(
    err: BaseException | None,
    verbosity: Verbosity = Verbosity.STRUCTURED,
    registry: CodeRegistry | None = None,
) -> str:
    data = render(err, verbosity | Verbosity.STRUCTURED, registry)
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def render_stack(err: BaseException | None) -> str:
    """Full-stack dump, root first: each node's text then all its frames.

    StackWrap nodes repeat no text, they only add frames.
    """
    parts: list[str] = []
    for node in reversed(flatten(err)):
        if not isinstance(node, StackWrap):
            prefix = "\n" if parts else ""
            parts.append(prefix + _internal_text(node))
        stack = node.stack if isinstance(node, ChainError) else None
        if stack is not None:
            parts.append(stack.format_full())
    return "".join(parts)
