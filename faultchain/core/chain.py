"""Error Chain — four node kinds linked by `cause`, plus construction and inspection.

Invariants:
    - ChainError has exactly four concrete kinds: BaseError, StackWrap,
      MessageWrap, CodeWrap (the format engine handles exactly these)
    - Nodes are immutable after construction: read-only properties, no setters
    - Following `cause` always terminates; every wrap owns its cause
    - A CodeWrap's code never changes; wrap() and wrap_with_stack() over a
      CodeWrap yield a CodeWrap with the same code
    - Only BaseError, StackWrap and CodeWrap own a stack snapshot;
      MessageWrap never captures one
    - Constructors never raise except for a zero code

Design Decisions:
    - Nodes are Exceptions so they can be raised; wraps set __cause__ so the
      interpreter's traceback shows the same chain
    - str(CodeWrap) is the user-safe text; internal text is `internal_message`
    - Inspection walks with unwrap(): chain nodes by `cause`, foreign
      exceptions by `__cause__`
    - `*args` are applied with % only when given ("100%" stays literal)
"""

from typing import Iterator, Protocol, TypeVar, runtime_checkable

from faultchain.core import codes as _codes
from faultchain.core.codes import Coder, CodeRegistry
from faultchain.core.errors import ZeroCodeError
from faultchain.core.stack import StackSnapshot, capture

E = TypeVar("E", bound=BaseException)


@runtime_checkable
class SupportsCause(Protocol):
    """Anything exposing a one-step `cause` accessor."""

    @property
    def cause(self) -> BaseException | None: ...


class ChainError(Exception):
    """Base of every chain node. Not instantiated directly."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        stack: StackSnapshot | None = None,
    ):
        super().__init__(message)
        self._cause = cause
        self._stack = stack
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> BaseException | None:
        return self._cause

    @property
    def stack(self) -> StackSnapshot | None:
        return self._stack

    @property
    def code(self) -> int | None:
        return None

    @property
    def internal_message(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.internal_message

    def __format__(self, spec: str) -> str:
        """`-` detail, `+` trace, `#` structured (JSON text); empty → str()."""
        if not spec:
            return str(self)
        from faultchain.core.format_chain import Verbosity, render, render_json

        verbosity = Verbosity.parse(spec)
        if Verbosity.STRUCTURED in verbosity:
            return render_json(self, verbosity)
        return render(self, verbosity)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.internal_message!r})"


class BaseError(ChainError):
    """Root node: own message, own stack, no cause, no code."""

    def __init__(self, message: str, stack: StackSnapshot):
        super().__init__(message, None, stack)
        self._message = message

    @property
    def internal_message(self) -> str:
        return self._message


class StackWrap(ChainError):
    """Adds call-site provenance to a cause; its text is the cause's text."""

    def __init__(self, cause: BaseException, stack: StackSnapshot):
        super().__init__(_text_below_stack_wraps(cause), cause, stack)

    @property
    def internal_message(self) -> str:
        return _text_below_stack_wraps(self._cause)


def _text_below_stack_wraps(err: BaseException) -> str:
    """Text of the first node under a run of StackWraps, found iteratively."""
    while isinstance(err, StackWrap):
        err = err.cause
    return str(err)


class MessageWrap(ChainError):
    """Adds context text to a cause. Owns no stack."""

    def __init__(self, cause: BaseException, message: str):
        super().__init__(message, cause, None)
        self._message = message

    @property
    def internal_message(self) -> str:
        return self._message


class CodeWrap(ChainError):
    """Carries a diagnostic code, internal detail text and its own stack."""

    def __init__(
        self,
        code: int,
        detail: str,
        cause: BaseException | None,
        stack: StackSnapshot,
    ):
        if code == 0:
            raise ZeroCodeError()
        super().__init__(detail, cause, stack)
        self._code = code
        self._detail = detail

    @property
    def code(self) -> int:
        return self._code

    @property
    def detail(self) -> str:
        return self._detail

    @property
    def internal_message(self) -> str:
        return self._detail

    def __str__(self) -> str:
        return _codes.lookup(self._code).external_text or self._detail

    def __repr__(self) -> str:
        return f"CodeWrap(code={self._code}, detail={self._detail!r})"


def _text(message: str, args: tuple) -> str:
    return message % args if args else message


# ─── Construction ────────────────────────────────────────────────

def new(message: str, *args) -> BaseError:
    return BaseError(_text(message, args), capture())


def wrap(cause: BaseException | None, message: str, *args) -> ChainError | None:
    """Add context. Over a CodeWrap the result keeps its code and captures a
    stack; otherwise it is a stackless MessageWrap."""
    if cause is None:
        return None
    if isinstance(cause, CodeWrap):
        return CodeWrap(cause.code, _text(message, args), cause, capture())
    return MessageWrap(cause, _text(message, args))


def wrap_with_stack(cause: BaseException | None) -> ChainError | None:
    if cause is None:
        return None
    if isinstance(cause, CodeWrap):
        return CodeWrap(cause.code, cause.detail, cause, capture())
    return StackWrap(cause, capture())


def with_message(cause: BaseException | None, message: str, *args) -> MessageWrap | None:
    """Add context without code promotion or stack capture."""
    if cause is None:
        return None
    return MessageWrap(cause, _text(message, args))


def with_code(code: int, message: str, *args) -> CodeWrap:
    return CodeWrap(code, _text(message, args), None, capture())


def wrap_with_code(
    cause: BaseException | None, code: int, message: str, *args,
) -> CodeWrap | None:
    """Re-code the chain from here on, whatever the cause carried."""
    if cause is None:
        return None
    return CodeWrap(code, _text(message, args), cause, capture())


# ─── Inspection ──────────────────────────────────────────────────

def cause(err: BaseException) -> BaseException | None:
    if isinstance(err, SupportsCause):
        return err.cause
    return None


def root_cause(err: BaseException | None) -> BaseException | None:
    """Follow `cause` until a node without one; non-causers return themselves."""
    while err is not None:
        nxt = cause(err)
        if nxt is None:
            break
        err = nxt
    return err


def unwrap(err: BaseException | None) -> BaseException | None:
    """One step down the chain, for code that does not know the node kinds."""
    if err is None:
        return None
    if isinstance(err, ChainError):
        return err.cause
    return err.__cause__


def iter_chain(err: BaseException | None) -> Iterator[BaseException]:
    """Nearest first, root last."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = unwrap(err)


def code_of(
    err: BaseException | None, registry: CodeRegistry | None = None,
) -> Coder | None:
    """Descriptor of the nearest CodeWrap in the chain, else the unknown one."""
    if err is None:
        return None
    if registry is None:
        registry = _codes.default_registry
    for node in iter_chain(err):
        if isinstance(node, CodeWrap):
            return registry.lookup(node.code)
    return registry.unknown


def is_code(err: BaseException | None, code: int) -> bool:
    return any(
        isinstance(node, CodeWrap) and node.code == code
        for node in iter_chain(err)
    )


# ─── Compatibility ───────────────────────────────────────────────

def is_error(err: BaseException | None, target: BaseException) -> bool:
    """True if `target` is, or equals, any node of the chain."""
    return any(node is target or node == target for node in iter_chain(err))


def as_error(err: BaseException | None, exc_type: type[E]) -> E | None:
    """First node of the chain that is an instance of `exc_type`."""
    for node in iter_chain(err):
        if isinstance(node, exc_type):
            return node
    return None
