"""Stack Capture — bounded call-stack snapshots resolved lazily to file/line/function.

Invariants:
    - A snapshot holds at most `depth` frames (STACK_DEPTH by default)
    - The first frame of a snapshot is the call site of the node constructor,
      never a faultchain-internal frame
    - capture() never raises; without frame introspection the snapshot is empty
    - Resolution is pure and repeatable; nothing is cached across snapshots
    - Unresolvable frames degrade to "unknown" / 0 / "unknown"

Design Decisions:
    - Raw identifier = (code object, line, module name): keeps no frame alive,
      so locals of the failing call are not retained by the error
    - Frame.at() gives an explicit caller-supplied location for runtimes
      without frame introspection
"""

import inspect
import os
from dataclasses import dataclass
from types import CodeType

STACK_DEPTH = 32
UNKNOWN = "unknown"

_default_depth = STACK_DEPTH


def set_default_depth(depth: int) -> None:
    """Set the capacity used by capture() when no depth is given."""
    global _default_depth
    if depth < 1:
        raise ValueError(f"stack depth must be >= 1, got {depth}")
    _default_depth = depth


def default_depth() -> int:
    return _default_depth


@dataclass(frozen=True)
class FrameInfo:
    """A resolved frame."""
    file: str
    line: int
    function: str

    @property
    def short_file(self) -> str:
        return os.path.basename(self.file)

    @property
    def short_function(self) -> str:
        """Last dotted component: `pkg.mod.Class.method` → `method`."""
        return self.function.rsplit(".", 1)[-1]

    def to_text(self) -> str:
        if self.function == UNKNOWN:
            return UNKNOWN
        return f"{self.function} {self.file}:{self.line}"

    def __str__(self) -> str:
        return f"{self.short_file}:{self.line}"


_UNRESOLVED = FrameInfo(UNKNOWN, 0, UNKNOWN)


@dataclass(frozen=True)
class Frame:
    """One raw frame identifier. Resolve with resolve(frame) or the properties."""
    code: CodeType | None = None
    lineno: int = 0
    module: str = ""
    location: FrameInfo | None = None

    @classmethod
    def at(cls, file: str, line: int, function: str) -> "Frame":
        """Explicit location, used where the interpreter offers no frames."""
        return cls(location=FrameInfo(file, line, function))

    @property
    def file(self) -> str:
        return resolve(self).file

    @property
    def line(self) -> int:
        return resolve(self).line

    @property
    def function(self) -> str:
        return resolve(self).function

    def __str__(self) -> str:
        return str(resolve(self))


def resolve(frame: Frame) -> FrameInfo:
    """Map a raw frame to file/line/function, degrading to "unknown" placeholders."""
    if frame.location is not None:
        return frame.location
    code = frame.code
    if code is None:
        return _UNRESOLVED
    file = code.co_filename or UNKNOWN
    qualname = getattr(code, "co_qualname", None) or code.co_name or UNKNOWN
    function = f"{frame.module}.{qualname}" if frame.module else qualname
    return FrameInfo(file, frame.lineno or 0, function)


@dataclass(frozen=True)
class StackSnapshot:
    """Immutable, bounded sequence of raw frames captured at node construction."""
    frames: tuple[Frame, ...] = ()

    @classmethod
    def at(cls, file: str, line: int, function: str) -> "StackSnapshot":
        return cls((Frame.at(file, line, function),))

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self):
        return iter(self.frames)

    def __getitem__(self, index: int) -> Frame:
        return self.frames[index]

    @property
    def first(self) -> Frame | None:
        """Nearest frame: the call site that built the error."""
        return self.frames[0] if self.frames else None

    def resolved(self) -> list[FrameInfo]:
        return [resolve(f) for f in self.frames]

    def format_full(self) -> str:
        """Every frame as `\\n<function>\\n\\t<file>:<line>`."""
        return "".join(
            f"\n{info.function}\n\t{info.file}:{info.line}"
            for info in self.resolved()
        )

    def __str__(self) -> str:
        return "[" + " ".join(str(f) for f in self.frames) + "]"


def capture(skip: int = 0, depth: int | None = None) -> StackSnapshot:
    """Record up to `depth` frames, starting `skip` frames above the caller
    of the function that calls capture()."""
    limit = depth if depth is not None else _default_depth
    frame = inspect.currentframe()
    try:
        # capture() itself, then the constructor that called it
        for _ in range(skip + 2):
            if frame is None:
                break
            frame = frame.f_back
        frames = []
        while frame is not None and len(frames) < limit:
            frames.append(Frame(
                frame.f_code,
                frame.f_lineno or 0,
                frame.f_globals.get("__name__", ""),
            ))
            frame = frame.f_back
        return StackSnapshot(tuple(frames))
    finally:
        del frame
