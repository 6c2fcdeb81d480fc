"""Stack Capture — tests for snapshot bounds, call-site skipping and resolution.

Tests cover:
    - First frame is the call site of the constructor, not the constructor
    - skip moves the first frame further up
    - Capacity bounds (explicit depth and default depth)
    - Unresolvable and explicit frames
    - Text renderings (short names, full dump)
"""

import os
import sys

import pytest

from faultchain.core.stack import (
    STACK_DEPTH, Frame, FrameInfo, StackSnapshot,
    capture, default_depth, resolve, set_default_depth,
)

THIS_FILE = os.path.basename(__file__)


def _construct(skip: int = 0, depth: int | None = None) -> StackSnapshot:
    return capture(skip, depth)


def _outer_construct() -> StackSnapshot:
    return _construct(skip=1)


def _recurse(n: int, depth: int | None = None) -> StackSnapshot:
    if n == 0:
        return _construct(depth=depth)
    return _recurse(n - 1, depth)


# ─── capture ─────────────────────────────────────────────────────

def test_first_frame_is_call_site():
    line = sys._getframe().f_lineno + 1
    snap = _construct()
    info = resolve(snap.first)
    assert os.path.basename(info.file) == THIS_FILE
    assert info.line == line
    assert info.function.endswith("test_first_frame_is_call_site")


def test_function_name_is_module_qualified():
    snap = _construct()
    assert resolve(snap.first).function == (
        f"{__name__}.test_function_name_is_module_qualified"
    )


def test_skip_moves_past_intermediate_frames():
    line = sys._getframe().f_lineno + 1
    snap = _outer_construct()
    info = resolve(snap.first)
    assert info.function.endswith("test_skip_moves_past_intermediate_frames")
    assert info.line == line


def test_capture_bounded_by_explicit_depth():
    snap = _recurse(50, depth=5)
    assert len(snap) == 5
    assert all(f.function.endswith("_recurse") for f in snap)


def test_capture_bounded_by_default_depth():
    snap = _recurse(STACK_DEPTH + 10)
    assert len(snap) == STACK_DEPTH


def test_set_default_depth_changes_capacity(restore_depth):
    set_default_depth(3)
    assert default_depth() == 3
    assert len(_recurse(10)) == 3


def test_set_default_depth_rejects_zero(restore_depth):
    with pytest.raises(ValueError):
        set_default_depth(0)


def test_huge_skip_yields_empty_snapshot():
    snap = _construct(skip=10_000)
    assert len(snap) == 0
    assert snap.first is None


# ─── resolve ─────────────────────────────────────────────────────

def test_unresolvable_frame_degrades_to_unknown():
    info = resolve(Frame())
    assert info == FrameInfo("unknown", 0, "unknown")
    assert info.to_text() == "unknown"


def test_resolution_is_repeatable():
    frame = _construct().first
    assert resolve(frame) == resolve(frame)


def test_explicit_location_resolves_verbatim():
    snap = StackSnapshot.at("/srv/app/handlers.py", 42, "app.handlers.get_user")
    info = resolve(snap.first)
    assert info.file == "/srv/app/handlers.py"
    assert info.line == 42
    assert info.function == "app.handlers.get_user"


# ─── renderings ──────────────────────────────────────────────────

def test_short_names():
    info = FrameInfo("/srv/app/handlers.py", 42, "app.handlers.Users.get")
    assert info.short_file == "handlers.py"
    assert info.short_function == "get"
    assert str(info) == "handlers.py:42"
    assert info.to_text() == "app.handlers.Users.get /srv/app/handlers.py:42"


def test_frame_properties_delegate_to_resolve():
    frame = Frame.at("a.py", 7, "m.f")
    assert (frame.file, frame.line, frame.function) == ("a.py", 7, "m.f")
    assert str(frame) == "a.py:7"


def test_format_full_lists_every_frame():
    snap = StackSnapshot((
        Frame.at("/x/a.py", 1, "m.a"),
        Frame.at("/x/b.py", 2, "m.b"),
    ))
    assert snap.format_full() == "\nm.a\n\t/x/a.py:1\nm.b\n\t/x/b.py:2"
    assert str(snap) == "[a.py:1 b.py:2]"
