"""Call-stack inspection used to attribute log events to application code.

Frame 0 is always the function that called into this module. Leading frames
that belong to ``ignore_modules`` (the logging framework, our own processors)
are stepped over before ``skip_frames`` is applied, so the offset only has to
account for application-level wrapper layers.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from types import FrameType


UNKNOWN = "Unknown"
UNAVAILABLE_TRACE = "Unable to capture full context"


@dataclass(frozen=True)
class CallerContext:
    class_name: str = UNKNOWN
    method_name: str = UNKNOWN
    file_path: str = UNKNOWN
    line_number: int = 0

    @classmethod
    def unknown(cls) -> CallerContext:
        return cls()

    @classmethod
    def from_frame(cls, frame: FrameType) -> CallerContext:
        code = frame.f_code
        return cls(
            class_name=_declaring_name(frame),
            method_name=code.co_name or UNKNOWN,
            file_path=code.co_filename or UNKNOWN,
            line_number=frame.f_lineno or 0,
        )


@dataclass(frozen=True)
class CallSiteInfo:
    """Where a call expression sits in source: method, file and line."""

    method_name: str = UNKNOWN
    source_file: str = UNKNOWN
    line_number: int = 0

    @classmethod
    def from_frame(cls, frame: FrameType) -> CallSiteInfo:
        code = frame.f_code
        return cls(
            method_name=code.co_name or UNKNOWN,
            source_file=code.co_filename or UNKNOWN,
            line_number=frame.f_lineno or 0,
        )


def _module_name(frame: FrameType) -> str:
    return str(frame.f_globals.get("__name__") or "")


def _qualname(frame: FrameType) -> str:
    code = frame.f_code
    # co_qualname only exists on 3.11+.
    return getattr(code, "co_qualname", None) or code.co_name


def _declaring_name(frame: FrameType) -> str:
    owners = [part for part in _qualname(frame).split(".")[:-1] if part != "<locals>"]
    if owners:
        return owners[-1]
    module = _module_name(frame)
    if module:
        return module.rsplit(".", 1)[-1]
    return UNKNOWN


def _is_ignored(frame: FrameType, ignore_modules: Sequence[str]) -> bool:
    module = _module_name(frame)
    return any(module == name or module.startswith(name + ".") for name in ignore_modules)


def _find_frame(start: FrameType | None, skip_frames: int, ignore_modules: Sequence[str]) -> FrameType | None:
    frame = start
    while frame is not None and ignore_modules and _is_ignored(frame, ignore_modules):
        frame = frame.f_back

    for _ in range(max(skip_frames, 0)):
        if frame is None:
            break
        frame = frame.f_back
    return frame


def resolve_caller(skip_frames: int = 0, ignore_modules: Sequence[str] = ()) -> CallerContext:
    """Return the class/method/file/line of the selected caller frame.

    Falls back to the all-``Unknown`` sentinel when the stack is shallower than
    the requested depth.
    """

    frame = _find_frame(sys._getframe(1), skip_frames, ignore_modules)
    if frame is None:
        return CallerContext.unknown()
    return CallerContext.from_frame(frame)


def resolve_full_trace(skip_frames: int = 0, ignore_modules: Sequence[str] = ()) -> str:
    """Render every frame from the selected caller outwards, one per line."""

    try:
        frame = _find_frame(sys._getframe(1), skip_frames, ignore_modules)
        lines: list[str] = []
        while frame is not None:
            lines.append(
                f"{_module_name(frame)}.{_qualname(frame)} "
                f"(Line {frame.f_lineno or 0} in {frame.f_code.co_filename})"
            )
            frame = frame.f_back
        return "\n".join(lines).strip()
    except Exception:
        return UNAVAILABLE_TRACE


def capture_call_site(skip_frames: int = 0) -> CallSiteInfo:
    """Call-site info for whoever called the function that calls this.

    ``skip_frames`` walks further out for helpers that are themselves wrapped.
    """

    try:
        frame = sys._getframe(2 + max(skip_frames, 0))
    except ValueError:
        # Stack is shallower than requested.
        return CallSiteInfo()
    return CallSiteInfo.from_frame(frame)
