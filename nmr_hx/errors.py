from __future__ import annotations
from contextlib import contextmanager


class HxError(Exception):
    """
    Base class for all errors raised by the hypercomplex engine.

    Every error carries a ``trace``: a list of contextual messages, innermost
    first, appended as the error propagates through :func:`trace` blocks.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.trace: list[str] = [message]

    def add_trace(self, message: str) -> None:
        self.trace.append(message)


class AllocationError(HxError, MemoryError):
    """Size computation overflowed or storage could not be obtained."""


class OutOfBoundsError(HxError, IndexError):
    """A multi-index or element index lies outside the array."""


class DimensionError(OutOfBoundsError):
    """A topological axis or algebraic basis index is out of range."""


class InvalidArgument(HxError, ValueError):
    """A parameter is malformed or outside its accepted range."""


@contextmanager
def trace(message: str):
    """
    Attach ``message`` to any :class:`HxError` leaving the block, then re-raise.

    Example:
        with trace("failed to apply forward fft"):
            fft(x, axis=1, basis=1)
    """
    try:
        yield
    except HxError as err:
        err.add_trace(message)
        raise


def format_trace(err: HxError) -> str:
    """Render the trace of an error outermost first, one message per line."""
    lines = []
    for depth, message in enumerate(reversed(err.trace)):
        lines.append(f"{'  ' * depth}{message}")
    return "\n".join(lines)
