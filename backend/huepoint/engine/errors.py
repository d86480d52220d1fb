"""Engine exceptions."""

from __future__ import annotations


class InvalidRasterError(ValueError):
    """Raster is empty, has no pixels, or has an unsupported shape."""


class EngineBusyError(RuntimeError):
    """A request arrived while the engine was still computing another one."""
