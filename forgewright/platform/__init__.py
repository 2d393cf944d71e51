"""Operating system boundary: external processes."""

from forgewright.platform.process import ProcessError, is_available, run

__all__ = ["ProcessError", "is_available", "run"]
