from __future__ import annotations


class AftercareError(Exception):
    """Base class for errors raised by aftercare-engine."""


class TemplateError(AftercareError, ValueError):
    """A task template definition could not be parsed."""


class TaskStoreError(AftercareError):
    """A bundled store rejected a write."""
