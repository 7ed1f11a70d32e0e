# qbell/errors.py
from __future__ import annotations


class QBellError(Exception):
    """Base class for every error raised by qbell."""


class ConfigurationError(QBellError, ValueError):
    """Invalid run parameters: trial count, label, qubit count, targets, backend."""


class NormDriftError(QBellError, RuntimeError):
    """Total probability left the fatal tolerance after a gate or collapse."""


class RandomSourceError(QBellError, RuntimeError):
    """The random source failed or produced a value outside [0, 1)."""
