"""Exception hierarchy.

Probe failures never surface as exceptions; only configuration and page
output problems do, and both are fatal for the process.
"""

from __future__ import annotations


class UptimerError(Exception):
    """Base for all uptimer errors."""


class ChecksFileError(UptimerError):
    """The probe list could not be read or parsed."""


class RenderError(UptimerError):
    """A status page could not be written."""
