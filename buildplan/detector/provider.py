"""Provider protocol and the errors providers may raise.

A provider is one language ecosystem's detect/plan unit. The orchestrator
only sees this interface, so new ecosystems plug in without touching it.
"""

from typing import Optional, Protocol, runtime_checkable

from buildplan.detector.context import DetectionContext
from buildplan.detector.types import Plan


@runtime_checkable
class Provider(Protocol):
    """Protocol for language provider implementations."""

    def name(self) -> str:
        """Short identifier recorded as Plan.provider (e.g. "node")."""
        ...

    def detect(self, ctx: DetectionContext) -> bool:
        """Return True if this provider recognises the project.

        Raises:
            OSError: On an unexpected read failure. The orchestrator treats
                this as "not detected" and moves on to the next provider.
        """
        ...

    def plan(self, ctx: DetectionContext) -> Plan:
        """Build the plan for a project this provider detected.

        Raises:
            ManifestError: If the defining manifest exists but is invalid.
        """
        ...


class ManifestError(Exception):
    """Raised when a project manifest exists but cannot be used.

    Carries the manifest file name and underlying error for upstream logging.
    """

    def __init__(self, manifest: str, message: str, cause: Optional[Exception] = None):
        self.manifest = manifest
        self.cause = cause
        super().__init__(f"[{manifest}] {message}")
