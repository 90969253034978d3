"""Detector module for building a plan from a project directory.

Public API:
    detect(path) -> Plan | None
"""

from buildplan.detector.context import DetectionContext, PathEscapeError
from buildplan.detector.orchestrator import Detector, detect
from buildplan.detector.provider import ManifestError, Provider
from buildplan.detector.types import Plan

__all__ = [
    "detect",
    "Detector",
    "DetectionContext",
    "ManifestError",
    "PathEscapeError",
    "Plan",
    "Provider",
]
