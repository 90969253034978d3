"""Detect how to install, build and run a source project."""

from buildplan.detector import Detector, ManifestError, Plan, detect

__version__ = "0.1.0"

__all__ = ["detect", "Detector", "ManifestError", "Plan", "__version__"]
