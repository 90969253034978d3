"""Detector orchestrator: asks each provider in turn for a plan.

Detection flow:
1. Build a DetectionContext over the project root with the whitelisted
   environment overrides.
2. Ask each registered provider, in registration order, whether it
   recognises the project.
3. The first provider that says yes produces the Plan. Its errors
   propagate; later providers are not tried.

If no provider recognises the project, the result is None.
"""

import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence

from buildplan.core.config import Settings, get_settings
from buildplan.detector.context import DetectionContext
from buildplan.detector.node import NodeProvider
from buildplan.detector.provider import Provider
from buildplan.detector.types import Plan

logger = logging.getLogger(__name__)


def default_providers() -> list[Provider]:
    """Providers in priority order."""
    return [
        NodeProvider(),
    ]


class Detector:
    """Runs registered providers against one project directory."""

    def __init__(
        self,
        path: Path | str,
        providers: Optional[Sequence[Provider]] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.path = Path(path)
        self.providers: list[Provider] = list(providers) if providers is not None else default_providers()
        self._env = env

    def register(self, provider: Provider) -> None:
        self.providers.append(provider)

    def detect(self) -> Optional[Plan]:
        """Return the first provider's plan, or None if nothing was detected.

        Raises:
            ManifestError: If the detecting provider's manifest is invalid.
            pydantic.ValidationError: If no env was given and the process
                environment holds an invalid override (e.g. an unknown
                BUILDPLAN_STATIC_SERVER).
        """
        env = self._env if self._env is not None else load_relevant_env()
        ctx = DetectionContext(root=self.path, env=env)

        for provider in self.providers:
            try:
                detected = provider.detect(ctx)
            except OSError as exc:
                logger.warning("Provider %s failed to inspect %s: %s", provider.name(), ctx.root, exc)
                continue

            if detected:
                logger.info("Provider %s detected a project at %s", provider.name(), ctx.root)
                return provider.plan(ctx)

        logger.info("No provider detected a project at %s", ctx.root)
        return None


def load_relevant_env(settings: Optional[Settings] = None) -> dict[str, str]:
    """Return the environment overrides that may influence detection.

    Raises:
        pydantic.ValidationError: If `settings` is not given and the process
            environment holds an invalid override.
    """
    settings = settings or get_settings()
    return settings.to_env()


def detect(path: Path | str, env: Optional[Mapping[str, str]] = None) -> Optional[Plan]:
    """Run the full detection pipeline on a project directory.

    Raises:
        ManifestError: If the detecting provider's manifest is invalid.
        pydantic.ValidationError: If `env` is not given and the process
            environment holds an invalid override.
    """
    return Detector(path, env=env).detect()
