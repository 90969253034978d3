"""Shared types for the detector module.

All providers produce a Plan: the single JSON-serializable description of
how to install, build and run a project.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

# Optional string fields, in wire order. None is omitted on the wire; an
# empty string is kept so consumers can tell the two apart.
_OPTIONAL_FIELDS = (
    "language_version",
    "framework",
    "framework_version",
    "package_manager",
    "package_manager_version",
    "install_command",
    "build_command",
    "start_command",
)


@dataclass
class Plan:
    """Complete detection output for a project.

    provider and language are always set. detected_files lists every file
    whose presence influenced the result, in the order it was considered.
    metadata is an open map for provider-specific extensions.
    """

    provider: str
    language: str
    language_version: Optional[str] = None
    framework: Optional[str] = None
    framework_version: Optional[str] = None
    package_manager: Optional[str] = None
    package_manager_version: Optional[str] = None
    install_command: Optional[str] = None
    build_command: Optional[str] = None
    start_command: Optional[str] = None
    detected_files: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    build_env: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)

    def add_detected_file(self, name: str) -> None:
        if name not in self.detected_files:
            self.detected_files.append(name)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "provider": self.provider,
            "language": self.language,
        }
        for name in _OPTIONAL_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        data["detected_files"] = list(self.detected_files)
        data["metadata"] = dict(self.metadata)
        data["build_env"] = dict(self.build_env)
        data["env"] = dict(self.env)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Plan":
        """Rebuild a Plan from `to_dict()` output. Unknown keys are ignored."""
        plan = cls(provider=data["provider"], language=data["language"])
        for name in _OPTIONAL_FIELDS:
            if name in data:
                setattr(plan, name, data[name])
        plan.detected_files = list(data.get("detected_files") or [])
        plan.metadata = dict(data.get("metadata") or {})
        plan.build_env = dict(data.get("build_env") or {})
        plan.env = dict(data.get("env") or {})
        return plan

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, raw: str) -> "Plan":
        return cls.from_dict(json.loads(raw))
