"""package.json model and loader.

The manifest is validated with pydantic so a structurally wrong file
(e.g. `"scripts": []`) surfaces as a ManifestError instead of a confusing
failure deep inside a resolver.
"""

import json
import logging
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from buildplan.detector.context import DetectionContext
from buildplan.detector.provider import ManifestError

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"
PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"


class Engines(BaseModel):
    """The `engines` block. Missing entries are empty strings."""

    model_config = ConfigDict(extra="ignore")

    node: str = ""
    npm: str = ""
    yarn: str = ""
    pnpm: str = ""
    bun: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class PackageJson(BaseModel):
    """The subset of package.json that detection relies on."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = ""
    version: str = ""
    main: str = ""
    module_type: str = Field(default="", alias="type")
    scripts: dict[str, str] = Field(default_factory=dict)
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    engines: Engines = Field(default_factory=Engines)
    package_manager: str = Field(default="", alias="packageManager")
    workspaces: list[str] = Field(default_factory=list)
    cache_directories: list[str] = Field(default_factory=list, alias="cacheDirectories")

    @field_validator("name", "version", "main", "module_type", "package_manager", mode="before")
    @classmethod
    def null_string(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("scripts", "dependencies", "dev_dependencies", "engines", mode="before")
    @classmethod
    def null_mapping(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("cache_directories", mode="before")
    @classmethod
    def null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("workspaces", mode="before")
    @classmethod
    def normalise_workspaces(cls, v: Any) -> list[str]:
        """Accept both `["pkgs/*"]` and `{"packages": ["pkgs/*"]}`."""
        if isinstance(v, dict):
            v = v.get("packages")
        if isinstance(v, list) and all(isinstance(item, str) for item in v):
            return v
        return []

    def has_script(self, name: str) -> bool:
        return name in self.scripts

    def has_dependency(self, name: str) -> bool:
        """True if `name` is declared in dependencies or devDependencies."""
        return name in self.dependencies or name in self.dev_dependencies

    def dependency_version(self, name: str) -> str:
        """Declared range for `name`, preferring dependencies over devDependencies."""
        if name in self.dependencies:
            return self.dependencies[name]
        return self.dev_dependencies.get(name, "")

    def package_manager_info(self) -> tuple[str, str]:
        """Split the packageManager field ("pnpm@8.6.0+sha256.abc") into (name, version)."""
        if not self.package_manager:
            return "", ""
        name, _, rest = self.package_manager.partition("@")
        version = rest.split("+", 1)[0]
        return name, version

    @property
    def is_monorepo(self) -> bool:
        return len(self.workspaces) > 0


def parse_package_json(data: bytes | str, source: str = MANIFEST_FILE) -> PackageJson:
    """Parse raw package.json content.

    Raises:
        ManifestError: If the content is not valid JSON, is not a JSON
            object, or has fields of the wrong type.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestError(source, f"invalid JSON: {exc}", exc) from exc

    if not isinstance(raw, dict):
        raise ManifestError(source, f"expected a JSON object, got {type(raw).__name__}")

    try:
        return PackageJson.model_validate(raw)
    except ValidationError as exc:
        raise ManifestError(source, f"unexpected structure: {exc}", exc) from exc


def load_package_json(ctx: DetectionContext) -> PackageJson:
    """Read and validate package.json, filling workspaces from pnpm if needed.

    Raises:
        ManifestError: If the manifest cannot be read or is invalid.
    """
    try:
        data = ctx.read_file(MANIFEST_FILE)
    except OSError as exc:
        raise ManifestError(MANIFEST_FILE, f"failed to read: {exc}", exc) from exc

    pkg = parse_package_json(data)

    if not pkg.workspaces:
        workspaces = read_pnpm_workspaces(ctx)
        if workspaces:
            pkg.workspaces = workspaces
    return pkg


def read_pnpm_workspaces(ctx: DetectionContext) -> list[str]:
    """Return the `packages` list from pnpm-workspace.yaml, or [] if absent/invalid."""
    if not ctx.has_file(PNPM_WORKSPACE_FILE):
        return []

    try:
        data = yaml.safe_load(ctx.read_file(PNPM_WORKSPACE_FILE))
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to read %s: %s", PNPM_WORKSPACE_FILE, exc)
        return []

    packages: Optional[list] = data.get("packages") if isinstance(data, dict) else None
    if not isinstance(packages, list):
        return []
    return [p for p in packages if isinstance(p, str)]
