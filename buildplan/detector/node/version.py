"""Node.js runtime version detection.

Priority order (first non-empty wins):
1. BUILDPLAN_NODE_VERSION env var
2. NODE_VERSION env var (legacy)
3. engines.node in package.json (major only)
4. .nvmrc
5. .node-version
6. .tool-versions (asdf)
7. mise.toml
8. DEFAULT_NODE_VERSION
"""

import logging
import re
from typing import Optional

from buildplan.detector.context import DetectionContext
from buildplan.detector.node.defaults import DEFAULT_NODE_VERSION
from buildplan.detector.node.package_json import PackageJson
from buildplan.detector.rules import Rule, first_match

logger = logging.getLogger(__name__)

_ENGINE_VERSION_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")
_MISE_NODE_RE = re.compile(r'(?:node|nodejs)\s*=\s*"([^"]+)"')

# asdf tool name for Node.js
TOOL_VERSIONS_NAME = "nodejs"

VERSION_FILES = [".nvmrc", ".node-version", ".tool-versions", "mise.toml"]


def normalize_version(value: str) -> str:
    return value.strip().removeprefix("v")


def parse_version_file(content: str) -> str:
    """Normalise a version read from a file; "lts/*" style values map to the default."""
    value = normalize_version(content)
    if value.lower().startswith("lts"):
        return DEFAULT_NODE_VERSION
    return value


def parse_engine_version(constraint: str) -> str:
    """Return the major version of the first number in a semver range.

    ">=18 <21" -> "18", "^20.10.0" -> "20", "18.x" -> "18".
    """
    match = _ENGINE_VERSION_RE.search(constraint.strip())
    return match.group(1) if match else ""


def parse_tool_versions(content: str, tool: str = TOOL_VERSIONS_NAME) -> str:
    for line in content.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == tool:
            return parse_version_file(parts[1])
    return ""


def parse_mise_toml(content: str) -> str:
    match = _MISE_NODE_RE.search(content)
    return parse_version_file(match.group(1)) if match else ""


def _from_env(key: str):
    def resolve(ctx: DetectionContext, pkg: Optional[PackageJson]) -> str:
        return normalize_version(ctx.env.get(key, ""))
    return resolve


def _from_engines(ctx: DetectionContext, pkg: Optional[PackageJson]) -> str:
    if pkg is None or not pkg.engines.node:
        return ""
    return parse_engine_version(pkg.engines.node)


def _from_file(name: str, parse):
    def resolve(ctx: DetectionContext, pkg: Optional[PackageJson]) -> str:
        if not ctx.has_file(name):
            return ""
        try:
            content = ctx.read_text(name)
        except OSError as exc:
            logger.warning("Failed to read %s: %s", name, exc)
            return ""
        return parse(content)
    return resolve


NODE_VERSION_RULES: list[Rule[str]] = [
    Rule("env BUILDPLAN_NODE_VERSION", _from_env("BUILDPLAN_NODE_VERSION")),
    Rule("env NODE_VERSION", _from_env("NODE_VERSION")),
    Rule("package.json engines.node", _from_engines),
    Rule(".nvmrc", _from_file(".nvmrc", parse_version_file)),
    Rule(".node-version", _from_file(".node-version", parse_version_file)),
    Rule(".tool-versions", _from_file(".tool-versions", parse_tool_versions)),
    Rule("mise.toml", _from_file("mise.toml", parse_mise_toml)),
]


def detect_node_version(ctx: DetectionContext, pkg: Optional[PackageJson]) -> str:
    """Return the Node.js version to run the project with."""
    version, source = first_match(NODE_VERSION_RULES, ctx, pkg)
    if version is None:
        return DEFAULT_NODE_VERSION

    logger.debug("node_version: %s (%s)", version, source)
    return version
