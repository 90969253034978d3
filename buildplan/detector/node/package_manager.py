"""Package manager detection for Node.js projects.

Priority order (first match wins):
1. packageManager field in package.json
2. Lock files / yarnrc
3. engines field (pnpm, bun, yarn; never npm)
4. npm
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from buildplan.detector.context import DetectionContext
from buildplan.detector.node.package_json import PackageJson
from buildplan.detector.rules import Rule, first_match

logger = logging.getLogger(__name__)


class PackageManager(StrEnum):
    NPM = "npm"
    YARN1 = "yarn"
    YARN_BERRY = "yarnberry"
    PNPM = "pnpm"
    BUN = "bun"


_INSTALL_COMMANDS: dict[PackageManager, str] = {
    PackageManager.NPM: "npm ci",
    PackageManager.YARN1: "yarn install --frozen-lockfile",
    PackageManager.YARN_BERRY: "yarn install --immutable",
    PackageManager.PNPM: "pnpm install --frozen-lockfile",
    PackageManager.BUN: "bun install --frozen-lockfile",
}

_RUN_COMMANDS: dict[PackageManager, str] = {
    PackageManager.NPM: "npm run",
    PackageManager.YARN1: "yarn",
    PackageManager.YARN_BERRY: "yarn",
    PackageManager.PNPM: "pnpm",
    PackageManager.BUN: "bun run",
}

_LOCK_FILES: dict[PackageManager, str] = {
    PackageManager.NPM: "package-lock.json",
    PackageManager.YARN1: "yarn.lock",
    PackageManager.YARN_BERRY: "yarn.lock",
    PackageManager.PNPM: "pnpm-lock.yaml",
    PackageManager.BUN: "bun.lockb",
}


@dataclass(frozen=True)
class PackageManagerInfo:
    """Detected package manager. version is empty when not declared."""

    name: PackageManager = PackageManager.NPM
    version: str = ""

    @property
    def install_command(self) -> str:
        return _INSTALL_COMMANDS[self.name]

    @property
    def run_command(self) -> str:
        """Prefix for running a package.json script (e.g. "npm run")."""
        return _RUN_COMMANDS[self.name]

    @property
    def lock_file(self) -> str:
        return _LOCK_FILES[self.name]

    def run(self, script: str) -> str:
        return f"{self.run_command} {script}"


def is_yarn_berry(version: str) -> bool:
    """Yarn 2+ ("Berry") versions start with a digit from 2 to 9."""
    return bool(version) and "2" <= version[0] <= "9"


def _from_package_manager_field(ctx: DetectionContext, pkg: PackageJson) -> Optional[PackageManagerInfo]:
    name, version = pkg.package_manager_info()
    if name == "pnpm":
        return PackageManagerInfo(PackageManager.PNPM, version)
    if name == "yarn":
        pm = PackageManager.YARN_BERRY if is_yarn_berry(version) else PackageManager.YARN1
        return PackageManagerInfo(pm, version)
    if name == "bun":
        return PackageManagerInfo(PackageManager.BUN, version)
    if name == "npm":
        return PackageManagerInfo(PackageManager.NPM, version)
    return None


def _when_file(*names: str, pm: PackageManager):
    def resolve(ctx: DetectionContext, pkg: PackageJson) -> Optional[PackageManagerInfo]:
        if any(ctx.has_file(name) for name in names):
            return PackageManagerInfo(pm)
        return None
    return resolve


def _when_engine(engine: str, pm: PackageManager):
    def resolve(ctx: DetectionContext, pkg: PackageJson) -> Optional[PackageManagerInfo]:
        if getattr(pkg.engines, engine):
            return PackageManagerInfo(pm)
        return None
    return resolve


PACKAGE_MANAGER_RULES: list[Rule[PackageManagerInfo]] = [
    Rule("package.json packageManager field", _from_package_manager_field),
    Rule("lock file: pnpm-lock.yaml", _when_file("pnpm-lock.yaml", pm=PackageManager.PNPM)),
    Rule("lock file: bun.lockb / bun.lock", _when_file("bun.lockb", "bun.lock", pm=PackageManager.BUN)),
    Rule("yarnrc: .yarnrc.yml", _when_file(".yarnrc.yml", ".yarnrc.yaml", pm=PackageManager.YARN_BERRY)),
    Rule("lock file: yarn.lock", _when_file("yarn.lock", pm=PackageManager.YARN1)),
    Rule("lock file: package-lock.json", _when_file("package-lock.json", pm=PackageManager.NPM)),
    Rule("package.json engines.pnpm", _when_engine("pnpm", PackageManager.PNPM)),
    Rule("package.json engines.bun", _when_engine("bun", PackageManager.BUN)),
    Rule("package.json engines.yarn", _when_engine("yarn", PackageManager.YARN1)),
]


def detect_package_manager(ctx: DetectionContext, pkg: PackageJson) -> PackageManagerInfo:
    """Return the package manager governing the project (npm if no signal)."""
    info, source = first_match(PACKAGE_MANAGER_RULES, ctx, pkg)
    if info is None:
        logger.debug("No package manager signal, defaulting to npm")
        return PackageManagerInfo()

    logger.debug("package_manager: %s (%s)", info.name, source)
    return info
