"""Node.js ecosystem provider.

Entry point: NodeProvider().plan(ctx) -> Plan
"""

import logging

from buildplan.detector.context import DetectionContext
from buildplan.detector.node.defaults import (
    BUN_RUNTIME_NOTE,
    CONFIG_FILES,
    DEFAULT_BUN_VERSION,
    ENTRY_POINTS,
    MOON_WORKSPACE_FILE,
    SPA_ROUTERS,
)
from buildplan.detector.node.framework import Framework, FrameworkInfo, OutputType, detect_framework
from buildplan.detector.node.native_deps import detect_native_dependencies, required_apt_packages
from buildplan.detector.node.package_json import MANIFEST_FILE, PackageJson, load_package_json
from buildplan.detector.node.package_manager import (
    PackageManager,
    PackageManagerInfo,
    detect_package_manager,
)
from buildplan.detector.node.version import VERSION_FILES, detect_node_version
from buildplan.detector.types import Plan

logger = logging.getLogger(__name__)

# Frameworks that emit one HTML file per route, so static output needs no SPA fallback
_PER_ROUTE_HTML = {
    Framework.GATSBY,
    Framework.ELEVENTY,
    Framework.NEXTJS,
    Framework.NUXT,
    Framework.ASTRO,
}


class NodeProvider:
    """Detects Node.js (and Bun) projects by their package.json."""

    def name(self) -> str:
        return "node"

    def detect(self, ctx: DetectionContext) -> bool:
        return ctx.has_file(MANIFEST_FILE)

    def plan(self, ctx: DetectionContext) -> Plan:
        """Run full Node.js detection and synthesize the plan.

        Raises:
            ManifestError: If package.json cannot be read or parsed.
        """
        pkg = load_package_json(ctx)

        # 1. Resolvers, in dependency order
        pm = detect_package_manager(ctx, pkg)
        node_version = detect_node_version(ctx, pkg)
        fw = detect_framework(ctx, pkg)

        plan = Plan(
            provider=self.name(),
            language="nodejs",
            language_version=node_version,
            package_manager=pm.name.value,
            package_manager_version=pm.version or None,
            detected_files=[MANIFEST_FILE],
        )

        # 2. Bun is both the package manager and the runtime
        if pm.name == PackageManager.BUN:
            plan.language = "bun"
            plan.language_version = pm.version or DEFAULT_BUN_VERSION
            plan.metadata["runtime"] = "bun"
            plan.metadata["runtime_note"] = BUN_RUNTIME_NOTE

        # 3. Framework
        if fw.name != Framework.NONE:
            plan.framework = fw.name.value
            plan.framework_version = fw.version or None
            if fw.output_type != OutputType.NONE:
                plan.metadata["output_type"] = fw.output_type.value

        # 4. Commands, with env overrides winning over everything derived
        plan.install_command = ctx.env.get("BUILDPLAN_INSTALL_CMD") or pm.install_command
        plan.build_command = ctx.env.get("BUILDPLAN_BUILD_CMD") or determine_build_command(pkg, pm, fw)
        plan.start_command = ctx.env.get("BUILDPLAN_START_CMD") or determine_start_command(ctx, pkg, pm, fw)

        # 5. Evidence and metadata
        for name in detect_relevant_files(ctx, pm):
            plan.add_detected_file(name)
        _add_metadata(plan, ctx, pkg, fw)

        logger.info(
            "Node plan: language=%s version=%s pm=%s framework=%s output=%s",
            plan.language,
            plan.language_version,
            plan.package_manager,
            plan.framework,
            plan.metadata.get("output_type"),
        )
        return plan


def determine_build_command(pkg: PackageJson, pm: PackageManagerInfo, fw: FrameworkInfo) -> str | None:
    if pkg.has_script("build"):
        return pm.run("build")
    return fw.default_build_command(pm) or None


def determine_start_command(
    ctx: DetectionContext,
    pkg: PackageJson,
    pm: PackageManagerInfo,
    fw: FrameworkInfo,
) -> str | None:
    """Pick the start command.

    Order: scripts.start, scripts.serve, framework default, package.json
    main, then the first existing file of ENTRY_POINTS.
    """
    if pkg.has_script("start"):
        return pm.run("start")
    if pkg.has_script("serve"):
        return pm.run("serve")

    if cmd := fw.default_start_command(pm):
        return cmd

    if pkg.main:
        return f"node {pkg.main}"

    for entry in ENTRY_POINTS:
        if ctx.has_file(entry):
            return f"node {entry}"
    return None


def detect_relevant_files(ctx: DetectionContext, pm: PackageManagerInfo) -> list[str]:
    """Lock, version and config files present in the project, in a fixed order."""
    files: list[str] = []
    if ctx.has_file(pm.lock_file):
        files.append(pm.lock_file)
    files.extend(f for f in VERSION_FILES if ctx.has_file(f))
    files.extend(f for f in CONFIG_FILES if ctx.has_file(f))
    return files


def detect_spa(pkg: PackageJson, fw: FrameworkInfo) -> bool:
    """True if a static build relies on client-side routing."""
    if fw.name in _PER_ROUTE_HTML:
        return False
    return any(pkg.has_dependency(router) for router in SPA_ROUTERS)


def _add_metadata(plan: Plan, ctx: DetectionContext, pkg: PackageJson, fw: FrameworkInfo) -> None:
    meta = plan.metadata

    if pkg.name:
        meta["name"] = pkg.name
    if pkg.version:
        meta["version"] = pkg.version
    if pkg.is_monorepo:
        meta["is_monorepo"] = True
        meta["workspaces"] = list(pkg.workspaces)
    if pkg.module_type:
        meta["module_type"] = pkg.module_type

    native_deps = detect_native_dependencies(pkg)
    if native_deps:
        meta["apt_packages"] = required_apt_packages(native_deps)
        meta["native_packages"] = [dep.package for dep in native_deps]

    if base_image := ctx.env.get("BUILDPLAN_BASE_IMAGE"):
        meta["base_image"] = base_image
    if spa_output_dir := ctx.env.get("BUILDPLAN_SPA_OUTPUT_DIR"):
        meta["spa_output_dir"] = spa_output_dir
    if static_server := ctx.env.get("BUILDPLAN_STATIC_SERVER"):
        meta["static_server"] = static_server

    if pkg.has_dependency("cypress"):
        meta["has_cypress"] = True
    if ctx.has_file(MOON_WORKSPACE_FILE):
        meta["has_moon"] = True
    if pkg.cache_directories:
        meta["cache_directories"] = list(pkg.cache_directories)

    if meta.get("output_type") == OutputType.STATIC.value and detect_spa(pkg, fw):
        meta["is_spa"] = True


__all__ = ["NodeProvider"]
