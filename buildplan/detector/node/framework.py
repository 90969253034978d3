"""Framework detection for Node.js projects.

FRAMEWORK_RULES is evaluated top to bottom and the first matching rule
wins. Order matters: SSR meta-frameworks come first, then static site
generators, then backend frameworks, and generic bundlers last, so a
project using both `next` and `vite` is reported as Next.js.

Rules with a static/server split read the framework's own config file
(TypeScript variant first) and look for one marker property. A missing
marker, unreadable file or parse failure leaves the baseline output type.
"""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Optional

from buildplan.detector.context import DetectionContext
from buildplan.detector.node.package_json import PackageJson
from buildplan.detector.node.package_manager import PackageManagerInfo
from buildplan.detector.rules import Rule, first_match
from buildplan.scanner import find_nested_property, language_for

logger = logging.getLogger(__name__)


class Framework(StrEnum):
    NONE = ""
    NEXTJS = "nextjs"
    REMIX = "remix"
    NUXT = "nuxt"
    ASTRO = "astro"
    VITE = "vite"
    CRA = "create-react-app"
    ANGULAR = "angular"
    SVELTEKIT = "sveltekit"
    SOLID_START = "solid-start"
    EXPRESS = "express"
    FASTIFY = "fastify"
    NESTJS = "nestjs"
    ADONISJS = "adonisjs"
    REACT_ROUTER = "react-router"
    TANSTACK_START = "tanstack-start"
    GATSBY = "gatsby"
    ELEVENTY = "eleventy"


class OutputType(StrEnum):
    NONE = ""
    STATIC = "static"  # Static files; served by any static file server
    SERVER = "server"  # Needs a Node.js process at runtime


@dataclass(frozen=True)
class FrameworkInfo:
    name: Framework = Framework.NONE
    version: str = ""
    output_type: OutputType = OutputType.NONE

    def default_build_command(self, pm: PackageManagerInfo) -> str:
        if self.name in _BUILDS_WITH_SCRIPT:
            return pm.run("build")
        return ""

    def default_start_command(self, pm: PackageManagerInfo) -> str:
        if self.name in _STARTS_WITH_SCRIPT:
            return pm.run("start")
        return _START_COMMANDS.get(self.name, "")


_BUILDS_WITH_SCRIPT = {
    Framework.NEXTJS,
    Framework.REMIX,
    Framework.REACT_ROUTER,
    Framework.NUXT,
    Framework.ASTRO,
    Framework.VITE,
    Framework.CRA,
    Framework.ANGULAR,
    Framework.SVELTEKIT,
    Framework.GATSBY,
}

_STARTS_WITH_SCRIPT = {
    Framework.NEXTJS,
    Framework.REMIX,
    Framework.REACT_ROUTER,
    Framework.NESTJS,
    Framework.EXPRESS,
    Framework.FASTIFY,
}

_START_COMMANDS: dict[Framework, str] = {
    Framework.NUXT: "node .output/server/index.mjs",
    Framework.ASTRO: "node ./dist/server/entry.mjs",
}


# ---------------------------------------------------------------------------
# Rule building blocks
# ---------------------------------------------------------------------------

Matcher = Callable[[DetectionContext, PackageJson], bool]
OutputResolver = Callable[[DetectionContext, PackageJson], OutputType]


def any_dependency(*names: str) -> Matcher:
    return lambda ctx, pkg: any(pkg.has_dependency(n) for n in names)


def any_file(*names: str) -> Matcher:
    return lambda ctx, pkg: any(ctx.has_file(n) for n in names)


def either(*matchers: Matcher) -> Matcher:
    return lambda ctx, pkg: any(m(ctx, pkg) for m in matchers)


def both(*matchers: Matcher) -> Matcher:
    return lambda ctx, pkg: all(m(ctx, pkg) for m in matchers)


@dataclass(frozen=True)
class ConfigMarker:
    """A property value in a config file that flips the output type.

    files are checked in order; the first file containing the marker wins.
    """

    files: tuple[str, ...]
    path: tuple[str, ...]
    values: frozenset[str]

    def present(self, ctx: DetectionContext) -> bool:
        for name in self.files:
            if not ctx.has_file(name):
                continue
            try:
                source = ctx.read_file(name)
            except OSError as exc:
                logger.warning("Failed to read %s: %s", name, exc)
                continue
            value = find_nested_property(source, language_for(name), self.path)
            if value in self.values:
                logger.debug("%s: %s = %s", name, ".".join(self.path), value)
                return True
        return False


def fixed(output: OutputType) -> OutputResolver:
    return lambda ctx, pkg: output


def unless_config(marker: ConfigMarker, baseline: OutputType, otherwise: OutputType) -> OutputResolver:
    return lambda ctx, pkg: otherwise if marker.present(ctx) else baseline


def unless_dependency(name: str, baseline: OutputType, otherwise: OutputType) -> OutputResolver:
    return lambda ctx, pkg: otherwise if pkg.has_dependency(name) else baseline


@dataclass(frozen=True)
class FrameworkRule:
    framework: Framework
    matches: Matcher
    output: OutputResolver
    # Dependencies whose declared range is reported as the version, in order
    version_from: tuple[str, ...] = field(default_factory=tuple)

    def __call__(self, ctx: DetectionContext, pkg: PackageJson) -> Optional[FrameworkInfo]:
        if not self.matches(ctx, pkg):
            return None
        version = next(
            (pkg.dependency_version(d) for d in self.version_from if pkg.dependency_version(d)),
            "",
        )
        return FrameworkInfo(
            name=self.framework,
            version=clean_version(version),
            output_type=self.output(ctx, pkg),
        )


def clean_version(version: str) -> str:
    """Strip leading range markers: "^14.2.3" -> "14.2.3", ">= 4" -> "4"."""
    if version and version[0] in "^~><=":
        return version.lstrip("^~><= ")
    return version


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

_SERVER = OutputType.SERVER
_STATIC = OutputType.STATIC

_NEXT_EXPORT = ConfigMarker(
    files=("next.config.ts", "next.config.mjs", "next.config.js"),
    path=("output",),
    values=frozenset({"export"}),
)
_NUXT_SPA = ConfigMarker(
    files=("nuxt.config.ts", "nuxt.config.js", "nuxt.config.mjs"),
    path=("ssr",),
    values=frozenset({"false"}),
)
_ASTRO_SSR = ConfigMarker(
    files=("astro.config.ts", "astro.config.mjs", "astro.config.js"),
    path=("output",),
    values=frozenset({"server", "hybrid"}),
)
_SOLID_SPA = ConfigMarker(
    files=("app.config.ts", "app.config.js"),
    path=("ssr",),
    values=frozenset({"false"}),
)
_TANSTACK_STATIC = ConfigMarker(
    files=("app.config.ts", "app.config.js"),
    path=("server", "preset"),
    values=frozenset({"static"}),
)
_REACT_ROUTER_SPA = ConfigMarker(
    files=("react-router.config.ts", "react-router.config.js"),
    path=("ssr",),
    values=frozenset({"false"}),
)


FRAMEWORK_RULES: list[FrameworkRule] = [
    # Meta-frameworks with SSR
    FrameworkRule(
        Framework.NEXTJS,
        any_dependency("next"),
        unless_config(_NEXT_EXPORT, baseline=_SERVER, otherwise=_STATIC),
        ("next",),
    ),
    FrameworkRule(
        Framework.REMIX,
        any_dependency("@remix-run/react", "@remix-run/node"),
        fixed(_SERVER),
        ("@remix-run/react", "@remix-run/node"),
    ),
    FrameworkRule(
        Framework.NUXT,
        any_dependency("nuxt", "nuxt3"),
        unless_config(_NUXT_SPA, baseline=_SERVER, otherwise=_STATIC),
        ("nuxt", "nuxt3"),
    ),
    FrameworkRule(
        Framework.ASTRO,
        either(
            any_dependency("astro"),
            any_file("astro.config.mjs", "astro.config.js", "astro.config.ts"),
        ),
        unless_config(_ASTRO_SSR, baseline=_STATIC, otherwise=_SERVER),
        ("astro",),
    ),
    FrameworkRule(
        Framework.SVELTEKIT,
        any_dependency("@sveltejs/kit"),
        unless_dependency("@sveltejs/adapter-static", baseline=_SERVER, otherwise=_STATIC),
        ("@sveltejs/kit",),
    ),
    FrameworkRule(
        Framework.SOLID_START,
        any_dependency("solid-start", "@solidjs/start"),
        unless_config(_SOLID_SPA, baseline=_SERVER, otherwise=_STATIC),
        ("@solidjs/start", "solid-start"),
    ),
    FrameworkRule(
        Framework.TANSTACK_START,
        any_dependency("@tanstack/start", "@tanstack/react-start"),
        unless_config(_TANSTACK_STATIC, baseline=_SERVER, otherwise=_STATIC),
        ("@tanstack/start", "@tanstack/react-start"),
    ),
    # React Router v7 framework mode needs its config file; library mode is just a router
    FrameworkRule(
        Framework.REACT_ROUTER,
        both(
            any_dependency("react-router"),
            any_file("react-router.config.ts", "react-router.config.js"),
        ),
        unless_config(_REACT_ROUTER_SPA, baseline=_SERVER, otherwise=_STATIC),
        ("react-router",),
    ),
    # Static site generators
    FrameworkRule(Framework.GATSBY, any_dependency("gatsby"), fixed(_STATIC), ("gatsby",)),
    FrameworkRule(Framework.ELEVENTY, any_dependency("@11ty/eleventy"), fixed(_STATIC), ("@11ty/eleventy",)),
    # Angular before backend frameworks: Angular SSR pulls in express
    FrameworkRule(
        Framework.ANGULAR,
        either(any_dependency("@angular/core"), any_file("angular.json")),
        unless_dependency("@angular/ssr", baseline=_STATIC, otherwise=_SERVER),
        ("@angular/core",),
    ),
    # Backend frameworks
    FrameworkRule(Framework.ADONISJS, any_dependency("@adonisjs/core"), fixed(_SERVER), ("@adonisjs/core",)),
    FrameworkRule(Framework.NESTJS, any_dependency("@nestjs/core"), fixed(_SERVER), ("@nestjs/core",)),
    FrameworkRule(Framework.FASTIFY, any_dependency("fastify"), fixed(_SERVER), ("fastify",)),
    FrameworkRule(Framework.EXPRESS, any_dependency("express"), fixed(_SERVER), ("express",)),
    # Client-side bundlers
    FrameworkRule(Framework.CRA, any_dependency("react-scripts"), fixed(_STATIC), ("react-scripts",)),
    FrameworkRule(
        Framework.VITE,
        either(
            any_dependency("vite"),
            any_file("vite.config.js", "vite.config.ts", "vite.config.mjs"),
        ),
        fixed(_STATIC),
        ("vite",),
    ),
]

_RULES: list[Rule[FrameworkInfo]] = [
    Rule(f"framework: {rule.framework.value}", rule) for rule in FRAMEWORK_RULES
]


def detect_framework(ctx: DetectionContext, pkg: Optional[PackageJson]) -> FrameworkInfo:
    """Return the framework in use, or FrameworkInfo() when none matches."""
    if pkg is None:
        return FrameworkInfo()

    info, source = first_match(_RULES, ctx, pkg)
    if info is None:
        return FrameworkInfo()

    logger.debug("%s (%s output)", source, info.output_type or "unknown")
    return info
