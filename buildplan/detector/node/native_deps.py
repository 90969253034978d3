"""Native system packages required by well-known npm packages.

NATIVE_DEPENDENCIES is a read-only catalog built at import time and never
mutated, so concurrent detection runs can share it without locking.
"""

from dataclasses import dataclass

from buildplan.detector.node.package_json import PackageJson


@dataclass(frozen=True)
class NativeDependency:
    """An npm package that needs OS packages to build or run.

    package: npm package name.
    apt_packages: Debian/Ubuntu packages required for it.
    description: Why the packages are needed.
    """

    package: str
    apt_packages: tuple[str, ...]
    description: str


_BROWSER_LIBS = (
    "libnss3",
    "libatk1.0-0",
    "libatk-bridge2.0-0",
    "libcups2",
    "libdrm2",
    "libxkbcommon0",
    "libxcomposite1",
    "libxdamage1",
    "libxfixes3",
    "libxrandr2",
    "libgbm1",
    "libasound2",
    "libpango-1.0-0",
    "libcairo2",
)

NATIVE_DEPENDENCIES: tuple[NativeDependency, ...] = (
    NativeDependency("sharp", ("libvips-dev",), "Image processing library"),
    NativeDependency("@prisma/client", ("openssl",), "Database ORM"),
    NativeDependency("prisma", ("openssl",), "Database ORM CLI"),
    NativeDependency("puppeteer", ("chromium",) + _BROWSER_LIBS, "Headless Chrome automation"),
    NativeDependency("playwright", _BROWSER_LIBS, "Browser automation"),
    NativeDependency(
        "canvas",
        ("libcairo2-dev", "libjpeg-dev", "libpango1.0-dev", "libgif-dev", "librsvg2-dev"),
        "Canvas rendering",
    ),
    NativeDependency("bcrypt", ("build-essential", "python3"), "Password hashing"),
    NativeDependency("argon2", ("build-essential",), "Password hashing"),
    NativeDependency("sqlite3", ("build-essential", "python3"), "SQLite database"),
    NativeDependency("better-sqlite3", ("build-essential", "python3"), "SQLite database"),
    NativeDependency("node-gyp", ("build-essential", "python3"), "Native addon build tool"),
    NativeDependency("cpu-features", ("build-essential",), "CPU feature detection"),
    NativeDependency("ssh2", ("build-essential",), "SSH client"),
    NativeDependency("libsql", ("build-essential",), "LibSQL database"),
    NativeDependency("@libsql/client", ("build-essential",), "LibSQL client"),
)


def detect_native_dependencies(pkg: PackageJson) -> list[NativeDependency]:
    """Catalog entries whose package is declared, in catalog order."""
    return [dep for dep in NATIVE_DEPENDENCIES if pkg.has_dependency(dep.package)]


def required_apt_packages(deps: list[NativeDependency]) -> list[str]:
    """Flatten the OS packages of `deps`, keeping first-seen order, without duplicates."""
    return list(dict.fromkeys(pkg for dep in deps for pkg in dep.apt_packages))
