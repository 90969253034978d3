"""Default values and file lists for Node.js project detection."""

DEFAULT_NODE_VERSION = "24"

# Language version reported for bun projects without a pinned bun version
DEFAULT_BUN_VERSION = "latest"

# Human-readable note attached to bun plans
BUN_RUNTIME_NOTE = "Using Bun runtime (oven/bun image)"

# Candidate entry points for `node <file>` when nothing else gives a start command
ENTRY_POINTS: list[str] = [
    "dist/index.js",
    "build/index.js",
    "index.js",
    "server.js",
    "app.js",
]

# Config files recorded in Plan.detected_files when present
CONFIG_FILES: list[str] = [
    ".yarnrc.yml", ".yarnrc.yaml", ".npmrc", ".pnpmrc",
    "tsconfig.json", "jsconfig.json",
    "vite.config.js", "vite.config.ts", "vite.config.mjs",
    "next.config.js", "next.config.mjs", "next.config.ts",
    "astro.config.mjs", "astro.config.js", "astro.config.ts",
    "angular.json",
    "remix.config.js",
    "nuxt.config.ts", "nuxt.config.js",
    "pnpm-workspace.yaml",
]

# moonrepo workspace marker
MOON_WORKSPACE_FILE = ".moon/workspace.yml"

# Client-side routers; any of these in a static build means SPA fallback routing
SPA_ROUTERS: list[str] = [
    # Vue
    "vue-router",
    # React
    "react-router-dom",
    "react-router",
    "@reach/router",
    "wouter",
    "@tanstack/react-router",
    # Svelte (not SvelteKit)
    "svelte-navigator",
    "svelte-routing",
    "@roxi/routify",
    # Solid
    "@solidjs/router",
    "solid-app-router",
    # Preact
    "preact-router",
    # General
    "navigo",
    "page",
]
