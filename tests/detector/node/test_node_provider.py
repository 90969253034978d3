"""Tests for Node.js plan synthesis."""

import json
from pathlib import Path
from typing import Optional

import pytest

from buildplan.detector.context import DetectionContext
from buildplan.detector.node import NodeProvider, determine_start_command, detect_spa
from buildplan.detector.node.framework import Framework, FrameworkInfo, OutputType
from buildplan.detector.node.package_json import PackageJson
from buildplan.detector.node.package_manager import PackageManagerInfo
from buildplan.detector.provider import ManifestError, Provider


def _write_repo(root: Path, manifest: dict, files: Optional[dict[str, str]] = None) -> None:
    (root / "package.json").write_text(json.dumps(manifest))
    for name, content in (files or {}).items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def _plan(root: Path, env: Optional[dict[str, str]] = None):
    return NodeProvider().plan(DetectionContext(root=root, env=env or {}))


class TestDetect:
    def test_is_a_provider(self):
        assert isinstance(NodeProvider(), Provider)
        assert NodeProvider().name() == "node"

    def test_detects_package_json(self, tmp_path):
        _write_repo(tmp_path, {})
        assert NodeProvider().detect(DetectionContext(root=tmp_path))

    def test_ignores_other_projects(self, tmp_path):
        (tmp_path / "requirements.txt").write_text("flask\n")
        assert not NodeProvider().detect(DetectionContext(root=tmp_path))


class TestPlanBasics:
    def test_empty_manifest(self, tmp_path):
        _write_repo(tmp_path, {})
        plan = _plan(tmp_path)

        assert plan.provider == "node"
        assert plan.language == "nodejs"
        assert plan.language_version == "24"
        assert plan.package_manager == "npm"
        assert plan.package_manager_version is None
        assert plan.install_command == "npm ci"
        assert plan.build_command is None
        assert plan.start_command is None
        assert plan.framework is None
        assert plan.detected_files == ["package.json"]
        assert plan.metadata == {}

    def test_express_project(self, tmp_path):
        _write_repo(
            tmp_path,
            {
                "name": "api",
                "engines": {"node": ">=18 <21"},
                "dependencies": {"express": "^4.19.2"},
            },
            {"yarn.lock": ""},
        )
        plan = _plan(tmp_path)

        assert plan.language_version == "18"
        assert plan.package_manager == "yarn"
        assert plan.framework == "express"
        assert plan.framework_version == "4.19.2"
        assert plan.install_command == "yarn install --frozen-lockfile"
        assert plan.build_command is None
        assert plan.start_command == "yarn start"
        assert plan.metadata["output_type"] == "server"

    def test_pnpm_version_is_reported(self, tmp_path):
        _write_repo(tmp_path, {"packageManager": "pnpm@9.1.0+sha256.abc"})
        plan = _plan(tmp_path)
        assert plan.package_manager == "pnpm"
        assert plan.package_manager_version == "9.1.0"

    def test_invalid_manifest_raises(self, tmp_path):
        (tmp_path / "package.json").write_text("{ not json")
        with pytest.raises(ManifestError) as exc_info:
            _plan(tmp_path)
        assert exc_info.value.manifest == "package.json"

    def test_wrongly_typed_manifest_raises(self, tmp_path):
        _write_repo(tmp_path, {"scripts": ["build"]})
        with pytest.raises(ManifestError):
            _plan(tmp_path)


class TestBun:
    def test_bun_from_package_manager_field(self, tmp_path):
        _write_repo(tmp_path, {"packageManager": "bun@1.1.8"})
        plan = _plan(tmp_path)

        assert plan.language == "bun"
        assert plan.language_version == "1.1.8"
        assert plan.package_manager == "bun"
        assert plan.install_command == "bun install --frozen-lockfile"
        assert plan.metadata["runtime"] == "bun"
        assert plan.metadata["runtime_note"] == "Using Bun runtime (oven/bun image)"

    def test_bun_from_lock_file_uses_latest(self, tmp_path):
        _write_repo(tmp_path, {"scripts": {"start": "bun src/index.ts"}}, {"bun.lockb": ""})
        plan = _plan(tmp_path)

        assert plan.language == "bun"
        assert plan.language_version == "latest"
        assert plan.start_command == "bun run start"
        assert plan.detected_files == ["package.json", "bun.lockb"]


class TestCommands:
    def test_scripts_beat_framework_defaults(self, tmp_path):
        _write_repo(
            tmp_path,
            {
                "scripts": {"build": "tsc", "start": "node dist/main.js"},
                "dependencies": {"@nestjs/core": "^10.0.0"},
            },
        )
        plan = _plan(tmp_path)
        assert plan.build_command == "npm run build"
        assert plan.start_command == "npm run start"

    def test_serve_script_beats_framework_default(self, tmp_path):
        _write_repo(
            tmp_path,
            {"scripts": {"serve": "astro preview"}, "dependencies": {"astro": "^4.0.0"}},
        )
        plan = _plan(tmp_path)
        assert plan.start_command == "npm run serve"
        assert plan.build_command == "npm run build"

    def test_framework_start_default(self, tmp_path):
        _write_repo(tmp_path, {"dependencies": {"nuxt": "^3.11.0"}})
        assert _plan(tmp_path).start_command == "node .output/server/index.mjs"

    def test_main_field(self, tmp_path):
        _write_repo(tmp_path, {"main": "lib/worker.js"})
        assert _plan(tmp_path).start_command == "node lib/worker.js"

    def test_first_existing_entry_point(self, tmp_path):
        _write_repo(tmp_path, {}, {"server.js": "", "app.js": ""})
        assert _plan(tmp_path).start_command == "node server.js"

    def test_nested_entry_point_wins_by_order(self, tmp_path):
        _write_repo(tmp_path, {}, {"index.js": "", "dist/index.js": ""})
        assert _plan(tmp_path).start_command == "node dist/index.js"

    def test_env_overrides_win(self, tmp_path):
        _write_repo(tmp_path, {"scripts": {"build": "vite build", "start": "vite preview"}})
        plan = _plan(
            tmp_path,
            env={
                "BUILDPLAN_INSTALL_CMD": "npm install",
                "BUILDPLAN_BUILD_CMD": "make build",
                "BUILDPLAN_START_CMD": "./run.sh",
            },
        )
        assert plan.install_command == "npm install"
        assert plan.build_command == "make build"
        assert plan.start_command == "./run.sh"

    def test_start_command_helper_without_signals(self, tmp_path):
        ctx = DetectionContext(root=tmp_path)
        assert determine_start_command(ctx, PackageJson(), PackageManagerInfo(), FrameworkInfo()) is None


class TestDetectedFiles:
    def test_order_and_uniqueness(self, tmp_path):
        _write_repo(
            tmp_path,
            {"dependencies": {"vite": "^5.0.0"}},
            {
                "vite.config.ts": "export default {};",
                "tsconfig.json": "{}",
                ".nvmrc": "20\n",
                "mise.toml": '[tools]\nnode = "20"\n',
                "package-lock.json": "{}",
                ".npmrc": "",
            },
        )
        plan = _plan(tmp_path)
        assert plan.detected_files == [
            "package.json",
            "package-lock.json",
            ".nvmrc",
            "mise.toml",
            ".npmrc",
            "tsconfig.json",
            "vite.config.ts",
        ]

    def test_lock_file_of_other_manager_is_not_reported(self, tmp_path):
        _write_repo(tmp_path, {"packageManager": "pnpm@9.0.0"}, {"yarn.lock": ""})
        plan = _plan(tmp_path)
        assert "yarn.lock" not in plan.detected_files


class TestMetadata:
    def test_manifest_fields(self, tmp_path):
        _write_repo(
            tmp_path,
            {
                "name": "shop",
                "version": "2.0.0",
                "type": "module",
                "cacheDirectories": [".next/cache"],
                "devDependencies": {"cypress": "^13.0.0"},
            },
            {".moon/workspace.yml": "projects: []\n"},
        )
        meta = _plan(tmp_path).metadata

        assert meta["name"] == "shop"
        assert meta["version"] == "2.0.0"
        assert meta["module_type"] == "module"
        assert meta["cache_directories"] == [".next/cache"]
        assert meta["has_cypress"] is True
        assert meta["has_moon"] is True

    def test_workspaces_from_manifest(self, tmp_path):
        _write_repo(tmp_path, {"workspaces": {"packages": ["apps/*", "libs/*"]}})
        meta = _plan(tmp_path).metadata
        assert meta["is_monorepo"] is True
        assert meta["workspaces"] == ["apps/*", "libs/*"]

    def test_workspaces_from_pnpm_workspace_file(self, tmp_path):
        _write_repo(tmp_path, {}, {"pnpm-workspace.yaml": "packages:\n  - 'packages/*'\n"})
        plan = _plan(tmp_path)
        assert plan.metadata["workspaces"] == ["packages/*"]
        assert "pnpm-workspace.yaml" in plan.detected_files

    def test_native_packages(self, tmp_path):
        _write_repo(tmp_path, {"dependencies": {"sharp": "^0.33.0", "puppeteer": "^22.0.0"}})
        meta = _plan(tmp_path).metadata
        assert meta["native_packages"] == ["sharp", "puppeteer"]
        assert meta["apt_packages"][:2] == ["libvips-dev", "chromium"]

    def test_env_metadata(self, tmp_path):
        _write_repo(tmp_path, {})
        meta = _plan(
            tmp_path,
            env={
                "BUILDPLAN_BASE_IMAGE": "node:20-slim",
                "BUILDPLAN_SPA_OUTPUT_DIR": "out",
                "BUILDPLAN_STATIC_SERVER": "nginx",
            },
        ).metadata
        assert meta["base_image"] == "node:20-slim"
        assert meta["spa_output_dir"] == "out"
        assert meta["static_server"] == "nginx"

    def test_spa_for_static_vite_with_router(self, tmp_path):
        _write_repo(tmp_path, {"dependencies": {"react-router-dom": "^6.0.0"}, "devDependencies": {"vite": "^5.0.0"}})
        meta = _plan(tmp_path).metadata
        assert meta["output_type"] == "static"
        assert meta["is_spa"] is True

    def test_no_spa_for_server_output(self, tmp_path):
        _write_repo(tmp_path, {"dependencies": {"express": "^4", "react-router-dom": "^6"}})
        assert "is_spa" not in _plan(tmp_path).metadata

    def test_plan_is_json_serializable(self, tmp_path):
        _write_repo(tmp_path, {"dependencies": {"next": "14.0.0"}})
        data = json.loads(_plan(tmp_path).to_json())
        assert data["framework"] == "nextjs"
        assert data["metadata"]["output_type"] == "server"


class TestDetectSpa:
    def test_per_route_frameworks_are_not_spa(self):
        pkg = PackageJson(dependencies={"react-router-dom": "6"})
        assert not detect_spa(pkg, FrameworkInfo(Framework.GATSBY, "", OutputType.STATIC))

    def test_router_dependency(self):
        pkg = PackageJson(dependencies={"vue-router": "4"})
        assert detect_spa(pkg, FrameworkInfo(Framework.VITE, "", OutputType.STATIC))

    def test_no_router(self):
        assert not detect_spa(PackageJson(), FrameworkInfo(Framework.CRA, "", OutputType.STATIC))


class TestIdempotence:
    def test_same_input_same_plan(self, tmp_path):
        _write_repo(
            tmp_path,
            {"dependencies": {"next": "^14.0.0", "sharp": "^0.33.0"}},
            {"next.config.js": "module.exports = { output: 'export' };", "package-lock.json": "{}"},
        )
        assert _plan(tmp_path).to_dict() == _plan(tmp_path).to_dict()
