"""Tests for the read-only project view."""

import pytest

from buildplan.detector.context import DetectionContext, PathEscapeError


@pytest.fixture
def ctx(tmp_path):
    (tmp_path / "package.json").write_text('{"name": "demo"}')
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "index.ts").write_text("export {};")
    (tmp_path / "next.config.js").write_text("module.exports = {};")
    (tmp_path / "next.config.ts").write_text("export default {};")
    return DetectionContext(root=tmp_path, env={"NODE_VERSION": "20"})


class TestHasFile:
    def test_existing_file(self, ctx):
        assert ctx.has_file("package.json")

    def test_nested_file(self, ctx):
        assert ctx.has_file("src/index.ts")

    def test_missing_file(self, ctx):
        assert not ctx.has_file("yarn.lock")

    def test_escape_is_false_not_error(self, ctx, tmp_path):
        (tmp_path.parent / "outside.txt").write_text("x")
        assert not ctx.has_file("../outside.txt")

    def test_absolute_path_is_rejected(self, ctx, tmp_path):
        assert not ctx.has_file(str(tmp_path / "package.json"))


class TestReadFile:
    def test_reads_bytes(self, ctx):
        assert ctx.read_file("package.json") == b'{"name": "demo"}'

    def test_read_text(self, ctx):
        assert ctx.read_text("src/index.ts") == "export {};"

    def test_missing_raises_file_not_found(self, ctx):
        with pytest.raises(FileNotFoundError):
            ctx.read_file("missing.json")

    def test_escape_raises(self, ctx):
        with pytest.raises(PathEscapeError):
            ctx.read_file("../../etc/passwd")

    def test_dotdot_inside_root_is_allowed(self, ctx):
        assert ctx.read_file("src/../package.json") == b'{"name": "demo"}'


class TestListFiles:
    def test_glob_is_sorted_and_relative(self, ctx):
        assert ctx.list_files("next.config.*") == ["next.config.js", "next.config.ts"]

    def test_subdirectory_glob(self, ctx):
        assert ctx.list_files("src/*.ts") == ["src/index.ts"]

    def test_no_match_is_empty(self, ctx):
        assert ctx.list_files("*.toml") == []

    def test_escaping_pattern_is_dropped(self, ctx, tmp_path):
        (tmp_path.parent / "sibling.json").write_text("{}")
        assert ctx.list_files("../*.json") == []


class TestEnv:
    def test_env_is_read_only(self, ctx):
        with pytest.raises(TypeError):
            ctx.env["NODE_VERSION"] = "22"

    def test_env_is_copied(self, tmp_path):
        source = {"NODE_VERSION": "20"}
        ctx = DetectionContext(root=tmp_path, env=source)
        source["NODE_VERSION"] = "22"
        assert ctx.env["NODE_VERSION"] == "20"

    def test_missing_key_means_not_overridden(self, ctx):
        assert ctx.env.get("BUILDPLAN_START_CMD") is None

    def test_root_is_resolved(self, tmp_path):
        ctx = DetectionContext(root=str(tmp_path / "." / "."))
        assert ctx.root == tmp_path.resolve()
