"""
Tests for the main CLI module.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from conftest import DAY, JAN_1_2020, JUN_1_2020

from update_center.config import UpdateCenterConfig
from update_center.main import main, run, to_json_text
from update_center.repository import load_manifest
from update_center.wiki import NoWikiResolver, WikiFetchError, WikiMetadataResolver

MANIFEST = {
    "core": [
        {"version": "2.0", "timestamp": JAN_1_2020, "url": "http://repo.example.org/2.0/jenkins.war"},
        {"version": "2.1", "timestamp": JUN_1_2020, "url": "http://repo.example.org/2.1/jenkins.war"},
    ],
    "plugins": [
        {"artifactId": "git", "version": "1.0", "timestamp": JAN_1_2020, "requiredCore": "1.0"},
        {"artifactId": "git", "version": "1.1", "timestamp": JUN_1_2020, "requiredCore": "2.0"},
        {
            "artifactId": "git",
            "version": "2.0-beta-1",
            "timestamp": JUN_1_2020 + DAY,
            "requiredCore": "2.1",
        },
        {"artifactId": "mail", "version": "1.0", "timestamp": JAN_1_2020},
    ],
}


@pytest.fixture
def manifest(tmp_path):
    path = tmp_path / "releases.json"
    path.write_text(json.dumps(MANIFEST))
    return path


def read_json(path):
    return json.loads(path.read_text())


class TestToJsonText:
    """Test JSON serialization."""

    def test_compact(self):
        assert to_json_text({"a": 1, "b": [1, 2]}, pretty=False) == '{"a":1,"b":[1,2]}'

    def test_pretty(self):
        assert to_json_text({"a": 1}, pretty=True) == '{\n  "a": 1\n}'


class TestRun:
    """Test a complete generator run."""

    def test_writes_all_outputs(self, tmp_path, manifest, resolver):
        """Test catalog, history and text files are written."""
        config = UpdateCenterConfig(
            id="default",
            output=tmp_path / "update-center.json",
            release_history=tmp_path / "release-history.json",
            plugin_count_txt=tmp_path / "count.txt",
            latest_core_txt=tmp_path / "latestCore.txt",
        )

        catalog, history = run(config, load_manifest(manifest), resolver)

        assert read_json(config.output) == catalog
        assert read_json(config.release_history) == history
        assert catalog["plugins"]["git"]["version"] == "2.0-beta-1"
        assert catalog["plugins"]["git"]["title"] == "Git Plugin"
        assert (tmp_path / "count.txt").read_text() == "2"
        assert (tmp_path / "latestCore.txt").read_text() == "2.1"

    def test_view_options_are_applied(self, tmp_path, manifest):
        config = UpdateCenterConfig(
            id="default",
            output=tmp_path / "update-center.json",
            release_history=tmp_path / "release-history.json",
            cap_plugin="2.0",
            no_experimental=True,
            max_plugins=1,
        )

        catalog, _ = run(config, load_manifest(manifest), NoWikiResolver())

        assert list(catalog["plugins"]) == ["git"]
        assert catalog["plugins"]["git"]["version"] == "1.1"
        assert catalog["core"]["version"] == "2.0"

    def test_rerun_is_byte_identical(self, tmp_path, manifest):
        config = UpdateCenterConfig(
            id="default",
            output=tmp_path / "update-center.json",
            release_history=tmp_path / "release-history.json",
        )

        run(config, load_manifest(manifest), NoWikiResolver())
        first = config.output.read_bytes(), config.release_history.read_bytes()
        run(config, load_manifest(manifest), NoWikiResolver())

        assert (config.output.read_bytes(), config.release_history.read_bytes()) == first


class TestMainCommand:
    """Test the click command."""

    def test_nowiki_run(self, tmp_path, manifest):
        """Test a full CLI run without the wiki."""
        runner = CliRunner()
        result = runner.invoke(
            main,
            [
                "--id",
                "default",
                "--manifest",
                str(manifest),
                "--www",
                str(tmp_path / "www"),
                "--nowiki",
                "--no-experimental",
                "--pretty",
            ],
        )

        assert result.exit_code == 0, result.output
        catalog = read_json(tmp_path / "www" / "update-center.json")
        assert catalog["id"] == "default"
        assert catalog["plugins"]["git"]["version"] == "1.1"
        assert catalog["plugins"]["mail"]["wiki"] == ""
        assert (tmp_path / "www" / "latestCore.txt").read_text() == "2.1"
        assert (tmp_path / "www" / "release-history.json").exists()

    def test_id_from_environment(self, tmp_path, manifest):
        runner = CliRunner()
        output = tmp_path / "uc.json"

        result = runner.invoke(
            main,
            [
                "--manifest",
                str(manifest),
                "-o",
                str(output),
                "-r",
                str(tmp_path / "rh.json"),
                "--nowiki",
            ],
            env={"UPDATE_CENTER_ID": "from-env"},
        )

        assert result.exit_code == 0, result.output
        assert read_json(output)["id"] == "from-env"

    def test_conflicting_flags(self, tmp_path, manifest):
        runner = CliRunner()

        result = runner.invoke(
            main,
            [
                "--id",
                "default",
                "--manifest",
                str(manifest),
                "--nowiki",
                "--experimental-only",
                "--no-experimental",
            ],
        )

        assert result.exit_code != 0
        assert "mutually exclusive" in result.output

    def test_malformed_manifest(self, tmp_path):
        manifest = tmp_path / "releases.json"
        manifest.write_text("not json")
        runner = CliRunner()

        result = runner.invoke(main, ["--id", "default", "--manifest", str(manifest)])

        assert result.exit_code != 0
        assert "Failed to read manifest" in result.output

    def test_unreachable_wiki(self, tmp_path, manifest):
        """Test a wiki that cannot be indexed fails the run."""
        runner = CliRunner()

        with patch.object(
            WikiMetadataResolver, "initialize", side_effect=WikiFetchError("connection refused")
        ):
            result = runner.invoke(
                main,
                [
                    "--id",
                    "default",
                    "--manifest",
                    str(manifest),
                    "-o",
                    str(tmp_path / "uc.json"),
                    "-r",
                    str(tmp_path / "rh.json"),
                    "--cache-dir",
                    str(tmp_path / "cache"),
                ],
            )

        assert result.exit_code != 0
        assert "Wiki is unavailable" in result.output
        assert not (tmp_path / "uc.json").exists()
