"""Tests for the command line interface."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from droid_plugin_compat.cli import main


def create_plugin(tmp_path: Path) -> Path:
    plugin_dir = tmp_path / "plugin"
    (plugin_dir / ".claude-plugin").mkdir(parents=True)
    (plugin_dir / ".claude-plugin" / "plugin.json").write_text(
        json.dumps({"name": "cli-plugin", "version": "0.3.0", "description": "CLI test"})
    )
    (plugin_dir / "commands").mkdir()
    (plugin_dir / "commands" / "review.md").write_text("---\ndescription: Review\n---\n\nReview.\n")
    return plugin_dir


class TestConvert:
    def test_convert(self, tmp_path: Path) -> None:
        plugin_dir = create_plugin(tmp_path)
        output = tmp_path / "out"

        result = CliRunner().invoke(main, ["convert", str(plugin_dir), "--output", str(output)])

        assert result.exit_code == 0, result.output
        assert "Converted cli-plugin" in result.output
        assert (output / ".factory" / "commands" / "review.md").exists()

    def test_convert_with_options(self, tmp_path: Path) -> None:
        plugin_dir = create_plugin(tmp_path)
        output = tmp_path / ".factory"

        result = CliRunner().invoke(
            main,
            [
                "convert",
                str(plugin_dir),
                "-o",
                str(output),
                "--agent-mode",
                "primary",
                "--infer-temperature",
                "--permissions",
                "broad",
            ],
        )

        assert result.exit_code == 0, result.output
        assert (output / "commands" / "review.md").exists()

    def test_output_from_environment(self, tmp_path: Path) -> None:
        plugin_dir = create_plugin(tmp_path)
        output = tmp_path / "env-out"

        result = CliRunner().invoke(
            main, ["convert", str(plugin_dir)], env={"DROID_PLUGIN_OUTPUT": str(output)}
        )

        assert result.exit_code == 0, result.output
        assert (output / ".factory" / "commands" / "review.md").exists()

    def test_dry_run(self, tmp_path: Path) -> None:
        plugin_dir = create_plugin(tmp_path)
        output = tmp_path / "out"

        result = CliRunner().invoke(
            main, ["convert", str(plugin_dir), "-o", str(output), "--dry-run"]
        )

        assert result.exit_code == 0, result.output
        assert "Would convert" in result.output
        assert not output.exists()

    def test_convert_missing_source(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            main, ["convert", str(tmp_path / "missing"), "-o", str(tmp_path / "out")]
        )

        assert result.exit_code == 1
        assert "Failed to convert" in result.output

    def test_invalid_agent_mode(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            main, ["convert", str(create_plugin(tmp_path)), "--agent-mode", "boss"]
        )

        assert result.exit_code == 2


class TestValidate:
    def test_valid_plugin(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["validate", str(create_plugin(tmp_path))])

        assert result.exit_code == 0, result.output
        assert "Valid plugin: cli-plugin v0.3.0" in result.output
        assert "Commands (1):" in result.output
        assert "/review -> /review" in result.output
        assert "⚠" not in result.output

    def test_previews_droid_names_and_collisions(self, tmp_path: Path) -> None:
        plugin_dir = create_plugin(tmp_path)
        (plugin_dir / "commands" / "workflows").mkdir()
        (plugin_dir / "commands" / "workflows" / "review.md").write_text(
            "---\ndescription: Nested review\n---\n\nReview.\n"
        )
        (plugin_dir / "agents").mkdir()
        (plugin_dir / "agents" / "sec.md").write_text(
            "---\nname: Security Reviewer\ndescription: Reviews\n---\n\nReview.\n"
        )

        result = CliRunner().invoke(main, ["validate", str(plugin_dir)])

        assert result.exit_code == 0, result.output
        assert "/workflows:review -> /review" in result.output
        assert "Security Reviewer -> security-reviewer.md" in result.output
        assert "2 sources map to commands/review.md" in result.output

    def test_invalid_plugin(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["validate", str(tmp_path)])

        assert result.exit_code == 1
        assert "Invalid plugin" in result.output
