"""Write converted bundles into a Factory .factory directory."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from droid_plugin_compat.parser import ClaudePlugin, parse_plugin
from droid_plugin_compat.translator import ConvertOptions, DroidBundle, convert_claude_to_droid

logger = logging.getLogger(__name__)

FACTORY_DIR_NAME = ".factory"


@dataclass(frozen=True)
class DroidPaths:
    """Target directories for one output root."""

    root: Path
    commands_dir: Path
    droids_dir: Path
    skills_dir: Path


@dataclass
class ConvertResult:
    """Result of a plugin conversion."""

    success: bool
    plugin_name: str
    message: str
    output_root: Optional[Path] = None
    written_components: dict = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    dry_run: bool = False

    def __str__(self) -> str:
        if self.success:
            verb = "Would convert" if self.dry_run else "Converted"
            parts = [f"✓ {verb} {self.plugin_name} -> {self.output_root}"]
            for component, items in self.written_components.items():
                parts.append(f"  {component}: {len(items)}")
            if self.warnings:
                parts.append("Warnings:")
                for w in self.warnings:
                    parts.append(f"  ⚠ {w}")
            return "\n".join(parts)
        return f"✗ Failed to convert: {self.message}"


def resolve_droid_paths(output_root: Path) -> DroidPaths:
    """Work out where commands, droids and skills go.

    An output root that is already a .factory directory (e.g. ~/.factory)
    is written into directly; anything else gets a .factory child.
    """
    output_root = Path(output_root)
    base = output_root if output_root.name == FACTORY_DIR_NAME else output_root / FACTORY_DIR_NAME

    return DroidPaths(
        root=output_root,
        commands_dir=base / "commands",
        droids_dir=base / "droids",
        skills_dir=base / "skills",
    )


def write_droid_bundle(output_root: Path, bundle: DroidBundle) -> DroidPaths:
    """Write a converted bundle to disk.

    Subdirectories are only created for component kinds that have
    entries. Files with the same name overwrite each other in order.

    Args:
        output_root: Project directory or .factory directory
        bundle: Converted bundle

    Returns:
        The resolved DroidPaths

    Raises:
        ValueError: If a skill name would land outside the skills directory
    """
    paths = resolve_droid_paths(output_root)
    skill_targets = [_skill_target(paths.skills_dir, skill.name) for skill in bundle.skill_dirs]
    paths.root.mkdir(parents=True, exist_ok=True)

    if bundle.commands:
        paths.commands_dir.mkdir(parents=True, exist_ok=True)
        for command in bundle.commands:
            target = paths.commands_dir / f"{command.name}.md"
            target.write_text(command.content + "\n", encoding="utf-8")
            logger.debug("Wrote command %s", target)

    if bundle.droids:
        paths.droids_dir.mkdir(parents=True, exist_ok=True)
        for droid in bundle.droids:
            target = paths.droids_dir / f"{droid.name}.md"
            target.write_text(droid.content + "\n", encoding="utf-8")
            logger.debug("Wrote droid %s", target)

    if bundle.skill_dirs:
        paths.skills_dir.mkdir(parents=True, exist_ok=True)
        for skill, target in zip(bundle.skill_dirs, skill_targets):
            if target.is_symlink() or target.is_file():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)
            shutil.copytree(skill.source_dir, target)
            logger.debug("Copied skill %s -> %s", skill.source_dir, target)

    return paths


def _skill_target(skills_dir: Path, name: str) -> Path:
    """Return skills_dir / name, refusing names that escape skills_dir."""
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"Invalid skill name: {name!r}")

    target = skills_dir / name
    if target.resolve().parent != skills_dir.resolve():
        raise ValueError(f"Skill {name!r} resolves outside {skills_dir}")

    return target


def convert_plugin(
    source: str,
    output_root: Path,
    options: Optional[ConvertOptions] = None,
    dry_run: bool = False,
) -> ConvertResult:
    """Convert a Claude Code plugin and write it as a Droid bundle.

    Args:
        source: Git URL or local path to plugin
        output_root: Where to write (project dir or a .factory dir)
        options: Conversion settings
        dry_run: Convert but do not write anything

    Returns:
        ConvertResult with conversion outcome
    """
    if options is None:
        options = ConvertOptions()

    # Resolve source to local path
    try:
        plugin_path, cloned = _resolve_source(source)
    except (ValueError, OSError, subprocess.CalledProcessError) as e:
        return ConvertResult(
            success=False,
            plugin_name="unknown",
            message=f"Failed to resolve source: {e}",
        )

    try:
        return _convert_local_plugin(plugin_path, Path(output_root), options, dry_run)
    finally:
        if cloned:
            shutil.rmtree(plugin_path, ignore_errors=True)


def _convert_local_plugin(
    plugin_path: Path,
    output_root: Path,
    options: ConvertOptions,
    dry_run: bool,
) -> ConvertResult:
    try:
        plugin = parse_plugin(plugin_path)
    except (ValueError, OSError) as e:
        return ConvertResult(
            success=False,
            plugin_name="unknown",
            message=f"Failed to parse plugin: {e}",
        )

    plugin_name = plugin.manifest.name
    bundle = convert_claude_to_droid(plugin, options)
    warnings = _collect_warnings(plugin, bundle)
    for warning in warnings:
        logger.warning("%s: %s", plugin_name, warning)

    if not dry_run:
        try:
            write_droid_bundle(output_root, bundle)
        except (ValueError, OSError) as e:
            return ConvertResult(
                success=False,
                plugin_name=plugin_name,
                message=f"Failed to write bundle: {e}",
            )

    written_components = {
        "commands": [c.name for c in bundle.commands],
        "droids": [d.name for d in bundle.droids],
        "skills": [s.name for s in bundle.skill_dirs],
    }

    return ConvertResult(
        success=True,
        plugin_name=plugin_name,
        message="Conversion complete",
        output_root=output_root,
        written_components={k: v for k, v in written_components.items() if v},
        warnings=warnings,
        dry_run=dry_run,
    )


def _collect_warnings(plugin: ClaudePlugin, bundle: DroidBundle) -> list[str]:
    warnings = []

    for kind, names in (
        ("command", [c.name for c in bundle.commands]),
        ("droid", [d.name for d in bundle.droids]),
    ):
        for name, count in Counter(names).items():
            if count > 1:
                warnings.append(f"{count} {kind}s map to {name}.md; only the last is kept")

    if plugin.has_hooks:
        warnings.append("Hooks are not converted for Droid")
    if plugin.has_mcp:
        warnings.append("MCP servers are not converted for Droid")

    return warnings


def _resolve_source(source: str) -> tuple[Path, bool]:
    """Resolve a source string to a local path.

    Supports:
    - Local paths: /path/to/plugin or ./plugin
    - GitHub shorthand: github.com/owner/repo
    - Git URLs: git+https://github.com/owner/repo

    Returns:
        Tuple of (path, cloned) where cloned means path is a temp checkout
    """
    # Local path
    local_path = Path(source).expanduser()
    if local_path.exists():
        return local_path.resolve(), False

    # Git URL or GitHub shorthand
    if source.startswith("git+") or source.startswith("https://") or "github.com" in source:
        return _clone_repo(source), True

    raise ValueError(f"Cannot resolve source: {source}")


def _clone_repo(source: str) -> Path:
    """Clone a git repository to a temporary location."""
    # Normalize URL
    url = source
    if url.startswith("git+"):
        url = url[4:]
    if not url.startswith("https://"):
        url = f"https://{url}"
    if not url.endswith(".git"):
        url = f"{url}.git"

    temp_dir = tempfile.mkdtemp(prefix="droid-plugin-")
    logger.debug("Cloning %s into %s", url, temp_dir)
    try:
        subprocess.run(
            ["git", "clone", "--depth=1", url, temp_dir],
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError):
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise

    return Path(temp_dir)
