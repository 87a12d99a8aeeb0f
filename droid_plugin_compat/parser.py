"""Parse Claude Code plugin structure."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from droid_plugin_compat.frontmatter import FrontmatterError, parse_frontmatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginManifest:
    """Fields of plugin.json that the conversion reports on.

    ``author`` may be written as a plain string or as an object with a
    ``name`` key; both collapse to the author's name here.
    """

    name: str
    version: str
    description: str
    author: Optional[str] = None
    keywords: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict, default_name: str = "unknown") -> PluginManifest:
        name = _as_str(data.get("name"))
        author = data.get("author")
        if isinstance(author, dict):
            author = author.get("name")
        return cls(
            name=name.strip() if name and name.strip() else default_name,
            version=_as_str(data.get("version")) or "0.0.0",
            description=_as_str(data.get("description")) or "",
            author=_as_str(author) or None,
            keywords=_as_list(data.get("keywords")) or [],
        )


@dataclass(frozen=True)
class ClaudeCommand:
    """A slash command from commands/."""

    name: str
    description: str
    body: str
    argument_hint: Optional[str] = None
    model: Optional[str] = None
    allowed_tools: Optional[list[str]] = None
    disable_model_invocation: bool = False
    source_path: Optional[Path] = None


@dataclass(frozen=True)
class ClaudeAgent:
    """An agent definition from agents/."""

    name: str
    description: str
    body: str
    capabilities: Optional[list[str]] = None
    model: Optional[str] = None
    source_path: Optional[Path] = None


@dataclass(frozen=True)
class ClaudeSkill:
    """A skill directory containing SKILL.md."""

    name: str
    description: str
    source_dir: Path
    skill_path: Path


@dataclass(frozen=True)
class ClaudePlugin:
    """Fully parsed Claude Code plugin."""

    root: Path
    manifest: PluginManifest
    commands: list[ClaudeCommand] = field(default_factory=list)
    agents: list[ClaudeAgent] = field(default_factory=list)
    skills: list[ClaudeSkill] = field(default_factory=list)
    hooks_config: Optional[dict] = None
    mcp_config: Optional[dict] = None

    @property
    def has_hooks(self) -> bool:
        return self.hooks_config is not None

    @property
    def has_mcp(self) -> bool:
        return self.mcp_config is not None

    def summary(self) -> dict:
        """Return a summary of plugin components."""
        return {
            "name": self.manifest.name,
            "version": self.manifest.version,
            "skills": len(self.skills),
            "agents": len(self.agents),
            "commands": len(self.commands),
            "has_hooks": self.has_hooks,
            "has_mcp": self.has_mcp,
        }


def parse_plugin(plugin_path: Path) -> ClaudePlugin:
    """Parse a Claude Code plugin directory.

    Args:
        plugin_path: Path to the plugin root directory

    Returns:
        ClaudePlugin with all discovered components

    Raises:
        ValueError: If plugin structure or a component file is invalid
    """
    plugin_path = Path(plugin_path).resolve()

    if not plugin_path.is_dir():
        raise ValueError(f"Plugin path is not a directory: {plugin_path}")

    manifest = _parse_manifest(plugin_path)

    commands = _load_commands(plugin_path)
    agents = _load_agents(plugin_path)
    skills = _load_skills(plugin_path)

    hooks_config = _load_json_config(plugin_path / "hooks" / "hooks.json")
    mcp_config = _load_json_config(plugin_path / ".mcp.json")

    logger.debug(
        "Parsed plugin %s: %d commands, %d agents, %d skills",
        manifest.name,
        len(commands),
        len(agents),
        len(skills),
    )

    return ClaudePlugin(
        root=plugin_path,
        manifest=manifest,
        commands=commands,
        agents=agents,
        skills=skills,
        hooks_config=hooks_config,
        mcp_config=mcp_config,
    )


def _parse_manifest(plugin_path: Path) -> PluginManifest:
    """Parse the plugin.json manifest."""
    manifest_path = plugin_path / ".claude-plugin" / "plugin.json"

    if not manifest_path.exists():
        # Try alternate location at root
        manifest_path = plugin_path / "plugin.json"

    if not manifest_path.exists():
        raise ValueError(f"No plugin.json found in {plugin_path}")

    data = _read_json(manifest_path)
    if not isinstance(data, dict):
        raise ValueError(f"plugin.json must contain an object: {manifest_path}")

    return PluginManifest.from_dict(data, default_name=plugin_path.name)


def _load_commands(plugin_path: Path) -> list[ClaudeCommand]:
    """Load every command markdown file, including nested groups.

    commands/workflows/plan.md becomes workflows:plan.
    """
    commands_dir = plugin_path / "commands"
    if not commands_dir.is_dir():
        return []

    commands = []
    for command_path in sorted(commands_dir.rglob("*.md")):
        data, body = _read_markdown(command_path)
        default_name = ":".join(command_path.relative_to(commands_dir).with_suffix("").parts)

        commands.append(
            ClaudeCommand(
                name=_as_str(data.get("name")) or default_name,
                description=_as_str(data.get("description")) or "",
                body=body,
                argument_hint=_as_str(data.get("argument-hint")),
                model=_as_str(data.get("model")),
                allowed_tools=_as_list(data.get("allowed-tools")),
                disable_model_invocation=data.get("disable-model-invocation") is True,
                source_path=command_path,
            )
        )
        logger.debug("Loaded command %s from %s", commands[-1].name, command_path)

    return commands


def _load_agents(plugin_path: Path) -> list[ClaudeAgent]:
    """Load all agent markdown files in agents/ directory."""
    agents_dir = plugin_path / "agents"
    if not agents_dir.is_dir():
        return []

    agents = []
    for agent_path in sorted(agents_dir.glob("*.md")):
        data, body = _read_markdown(agent_path)

        agents.append(
            ClaudeAgent(
                name=_as_str(data.get("name")) or agent_path.stem,
                description=_as_str(data.get("description")) or "",
                body=body,
                capabilities=_as_list(data.get("capabilities")),
                model=_as_str(data.get("model")),
                source_path=agent_path,
            )
        )
        logger.debug("Loaded agent %s from %s", agents[-1].name, agent_path)

    return agents


def _load_skills(plugin_path: Path) -> list[ClaudeSkill]:
    """Find all SKILL.md files in skills/ directory."""
    skills_dir = plugin_path / "skills"
    if not skills_dir.is_dir():
        return []

    skills = []
    for skill_dir in sorted(skills_dir.iterdir()):
        skill_file = skill_dir / "SKILL.md"
        if not skill_dir.is_dir() or not skill_file.exists():
            continue

        data, _ = _read_markdown(skill_file)
        skills.append(
            ClaudeSkill(
                name=_as_str(data.get("name")) or skill_dir.name,
                description=_as_str(data.get("description")) or "",
                source_dir=skill_dir,
                skill_path=skill_file,
            )
        )

    return skills


def _read_markdown(path: Path) -> tuple[dict[str, Any], str]:
    """Read a markdown file and parse its frontmatter."""
    try:
        return parse_frontmatter(path.read_text(encoding="utf-8"))
    except FrontmatterError as e:
        raise ValueError(f"{path}: {e}") from e


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e


def _load_json_config(path: Path) -> Optional[dict]:
    """Load a JSON config file if it exists."""
    if not path.exists():
        return None

    return _read_json(path)


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _as_list(value: Any) -> Optional[list[str]]:
    """Accept either a YAML list or a comma-separated string."""
    if value is None:
        return None
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item) for item in value]
    return [str(value)]
