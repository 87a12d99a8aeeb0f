"""Translate Claude Code plugin formats to Factory Droid formats."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from droid_plugin_compat.frontmatter import format_frontmatter
from droid_plugin_compat.parser import ClaudeAgent, ClaudeCommand, ClaudePlugin

# Claude tool keyword -> Droid tool name. Several keywords share a target.
CLAUDE_TO_DROID_TOOLS = MappingProxyType(
    {
        "read": "Read",
        "write": "Create",
        "edit": "Edit",
        "multiedit": "Edit",
        "bash": "Execute",
        "grep": "Grep",
        "glob": "Glob",
        "list": "LS",
        "ls": "LS",
        "webfetch": "FetchUrl",
        "websearch": "WebSearch",
        "task": "Task",
        "todowrite": "TodoWrite",
        "todoread": "TodoWrite",
        "question": "AskUser",
    }
)

VALID_DROID_TOOLS = frozenset(
    {
        "Read",
        "LS",
        "Grep",
        "Glob",
        "Create",
        "Edit",
        "ApplyPatch",
        "Execute",
        "WebSearch",
        "FetchUrl",
        "TodoWrite",
        "Task",
        "AskUser",
    }
)

# Top-level directories that look like slash commands but are file paths
PATH_LIKE_COMMANDS = frozenset({"dev", "tmp", "etc", "usr", "var", "bin", "home"})

FALLBACK_NAME = "item"

_TASK_CALL_PATTERN = re.compile(r"^(\s*-?\s*)Task\s+([a-z][a-z0-9-]*)\(([^)]+)\)", re.MULTILINE)
# ASCII identifiers, but any Unicode whitespace may end a command
_SLASH_COMMAND_PATTERN = re.compile(
    r"(?<![:\w])/([a-z][a-z0-9_:-]*?)(?=(?u:\s)|[,.\"')\]}`]|\Z)", re.IGNORECASE | re.ASCII
)
_AGENT_REF_PATTERN = re.compile(r"@agent-([a-z][a-z0-9-]*)", re.IGNORECASE | re.ASCII)


class AgentMode(str, Enum):
    PRIMARY = "primary"
    SUBAGENT = "subagent"


class PermissionMode(str, Enum):
    NONE = "none"
    BROAD = "broad"
    FROM_COMMANDS = "from-commands"


@dataclass(frozen=True)
class ConvertOptions:
    """Conversion settings.

    These are carried for parity with the other output targets; the
    Droid output does not currently emit anything derived from them.
    """

    agent_mode: AgentMode = AgentMode.SUBAGENT
    infer_temperature: bool = False
    permissions: PermissionMode = PermissionMode.NONE


@dataclass(frozen=True)
class DroidCommandFile:
    name: str
    content: str


@dataclass(frozen=True)
class DroidAgentFile:
    name: str
    content: str


@dataclass(frozen=True)
class DroidSkillDir:
    name: str
    source_dir: Path


@dataclass(frozen=True)
class DroidBundle:
    """Everything needed to write a .factory directory."""

    commands: list[DroidCommandFile] = field(default_factory=list)
    droids: list[DroidAgentFile] = field(default_factory=list)
    skill_dirs: list[DroidSkillDir] = field(default_factory=list)


def convert_claude_to_droid(
    plugin: ClaudePlugin,
    options: Optional[ConvertOptions] = None,
) -> DroidBundle:
    """Convert a parsed Claude Code plugin into a Droid bundle.

    Commands, agents and skills are mapped one-to-one and keep the
    plugin's ordering. Skill directories are passed through untouched.

    Args:
        plugin: Parsed plugin to convert
        options: Conversion settings (defaults to ConvertOptions())

    Returns:
        DroidBundle ready to be written to disk
    """
    commands = [translate_command(command) for command in plugin.commands]
    droids = [translate_agent(agent) for agent in plugin.agents]
    skill_dirs = [
        DroidSkillDir(name=skill.name, source_dir=skill.source_dir) for skill in plugin.skills
    ]

    return DroidBundle(commands=commands, droids=droids, skill_dirs=skill_dirs)


def translate_command(command: ClaudeCommand) -> DroidCommandFile:
    """Convert a Claude Code command to a Droid command file.

    Claude Code format:
        ---
        description: "Command description"
        argument-hint: "[FOCUS]"
        disable-model-invocation: true
        ---
        Prompt content...

    Droid format keeps the same three keys; the namespace is dropped from
    the name (workflows:plan -> plan) and the body is rewritten.
    """
    name = flatten_command_name(command.name)
    frontmatter: dict = {"description": command.description}

    if command.argument_hint:
        frontmatter["argument-hint"] = command.argument_hint
    if command.disable_model_invocation is True:
        frontmatter["disable-model-invocation"] = True

    body = transform_content_for_droid(command.body.strip())
    return DroidCommandFile(name=name, content=format_frontmatter(frontmatter, body))


def translate_agent(agent: ClaudeAgent) -> DroidAgentFile:
    """Convert a Claude Code agent to a Droid definition.

    Claude Code format:
        ---
        name: Security Reviewer
        description: Agent description
        capabilities: [Threat modeling]
        model: inherit
        ---
        System prompt content...

    Droid format:
        ---
        name: security-reviewer
        description: Agent description
        model: inherit
        tools: [Grep, Read]
        ---
        ## Capabilities
        - Threat modeling

        System prompt content...
    """
    name = normalize_name(agent.name)
    frontmatter: dict = {
        "name": name,
        "description": agent.description,
        "model": agent.model if agent.model and agent.model != "inherit" else "inherit",
    }

    tools = map_agent_tools(agent)
    if tools:
        frontmatter["tools"] = tools

    body = agent.body.strip()
    if agent.capabilities:
        capabilities = "\n".join(f"- {capability}" for capability in agent.capabilities)
        body = f"## Capabilities\n{capabilities}\n\n{body}".strip()
    if not body:
        body = f"Instructions converted from the {agent.name} agent."

    body = transform_content_for_droid(body)
    return DroidAgentFile(name=name, content=format_frontmatter(frontmatter, body))


def map_agent_tools(agent: ClaudeAgent) -> Optional[list[str]]:
    """Infer Droid tools from anything the agent mentions.

    Plain substring matching: "grep" in "grepping" counts.

    Returns:
        Sorted tool names, or None if no tool keyword appears at all
    """
    scan_text = f"{agent.name} {agent.description or ''} {agent.body}".lower()

    mentioned = {
        droid_tool
        for claude_tool, droid_tool in CLAUDE_TO_DROID_TOOLS.items()
        if claude_tool in scan_text
    }

    if not mentioned:
        return None
    return sorted(tool for tool in mentioned if tool in VALID_DROID_TOOLS)


def transform_content_for_droid(body: str) -> str:
    """Rewrite Claude Code references in a body for Factory Droid.

    1. Task agent calls: Task agent-name(args) -> Task agent-name: args
    2. Slash commands: /workflows:plan -> /plan, /command-name stays as-is
    3. Agent references: @agent-name -> the name droid

    Passes always run in this order. Code spans are not treated specially.
    """
    result = _TASK_CALL_PATTERN.sub(_replace_task_call, body)
    result = _SLASH_COMMAND_PATTERN.sub(_replace_slash_command, result)
    result = _AGENT_REF_PATTERN.sub(_replace_agent_ref, result)
    return result


def _replace_task_call(match: re.Match) -> str:
    prefix, agent_name, args = match.groups()
    return f"{prefix}Task {normalize_name(agent_name)}: {args.strip()}"


def _replace_slash_command(match: re.Match) -> str:
    command_name = match.group(1)

    # Looks like a file path, not a command
    if "/" in command_name or command_name.lower() in PATH_LIKE_COMMANDS:
        return match.group(0)

    return f"/{flatten_command_name(command_name)}"


def _replace_agent_ref(match: re.Match) -> str:
    return f"the {normalize_name(match.group(1))} droid"


def flatten_command_name(name: str) -> str:
    """Strip the namespace prefix from a command name.

    "workflows:plan" -> "plan"
    "plan_review" -> "plan_review"
    """
    return normalize_name(name.rpartition(":")[2])


def normalize_name(value: str) -> str:
    """Turn any string into a lowercase, hyphenated slug."""
    trimmed = value.strip()
    if not trimmed:
        return FALLBACK_NAME

    normalized = trimmed.lower()
    normalized = re.sub(r"[\\/]+", "-", normalized)
    normalized = re.sub(r"[:\s]+", "-", normalized)
    normalized = re.sub(r"[^a-z0-9_-]+", "-", normalized)
    normalized = re.sub(r"-+", "-", normalized)
    normalized = normalized.strip("-")

    return normalized or FALLBACK_NAME
