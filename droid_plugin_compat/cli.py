"""CLI for converting Claude Code plugins to Factory Droid."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

import click

from droid_plugin_compat.parser import parse_plugin
from droid_plugin_compat.translator import (
    AgentMode,
    ConvertOptions,
    PermissionMode,
    flatten_command_name,
    normalize_name,
)
from droid_plugin_compat.writer import convert_plugin


@click.group()
@click.version_option(package_name="droid-plugin-compat")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """Convert Claude Code plugins into Factory Droid bundles."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("source")
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    envvar="DROID_PLUGIN_OUTPUT",
    show_default=True,
    help="Project directory or .factory directory to write into",
)
@click.option(
    "--agent-mode",
    type=click.Choice([m.value for m in AgentMode]),
    default=AgentMode.SUBAGENT.value,
    show_default=True,
)
@click.option("--infer-temperature", is_flag=True, help="Infer temperature from agent text")
@click.option(
    "--permissions",
    type=click.Choice([p.value for p in PermissionMode]),
    default=PermissionMode.NONE.value,
    show_default=True,
)
@click.option("--dry-run", is_flag=True, help="Convert without writing any files")
def convert(
    source: str,
    output: Path,
    agent_mode: str,
    infer_temperature: bool,
    permissions: str,
    dry_run: bool,
) -> None:
    """Convert a Claude Code plugin.

    SOURCE can be:
    - Local path: /path/to/plugin or ./plugin
    - GitHub: github.com/owner/repo
    - Git URL: git+https://github.com/owner/repo
    """
    click.echo(f"Converting plugin from {source}...")

    options = ConvertOptions(
        agent_mode=AgentMode(agent_mode),
        infer_temperature=infer_temperature,
        permissions=PermissionMode(permissions),
    )
    result = convert_plugin(source, output, options=options, dry_run=dry_run)

    if result.success:
        click.secho(str(result), fg="green")
    else:
        click.secho(str(result), fg="red")
        raise SystemExit(1)


@main.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def validate(path: Path) -> None:
    """Check a Claude Code plugin and preview its Droid names."""
    click.echo(f"Validating plugin at {path}...")

    try:
        plugin = parse_plugin(path)
    except (ValueError, OSError) as e:
        click.secho(f"✗ Invalid plugin: {e}", fg="red")
        raise SystemExit(1)

    click.secho(f"✓ Valid plugin: {plugin.manifest.name} v{plugin.manifest.version}", fg="green")

    command_names = [flatten_command_name(c.name) for c in plugin.commands]
    click.echo(f"\n  Commands ({len(plugin.commands)}):")
    for command, droid_name in zip(plugin.commands, command_names):
        click.echo(f"    /{command.name} -> /{droid_name}")

    droid_names = [normalize_name(a.name) for a in plugin.agents]
    click.echo(f"\n  Droids ({len(plugin.agents)}):")
    for agent, droid_name in zip(plugin.agents, droid_names):
        click.echo(f"    {agent.name} -> {droid_name}.md")

    click.echo(f"\n  Skills ({len(plugin.skills)}):")
    for skill in plugin.skills:
        click.echo(f"    {skill.name}")

    click.echo()
    for subdir, names in (("commands", command_names), ("droids", droid_names)):
        for name, count in sorted(Counter(names).items()):
            if count > 1:
                click.secho(
                    f"  ⚠ {count} sources map to {subdir}/{name}.md; only the last is kept",
                    fg="yellow",
                )
    if plugin.has_hooks:
        click.secho("  ⚠ Hooks will not be converted", fg="yellow")
    if plugin.has_mcp:
        click.secho("  ⚠ MCP servers will not be converted", fg="yellow")


if __name__ == "__main__":
    main()
