import dataclasses
from pathlib import Path

import click

from branchline.cli.config import (
    REPO_CONFIG_KEYS,
    format_config_value,
    load_repo_config,
    parse_config_value,
    save_repo_config,
)
from branchline.cli.ensure import Ensure
from branchline.cli.output import machine_output, user_output
from branchline.core.context import BranchlineContext
from branchline.core.global_config import GLOBAL_CONFIG_KEYS, GlobalConfig
from branchline.core.repo_discovery import NoRepoSentinel


def _global_value(config: GlobalConfig, key: str) -> str:
    return format_config_value(getattr(config, key))


def _update_global_config_field(config: GlobalConfig, key: str, value: str) -> GlobalConfig:
    """Return a copy of `config` with one field replaced.

    Raises:
        SystemExit: If the key is unknown or the value does not fit it
    """
    if key == "root":
        return dataclasses.replace(config, root=Path(value).expanduser().resolve())
    if key == "offline":
        lowered = value.strip().lower()
        Ensure.invariant(
            lowered in ("true", "false"), f"Invalid boolean value for offline: {value}"
        )
        return dataclasses.replace(config, offline=lowered == "true")
    Ensure.invariant(False, f"Invalid global config key: {key}")
    return config


@click.group("config")
def config_group() -> None:
    """Manage branchline configuration."""


@config_group.command("list")
@click.pass_obj
def config_list(ctx: BranchlineContext) -> None:
    """Print a list of configuration keys and values."""
    user_output(click.style("Global configuration:", bold=True))
    for key in GLOBAL_CONFIG_KEYS:
        machine_output(f"  {key}={_global_value(ctx.global_config, key)}")

    user_output(click.style("\nRepository configuration:", bold=True))
    if isinstance(ctx.repo, NoRepoSentinel):
        user_output("  (not in a git repository)")
        return
    for key in REPO_CONFIG_KEYS:
        machine_output(f"  {key}={format_config_value(getattr(ctx.repo_config, key))}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.option("--global", "is_global", is_flag=True, help="Read the global configuration.")
@click.pass_obj
def config_get(ctx: BranchlineContext, key: str, is_global: bool) -> None:
    """Print the value of a given configuration key."""
    if is_global:
        Ensure.invariant(key in GLOBAL_CONFIG_KEYS, f"Invalid global config key: {key}")
        machine_output(_global_value(ctx.global_config, key))
        return

    Ensure.in_repo(ctx)
    Ensure.invariant(key in REPO_CONFIG_KEYS, f"Invalid key: {key}")
    machine_output(format_config_value(getattr(ctx.repo_config, key)))


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.option("--global", "is_global", is_flag=True, help="Write the global configuration.")
@click.pass_obj
def config_set(ctx: BranchlineContext, key: str, value: str, is_global: bool) -> None:
    """Update configuration with a value for the given key."""
    if is_global:
        new_config = _update_global_config_field(ctx.global_config, key, value)
        ctx.config_store.save(new_config)
        user_output(f"Set {key}={_global_value(new_config, key)}")
        return

    repo = Ensure.in_repo(ctx)
    try:
        parsed = parse_config_value(key, value)
        current = load_repo_config(repo.repo_dir)
    except ValueError as e:
        Ensure.invariant(False, str(e))
        return
    new_config = dataclasses.replace(current, **{key: parsed})
    save_repo_config(repo.repo_dir, new_config)
    user_output(f"Set {key}={format_config_value(parsed)}")
