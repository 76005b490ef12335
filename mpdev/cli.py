"""
CLI interface for mpdev.

Provides commands: apply, validate.
"""

import time
from pathlib import Path

import click

from mpdev import __version__
from mpdev.config import ConfigError, load_config
from mpdev.errors import MpdevError
from mpdev.executor import DryRunExecutor, SubprocessExecutor
from mpdev.loader import load_resources
from mpdev.registry import Registry
from mpdev.utils import (
    format_duration,
    print_banner,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="mpdev")
def main():
    """
    mpdev - Apply declarative marketplace resources.

    Loads resource definitions, resolves references between them and
    applies them in order.
    """
    pass


def _build_registry(files, config_path, dry_run=False, verbose=False) -> Registry:
    """Load config and definitions, and register every resource."""
    config = load_config(config_path)

    log_level = "DEBUG" if verbose else config.get_log_level()
    setup_logging(
        config.get_log_file_path(),
        log_level,
        config.get_log_format(),
        config.should_log_to_console(),
    )

    executor = DryRunExecutor() if dry_run else SubprocessExecutor()
    registry = Registry(executor, config)
    for resource, source_dir in load_resources(files):
        if resource.name in registry:
            print_warning(f"{resource.name} is defined more than once, using the last definition")
        registry.register_resource(resource, source_dir)
    return registry


_files_option = click.option(
    "-f",
    "--filename",
    "files",
    multiple=True,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Resource definition file (repeatable, applied in order)",
)
_config_option = click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Custom configuration file (default: $MPDEV_HOME/config.yaml)",
)


@main.command()
@_files_option
@_config_option
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print commands instead of running them",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
def apply(files, config, dry_run, verbose):
    """
    Apply resource definitions.

    Examples:

      # Apply a definition file
      mpdev apply -f resources.yaml

      # Apply several files in order
      mpdev apply -f autogen.yaml -f dm_template.yaml

      # Show the commands that would run
      mpdev apply -f resources.yaml --dry-run
    """
    start_time = time.time()
    try:
        registry = _build_registry(files, config, dry_run=dry_run, verbose=verbose)

        print_banner("mpdev apply")
        print_info(f"Applying {len(registry)} resources...")

        applied = registry.apply()

        if dry_run:
            for call in registry.executor.calls:
                click.echo("  " + " ".join(call.argv))
        for name in applied:
            print_success(name)
        print_success(
            f"Applied {len(applied)} resources in {format_duration(time.time() - start_time)}"
        )
    except (MpdevError, ConfigError) as e:
        print_error(str(e))
        raise SystemExit(1)


@main.command()
@_files_option
@_config_option
def validate(files, config):
    """
    Validate definitions and references without applying.

    Example:

      mpdev validate -f resources.yaml
    """
    try:
        registry = _build_registry(files, config)
        registry.validate_references()
    except (MpdevError, ConfigError) as e:
        print_error(str(e))
        raise SystemExit(1)

    for resource in registry.resources():
        print_success(f"{resource.kind} {resource.name}")
    print_success(f"{len(registry)} resources valid")


if __name__ == "__main__":
    main()
