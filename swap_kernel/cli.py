"""
Swap Kernel CLI.

Usage:
    swap-kernel run           Run the swap trigger monitor in the foreground
    swap-kernel check-config  Validate a config file and list its triggers
    swap-kernel serve         Run the monitor in the background behind the API
"""

import importlib
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from swap_kernel.config.loader import ConfigError, load_config
from swap_kernel.hook.interface import ProcessLocator
from swap_kernel.hook.simulated import SimulatedGame, SimulatedLocator, SimulatedPlayer
from swap_kernel.models.config import SwapperConfig
from swap_kernel.monitor.loop import AcquisitionError, SwapMonitor

logger = logging.getLogger("swap_kernel")

DEFAULT_CONFIG = "DSREquipmentSwap.json"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Send swap kernel logs to stderr and, optionally, a log file."""
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, handlers=handlers, force=True)


def load_locator(target: str, config: SwapperConfig) -> ProcessLocator:
    """
    Build a ProcessLocator from "package.module:factory".
    The factory is called with the loaded config.
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter("Expected 'package.module:factory'.", param_hint="--hook")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"Cannot import {module_name}: {e}", param_hint="--hook")
    factory = getattr(module, attr, None)
    if factory is None:
        raise click.BadParameter(f"{module_name} has no attribute {attr}.", param_hint="--hook")
    return factory(config)


def simulated_locator() -> SimulatedLocator:
    """A simulated game with one connected player, for dry runs."""
    game = SimulatedGame()
    game.add_player(0, SimulatedPlayer())
    return SimulatedLocator(game)


def _load_or_exit(config_path: Path) -> SwapperConfig:
    try:
        return load_config(config_path)
    except ConfigError as e:
        logger.error("%s", e)
        click.echo(f"Failed to load configuration: {e}", err=True)
        sys.exit(1)


def _resolve_locator(hook: Optional[str], simulate: bool, config: SwapperConfig) -> ProcessLocator:
    if hook and simulate:
        raise click.UsageError("Use either --hook or --simulate, not both.")
    if simulate:
        logger.warning("Running against a simulated game; no real process is touched.")
        return simulated_locator()
    if not hook:
        raise click.UsageError("A game hook is required: pass --hook module:factory or --simulate.")
    return load_locator(hook, config)


config_option = click.option(
    "--config", "-c", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG, show_default=True,
    help="JSON file with settings and swap triggers",
)
hook_option = click.option(
    "--hook", default=None, help="ProcessLocator factory as 'package.module:factory'"
)
simulate_option = click.option(
    "--simulate", is_flag=True, help="Use an in-memory simulated game"
)


@click.group()
@click.version_option(package_name="equipment-swap-kernel", prog_name="swap-kernel")
@click.option("--log-level", default="INFO", show_default=True, help="Logging level")
@click.option(
    "--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None,
    help="Also write logs to this file",
)
def main(log_level: str, log_file: Optional[Path]):
    """Swap Kernel - equipment swap trigger monitor."""
    configure_logging(log_level, log_file)


@main.command()
@config_option
@hook_option
@simulate_option
def run(config_path: Path, hook: Optional[str], simulate: bool):
    """Run the swap trigger monitor until interrupted.

    Blocks in the foreground. Exits with status 2 if the game process is
    not found within the configured search timeout.
    """
    config = _load_or_exit(config_path)
    locator = _resolve_locator(hook, simulate, config)
    monitor = SwapMonitor(config, locator)

    logger.info("Swap kernel started. Starting swap trigger monitor.")
    try:
        monitor.run()
    except AcquisitionError as e:
        logger.error("%s Exiting...", e)
        sys.exit(2)
    except KeyboardInterrupt:
        monitor.stop_token.set()
        logger.info("Interrupted. Exiting...")


@main.command("check-config")
@config_option
def check_config(config_path: Path):
    """Validate a config file and list its swap triggers."""
    config = _load_or_exit(config_path)
    for label, count in config.trigger_counts().items():
        click.echo(f"{label}: {count} trigger(s)")
    for trigger in config.all_triggers():
        click.echo(f"  {trigger.id}: {trigger.describe()}")


@main.command()
@config_option
@hook_option
@simulate_option
@click.option("--host", "-h", default="127.0.0.1", help="Host to bind to")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind to")
def serve(config_path: Path, hook: Optional[str], simulate: bool, host: str, port: int):
    """Run the monitor on a background thread and serve the operator API."""
    import uvicorn

    from swap_kernel.api.app import create_app

    config = _load_or_exit(config_path)
    locator = _resolve_locator(hook, simulate, config)
    monitor = SwapMonitor(config, locator)
    app = create_app(monitor=monitor)

    monitor.start()
    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    finally:
        if monitor.running:
            monitor.stop()


if __name__ == "__main__":
    main()
