"""Click entry point for kbinventory.

    kbinventory list       -- show what the installation still has in the cluster
    kbinventory teardown   -- delete its custom resources, then show what is left
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import sys
from collections.abc import Coroutine
from typing import Any, TypeVar

import click

from kbinventory.client.kube import KubeResourceClient
from kbinventory.config import load_config
from kbinventory.discovery import DiscoveryResult, discover
from kbinventory.errors import KBInventoryError, TeardownError
from kbinventory.models.config import KBInventoryConfig
from kbinventory.observability.logging import get_logger, setup_logging
from kbinventory.report import format_remaining, remaining
from kbinventory.teardown import teardown

_T = TypeVar("_T")


def _apply_overrides(
    config: KBInventoryConfig,
    namespace: str | None,
    instance: str | None,
    timeout: int | None,
    log_level: str | None,
) -> KBInventoryConfig:
    if namespace:
        config.discovery = dataclasses.replace(config.discovery, namespace=namespace)
    if instance:
        config.discovery = dataclasses.replace(config.discovery, instance=instance)
    if timeout:
        config.timeout.operation_seconds = timeout
    if log_level:
        config.log.level = log_level.lower()
    return config


def _run(operation: str, config: KBInventoryConfig, coro: Coroutine[Any, Any, _T]) -> _T:
    """Run *coro* to completion, turning deadline and cluster failures into usage-level errors."""
    try:
        return asyncio.run(coro)
    except TimeoutError as exc:
        raise click.ClickException(
            f"{operation} did not finish within {config.timeout.operation_seconds}s; "
            "re-run it, or raise --timeout if it keeps expiring"
        ) from exc
    except TeardownError:
        raise
    except KBInventoryError as exc:
        raise click.ClickException(f"{operation} failed: {exc}") from exc


def _warn_discovery_errors(result: DiscoveryResult) -> None:
    for err in result.errors:
        click.echo(f"warning: {err}", err=True)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-n", "--namespace", metavar="NS", help="Namespace the installation runs in.")
@click.option("--instance", metavar="NAME", help="Instance/release label value of the installation.")
@click.option("--timeout", type=click.IntRange(min=1), help="Seconds allowed for each discover/teardown run.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Log level (logs go to stderr).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    namespace: str | None,
    instance: str | None,
    timeout: int | None,
    log_level: str | None,
) -> None:
    """Inventory and tear down the objects of a KubeBlocks installation."""
    try:
        config = _apply_overrides(load_config(), namespace, instance, timeout, log_level)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(config.log.level, json_output=not sys.stderr.isatty())
    ctx.obj = config


@cli.command("list")
@click.option("-o", "--output", type=click.Choice(["text", "json"]), default="text", show_default=True)
@click.pass_obj
def list_command(config: KBInventoryConfig, output: str) -> None:
    """List the objects that still belong to the installation."""
    result = _run("list", config, _discover(config))
    _warn_discovery_errors(result)
    leftovers = remaining(result.inventory)
    if output == "json":
        click.echo(json.dumps(leftovers, indent=2, sort_keys=True))
        return
    if not leftovers:
        click.echo("No remaining objects.")
        return
    for line in format_remaining(leftovers):
        click.echo(line)


@cli.command("teardown")
@click.pass_obj
def teardown_command(config: KBInventoryConfig) -> None:
    """Delete the installation's custom resources and strip their finalizers."""
    try:
        leftovers = _run("teardown", config, _teardown(config))
    except TeardownError as exc:
        click.echo(f"error: {exc}", err=True)
        if exc.unprocessed:
            click.echo(f"not processed: {', '.join(exc.unprocessed)}", err=True)
        click.echo("Re-run teardown to continue.", err=True)
        sys.exit(1)

    if leftovers:
        click.echo("Remaining objects:")
        for line in format_remaining(leftovers):
            click.echo(f"  {line}")
    else:
        click.echo("No remaining objects.")


async def _discover(config: KBInventoryConfig) -> DiscoveryResult:
    async with KubeResourceClient.connect(
        kubeconfig=config.kube.kubeconfig,
        context=config.kube.context,
        request_timeout=config.kube.request_timeout_seconds,
    ) as client:
        return await discover(client, config.discovery, timeout=config.timeout.operation_seconds)


async def _teardown(config: KBInventoryConfig) -> dict[str, list[str]]:
    log = get_logger("cli")
    async with KubeResourceClient.connect(
        kubeconfig=config.kube.kubeconfig,
        context=config.kube.context,
        request_timeout=config.kube.request_timeout_seconds,
    ) as client:
        before = await discover(client, config.discovery, timeout=config.timeout.operation_seconds)
        _warn_discovery_errors(before)
        await teardown(client, before.inventory, timeout=config.timeout.operation_seconds)
        log.info("teardown finished, checking for leftovers")

        after = await discover(client, config.discovery, timeout=config.timeout.operation_seconds)
        _warn_discovery_errors(after)
        return remaining(after.inventory)
