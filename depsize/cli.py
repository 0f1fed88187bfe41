"""CLI entry point: depsize.

Usage:
    depsize                      # interactive: prompt for package names
    depsize react                # one-shot
    depsize react lodash --json  # several roots, one JSON object per line
"""

from __future__ import annotations

import asyncio

import click

from depsize import __version__
from depsize.core.config import Settings
from depsize.core.logging import setup_logging
from depsize.engines.registry import RegistryClient
from depsize.engines.traversal import TraversalResult, traverse
from depsize.exceptions import InputRejectedError
from depsize.report import render_json, render_text


def normalize_package_name(raw: str) -> str:
    """Trim surrounding whitespace; reject empty names."""
    name = raw.strip()
    if not name:
        raise InputRejectedError("package name is empty")
    return name


async def resolve_all(roots: list[str], settings: Settings) -> list[TraversalResult]:
    """Run one traversal per root, sequentially, over a shared HTTP client."""
    results: list[TraversalResult] = []
    async with RegistryClient(
        settings.registry_url,
        timeout=settings.timeout,
        max_attempts=settings.max_attempts,
        user_agent=settings.user_agent,
    ) as client:
        for root in roots:
            results.append(
                await traverse(root, client, max_concurrency=settings.max_concurrency)
            )
    return results


def _emit(result: TraversalResult, as_json: bool) -> None:
    if as_json:
        click.echo(render_json(result))
    else:
        click.echo(render_text(result))


def _interactive(settings: Settings, as_json: bool) -> None:
    while True:
        try:
            raw = click.prompt(
                "Enter a package name", default="", show_default=False, prompt_suffix=": "
            )
        except click.Abort:
            click.echo()
            return
        try:
            name = normalize_package_name(raw)
        except InputRejectedError:
            click.echo("-- Your input was empty")
            continue
        (result,) = asyncio.run(resolve_all([name], settings))
        _emit(result, as_json)


@click.command()
@click.argument("packages", nargs=-1)
@click.option("--registry", "registry_url", default=None, help="Registry base URL")
@click.option(
    "-c",
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum in-flight registry requests",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-request timeout in seconds",
)
@click.option(
    "--attempts", type=click.IntRange(min=1), default=None, help="Attempts per request"
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.version_option(__version__, prog_name="depsize")
@click.pass_context
def main(
    ctx: click.Context,
    packages: tuple[str, ...],
    registry_url: str | None,
    concurrency: int | None,
    timeout: float | None,
    attempts: int | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Report the installed size of an npm package and all its dependencies.

    With no PACKAGES, prompts for names until EOF.
    """
    setup_logging(verbose)
    try:
        settings = Settings.from_env().override(
            registry_url=registry_url,
            max_concurrency=concurrency,
            timeout=timeout,
            max_attempts=attempts,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    if not packages:
        _interactive(settings, as_json)
        return

    try:
        roots = [normalize_package_name(p) for p in packages]
    except InputRejectedError as exc:
        raise click.BadParameter(str(exc), param_hint="PACKAGES") from exc

    results = asyncio.run(resolve_all(roots, settings))
    for result in results:
        _emit(result, as_json)
    if not all(r.ok for r in results):
        ctx.exit(1)
