"""antroute command-line interface powered by Typer."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from antroute.config import load_settings
from antroute.context import bind_request
from antroute.errors import UrlMappingError
from antroute.mapping import Deferred, Fixed, UrlMapping
from antroute.patterns import parse_pattern, translate
from antroute.routing import Router

app = typer.Typer(name="antroute", add_completion=False, no_args_is_help=True)

RoutesFile = Annotated[Path, typer.Argument(help="JSON route file.", exists=True, dir_okay=False)]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Compile, match and reverse Ant-style URL mappings."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _load_router(path: Path) -> Router:
    try:
        return Router.from_settings(load_settings(path))
    except ValidationError as exc:
        typer.echo(f"Error: invalid route file {str(path)!r}:\n{exc}", err=True)
        raise typer.Exit(1) from exc
    except UrlMappingError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


def _parse_params(pairs: list[str]) -> dict[str, str | list[str]]:
    """Turn ``name=value`` options into a mapping; repeated names become lists."""
    params: dict[str, str | list[str]] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            typer.echo(f"Error: parameter {pair!r} is not in name=value form.", err=True)
            raise typer.Exit(1)
        if name in params:
            existing = params[name]
            params[name] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            params[name] = value
    return params


def _label(identifier: Fixed | Deferred | None) -> str:
    if identifier is None:
        return "-"
    if isinstance(identifier, Deferred):
        return f"<{identifier.name}>"
    return identifier.value


def _describe(mapping: UrlMapping) -> str:
    if mapping.controller is None and mapping.view is not None:
        return f"view {_label(mapping.view)}"
    return f"{_label(mapping.controller)}#{_label(mapping.action)}"


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


@app.command("compile")
def compile_(
    pattern: Annotated[str, typer.Argument(help="URL pattern, e.g. /blog/(*)/(**).")],
) -> None:
    """Show the logical URLs of a pattern and the regex for each."""
    try:
        url_pattern = parse_pattern(pattern)
    except UrlMappingError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    width = max(len(url) for url in url_pattern.logical_urls)
    for url in url_pattern.logical_urls:
        typer.echo(f"{url:<{width}}   {translate(url)}")


@app.command()
def routes(path: RoutesFile) -> None:
    """List mappings in the order they are tried."""
    router = _load_router(path)
    if not len(router):
        return
    width = max(len(mapping.pattern) for mapping in router)
    for mapping in router:
        typer.echo(f"{mapping.pattern:<{width}}   {_describe(mapping)}")


@app.command()
def match(
    path: RoutesFile,
    uri: Annotated[str, typer.Argument(help="Request path to match.")],
) -> None:
    """Match a request path and print the result as JSON."""
    router = _load_router(path)
    result = router.match(uri)
    if result is None:
        typer.echo(f"No mapping matches {uri!r}", err=True)
        raise typer.Exit(1)

    with bind_request(result.params):
        payload = {
            "pattern": result.mapping.pattern,
            "controller": result.controller_name,
            "action": result.action_name,
            "view": result.view_name,
            "params": result.params,
        }
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def url(
    path: RoutesFile,
    controller: Annotated[str | None, typer.Option(help="Target controller.")] = None,
    action: Annotated[str | None, typer.Option(help="Target action.")] = None,
    param: Annotated[list[str] | None, typer.Option("--param", "-p", help="name=value, repeatable.")] = None,
    fragment: Annotated[str | None, typer.Option(help="URL fragment.")] = None,
    context_path: Annotated[str, typer.Option(help="Application context path prefix.")] = "",
) -> None:
    """Build a URL for a controller/action from parameters."""
    router = _load_router(path)
    params = _parse_params(param or [])
    try:
        with bind_request({}, context_path):
            result = router.create_url(controller, action, params, fragment)
    except UrlMappingError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(result)
