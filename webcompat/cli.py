"""Console script for webcompat."""

import json
import logging
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel

from . import __version__ as _version
from . import messages
from .config import Settings
from .constants import (
    BCD_CATEGORIES,
    DEFAULT_LIMIT,
    MAX_COMPARE_FEATURES,
    MAX_LIMIT,
    MIN_COMPARE_FEATURES,
)
from .data import ensure_datasets
from .exceptions import WebCompatError
from .features import UNSET, StatusFilter
from .model import to_jsonable
from .render_markdown import (
    render_baseline,
    render_baseline_list,
    render_browsers,
    render_compare,
    render_compat,
    render_search,
    render_version_matches,
)
from .server import CompatTools, build_server, paginated_output
from .service import WebCompat, get_default

LOGGER = logging.getLogger(__name__)

OUTPUT_CHOICES = ("rich", "markdown", "json")


def _configure_logging(debug: bool) -> None:
    # stdout carries the MCP transport and command output; logs go to stderr.
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _verbose() -> None:
    package_logger = logging.getLogger("webcompat")
    if package_logger.getEffectiveLevel() > logging.INFO:
        package_logger.setLevel(logging.INFO)


def _compat(ctx: click.Context) -> WebCompat:
    settings: Settings = ctx.obj
    try:
        return get_default(settings)
    except WebCompatError as exc:
        raise click.ClickException(str(exc)) from exc


def _emit(output: str, title: str, markdown: str, payload: Any) -> None:
    if output == "json":
        click.echo(json.dumps(to_jsonable(payload), indent=2, ensure_ascii=False))
    elif output == "markdown":
        click.echo(markdown)
    else:
        Console().print(Panel(Markdown(markdown), border_style="blue", title=title))


def _output_option(func: Any) -> Any:
    return click.option(
        "-o",
        "--output",
        type=click.Choice(OUTPUT_CHOICES),
        default="rich",
        show_default=True,
        help="Render as a rich panel, raw Markdown, or JSON.",
    )(func)


def _paging_options(func: Any) -> Any:
    func = click.option(
        "--offset", type=click.IntRange(min=0), default=0, show_default=True
    )(func)
    return click.option(
        "--limit",
        type=click.IntRange(1, MAX_LIMIT),
        default=DEFAULT_LIMIT,
        show_default=True,
    )(func)


_browser_option = click.option(
    "-b",
    "--browser",
    "browsers",
    multiple=True,
    help="Browser id to include (repeatable). Defaults to chrome, edge, firefox, safari.",
)
_category_option = click.option(
    "-c",
    "--category",
    type=click.Choice(BCD_CATEGORIES),
    default=None,
    help="Restrict to one BCD category.",
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(_version, "-v", "--version")
@click.option("--debug", is_flag=True, help="Enable debug logging (or set WEBCOMPAT_DEBUG=1).")
@click.pass_context
def main(ctx: click.Context, debug: bool) -> None:
    """
    Query browser compatibility data (MDN BCD + web-features Baseline)

    \b
    Example usages:
      webcompat check api.fetch
      webcompat search grid -c css
      webcompat baseline container-queries
      webcompat added chrome 120 -c css
      webcompat serve
    """
    settings = Settings.from_env()
    _configure_logging(debug or settings.debug)
    ctx.obj = settings


@main.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Run the MCP server over stdio."""
    _verbose()
    _compat(ctx)
    settings: Settings = ctx.obj
    LOGGER.info("web-compat MCP server running via stdio")
    build_server(CompatTools(lambda: get_default(settings))).run()


@main.command()
@click.option("--force", is_flag=True, help="Re-download even when files already exist.")
@click.pass_context
def download(ctx: click.Context, force: bool) -> None:
    """Download the BCD and web-features datasets."""
    _verbose()
    settings: Settings = ctx.obj
    if settings.offline:
        raise click.ClickException("Downloads are disabled (WEBCOMPAT_OFFLINE=1).")
    try:
        downloaded = ensure_datasets(settings, force=force)
    except WebCompatError as exc:
        raise click.ClickException(str(exc)) from exc
    if not downloaded:
        click.echo("Datasets already present; use --force to refresh.")
    for path in downloaded:
        click.echo(f"Saved {path}")


@main.command()
@click.argument("feature")
@_browser_option
@_output_option
@click.pass_context
def check(ctx: click.Context, feature: str, browsers: tuple[str, ...], output: str) -> None:
    """Check browser support for a BCD feature (e.g. api.fetch)."""
    result = _compat(ctx).get_feature_compat(feature, list(browsers) or None)
    if result is None:
        raise click.ClickException(messages.feature_not_found(feature))
    _emit(output, feature, render_compat(result), result)


@main.command()
@click.argument("features", nargs=-1, required=True)
@_browser_option
@_output_option
@click.pass_context
def compare(
    ctx: click.Context, features: tuple[str, ...], browsers: tuple[str, ...], output: str
) -> None:
    """Compare 2-5 BCD features side by side."""
    if not MIN_COMPARE_FEATURES <= len(features) <= MAX_COMPARE_FEATURES:
        raise click.BadParameter(
            f"expected {MIN_COMPARE_FEATURES}-{MAX_COMPARE_FEATURES} features, got {len(features)}",
            param_hint="FEATURES",
        )
    result = _compat(ctx).compare_features(list(features), list(browsers) or None)
    if not result.features:
        raise click.ClickException(messages.none_found(result.not_found))
    _emit(output, "compare", render_compare(result), result)


@main.command()
@click.argument("query")
@_category_option
@click.option(
    "--web-features",
    "web_features",
    is_flag=True,
    help="Search web-features ids, names and descriptions instead of BCD paths.",
)
@_paging_options
@_output_option
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    category: str | None,
    web_features: bool,
    limit: int,
    offset: int,
    output: str,
) -> None:
    """Search BCD feature paths (or web features) by keyword."""
    compat = _compat(ctx)
    if web_features:
        features_page = compat.search_web_features(query, limit, offset)
        if features_page.total == 0:
            raise click.ClickException(messages.no_baseline_results())
        _emit(
            output,
            f"search: {query}",
            render_baseline_list(features_page),
            paginated_output("features", features_page),
        )
        return

    page = compat.search_features(query, category, limit, offset)
    if page.total == 0:
        raise click.ClickException(messages.no_search_results(query, category))
    _emit(
        output,
        f"search: {query}",
        render_search(page, query),
        paginated_output("features", page),
    )


@main.command()
@click.argument("feature")
@_output_option
@click.pass_context
def baseline(ctx: click.Context, feature: str, output: str) -> None:
    """Show the Baseline status of a web feature (e.g. container-queries)."""
    result = _compat(ctx).get_baseline_status(feature)
    if result is None:
        raise click.ClickException(messages.web_feature_not_found(feature))
    _emit(output, feature, render_baseline(result), result)


@main.command("list-baseline")
@click.option("--status", type=click.Choice(["high", "low", "false"]), default=None)
@click.option("--group", default=None, help="web-features group id (e.g. css, forms).")
@_paging_options
@_output_option
@click.pass_context
def list_baseline(
    ctx: click.Context,
    status: str | None,
    group: str | None,
    limit: int,
    offset: int,
    output: str,
) -> None:
    """List web features by Baseline status and/or group."""
    status_filter: StatusFilter = UNSET
    if status == "false":
        status_filter = False
    elif status is not None:
        status_filter = status

    page = _compat(ctx).list_by_baseline(status_filter, group, limit, offset)
    if page.total == 0:
        raise click.ClickException(messages.no_baseline_results())
    _emit(
        output,
        "baseline",
        render_baseline_list(page, status),
        paginated_output("features", page),
    )


@main.command()
@_output_option
@click.pass_context
def browsers(ctx: click.Context, output: str) -> None:
    """List tracked browsers and their current releases."""
    items = _compat(ctx).list_browsers()
    _emit(output, "browsers", render_browsers(items), {"total": len(items), "browsers": items})


@main.command()
@click.argument("browser")
@click.argument("version")
@_category_option
@_paging_options
@_output_option
@click.pass_context
def added(
    ctx: click.Context,
    browser: str,
    version: str,
    category: str | None,
    limit: int,
    offset: int,
    output: str,
) -> None:
    """List features added in an exact browser version (e.g. chrome 120)."""
    page = _compat(ctx).find_by_browser_version(browser, version, category, limit, offset)
    if page.total == 0:
        raise click.ClickException(messages.no_version_results(browser, version, category))
    _emit(
        output,
        f"{browser} {version}",
        render_version_matches(browser, version, page),
        paginated_output("features", page, browser=browser, version=version),
    )


@main.command()
@click.pass_context
def groups(ctx: click.Context) -> None:
    """List web-features groups."""
    for group in _compat(ctx).list_groups():
        click.echo(f"{group.id}\t{group.name}")


@main.command()
@click.pass_context
def categories(ctx: click.Context) -> None:
    """List BCD top-level categories."""
    for category in _compat(ctx).list_categories():
        click.echo(category)
