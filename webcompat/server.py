"""MCP server exposing the compatibility queries as read-only tools."""

from collections.abc import Callable
import json
import logging
from typing import Annotated, Any, Literal

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from . import messages
from .constants import (
    BCD_CATEGORIES,
    DEFAULT_LIMIT,
    MAX_COMPARE_FEATURES,
    MAX_LIMIT,
    MAX_SEARCH_QUERY_LENGTH,
    MIN_COMPARE_FEATURES,
    MIN_SEARCH_QUERY_LENGTH,
    RESPONSE_FORMAT_JSON,
    SERVER_NAME,
)
from .exceptions import WebCompatError
from .features import UNSET, StatusFilter
from .model import Page, to_jsonable
from .render_markdown import (
    render_baseline,
    render_baseline_list,
    render_browsers,
    render_compare,
    render_compat,
    render_search,
    render_version_matches,
    truncate_if_needed,
)
from .service import WebCompat, get_default

LOGGER = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Browser compatibility data from MDN Browser Compat Data (BCD) and the W3C WebDX "
    "web-features dataset (Baseline). Use compat_search to find BCD identifiers, "
    "compat_check for per-browser support, and compat_get_baseline for Baseline status."
)

Category = Literal[BCD_CATEGORIES]  # type: ignore[valid-type]
ResponseFormat = Annotated[
    Literal["markdown", "json"],
    Field(description="Output format: 'markdown' for human-readable or 'json' for structured data"),
]
Limit = Annotated[
    int,
    Field(ge=1, le=MAX_LIMIT, description="Maximum number of results to return (1-100)"),
]
Offset = Annotated[int, Field(ge=0, description="Number of results to skip for pagination")]
Browsers = Annotated[
    list[str] | None,
    Field(
        description=(
            'Filter to specific browsers (e.g., ["chrome", "safari"]). '
            "Omit for default desktop browsers."
        )
    ),
]

_READ_ONLY = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": False,
}


def _dump(payload: Any) -> str:
    return truncate_if_needed(json.dumps(to_jsonable(payload), indent=2, ensure_ascii=False))


def paginated_output(key: str, page: Page[Any], **extra: Any) -> dict[str, Any]:
    """JSON envelope for one page of results."""
    output: dict[str, Any] = dict(extra)
    output[key] = page.items
    output.update(
        total=page.total,
        count=len(page.items),
        offset=page.offset,
        has_more=page.has_more,
    )
    if page.next_offset is not None:
        output["next_offset"] = page.next_offset
    return output


class CompatTools:
    """Tool implementations; each returns the text sent back to the client."""

    def __init__(self, compat_factory: Callable[[], WebCompat] = get_default) -> None:
        self._compat_factory = compat_factory

    def _respond(self, produce: Callable[[WebCompat], str]) -> str:
        try:
            return produce(self._compat_factory())
        except WebCompatError as exc:
            LOGGER.warning("%s", exc)
            return messages.handle_error(exc)
        except Exception as exc:
            LOGGER.exception("Unexpected tool failure")
            return messages.handle_error(exc)

    def compat_check(
        self,
        feature: Annotated[
            str,
            Field(
                min_length=1,
                description=(
                    'BCD feature identifier using dot notation (e.g., "api.PushManager", '
                    '"css.properties.grid", "javascript.builtins.Array.at")'
                ),
            ),
        ],
        browsers: Browsers = None,
        response_format: ResponseFormat = "markdown",
    ) -> str:
        """Check browser compatibility for a specific web platform feature using MDN BCD.

        Returns version support across browsers, Baseline status, and MDN/spec links.
        Examples: "api.PushManager", "css.properties.grid", "javascript.builtins.Array.at".
        """

        def _produce(compat: WebCompat) -> str:
            result = compat.get_feature_compat(feature, browsers)
            if result is None:
                return messages.feature_not_found(feature)
            if response_format == RESPONSE_FORMAT_JSON:
                return _dump(result)
            return truncate_if_needed(render_compat(result))

        return self._respond(_produce)

    def compat_compare(
        self,
        features: Annotated[
            list[Annotated[str, Field(min_length=1)]],
            Field(
                min_length=MIN_COMPARE_FEATURES,
                max_length=MAX_COMPARE_FEATURES,
                description=(
                    "BCD feature identifiers to compare "
                    '(e.g., ["api.fetch", "api.XMLHttpRequest"])'
                ),
            ),
        ],
        browsers: Browsers = None,
        response_format: ResponseFormat = "markdown",
    ) -> str:
        """Compare browser compatibility across 2-5 web platform features side by side.

        Useful for choosing between alternative APIs, e.g. ["api.fetch", "api.XMLHttpRequest"].
        """

        def _produce(compat: WebCompat) -> str:
            result = compat.compare_features(features, browsers)
            if not result.features:
                return messages.none_found(result.not_found)
            if response_format == RESPONSE_FORMAT_JSON:
                output: dict[str, Any] = {"features": result.features}
                if result.not_found:
                    output["not_found"] = result.not_found
                return _dump(output)
            return truncate_if_needed(render_compare(result))

        return self._respond(_produce)

    def compat_search(
        self,
        query: Annotated[
            str,
            Field(
                min_length=MIN_SEARCH_QUERY_LENGTH,
                max_length=MAX_SEARCH_QUERY_LENGTH,
                description='Keyword matched against feature identifiers (e.g., "push", "grid")',
            ),
        ],
        category: Annotated[
            Category | None,
            Field(description='Filter by BCD category (e.g., "api", "css", "html")'),
        ] = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        response_format: ResponseFormat = "markdown",
    ) -> str:
        """Search BCD features by keyword to find the identifier for compat_check.

        Searches APIs, CSS properties, HTML elements, JavaScript built-ins and more.
        """

        def _produce(compat: WebCompat) -> str:
            page = compat.search_features(query, category, limit, offset)
            if page.total == 0:
                return messages.no_search_results(query, category)
            if response_format == RESPONSE_FORMAT_JSON:
                return _dump(paginated_output("features", page))
            return truncate_if_needed(render_search(page, query))

        return self._respond(_produce)

    def compat_get_baseline(
        self,
        feature: Annotated[
            str,
            Field(
                min_length=1,
                description=(
                    'web-features identifier using kebab-case (e.g., "container-queries", '
                    '"push", "view-transitions")'
                ),
            ),
        ],
        response_format: ResponseFormat = "markdown",
    ) -> str:
        """Get the Baseline status of a web platform feature from the web-features dataset.

        "high" is Widely Available, "low" is Newly Available, false is not Baseline.
        """

        def _produce(compat: WebCompat) -> str:
            result = compat.get_baseline_status(feature)
            if result is None:
                return messages.web_feature_not_found(feature)
            if response_format == RESPONSE_FORMAT_JSON:
                return _dump(result)
            return truncate_if_needed(render_baseline(result))

        return self._respond(_produce)

    def compat_list_baseline(
        self,
        status: Annotated[
            Literal["high", "low", "false"] | None,
            Field(
                description=(
                    'Filter by Baseline status: "high" (Widely Available), '
                    '"low" (Newly Available), "false" (Not Baseline)'
                )
            ),
        ] = None,
        group: Annotated[
            str | None,
            Field(description='Filter by web-features group (e.g., "css", "forms")'),
        ] = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        response_format: ResponseFormat = "markdown",
    ) -> str:
        """List web platform features filtered by Baseline status and/or group."""

        def _produce(compat: WebCompat) -> str:
            status_filter: StatusFilter = UNSET
            if status == "false":
                status_filter = False
            elif status is not None:
                status_filter = status

            page = compat.list_by_baseline(status_filter, group, limit, offset)
            if page.total == 0:
                return messages.no_baseline_results()
            if response_format == RESPONSE_FORMAT_JSON:
                return _dump(paginated_output("features", page))
            return truncate_if_needed(render_baseline_list(page, status))

        return self._respond(_produce)

    def compat_list_browsers(self, response_format: ResponseFormat = "markdown") -> str:
        """List browsers tracked in BCD with their current versions and release dates."""

        def _produce(compat: WebCompat) -> str:
            browsers = compat.list_browsers()
            if response_format == RESPONSE_FORMAT_JSON:
                return _dump({"total": len(browsers), "browsers": browsers})
            return truncate_if_needed(render_browsers(browsers))

        return self._respond(_produce)

    def compat_check_support(
        self,
        browser: Annotated[
            str,
            Field(min_length=1, description='Browser identifier (e.g., "safari", "chrome")'),
        ],
        version: Annotated[
            str,
            Field(min_length=1, description='Browser version (e.g., "17.0", "120")'),
        ],
        category: Annotated[
            Category | None,
            Field(description='Filter by BCD category (e.g., "api", "css")'),
        ] = None,
        limit: Limit = DEFAULT_LIMIT,
        offset: Offset = 0,
        response_format: ResponseFormat = "markdown",
    ) -> str:
        """Find web platform features added in a specific browser version.

        The version is matched exactly as written in BCD ("120" does not match "120.0").
        """

        def _produce(compat: WebCompat) -> str:
            page = compat.find_by_browser_version(browser, version, category, limit, offset)
            if page.total == 0:
                return messages.no_version_results(browser, version, category)
            if response_format == RESPONSE_FORMAT_JSON:
                return _dump(
                    paginated_output("features", page, browser=browser, version=version)
                )
            return truncate_if_needed(render_version_matches(browser, version, page))

        return self._respond(_produce)


_TOOL_TITLES = {
    "compat_check": "Check Browser Compatibility",
    "compat_compare": "Compare Browser Compatibility",
    "compat_search": "Search Web Platform Features",
    "compat_get_baseline": "Get Baseline Status",
    "compat_list_baseline": "List Features by Baseline Status",
    "compat_list_browsers": "List Tracked Browsers",
    "compat_check_support": "Check Browser Version Support",
}


def build_server(tools: CompatTools | None = None) -> FastMCP:
    """Create the FastMCP server with every compatibility tool registered."""
    tools = tools or CompatTools()
    server = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)
    for name, title in _TOOL_TITLES.items():
        server.add_tool(
            getattr(tools, name),
            name=name,
            annotations=ToolAnnotations(title=title, **_READ_ONLY),
        )
    return server
