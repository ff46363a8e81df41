"""User-facing error and empty-result messages."""

from __future__ import annotations

import re

_KEBAB_RE = re.compile(r"-([a-z])")


def handle_error(error: object) -> str:
    if isinstance(error, Exception):
        return f"Error: {error}"
    return f"Error: Unexpected error occurred: {error}"


def feature_not_found(feature_id: str) -> str:
    """Explain a missing BCD path with likely corrections."""
    suggestions: list[str] = []

    if "." not in feature_id:
        suggestions.append(
            "BCD identifiers use dot notation. Try: "
            f'"api.{feature_id}", "css.properties.{feature_id}", '
            f'or "javascript.builtins.{feature_id}"'
        )

    if "-" in feature_id:
        camel_case = _KEBAB_RE.sub(lambda match: match.group(1).upper(), feature_id)
        suggestions.append(f'BCD uses camelCase for some APIs. Try: "{camel_case}"')

    suggestions.append("Use the compat_search tool to find the correct identifier.")

    return "\n".join(
        [
            f'Error: Feature "{feature_id}" not found in BCD.',
            "",
            "Suggestions:",
            *[f"  - {item}" for item in suggestions],
        ]
    )


def web_feature_not_found(feature_id: str) -> str:
    return "\n".join(
        [
            f'Error: Feature "{feature_id}" not found in web-features.',
            "",
            "Suggestions:",
            '  - web-features uses kebab-case IDs (e.g., "container-queries", "push")',
            "  - Use compat_search to find features, or compat_list_baseline to browse.",
        ]
    )


def no_search_results(query: str, category: str | None) -> str:
    lines = [
        f'No features found matching "{query}".',
        "",
        "Suggestions:",
        "  - Try a broader search term",
        "  - BCD uses camelCase for API names (e.g., 'PushManager' not 'push-manager')",
        (
            "  - Try without the category filter to search all categories"
            if category
            else "  - Try filtering by category: api, css, html, javascript"
        ),
    ]
    return "\n".join(lines)


def no_baseline_results() -> str:
    return "No features found matching the specified filters."


def no_version_results(browser: str, version: str, category: str | None) -> str:
    scope = f' in category "{category}"' if category else ""
    return (
        f"No features found for {browser} version {version}{scope}. "
        "Try a different version or check with `compat_list_browsers` for available browsers."
    )


def none_found(feature_ids: list[str]) -> str:
    return f"None of the specified features were found: {', '.join(feature_ids)}"
