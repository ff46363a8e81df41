"""Browser compatibility data (MDN BCD + web-features Baseline) for the terminal and MCP."""

from ._version import __version__

__all__ = ["__version__"]
