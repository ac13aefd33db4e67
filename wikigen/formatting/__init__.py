"""Formatting of raw provider output."""

from .response_formatter import FormattedResponse, clean_reference_url, format_response
from .infobox import parse_key_facts

__all__ = ["FormattedResponse", "clean_reference_url", "format_response", "parse_key_facts"]
