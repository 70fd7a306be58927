"""
Helper functions for encoding article titles the way MediaWiki URLs expect them.
"""

from typing import List
from urllib.parse import quote

# Characters left untouched by JavaScript's encodeURIComponent
URI_COMPONENT_SAFE = "-_.!~*'()"

TITLES_SEPARATOR = "|"
SEPARATOR_ENCODED_LENGTH = 3  # "%7C"


def encode_uri_component(text: str) -> str:
    """Percent-encodes text using the encodeURIComponent character set.

    Examples:
      "Marine biology"   =>   "Marine%20biology"
      "Algae|Penguin"    =>   "Algae%7CPenguin"
      "Café"             =>   "Caf%C3%A9"
    """
    return quote(text, safe=URI_COMPONENT_SAFE)


def join_titles(titles: List[str]) -> str:
    """Joins titles into the pipe separated form of the 'titles' API parameter."""
    return TITLES_SEPARATOR.join(titles)


def encoded_titles_length(titles: List[str]) -> int:
    """Returns the length of the percent-encoded 'titles' parameter for the given titles."""
    return len(encode_uri_component(join_titles(titles)))


def build_article_url(hostname: str, title: str) -> str:
    """Returns the URL of an article on the given MediaWiki host.

    Examples:
      ("en.wikipedia.org", "Marine biology")   =>   "https://en.wikipedia.org/wiki/Marine_biology"
    """
    return f"https://{hostname}/wiki/{encode_uri_component(title.replace(' ', '_'))}"


def format_path(path: List[str]) -> str:
    """Returns the path as a single line of text, eg. 'Hydrogen → Algae → Penguin'."""
    return " → ".join(path)
