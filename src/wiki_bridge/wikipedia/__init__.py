# Remote link sources consumed by the search engine

from .link_source import LinkSource
from .mediawiki import MediaWikiLinkSource

__all__ = ["LinkSource", "MediaWikiLinkSource"]
