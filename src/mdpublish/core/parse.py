"""markdown-it tokenization of document bodies"""

from functools import lru_cache

from markdown_it import MarkdownIt


DEFAULT_PRESET = "gfm-like"


@lru_cache(maxsize=None)
def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def parse_markdown(content: str, preset: str = DEFAULT_PRESET) -> list:
    """Return the flat markdown-it token stream for content."""
    return _make_parser(preset).parse(content)
