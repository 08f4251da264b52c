"""
Tag shielding for EPUB translation

Images (``<img>``, ``<image>``, inline ``<svg>`` blocks), ``<style>`` blocks
and ``<script>`` blocks are swapped for opaque tokens such as ``[[IMG_0]]``
before text is sent to a backend, then swapped back afterwards. Backends only
ever see prose and ordinary inline markup.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple

from epub_scribe.config import MIN_VISIBLE_CHARS


class TokenMarker(NamedTuple):
    """Delimiters wrapped around ``KIND_n`` to form a token"""
    open: str
    close: str

    def token(self, kind: str, index: int) -> str:
        return f"{self.open}{kind}_{index}{self.close}"


DEFAULT_MARKER = TokenMarker("[[", "]]")

IMAGE_KIND = "IMG"
STYLE_KIND = "STYLE"
SCRIPT_KIND = "SCRIPT"
KINDS = (IMAGE_KIND, STYLE_KIND, SCRIPT_KIND)

# Inline svg blocks are matched before single image tags so an <image>
# nested in an <svg> stays inside the svg literal
IMAGE_PATTERN = re.compile(r'<svg\b.*?</svg\s*>|<(?:img|image)\b[^>]*>', re.IGNORECASE | re.DOTALL)
STYLE_PATTERN = re.compile(r'<style\b.*?</style\s*>', re.IGNORECASE | re.DOTALL)
SCRIPT_PATTERN = re.compile(r'<script\b.*?</script\s*>', re.IGNORECASE | re.DOTALL)
TAG_PATTERN = re.compile(r'<[^>]+>')


@dataclass
class ShieldedText:
    """Markup with non-translatable blocks replaced by tokens.

    Attributes:
        text: Markup with tokens in place of shielded blocks
        images: Shielded image literals, index = token ordinal
        styles: Shielded style literals
        scripts: Shielded script literals
        has_content: Whether enough visible text remains to be worth translating
        visible_length: Length of the visible text after stripping tags and tokens
        marker: Token delimiters used for this text
        fragments: Token -> literal, for every token issued
    """
    text: str
    images: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)
    has_content: bool = False
    visible_length: int = 0
    marker: TokenMarker = DEFAULT_MARKER
    fragments: Dict[str, str] = field(default_factory=dict)

    @property
    def token_count(self) -> int:
        return len(self.images) + len(self.styles) + len(self.scripts)

    def restore(self, text: str) -> str:
        """Put the shielded literals back into (translated) text."""
        return unshield(text, self.images, self.styles, self.scripts, self.marker)


def choose_marker(text: str) -> TokenMarker:
    """
    Pick token delimiters that cannot collide with the source text.

    The default ``[[``/``]]`` is used unless the text already contains
    something starting like one of our tokens; the delimiters are then padded
    with ``#`` until no such prefix occurs.
    """
    padding = ""
    while True:
        marker = TokenMarker(DEFAULT_MARKER.open + padding, padding + DEFAULT_MARKER.close)
        if not any(f"{marker.open}{kind}_" in text for kind in KINDS):
            return marker
        padding += "#"


def _replace_blocks(text: str, pattern: re.Pattern, kind: str, marker: TokenMarker,
                    literals: List[str], fragments: Dict[str, str]) -> str:
    def replace(match: re.Match) -> str:
        token = marker.token(kind, len(literals))
        literals.append(match.group(0))
        fragments[token] = match.group(0)
        return token

    return pattern.sub(replace, text)


def visible_text(text: str, marker: TokenMarker = DEFAULT_MARKER) -> str:
    """Text left once tags and tokens are removed, trimmed."""
    stripped = TAG_PATTERN.sub('', text)
    token_pattern = re.escape(marker.open) + r'(?:' + '|'.join(KINDS) + r')_\d+' + re.escape(marker.close)
    stripped = re.sub(token_pattern, '', stripped)
    return stripped.strip()


def shield(markup: str, min_visible_chars: int = MIN_VISIBLE_CHARS) -> ShieldedText:
    """
    Replace images, styles and scripts with tokens.

    Args:
        markup: Document body (or any markup fragment)
        min_visible_chars: ``has_content`` is True only above this many visible chars

    Returns:
        ShieldedText; ``shielded.restore(shielded.text) == markup``

    Example:
        >>> s = shield('<p>Hi there, reader</p><img src="a.png"/>')
        >>> s.text
        '<p>Hi there, reader</p>[[IMG_0]]'
    """
    marker = choose_marker(markup)
    images: List[str] = []
    styles: List[str] = []
    scripts: List[str] = []
    fragments: Dict[str, str] = {}

    text = _replace_blocks(markup, IMAGE_PATTERN, IMAGE_KIND, marker, images, fragments)
    text = _replace_blocks(text, STYLE_PATTERN, STYLE_KIND, marker, styles, fragments)
    text = _replace_blocks(text, SCRIPT_PATTERN, SCRIPT_KIND, marker, scripts, fragments)

    visible_length = len(visible_text(text, marker))

    return ShieldedText(
        text=text,
        images=images,
        styles=styles,
        scripts=scripts,
        has_content=visible_length > min_visible_chars,
        visible_length=visible_length,
        marker=marker,
        fragments=fragments,
    )


def unshield(text: str, images: List[str], styles: List[str], scripts: List[str],
             marker: TokenMarker = DEFAULT_MARKER) -> str:
    """
    Replace every token with its literal.

    Kinds are restored in reverse shielding order: a later pass may have
    swallowed an earlier token (an image tag inside a script block), and the
    inner token must be restored after the outer one.

    Args:
        text: Text containing tokens
        images: Image literals
        styles: Style literals
        scripts: Script literals
        marker: Delimiters used when shielding

    Returns:
        Text with all known tokens replaced
    """
    for kind, literals in ((SCRIPT_KIND, scripts), (STYLE_KIND, styles), (IMAGE_KIND, images)):
        for index, literal in enumerate(literals):
            text = text.replace(marker.token(kind, index), literal)
    return text
