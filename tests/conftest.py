"""
Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and provides common fixtures
(in-memory EPUB containers, fake translation backends) for all test modules.
"""

import sys
import io
import zipfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

# Add project root to Python path (for the translate.py CLI module)
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from epub_scribe.core.backends.base import TranslationBackend


CONTAINER_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">\n'
    '  <rootfiles>\n'
    '    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>\n'
    '  </rootfiles>\n'
    '</container>\n'
)

CONTENT_OPF = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="id">\n'
    '  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/"><dc:title>Sample</dc:title></metadata>\n'
    '  <manifest><item id="c1" href="chapter1.xhtml" media-type="application/xhtml+xml"/></manifest>\n'
    '  <spine><itemref idref="c1"/></spine>\n'
    '</package>\n'
)

STYLESHEET = "body { margin: 0; }\np { text-indent: 1.5em; }\n"


def make_xhtml(body: str, title: str = "Chapter", body_attrs: str = "") -> str:
    """Wrap body markup in a complete XHTML document."""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<!DOCTYPE html>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">\n'
        f'<head><title>{title}</title><link rel="stylesheet" href="styles.css"/></head>\n'
        f'<body{body_attrs}>{body}</body>\n'
        '</html>\n'
    )


def make_epub_bytes(entries: Dict[str, object], include_mimetype: bool = True,
                    include_container: bool = True, directories: Optional[List[str]] = None) -> bytes:
    """
    Build an EPUB in memory.

    Args:
        entries: name -> str or bytes, written deflated in the given order
        include_mimetype: Write the stored ``mimetype`` entry first
        include_container: Write ``META-INF/container.xml``
        directories: Directory entries to add (names ending in '/')
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
        if include_mimetype:
            zf.writestr(zipfile.ZipInfo('mimetype'), 'application/epub+zip',
                        compress_type=zipfile.ZIP_STORED)
        for directory in directories or []:
            zf.writestr(zipfile.ZipInfo(directory), b'')
        if include_container:
            zf.writestr('META-INF/container.xml', CONTAINER_XML)
        for name, data in entries.items():
            if isinstance(data, str):
                data = data.encode('utf-8')
            zf.writestr(name, data)
    return buffer.getvalue()


class FakeBackend(TranslationBackend):
    """In-process backend driven by a function, records every call."""

    name = "fake"

    def __init__(self, translate: Optional[Callable[[str], str]] = None):
        super().__init__(timeout=5)
        self._translate = translate or (lambda text: text)
        self.calls: List[str] = []

    async def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        self.calls.append(text)
        return self._translate(text)


def word_swap(replacements: Dict[str, str]) -> Callable[[str], str]:
    """Translation function replacing whole words, leaving markup alone."""
    def translate(text: str) -> str:
        for source, target in replacements.items():
            text = text.replace(source, target)
        return text
    return translate


SPANISH = {
    "Hello": "Hola",
    "reader": "lector",
    "The night was quiet": "La noche estaba tranquila",
}


@pytest.fixture
def chapter_body():
    """Body markup of roughly 1200 characters with an image and a style block."""
    paragraphs = "".join(
        f'<p class="text">Hello reader, this is paragraph number {i} of the story. The night was quiet.</p>\n'
        for i in range(12)
    )
    return (
        '<style>p.text { color: #333; }</style>\n'
        '<h1>Chapter One</h1>\n'
        '<img src="../Images/map.png" alt="map"/>\n'
        + paragraphs
    )


@pytest.fixture
def chapter_xhtml(chapter_body):
    """Complete chapter document."""
    return make_xhtml(chapter_body, body_attrs=' class="chapter" epub:type="bodymatter"')


@pytest.fixture
def sample_epub_bytes(chapter_xhtml):
    """A small but complete EPUB."""
    return make_epub_bytes({
        'OEBPS/content.opf': CONTENT_OPF,
        'OEBPS/styles.css': STYLESHEET,
        'OEBPS/chapter1.xhtml': chapter_xhtml,
        'OEBPS/Images/map.png': b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR',
        'OEBPS/toc.ncx': '<ncx/>',
    }, directories=['OEBPS/'])


@pytest.fixture
def spanish_backend():
    """Backend translating a few English words to Spanish."""
    return FakeBackend(word_swap(SPANISH))


@pytest.fixture
def echo_backend():
    """Backend returning its input unchanged."""
    return FakeBackend()
