"""Archive entry classification.

Decides, from the entry name alone, whether an entry is structural
(never touched), an image, a stylesheet, a translatable markup document, or
something else that is copied through unchanged.
"""

from enum import Enum

from epub_scribe.config import MIMETYPE_ENTRY


class EntryCategory(Enum):
    """How the pipeline treats an archive entry"""
    SKIP_STRUCTURAL = "skip_structural"
    IMAGE = "image"
    STYLE = "style"
    TRANSLATABLE = "translatable"
    PASSTHROUGH = "passthrough"


class EntryClassifier:
    """Classifies archive entries by name.

    Rules are checked in order and the first match wins; any matching
    substring or extension is enough.
    """

    STRUCTURAL_MARKERS = ('toc', 'nav', 'cover', 'titlepage', 'title-page', 'title_page',
                          'copyright', 'dedication')
    STRUCTURAL_EXTENSIONS = {'opf', 'ncx', 'xml'}
    BINARY_EXTENSIONS = {'ttf', 'otf', 'woff', 'woff2', 'eot',
                         'mp3', 'mp4', 'm4a', 'ogg', 'wav', 'webm', 'pdf', 'bin'}
    IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'svg', 'webp'}
    STYLE_EXTENSIONS = {'css'}
    STYLE_MARKERS = ('stylesheet', 'style')
    MARKUP_EXTENSIONS = {'xhtml', 'html', 'htm'}

    @staticmethod
    def get_extension(name: str) -> str:
        """Lowercase extension of the last path component ('' if none)."""
        basename = name.rsplit('/', 1)[-1]
        if '.' not in basename:
            return ''
        return basename.rsplit('.', 1)[-1].lower()

    def classify(self, name: str, is_dir: bool = False) -> EntryCategory:
        """Classify an entry.

        Args:
            name: Entry path inside the archive
            is_dir: Whether the entry is a directory pseudo-entry

        Returns:
            EntryCategory for the entry
        """
        lower = name.lower()

        if is_dir or name.endswith('/') or name == MIMETYPE_ENTRY or lower.startswith('meta-inf/'):
            return EntryCategory.SKIP_STRUCTURAL

        ext = self.get_extension(name)

        if any(marker in lower for marker in self.STRUCTURAL_MARKERS):
            return EntryCategory.SKIP_STRUCTURAL
        if ext in self.STRUCTURAL_EXTENSIONS or ext in self.BINARY_EXTENSIONS:
            return EntryCategory.SKIP_STRUCTURAL

        if ext in self.IMAGE_EXTENSIONS:
            return EntryCategory.IMAGE

        if ext in self.STYLE_EXTENSIONS or any(marker in lower for marker in self.STYLE_MARKERS):
            return EntryCategory.STYLE

        if ext in self.MARKUP_EXTENSIONS:
            return EntryCategory.TRANSLATABLE

        return EntryCategory.PASSTHROUGH


_default_classifier = EntryClassifier()


def classify_entry(name: str, is_dir: bool = False) -> EntryCategory:
    """Classify an entry with the default rules."""
    return _default_classifier.classify(name, is_dir)
