"""
epub-scribe: translate the text of EPUB books, keep everything else intact.
"""

from epub_scribe.core.backends import TranslationClient, TranslationOutcome, create_backend
from epub_scribe.core.epub import (
    ArchiveError,
    EntryFailure,
    EpubArchive,
    PipelineError,
    TranslationRunResult,
    load_container,
    run_translation,
    serialize_container,
    translate_epub_file,
)

__version__ = "1.0.0"

__all__ = [
    'load_container',
    'run_translation',
    'serialize_container',
    'translate_epub_file',
    'create_backend',
    'EpubArchive',
    'EntryFailure',
    'TranslationRunResult',
    'TranslationClient',
    'TranslationOutcome',
    'ArchiveError',
    'PipelineError',
]
