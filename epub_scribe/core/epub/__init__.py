"""
EPUB translation module

Translates the text of EPUB containers while leaving every structural and
binary entry byte-identical.

Main entry points:
    load_container() - Parse .epub bytes into an EpubArchive
    run_translation() - Translate an EpubArchive
    serialize_container() - Write an EpubArchive back to .epub bytes
    translate_epub_file() - File-to-file convenience wrapper

Components:
    - archive: zip container codec
    - entry_classifier: which entries get translated
    - tag_shield: token shielding of images, styles and scripts
    - chunker: block-aligned chunking
    - scheduler: bounded-concurrency batch translation
    - reassembler: body extraction and structure-preserving reassembly
    - content_validator: corruption heuristics
    - diff_report: input/output comparison
"""

from .archive import ArchiveEntry, EpubArchive, load_container, serialize_container
from .chunker import BlockChunker, split_into_chunks
from .content_validator import ContentValidator, ValidationVerdict
from .diff_report import DiffReport, SizeChange, diff_containers
from .entry_classifier import EntryCategory, EntryClassifier, classify_entry
from .events import Event, EventBus, EventType
from .exceptions import (
    ArchiveError,
    BodyExtractionError,
    EpubTranslationError,
    PipelineError,
    XmlParsingError,
)
from .reassembler import ReassemblyResult, extract_body, reassemble_document
from .scheduler import BatchScheduler
from .tag_shield import ShieldedText, TokenMarker, shield, unshield
from .translator import (
    EntryFailure,
    EpubTranslationPipeline,
    TranslationRunResult,
    run_translation,
    translate_epub_file,
)

__all__ = [
    # Entry points
    'load_container',
    'run_translation',
    'serialize_container',
    'translate_epub_file',

    # Container
    'ArchiveEntry',
    'EpubArchive',

    # Pipeline components
    'EntryCategory',
    'EntryClassifier',
    'classify_entry',
    'ShieldedText',
    'TokenMarker',
    'shield',
    'unshield',
    'BlockChunker',
    'split_into_chunks',
    'BatchScheduler',
    'ReassemblyResult',
    'extract_body',
    'reassemble_document',
    'ContentValidator',
    'ValidationVerdict',
    'DiffReport',
    'SizeChange',
    'diff_containers',
    'EpubTranslationPipeline',

    # Results
    'EntryFailure',
    'TranslationRunResult',

    # Events
    'Event',
    'EventBus',
    'EventType',

    # Exceptions
    'EpubTranslationError',
    'ArchiveError',
    'PipelineError',
    'XmlParsingError',
    'BodyExtractionError',
]
