"""
EPUB translation orchestration

This module coordinates the translation pipeline for EPUB containers:
classification, shielding, chunking, batch translation, validation and
reassembly, entry by entry, followed by a comparison report.

The input ``EpubArchive`` is never modified. The output archive is built
from a private list of entries and only handed out once every entry has been
processed.
"""
import os
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import aiofiles

from epub_scribe.config import MIMETYPE_ENTRY, TranslationConfig
from epub_scribe.core.backends import create_backend
from epub_scribe.core.backends.base import TranslationBackend
from epub_scribe.core.backends.client import TranslationClient, TranslationOutcome
from epub_scribe.core.backends.exceptions import BackendConfigurationError
from epub_scribe.core.epub.archive import (
    ArchiveEntry,
    EpubArchive,
    load_container,
    serialize_container,
)
from epub_scribe.core.epub.chunker import split_into_chunks
from epub_scribe.core.epub.content_validator import ContentValidator
from epub_scribe.core.epub.diff_report import DiffReport, diff_containers
from epub_scribe.core.epub.entry_classifier import EntryCategory, EntryClassifier
from epub_scribe.core.epub.events import (
    EventBus,
    EventType,
    create_chunk_event,
    create_entry_event,
    create_fallback_event,
    create_progress_event,
    create_translation_completed_event,
    create_translation_started_event,
)
from epub_scribe.core.epub.exceptions import ArchiveError, PipelineError
from epub_scribe.core.epub.reassembler import ReassemblyResult, extract_body, reassemble_document
from epub_scribe.core.epub.scheduler import BatchScheduler
from epub_scribe.core.epub.tag_shield import ShieldedText, shield


@dataclass
class EntryFailure:
    """An entry that was not translated, and why"""
    entry_name: str
    reason: str


@dataclass
class TranslationRunResult:
    """Everything a translation run produced.

    Attributes:
        container: Output archive
        diff_report: Comparison of input and output archives
        failures: Entries whose translation failed (original or partial content kept)
        skipped: Translatable entries left alone (nothing to translate)
        stats: Counters (translated, failed, skipped, copied, chunks...)
    """
    container: EpubArchive
    diff_report: DiffReport
    failures: List[EntryFailure] = field(default_factory=list)
    skipped: List[EntryFailure] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def failed_entries(self) -> List[str]:
        return [failure.entry_name for failure in self.failures]


@dataclass
class _EntryPlan:
    """Shielded text and chunks for the entry being translated"""
    name: str
    source_text: str
    has_body: bool
    shielded: Optional[ShieldedText] = None
    chunks: List[str] = field(default_factory=list)
    skip_reason: Optional[str] = None


class EpubTranslationPipeline:
    """Runs one container through the translation pipeline."""

    def __init__(self,
                 client: TranslationClient,
                 config: TranslationConfig,
                 progress_callback: Optional[Callable[[float], None]] = None,
                 log_callback: Optional[Callable] = None,
                 event_bus: Optional[EventBus] = None):
        self.client = client
        self.config = config
        self.progress_callback = progress_callback
        self.log_callback = log_callback
        self.event_bus = event_bus
        self.classifier = EntryClassifier()
        self.validator = ContentValidator(
            max_size_loss_ratio=config.max_size_loss_ratio,
            min_translated_length=config.min_translated_length,
            large_original_length=config.large_original_length,
            require_markup=config.require_markup,
        )

    def _log(self, event_type: str, message: str) -> None:
        if self.log_callback:
            self.log_callback(event_type, message)

    def _publish(self, event) -> None:
        if self.event_bus:
            self.event_bus.publish(event)

    def _report_progress(self, completed: int, total: int) -> None:
        percent = 100.0 if total == 0 else 100.0 * completed / total
        if self.progress_callback:
            self.progress_callback(percent)
        self._publish(create_progress_event(percent, completed, total))

    # === Planning ===

    def plan_entry(self, entry: ArchiveEntry) -> _EntryPlan:
        """
        Decode, shield and chunk a translatable entry.

        Documents without a <body> are shielded and chunked whole; they go
        through the lossy text-only reassembly path.
        """
        try:
            document = entry.data.decode('utf-8')
        except UnicodeDecodeError:
            return _EntryPlan(name=entry.name, source_text="", has_body=False,
                              skip_reason="not valid UTF-8")

        body = extract_body(document)
        has_body = body is not None
        source_text = body if has_body else document

        shielded = shield(source_text, self.config.min_visible_chars)
        if not shielded.has_content:
            return _EntryPlan(name=entry.name, source_text=source_text, has_body=has_body,
                              shielded=shielded, skip_reason="no translatable text")

        chunks = split_into_chunks(shielded.text, self.config.max_chunk_size)
        return _EntryPlan(name=entry.name, source_text=source_text, has_body=has_body,
                          shielded=shielded, chunks=chunks)

    def _count_chunks(self, entry: ArchiveEntry) -> int:
        """Chunks the entry will be split into, 0 when it will be skipped."""
        try:
            return len(self.plan_entry(entry).chunks)
        except Exception:
            # The same error is recorded as the entry's failure in the main loop
            return 0

    # === Translation ===

    async def translate_entry(self, entry: ArchiveEntry, plan: _EntryPlan,
                              source_language: str, target_language: str):
        """
        Translate one planned entry.

        Returns:
            Tuple (new_entry_or_None, failure_reason_or_None). A None entry
            means the original is kept.
        """
        total_chunks = len(plan.chunks)

        def on_chunk_done(outcome: TranslationOutcome) -> None:
            self._publish(create_chunk_event(plan.name, outcome.index, total_chunks,
                                             outcome.success, outcome.attempts, outcome.error))

        scheduler = BatchScheduler(
            self.client,
            max_concurrent=self.config.max_concurrent,
            batch_delay=self.config.batch_delay,
            on_chunk_done=on_chunk_done,
        )
        outcomes = await scheduler.translate_outcomes(plan.chunks, source_language, target_language)

        failed = [outcome for outcome in outcomes if not outcome.success]
        if failed and len(failed) == total_chunks:
            return None, f"all {total_chunks} chunk(s) failed to translate ({failed[-1].error})"

        translated_text = plan.shielded.restore("".join(outcome.text for outcome in outcomes))

        verdict = self.validator.validate(plan.source_text, translated_text)
        if not verdict.accepted:
            self._publish(create_fallback_event(plan.name, verdict.reason))
            return None, f"validation rejected translation ({verdict.reason})"

        if plan.has_body:
            result = reassemble_document(entry.data, translated_text)
        else:
            result = ReassemblyResult(content=translated_text.encode('utf-8'),
                                      structure_preserved=False, error="document has no <body>")

        if not result.structure_preserved:
            self._log("reassembly_warning",
                      f"⚠️ {plan.name}: document structure could not be kept ({result.error})")
            self._publish(create_fallback_event(plan.name, "lossy_reassembly"))

        new_entry = ArchiveEntry(
            name=entry.name,
            data=result.content,
            compress_type=entry.compress_type,
            is_dir=entry.is_dir,
            date_time=entry.date_time,
        )

        if failed:
            return new_entry, (f"{len(failed)} of {total_chunks} chunk(s) kept original text "
                               f"({failed[-1].error})")
        return new_entry, None

    async def run(self, container: EpubArchive, source_language: str,
                  target_language: str) -> TranslationRunResult:
        """
        Translate a container.

        Args:
            container: Input archive (left untouched)
            source_language: Source language code
            target_language: Target language code

        Returns:
            TranslationRunResult
        """
        if MIMETYPE_ENTRY not in container:
            raise PipelineError("Container has no 'mimetype' entry")

        # Only chunk counts outlive this pass; entries are shielded again one
        # at a time in the main loop
        chunk_counts: Dict[str, int] = {}
        for name, entry in container.items():
            if self.classifier.classify(name, entry.is_dir) == EntryCategory.TRANSLATABLE:
                chunk_counts[name] = self._count_chunks(entry)

        total_chunks = sum(chunk_counts.values())
        stats = {
            'total_entries': len(container),
            'translatable': len(chunk_counts),
            'translated': 0,
            'failed': 0,
            'skipped': 0,
            'copied': 0,
            'total_chunks': total_chunks,
        }

        self._log("translation_start",
                  f"📚 {len(chunk_counts)} translatable entries, {total_chunks} chunks "
                  f"({source_language} → {target_language})")
        self._publish(create_translation_started_event(len(container), total_chunks,
                                                       source_language, target_language))

        output_entries: List[ArchiveEntry] = []
        failures: List[EntryFailure] = []
        skipped: List[EntryFailure] = []
        completed_chunks = 0

        for name, entry in container.items():
            if name not in chunk_counts:
                output_entries.append(entry)
                stats['copied'] += 1
                continue

            plan = None
            new_entry, failure_reason, skip_reason = None, None, None
            try:
                plan = self.plan_entry(entry)
                if plan.skip_reason:
                    skip_reason = plan.skip_reason
                else:
                    self._publish(create_entry_event(EventType.ENTRY_STARTED, name,
                                                     chunk_count=len(plan.chunks)))
                    new_entry, failure_reason = await self.translate_entry(
                        entry, plan, source_language, target_language
                    )
            except Exception as e:
                failure_reason = f"unexpected error: {e}"
            chunk_count = len(plan.chunks) if plan is not None else 0
            plan = None

            if skip_reason:
                output_entries.append(entry)
                skipped.append(EntryFailure(name, skip_reason))
                stats['skipped'] += 1
                self._log("entry_skipped", f"⏭️ {name}: {skip_reason}")
                self._publish(create_entry_event(EventType.ENTRY_SKIPPED, name, reason=skip_reason))
                continue

            completed_chunks += chunk_counts[name]
            output_entries.append(new_entry if new_entry is not None else entry)

            if failure_reason:
                failures.append(EntryFailure(name, failure_reason))
                stats['failed'] += 1
                self._log("entry_failed", f"❌ {name}: {failure_reason}")
                self._publish(create_entry_event(EventType.ENTRY_FAILED, name, reason=failure_reason))
            else:
                stats['translated'] += 1
                self._log("entry_completed", f"✅ {name}: {chunk_count} chunk(s) translated")
                self._publish(create_entry_event(EventType.ENTRY_COMPLETED, name, chunk_count=chunk_count))

            self._report_progress(completed_chunks, total_chunks)

        if total_chunks == 0 or completed_chunks < total_chunks:
            self._report_progress(total_chunks, total_chunks)

        output = EpubArchive(output_entries)
        report = diff_containers(container, output, self.config.diff_size_threshold)

        self._log("translation_complete",
                  f"🏁 {stats['translated']} translated, {stats['failed']} failed, "
                  f"{stats['skipped']} skipped, {stats['copied']} copied")
        self._publish(create_translation_completed_event(stats))

        return TranslationRunResult(
            container=output,
            diff_report=report,
            failures=failures,
            skipped=skipped,
            stats=stats,
        )


def _build_config(config: Optional[TranslationConfig], source_language: str,
                  target_language: str) -> TranslationConfig:
    try:
        if config is None:
            return TranslationConfig(source_language=source_language, target_language=target_language)
        if target_language == 'auto':
            raise ValueError("target_language cannot be 'auto'")
        return config
    except ValueError as e:
        raise PipelineError(f"Invalid configuration: {e}") from e


async def run_translation(container: EpubArchive,
                          source_lang: str,
                          target_lang: str,
                          progress_callback: Optional[Callable[[float], None]] = None,
                          *,
                          config: Optional[TranslationConfig] = None,
                          backend: Optional[TranslationBackend] = None,
                          client: Optional[TranslationClient] = None,
                          log_callback: Optional[Callable] = None,
                          event_bus: Optional[EventBus] = None) -> TranslationRunResult:
    """
    Translate every translatable entry of a container.

    Args:
        container: Loaded EPUB container (not modified)
        source_lang: Source language code ('auto' allowed)
        target_lang: Target language code
        progress_callback: Receives completion percentage (0-100), non-decreasing
        config: Run settings (thresholds, concurrency, backend selection)
        backend: Backend to use instead of the configured one (caller closes it)
        client: Fully built client, overrides ``backend``
        log_callback: ``log_callback(event_type, message)``
        event_bus: Receives pipeline events

    Returns:
        TranslationRunResult

    Raises:
        PipelineError: If the run cannot start (bad container, bad configuration)
    """
    config = _build_config(config, source_lang, target_lang)

    owns_client = False
    if client is None:
        if backend is None:
            try:
                backend = create_backend(
                    config.backend,
                    endpoint=config.endpoint,
                    api_key=config.openrouter_api_key,
                    model=config.model,
                    timeout=config.timeout,
                )
            except BackendConfigurationError as e:
                raise PipelineError(f"Cannot create backend: {e}") from e
            owns_client = True
        client = TranslationClient(
            backend,
            timeout=config.timeout,
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
            cache_size=config.cache_size,
        )

    pipeline = EpubTranslationPipeline(
        client,
        config,
        progress_callback=progress_callback,
        log_callback=log_callback,
        event_bus=event_bus,
    )
    try:
        return await pipeline.run(container, source_lang, target_lang)
    finally:
        if owns_client:
            await client.close()


async def translate_epub_file(input_filepath: str,
                              output_filepath: str,
                              source_lang: str,
                              target_lang: str,
                              progress_callback: Optional[Callable[[float], None]] = None,
                              *,
                              config: Optional[TranslationConfig] = None,
                              backend: Optional[TranslationBackend] = None,
                              log_callback: Optional[Callable] = None,
                              event_bus: Optional[EventBus] = None,
                              report_filepath: Optional[str] = None) -> TranslationRunResult:
    """
    Translate an EPUB file on disk.

    Args:
        input_filepath: Path to input EPUB
        output_filepath: Path to output EPUB
        source_lang: Source language code
        target_lang: Target language code
        progress_callback: Progress callback
        config: Run settings
        backend: Backend override
        log_callback: Logging callback
        event_bus: Event bus
        report_filepath: Where to write the comparison report (optional)

    Returns:
        TranslationRunResult

    Raises:
        ArchiveError: Input missing or not a valid EPUB
        PipelineError: Run could not start
    """
    if not os.path.exists(input_filepath):
        raise ArchiveError(f"Input EPUB file '{input_filepath}' not found.")

    async with aiofiles.open(input_filepath, 'rb') as f:
        data = await f.read()

    container = load_container(data)
    result = await run_translation(
        container,
        source_lang,
        target_lang,
        progress_callback,
        config=config,
        backend=backend,
        log_callback=log_callback,
        event_bus=event_bus,
    )

    async with aiofiles.open(output_filepath, 'wb') as f:
        await f.write(serialize_container(result.container))
    if log_callback:
        log_callback("epub_saved", f"💾 Saved translated EPUB: {output_filepath}")

    if report_filepath:
        async with aiofiles.open(report_filepath, 'w', encoding='utf-8') as f:
            await f.write(result.diff_report.to_text())

    return result
