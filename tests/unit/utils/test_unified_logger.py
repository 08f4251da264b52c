"""Unit tests for the unified logger."""

from epub_scribe.utils.unified_logger import LogLevel, LogType, UnifiedLogger


def quiet_logger(min_level=LogLevel.DEBUG):
    """Logger that stores entries instead of printing them."""
    entries = []
    logger = UnifiedLogger(console_output=False, enable_colors=False,
                           min_level=min_level, storage_callback=entries.append)
    return logger, entries


class TestUnifiedLogger:
    """Test levels, callbacks and formatting."""

    def test_min_level_filters(self):
        logger, entries = quiet_logger(min_level=LogLevel.WARNING)

        logger.info("hidden")
        logger.warning("shown")

        assert [entry['message'] for entry in entries] == ["shown"]
        assert entries[0]['level'] == "WARNING"

    def test_legacy_callback_levels(self):
        logger, entries = quiet_logger()
        callback = logger.create_legacy_callback()

        callback("entry_failed", "bad entry")
        callback("entry_skipped", "nothing to do")
        callback("reassembly_warning", "lossy")
        callback("cache_debug", "hit")
        callback("translation_start", "go")
        callback("entry_completed", "done")

        assert [entry['level'] for entry in entries] == [
            "ERROR", "WARNING", "WARNING", "DEBUG", "INFO", "INFO"
        ]
        assert entries[-1]['type'] == LogType.ENTRY_INFO.value

    def test_web_callback_receives_data(self):
        received = []
        logger = UnifiedLogger(console_output=False, web_callback=received.append)

        logger.error("boom", LogType.ERROR_DETAIL, {"entry": "a.xhtml"})

        assert received[0]['data'] == {"entry": "a.xhtml"}
        assert received[0]['type'] == "error_detail"

    def test_end_banner_reports_stats(self):
        logger, _ = quiet_logger()
        logger._render_start({"source_lang": "en", "target_lang": "es", "backend": "direct"})

        text = logger._render_end({
            "output_file": "book_es.epub",
            "stats": {"translated": 3, "failed": 1, "skipped": 2},
        })

        assert "book_es.epub" in text
        assert "Translated entries: 3" in text
        assert "Failed entries: 1" in text
        assert "Skipped entries: 2" in text
        assert logger.run.in_progress is False

    def test_progress_bar(self):
        logger, _ = quiet_logger()
        assert "50.0%" in logger._render_progress({"percentage": 50})
