"""Unit tests for configuration."""

import argparse

import pytest

from epub_scribe.config import SUPPORTED_LANGUAGES, TranslationConfig


class TestTranslationConfig:
    """Test validation and CLI mapping."""

    def test_defaults(self):
        config = TranslationConfig()
        assert config.max_chunk_size > 0
        assert config.require_markup
        assert config.endpoint is None

    @pytest.mark.parametrize("field, value", [
        ("max_chunk_size", 0),
        ("max_concurrent", 0),
        ("max_retries", -1),
        ("timeout", 0),
        ("max_size_loss_ratio", 0),
        ("max_size_loss_ratio", 1.5),
        ("target_language", "auto"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValueError):
            TranslationConfig(**{field: value})

    def test_from_cli_args(self):
        args = argparse.Namespace(
            source_lang="fr", target_lang="de", backend="google", endpoint=None,
            openrouter_api_key="", model="a/b", max_concurrent=5, chunk_size=800, no_color=True,
        )

        config = TranslationConfig.from_cli_args(args)

        assert config.source_language == "fr"
        assert config.target_language == "de"
        assert config.backend == "google"
        assert config.max_concurrent == 5
        assert config.max_chunk_size == 800
        assert config.enable_colors is False

    def test_language_table(self):
        assert SUPPORTED_LANGUAGES["auto"] == "Auto-detect"
        assert {"es", "en", "fr", "de", "it", "pt", "ru", "ja", "ko", "zh", "ar", "hi"} <= set(SUPPORTED_LANGUAGES)
