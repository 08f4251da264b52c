"""Corruption heuristics for translated documents.

A translated body is rejected when it looks broken: empty, much shorter
than the original, or stripped of all markup. Rejected entries keep their
original content.
"""
import re
from dataclasses import dataclass

from epub_scribe.config import (
    LARGE_ORIGINAL_LENGTH,
    MAX_SIZE_LOSS_RATIO,
    MIN_TRANSLATED_LENGTH,
)

REASON_OK = "ok"
REASON_EMPTY = "empty_translation"
REASON_SIZE_LOSS = "size_loss"
REASON_TOO_SHORT = "too_short"
REASON_NO_MARKUP = "no_markup"

MARKUP_PATTERN = re.compile(r'<[^<>]+>')


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of validating one translated document.

    Attributes:
        accepted: Whether the translation may be written
        reason: One of ok, empty_translation, size_loss, too_short, no_markup
        fallback_to_original: Whether the original content should be kept
    """
    accepted: bool
    reason: str = REASON_OK
    fallback_to_original: bool = False


class ContentValidator:
    """Checks a translation against its original."""

    def __init__(self, max_size_loss_ratio: float = MAX_SIZE_LOSS_RATIO,
                 min_translated_length: int = MIN_TRANSLATED_LENGTH,
                 large_original_length: int = LARGE_ORIGINAL_LENGTH,
                 require_markup: bool = True):
        self.max_size_loss_ratio = max_size_loss_ratio
        self.min_translated_length = min_translated_length
        self.large_original_length = large_original_length
        self.require_markup = require_markup

    @staticmethod
    def _reject(reason: str) -> ValidationVerdict:
        return ValidationVerdict(accepted=False, reason=reason, fallback_to_original=True)

    def validate(self, original: str, translated: str) -> ValidationVerdict:
        """
        Validate a translation.

        Checks run in order and the first failing one decides the reason.

        Args:
            original: Original document (or body) text
            translated: Translated text

        Returns:
            ValidationVerdict
        """
        if not translated or not translated.strip():
            return self._reject(REASON_EMPTY)

        original_length = len(original)
        translated_length = len(translated)

        if original_length > 0:
            loss = (original_length - translated_length) / original_length
            if loss > self.max_size_loss_ratio:
                return self._reject(REASON_SIZE_LOSS)

        if (translated_length < self.min_translated_length
                and original_length > self.large_original_length):
            return self._reject(REASON_TOO_SHORT)

        if self.require_markup and not MARKUP_PATTERN.search(translated):
            return self._reject(REASON_NO_MARKUP)

        return ValidationVerdict(accepted=True)
