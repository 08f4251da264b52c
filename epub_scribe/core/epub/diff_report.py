"""
Diagnostic comparison of an original and a translated container.

The report lists entries that appeared or disappeared and textual entries
whose length changed noticeably. It is informational only; nothing in the
pipeline acts on it.
"""
from dataclasses import dataclass, field
from typing import List

from epub_scribe.config import DIFF_SIZE_THRESHOLD
from epub_scribe.core.epub.archive import EpubArchive


@dataclass(frozen=True)
class SizeChange:
    """Character-length change of one entry"""
    entry: str
    original_size: int
    translated_size: int
    delta: int


@dataclass
class DiffReport:
    """Differences between two containers.

    Attributes:
        missing: Entries of the original absent from the output
        extra: Entries of the output absent from the original
        size_changes: Shared entries whose length changed beyond the threshold
        uncomparable: Shared entries that are not valid UTF-8 in either container
    """
    missing: List[str] = field(default_factory=list)
    extra: List[str] = field(default_factory=list)
    size_changes: List[SizeChange] = field(default_factory=list)
    uncomparable: List[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.missing or self.extra or self.size_changes or self.uncomparable)

    def to_text(self) -> str:
        """Human-readable summary"""
        lines = ["EPUB comparison report", "=" * 22]

        if self.missing:
            lines.append(f"Missing entries ({len(self.missing)}):")
            lines.extend(f"  - {name}" for name in self.missing)
        if self.extra:
            lines.append(f"Extra entries ({len(self.extra)}):")
            lines.extend(f"  + {name}" for name in self.extra)
        if self.size_changes:
            lines.append(f"Size changes ({len(self.size_changes)}):")
            for change in self.size_changes:
                lines.append(
                    f"  {change.entry}: {change.original_size} -> {change.translated_size} "
                    f"({change.delta:+d} chars)"
                )
        if self.uncomparable:
            lines.append(f"Could not compare ({len(self.uncomparable)}):")
            lines.extend(f"  ? {name}" for name in self.uncomparable)
        if self.is_clean:
            lines.append("No differences found.")

        return "\n".join(lines)


def diff_containers(original: EpubArchive, output: EpubArchive,
                    threshold: int = DIFF_SIZE_THRESHOLD) -> DiffReport:
    """
    Compare two containers.

    Args:
        original: Input container
        output: Translated container
        threshold: Only length changes strictly above this are reported

    Returns:
        DiffReport
    """
    report = DiffReport(
        missing=[name for name in original if name not in output],
        extra=[name for name in output if name not in original],
    )

    for name in original:
        if name not in output:
            continue
        try:
            original_text = original[name].data.decode('utf-8')
            output_text = output[name].data.decode('utf-8')
        except UnicodeDecodeError:
            report.uncomparable.append(name)
            continue

        change = SizeChange(entry=name, original_size=len(original_text),
                            translated_size=len(output_text),
                            delta=len(output_text) - len(original_text))
        if abs(change.delta) > threshold:
            report.size_changes.append(change)

    return report
