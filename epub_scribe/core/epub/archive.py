"""
EPUB container codec.

An EPUB is a zip archive with two hard rules: the ``mimetype`` entry comes
first and is stored uncompressed, and ``META-INF/container.xml`` points at
the package document. ``EpubArchive`` keeps every entry's raw bytes so
untouched entries are written back byte-identical.
"""

import io
import zipfile
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Tuple

from epub_scribe.config import CONTAINER_XML_ENTRY, MIMETYPE_ENTRY
from epub_scribe.core.epub.exceptions import ArchiveError


@dataclass(frozen=True)
class ArchiveEntry:
    """One zip entry.

    Attributes:
        name: Path inside the archive (unique)
        data: Raw bytes (empty for directories)
        compress_type: zipfile compression constant
        is_dir: Directory pseudo-entry
        date_time: Modification time as stored in the zip
    """
    name: str
    data: bytes
    compress_type: int = zipfile.ZIP_DEFLATED
    is_dir: bool = False
    date_time: Tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)

    @property
    def size(self) -> int:
        return len(self.data)


class EpubArchive(Mapping):
    """Ordered, read-only mapping from entry name to ``ArchiveEntry``"""

    def __init__(self, entries: Iterable[ArchiveEntry] = ()):
        self._entries = {}
        for entry in entries:
            if entry.name in self._entries:
                raise ArchiveError(f"Duplicate entry in archive: {entry.name}", entry.name)
            self._entries[entry.name] = entry

    def __getitem__(self, name: str) -> ArchiveEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"EpubArchive({len(self._entries)} entries)"

    @property
    def names(self) -> List[str]:
        return list(self._entries)

    def read(self, name: str) -> bytes:
        """Raw bytes of an entry"""
        return self._entries[name].data

    def replace_entry(self, name: str, data: bytes) -> ArchiveEntry:
        """
        Build a copy of an entry carrying new bytes.

        The archive itself is left untouched; callers collect the returned
        entries into a new ``EpubArchive``.

        Args:
            name: Existing entry name
            data: Replacement bytes

        Returns:
            New ArchiveEntry with the same name, compression and timestamp
        """
        return replace(self._entries[name], data=data)


def load_container(data: bytes) -> EpubArchive:
    """
    Load an EPUB container from bytes.

    Args:
        data: Raw bytes of the .epub file

    Returns:
        EpubArchive with entries in archive order

    Raises:
        ArchiveError: Not a zip, or ``mimetype`` / ``META-INF/container.xml`` missing
    """
    try:
        zip_ref = zipfile.ZipFile(io.BytesIO(data), 'r')
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Invalid EPUB file (not a valid ZIP): {e}") from e

    entries = []
    with zip_ref:
        for info in zip_ref.infolist():
            is_dir = info.is_dir()
            try:
                content = b"" if is_dir else zip_ref.read(info)
            except (zipfile.BadZipFile, RuntimeError, NotImplementedError) as e:
                raise ArchiveError(f"Cannot read entry {info.filename}: {e}", info.filename) from e
            entries.append(ArchiveEntry(
                name=info.filename,
                data=content,
                compress_type=info.compress_type,
                is_dir=is_dir,
                date_time=info.date_time,
            ))

    archive = EpubArchive(entries)

    if MIMETYPE_ENTRY not in archive:
        raise ArchiveError("Invalid EPUB: missing 'mimetype' entry", MIMETYPE_ENTRY)
    if CONTAINER_XML_ENTRY not in archive:
        raise ArchiveError(f"Invalid EPUB: missing '{CONTAINER_XML_ENTRY}'", CONTAINER_XML_ENTRY)

    return archive


def serialize_container(container: EpubArchive) -> bytes:
    """
    Write a container back to zip bytes.

    ``mimetype`` is written first and stored; directory entries are dropped;
    every other entry keeps its compression and timestamp.

    Args:
        container: Archive to serialize

    Returns:
        The .epub bytes

    Raises:
        ArchiveError: If the container has no ``mimetype`` entry
    """
    if MIMETYPE_ENTRY not in container:
        raise ArchiveError("Cannot serialize EPUB without 'mimetype' entry", MIMETYPE_ENTRY)

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as epub_zip:
        mimetype = container[MIMETYPE_ENTRY]
        info = zipfile.ZipInfo(MIMETYPE_ENTRY, date_time=mimetype.date_time)
        info.compress_type = zipfile.ZIP_STORED
        epub_zip.writestr(info, mimetype.data)

        for name, entry in container.items():
            if name == MIMETYPE_ENTRY or entry.is_dir:
                continue
            info = zipfile.ZipInfo(name, date_time=entry.date_time)
            info.compress_type = entry.compress_type
            epub_zip.writestr(info, entry.data)

    return buffer.getvalue()
