import logging
import mimetypes
import os
from pathlib import Path
from typing import BinaryIO, Dict, Mapping, Optional

from .. import config
from ..exceptions import FileHashError, FuzzyHashError
from ..models import EntryKind, FingerprintRecord, WalkEntry, render_timestamp
from .fuzzy import FuzzyHasher
from .hasher import DigestMultiplexer


def resolve_type_label(name: str, table: Optional[Mapping[str, str]] = None) -> str:
    """
    Maps a file name to its MIME type by extension.
    Unmapped extensions fall back to the bare extension, as cased on disk.
    """
    if table is None:
        if not mimetypes.inited:
            mimetypes.init()
        table = mimetypes.types_map

    ext = os.path.splitext(name)[1]
    if not ext:
        return ""
    mime_type = table.get(ext) or table.get(ext.lower())
    if mime_type:
        return mime_type
    return ext[1:]


class Fingerprinter:
    """
    Builds one FingerprintRecord per walked entry.

    Regular files are opened once: the exact digests are computed in a single
    forward pass, then the fuzzy hasher rewinds the same handle. Hashing
    failures are logged and leave the affected digests empty; the record is
    always produced.
    """

    def __init__(self,
                 fuzzy: Optional[FuzzyHasher] = None,
                 mime_table: Optional[Mapping[str, str]] = None):
        self.fuzzy = fuzzy or FuzzyHasher()
        self.mime_table = mime_table

    def fingerprint(self, entry: WalkEntry) -> FingerprintRecord:
        if entry.is_dir:
            kind = EntryKind.FOLDER
            type_label = config.FOLDER_TYPE
        else:
            kind = EntryKind.FILE
            type_label = resolve_type_label(entry.path.name, self.mime_table)

        digests: Dict[str, str] = {}
        if entry.is_regular:
            digests = self._hash_file(entry.path, entry.size)

        return FingerprintRecord(
            path=entry.path,
            kind=kind,
            type=type_label,
            size=entry.size,
            mode=entry.mode,
            created=entry.created,
            created_str=render_timestamp(entry.created),
            accessed=entry.accessed,
            accessed_str=render_timestamp(entry.accessed),
            changed=entry.mtime,
            changed_str=render_timestamp(entry.mtime),
            md5=digests.get("md5", ""),
            sha1=digests.get("sha1", ""),
            sha256=digests.get("sha256", ""),
            sha512=digests.get("sha512", ""),
            ssdeep=digests.get("ssdeep", ""),
        )

    def _open_for_hashing(self, path: Path) -> BinaryIO:
        return open(path, "rb")

    def _hash_file(self, path: Path, size: int) -> Dict[str, str]:
        try:
            f = self._open_for_hashing(path)
        except OSError as e:
            logging.warning(f"Could not compute hashes for {path} - {e}")
            return {}

        digests: Dict[str, str] = {}
        with f:
            mux = DigestMultiplexer()
            try:
                mux.consume(f)
            except (OSError, FileHashError) as e:
                logging.warning(f"Could not compute hashes for {path} - {e}")
            else:
                digests.update(mux.hexdigests())

            try:
                digests["ssdeep"] = self.fuzzy.hash_stream(f, size)
            except FuzzyHashError as e:
                logging.warning(f"Could not compute SSDeep for {path} - {e}")

        return digests
