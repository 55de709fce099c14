import os
import stat
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict

from . import config


class EntryKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"


def render_timestamp(epoch: int) -> str:
    """Local-time rendering of an epoch-seconds value."""
    return datetime.fromtimestamp(epoch).astimezone().strftime(config.TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class WalkEntry:
    """
    A single filesystem object found during traversal.
    `info` is the lstat result, so symlinks are never followed.
    """
    path: Path
    info: os.stat_result

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.info.st_mode)

    @property
    def is_regular(self) -> bool:
        return stat.S_ISREG(self.info.st_mode)

    @property
    def size(self) -> int:
        return self.info.st_size

    @property
    def mtime(self) -> int:
        return int(self.info.st_mtime)

    @property
    def mode(self) -> str:
        return stat.filemode(self.info.st_mode)

    @property
    def created(self) -> int:
        # st_birthtime only exists on some platforms
        return int(getattr(self.info, "st_birthtime", self.info.st_ctime))

    @property
    def accessed(self) -> int:
        return int(self.info.st_atime)


@dataclass(frozen=True)
class FingerprintRecord:
    """
    Represents one fingerprinted entry, as uploaded in a batch.
    Digest fields stay empty for folders and when hashing failed.
    """
    path: Path
    kind: EntryKind
    type: str
    size: int
    mode: str

    created: int
    created_str: str
    accessed: int
    accessed_str: str
    changed: int
    changed_str: str

    md5: str = ""
    sha1: str = ""
    sha256: str = ""
    sha512: str = ""
    ssdeep: str = ""

    @property
    def is_folder(self) -> bool:
        return self.kind is EntryKind.FOLDER

    def to_entry(self) -> Dict[str, Any]:
        """Labelled row for the uploaded table; numbered keys sort first."""
        return {
            "1. Path": str(self.path),
            "2. Size": self.size,
            "3. MD5": self.md5,
            "4. SHA1": self.sha1,
            "5. SHA256": self.sha256,
            "6. SHA512": self.sha512,
            "7. SSDeep": self.ssdeep,
            "Kind": self.kind.value,
            "Type": self.type,
            "Mode": self.mode,
            "Created": self.created,
            "CreatedStr": self.created_str,
            "Accessed": self.accessed,
            "AccessedStr": self.accessed_str,
            "Changed": self.changed,
            "ChangedStr": self.changed_str,
        }

    def __str__(self) -> str:
        return (
            f"{self.path} - [Created: {self.created_str}, Accessed: {self.accessed_str}, "
            f"Changed: {self.changed_str}, Size: {self.size}, Mode: {self.mode}] - "
            f"[MD5: {self.md5}, SHA1: {self.sha1}, SHA256: {self.sha256}, "
            f"SHA512: {self.sha512}, SSDEEP: {self.ssdeep}]"
        )
