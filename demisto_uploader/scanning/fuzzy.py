from typing import BinaryIO

import ppdeep

from .. import config
from ..exceptions import FuzzyHashError


class FuzzyHasher:
    def __init__(self,
                 max_size: int = config.FUZZY_HASH_MAX_SIZE,
                 chunk_size: int = config.HASH_CHUNK_SIZE):
        self.max_size = max_size
        self.chunk_size = chunk_size

    def hash_stream(self, stream: BinaryIO, length: int) -> str:
        """
        Computes the ssdeep (spamsum) signature of a seekable stream.

        The stream is rewound first, so it can be handed over straight after
        another reader consumed it. `length` is the size recorded when the
        entry was listed; a file that grew since is hashed up to that size.
        Files above `max_size` are refused before anything is read.

        Returns "blocksize:sig1:sig2".
        """
        if length > self.max_size:
            raise FuzzyHashError(f"{length} bytes exceeds the fuzzy hash limit of {self.max_size}")

        data = bytearray()
        try:
            stream.seek(0)
            while len(data) < length:
                chunk = stream.read(min(self.chunk_size, length - len(data)))
                if not chunk:
                    break
                data += chunk
        except (OSError, ValueError) as e:
            raise FuzzyHashError(str(e)) from e
        return ppdeep.hash(bytes(data))

    def similarity(self, first: str, second: str) -> int:
        """ssdeep match score between two signatures, 0 (unrelated) to 100."""
        return ppdeep.compare(first, second)
