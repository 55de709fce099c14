import hashlib
from typing import BinaryIO, Dict, Iterable, List, Optional, Protocol, Sequence

from .. import config
from ..exceptions import IncompleteWriteError


class ByteSink(Protocol):
    def write(self, chunk: bytes) -> int:
        ...


class DigestAccumulator(ByteSink, Protocol):
    name: str

    def hexdigest(self) -> str:
        ...


class HashAccumulator:
    """A hashlib object behind the write-sink interface."""

    def __init__(self, name: str):
        self.name = name
        # MD5/SHA-1 identify content here, they do not protect anything
        self._hash = hashlib.new(name, usedforsecurity=False)

    def write(self, chunk: bytes) -> int:
        self._hash.update(chunk)
        return len(chunk)

    def hexdigest(self) -> str:
        return self._hash.hexdigest()


class DigestMultiplexer:
    """
    Fans every chunk out to several digest accumulators so one forward
    read of a file updates all of them.

    The digest set is all-or-nothing: if any accumulator takes less than the
    full chunk, `write` raises IncompleteWriteError and the caller must drop
    every digest of this pass.
    """

    def __init__(self,
                 algorithms: Iterable[str] = config.DIGEST_ALGORITHMS,
                 accumulators: Optional[Sequence[DigestAccumulator]] = None):
        if accumulators is None:
            accumulators = [HashAccumulator(name) for name in algorithms]
        self.accumulators: List[DigestAccumulator] = list(accumulators)

    def write(self, chunk: bytes) -> int:
        for acc in self.accumulators:
            written = acc.write(chunk)
            if written < len(chunk):
                raise IncompleteWriteError(
                    f"{acc.name} consumed {written} of {len(chunk)} bytes"
                )
        return len(chunk)

    def consume(self, stream: BinaryIO, chunk_size: int = config.HASH_CHUNK_SIZE) -> int:
        """Reads the stream to EOF once. Returns the number of bytes hashed."""
        total = 0
        while chunk := stream.read(chunk_size):
            total += self.write(chunk)
        return total

    def hexdigests(self) -> Dict[str, str]:
        return {acc.name: acc.hexdigest() for acc in self.accumulators}
