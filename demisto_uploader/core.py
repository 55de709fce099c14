import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from tqdm import tqdm

from . import config
from .exceptions import LimitReachedError, UploadError
from .models import FingerprintRecord, WalkEntry
from .scanning.filesystem import TreeWalker, top_level_name
from .scanning.fingerprint import Fingerprinter
from .settings import Settings
from .upload.cases import Case, CaseSink


@dataclass
class RunSummary:
    files: int = 0
    folders: int = 0
    filtered: int = 0
    batches: int = 0
    stopped_by: Optional[str] = None
    upload_failed: bool = False


class UploaderApp:
    def __init__(self,
                 settings: Settings,
                 sink: CaseSink,
                 fingerprinter: Optional[Fingerprinter] = None,
                 walker: Optional[TreeWalker] = None):
        self.settings = settings
        self.sink = sink
        self.fingerprinter = fingerprinter or Fingerprinter()
        self.walker = walker or TreeWalker()
        self._case: Optional[Case] = None

    def run(self) -> RunSummary:
        """
        Walks the root, fingerprints every entry and uploads the records.

        A batch is started by each directory (holding the directory's own
        record) and collects the files that follow it, until the next
        directory at any depth, or the first file of another top-level
        directory (when the filter skipped the directories themselves).
        Batches go to the case of their top-level directory; a new case is
        opened whenever that name changes.
        """
        root = self.settings.root
        summary = RunSummary()
        batch: List[FingerprintRecord] = []

        logging.info(f"Scanning {root}...")
        try:
            for entry in self._entries():
                if not self.settings.matches(entry.path):
                    summary.filtered += 1
                    continue

                record = self.fingerprinter.fingerprint(entry)
                if entry.is_dir:
                    summary.folders += 1
                    if self.settings.verbose:
                        logging.info(f"{entry.path}")
                    if batch:
                        self._flush(batch, summary)
                    batch = [record]
                else:
                    if batch and self._case_name(batch[0]) != self._case_name(record):
                        self._flush(batch, summary)
                        batch = []
                    batch.append(record)
                    if self.settings.extra_verbose:
                        logging.debug(str(record))
                    summary.files += 1
                    if self.settings.limit > 0 and summary.files >= self.settings.limit:
                        raise LimitReachedError(f"Limit of {self.settings.limit} reached")
        except LimitReachedError as e:
            summary.stopped_by = str(e)
            logging.error(f"Error iterating {root} - {e}")
        except UploadError as e:
            summary.stopped_by = str(e)
            summary.upload_failed = True
            logging.error(f"Error iterating {root} - {e}")

        if batch:
            try:
                self._flush(batch, summary)
            except UploadError as e:
                summary.upload_failed = True
                logging.error(f"Error saving last batch {root} - {e}")

        logging.info(
            f"Scan complete. {summary.files} files, {summary.folders} folders "
            f"in {summary.batches} batches ({summary.filtered} filtered out)."
        )
        return summary

    def _entries(self) -> Iterator[WalkEntry]:
        entries = self.walker.iter_entries(self.settings.root)
        if self.settings.progress:
            return iter(tqdm(entries, desc="Fingerprinting", unit="entry"))
        return entries

    def _case_name(self, record: FingerprintRecord) -> str:
        return top_level_name(self.settings.root, record.path, is_dir=record.is_folder)

    def _flush(self, batch: List[FingerprintRecord], summary: RunSummary):
        name = self._case_name(batch[0])
        if self._case is None or self._case.name != name:
            self._case = self.sink.open_case(name)
        self.sink.add_batch(self._case, tuple(batch), config.ENTRY_FORMAT)
        summary.batches += 1
