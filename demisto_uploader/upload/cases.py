import logging
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence, Tuple

from ..exceptions import ClientError, UploadError
from ..models import FingerprintRecord
from .client import DemistoClient


@dataclass(frozen=True)
class Case:
    """An investigation that receives the batches of one top-level directory."""
    name: str
    investigation_id: str


class CaseSink(Protocol):
    def open_case(self, name: str) -> Case:
        ...

    def add_batch(self, case: Case, records: Sequence[FingerprintRecord], fmt: str) -> None:
        ...


class DemistoCaseSink:
    """
    Uploads batches to a Demisto server. Each case is a new incident plus its
    investigation, unless a fixed investigation id was configured.
    """

    def __init__(self, client: DemistoClient, investigation_id: str = ""):
        self.client = client
        self.investigation_id = investigation_id

    def open_case(self, name: str) -> Case:
        if self.investigation_id:
            return Case(name, self.investigation_id)

        try:
            incident = self.client.create_incident(name)
            logging.info(f"Incident {name} created with ID {incident.id}")
            investigation = self.client.investigate(incident)
        except ClientError as e:
            raise UploadError(f"Could not open case {name} - {e}") from e
        return Case(name, investigation.id)

    def add_batch(self, case: Case, records: Sequence[FingerprintRecord], fmt: str) -> None:
        rows = [r.to_entry() for r in records]
        try:
            self.client.add_entry(case.investigation_id, rows, fmt)
        except ClientError as e:
            raise UploadError(f"Could not add {len(rows)} records to {case.name} - {e}") from e
        logging.debug(f"Added {len(rows)} records to investigation {case.investigation_id}")


@dataclass
class DryRunCaseSink:
    """Keeps cases and batches in memory instead of uploading them."""
    cases: List[Case] = field(default_factory=list)
    batches: List[Tuple[Case, List[FingerprintRecord], str]] = field(default_factory=list)

    def open_case(self, name: str) -> Case:
        case = Case(name, f"dry-run-{len(self.cases) + 1}")
        self.cases.append(case)
        logging.info(f"[DRY RUN] Open case {name}")
        return case

    def add_batch(self, case: Case, records: Sequence[FingerprintRecord], fmt: str) -> None:
        self.batches.append((case, list(records), fmt))
        logging.info(f"[DRY RUN] Add {len(records)} records to {case.name}")
