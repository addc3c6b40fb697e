import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from clinic_queue.core.exceptions import ClinicQueueError, EmptyBatch, NoRecordsPersisted
from clinic_queue.services.normalizer import PatientCandidate

logger = logging.getLogger(__name__)


@dataclass
class PersistOutcome:
    index: int
    candidate: PatientCandidate
    record: Optional[Any] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    saved: List[Any] = field(default_factory=list)
    failures: List[PersistOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.saved)

    @property
    def attempted(self) -> int:
        return len(self.saved) + len(self.failures)


def persist_one(store, index: int, candidate: PatientCandidate) -> PersistOutcome:
    try:
        record = store.create(candidate.to_dict())
    except ClinicQueueError as e:
        return PersistOutcome(index=index, candidate=candidate, error=e.message)
    return PersistOutcome(index=index, candidate=candidate, record=record)


def persist_batch(store, candidates: Iterable[PatientCandidate]) -> BatchResult:
    """
    Save each candidate on its own, in input order.

    A failing record is logged and reported in ``failures``; it never stops
    the remaining ones. Raises EmptyBatch when there is nothing to save and
    NoRecordsPersisted when every attempt failed.
    """
    result = BatchResult()
    for index, candidate in enumerate(candidates):
        outcome = persist_one(store, index, candidate)
        if outcome.ok:
            result.saved.append(outcome.record)
            logger.debug("Patient saved: %s", candidate.full_name)
        else:
            result.failures.append(outcome)
            logger.error("Failed to save patient %s: %s", candidate.full_name, outcome.error)

    if result.attempted == 0:
        raise EmptyBatch("No valid patient found in the file")
    if result.succeeded == 0:
        raise NoRecordsPersisted(
            f"None of the {result.attempted} patients could be saved",
            failures=result.failures,
        )

    logger.info("%d parsed, %d persisted", result.attempted, result.succeeded)
    return result
