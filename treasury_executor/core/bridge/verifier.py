"""
Transaction verification.

Classifies the destination transaction of a bridge message into a single
outcome. Only a compute phase that ran and exited with code 0 counts as
success; any refund of the attached value is left to the bounce mechanism.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..chain.models import TransactionRecord
from ..errors import VerificationError


TVM_EXIT_SUCCESS = 0
ABSENT_COMPUTE_PHASE = "absent"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    COMPUTE_FAILED = "compute_failed"
    COMPUTE_SKIPPED = "compute_skipped"
    MISSING = "missing"


@dataclass(frozen=True)
class TransactionOutcome:
    kind: OutcomeKind
    exit_code: Optional[int] = None
    skip_reason: Optional[str] = None
    record: Optional[TransactionRecord] = None

    @property
    def is_success(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    def describe(self) -> str:
        if self.kind == OutcomeKind.SUCCESS:
            return "transaction succeeded"
        if self.kind == OutcomeKind.COMPUTE_FAILED:
            return f"transaction failed with exit_code: {self.exit_code}"
        if self.kind == OutcomeKind.COMPUTE_SKIPPED:
            return f"compute phase skipped due to: {self.skip_reason}"
        return "transaction is missing"

    def error(self) -> Optional[VerificationError]:
        if self.is_success:
            return None
        return VerificationError(self.describe(), outcome=self)

    def raise_for_status(self) -> None:
        error = self.error()
        if error is not None:
            raise error


def classify(record: Optional[TransactionRecord]) -> TransactionOutcome:
    if record is None:
        return TransactionOutcome(kind=OutcomeKind.MISSING)

    phase = record.compute_phase
    if phase is None:
        return TransactionOutcome(
            kind=OutcomeKind.COMPUTE_SKIPPED,
            skip_reason=ABSENT_COMPUTE_PHASE,
            record=record,
        )

    if phase.skipped:
        return TransactionOutcome(
            kind=OutcomeKind.COMPUTE_SKIPPED,
            skip_reason=phase.skip_reason,
            record=record,
        )

    if phase.exit_code != TVM_EXIT_SUCCESS:
        return TransactionOutcome(
            kind=OutcomeKind.COMPUTE_FAILED,
            exit_code=phase.exit_code,
            record=record,
        )

    return TransactionOutcome(kind=OutcomeKind.SUCCESS, exit_code=phase.exit_code, record=record)
