"""
Normalized views of on-chain transactions.

Lite-server transactions are TL-B objects from ``pytoniq_core``; the rest of
the executor only needs the compute phase verdict, so records are reduced to
small frozen dataclasses right after they are fetched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


SKIP_REASON_PREFIX = "cskip_"


@dataclass(frozen=True)
class ComputePhase:
    """Compute phase of an ordinary transaction."""
    skipped: bool
    exit_code: Optional[int] = None
    skip_reason: Optional[str] = None


@dataclass(frozen=True)
class TransactionRecord:
    """A finalized transaction on the destination account."""
    lt: int
    hash: Optional[str] = None
    compute_phase: Optional[ComputePhase] = None

    @classmethod
    def from_tlb(cls, tx: Any) -> "TransactionRecord":
        """Build a record from a ``pytoniq_core`` ``Transaction``.

        Non-ordinary transactions (tick-tock, split/merge) carry no compute
        phase and produce a record with ``compute_phase=None``.
        """
        description = getattr(tx, "description", None)
        phase = getattr(description, "compute_ph", None)

        compute: Optional[ComputePhase] = None
        if phase is not None:
            if getattr(phase, "type_", None) == "skipped":
                reason = getattr(getattr(phase, "reason", None), "type_", None)
                compute = ComputePhase(skipped=True, skip_reason=normalize_skip_reason(reason))
            else:
                compute = ComputePhase(skipped=False, exit_code=int(phase.exit_code))

        cell = getattr(tx, "cell", None)
        tx_hash = cell.hash.hex() if cell is not None else None

        return cls(lt=int(tx.lt), hash=tx_hash, compute_phase=compute)


def normalize_skip_reason(reason: Optional[str]) -> str:
    """``cskip_no_gas`` -> ``no-gas``."""
    if not reason:
        return "unknown"
    if reason.startswith(SKIP_REASON_PREFIX):
        reason = reason[len(SKIP_REASON_PREFIX):]
    return reason.replace("_", "-")
