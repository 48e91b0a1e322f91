"""
Tests for transaction outcome classification.
"""

import pytest

from treasury_executor.core.bridge.verifier import OutcomeKind, classify
from treasury_executor.core.chain.models import ComputePhase, TransactionRecord
from treasury_executor.core.errors import VerificationError


def _record(phase):
    return TransactionRecord(lt=100, hash="ab" * 32, compute_phase=phase)


class TestClassify:
    def test_exit_code_zero_is_success(self):
        outcome = classify(_record(ComputePhase(skipped=False, exit_code=0)))

        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.is_success
        assert outcome.error() is None
        outcome.raise_for_status()

    def test_non_zero_exit_code_fails(self):
        outcome = classify(_record(ComputePhase(skipped=False, exit_code=2)))

        assert outcome.kind == OutcomeKind.COMPUTE_FAILED
        assert outcome.exit_code == 2
        error = outcome.error()
        assert isinstance(error, VerificationError)
        assert "2" in str(error)
        assert error.outcome is outcome

    def test_treasury_error_code_reported(self):
        outcome = classify(_record(ComputePhase(skipped=False, exit_code=101)))

        with pytest.raises(VerificationError, match="exit_code: 101"):
            outcome.raise_for_status()

    def test_skipped_phase(self):
        outcome = classify(_record(ComputePhase(skipped=True, skip_reason="no-gas")))

        assert outcome.kind == OutcomeKind.COMPUTE_SKIPPED
        assert outcome.skip_reason == "no-gas"
        assert "no-gas" in str(outcome.error())

    def test_missing_record(self):
        outcome = classify(None)

        assert outcome.kind == OutcomeKind.MISSING
        assert outcome.record is None
        with pytest.raises(VerificationError, match="missing"):
            outcome.raise_for_status()

    def test_absent_compute_phase_is_skipped(self):
        outcome = classify(_record(None))

        assert outcome.kind == OutcomeKind.COMPUTE_SKIPPED
        assert outcome.skip_reason == "absent"
        assert outcome.error() is not None

    def test_classify_has_no_side_effects(self):
        record = _record(ComputePhase(skipped=False, exit_code=5))

        first = classify(record)
        second = classify(record)

        assert first == second
        assert record.compute_phase.exit_code == 5
