"""
Sign-and-submit orchestration.

Each unsigned transaction moves BUILT -> SIGNED -> SUBMITTED -> CONFIRMED, or
to FAILED at the first step that goes wrong. Batches are submitted strictly in
order and stop at the first failure: anything already confirmed stays on the
ledger and nothing after the failure is attempted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from .errors import PartialBatchFailure, PrivateKeyNotFoundError, SigningError
from .signing import Signer

logger = logging.getLogger(__name__)

SubmitFn = Callable[[str, bool], Awaitable[str]]


class SubmitState(Enum):
    BUILT = "built"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class SubmitAttempt:
    """Progress of one transaction through signing and submission."""

    index: int
    state: SubmitState = SubmitState.BUILT
    signature: Optional[str] = None
    error: Optional[BaseException] = None

    def advance(self, state: SubmitState) -> None:
        self.state = state

    def fail(self, error: BaseException) -> None:
        self.state = SubmitState.FAILED
        self.error = error


@dataclass
class BatchSubmitResult:
    """Outcome of a bulk submission.

    ``signatures`` lists every confirmed transaction in submission order.
    ``error`` is the first failure, if any; transactions after it were never
    attempted and have no entry in ``attempts``.
    """

    signatures: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None
    attempts: List[SubmitAttempt] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self, operation_name: Optional[str] = None) -> List[str]:
        if self.error is not None:
            raise PartialBatchFailure(self.signatures, self.error, operation_name=operation_name)
        return list(self.signatures)


class TransactionSubmitter:
    """Signs unsigned transactions and submits them through ``submit_fn``."""

    def __init__(self, submit_fn: SubmitFn, signer: Optional[Signer]) -> None:
        self._submit_fn = submit_fn
        self._signer = signer

    @property
    def has_signer(self) -> bool:
        return self._signer is not None

    def require_signer(self, operation_name: Optional[str] = None) -> Signer:
        if self._signer is None:
            raise PrivateKeyNotFoundError(operation_name)
        return self._signer

    async def _run(
        self,
        attempt: SubmitAttempt,
        transaction: str,
        skip_pre_flight: bool,
        signer: Signer,
        operation_name: Optional[str],
    ) -> str:
        try:
            signed = signer.sign(transaction)
        except SigningError as exc:
            attempt.fail(exc)
            raise
        except Exception as exc:
            error = SigningError(f"signer failed: {exc}", operation_name=operation_name)
            attempt.fail(error)
            raise error from exc
        attempt.advance(SubmitState.SIGNED)

        attempt.advance(SubmitState.SUBMITTED)
        try:
            signature = await self._submit_fn(signed, skip_pre_flight)
        except Exception as exc:
            attempt.fail(exc)
            raise
        attempt.signature = signature
        attempt.advance(SubmitState.CONFIRMED)
        return signature

    async def submit_one(self, transaction: str, skip_pre_flight: bool, *, operation_name: Optional[str] = None) -> str:
        """Sign and submit one transaction; returns its ledger signature."""
        signer = self.require_signer(operation_name)
        if not transaction:
            raise ValueError("transaction must not be empty")
        attempt = SubmitAttempt(index=0)
        signature = await self._run(attempt, transaction, skip_pre_flight, signer, operation_name)
        logger.info("Submitted %s transaction: %s", operation_name or "signed", signature)
        return signature

    async def submit_many(
        self,
        transactions: Sequence[str],
        skip_pre_flight: bool,
        *,
        operation_name: Optional[str] = None,
    ) -> BatchSubmitResult:
        """Sign and submit ``transactions`` in order, stopping at the first failure."""
        signer = self.require_signer(operation_name)
        result = BatchSubmitResult()
        for index, transaction in enumerate(transactions):
            attempt = SubmitAttempt(index=index)
            result.attempts.append(attempt)
            try:
                if not transaction:
                    raise SigningError(f"transaction {index} is empty", operation_name=operation_name)
                signature = await self._run(attempt, transaction, skip_pre_flight, signer, operation_name)
            except Exception as exc:
                if attempt.state is not SubmitState.FAILED:
                    attempt.fail(exc)
                logger.warning(
                    "%s stopped at transaction %d of %d after %d confirmed: %s",
                    operation_name or "Batch submission",
                    index + 1,
                    len(transactions),
                    len(result.signatures),
                    exc,
                )
                result.error = exc
                break
            result.signatures.append(signature)
        return result


__all__ = [
    "BatchSubmitResult",
    "SubmitAttempt",
    "SubmitFn",
    "SubmitState",
    "TransactionSubmitter",
]
