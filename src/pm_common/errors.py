"""Unified error codes and custom exceptions.

Error code ranges:
  6xxx: Commitment integrity (fatal, never retried)
  7xxx: Commit-reveal workflow
  8xxx: External collaborators (prover, ledger)
  9xxx: System

``retryable`` tells the caller whether the same call may succeed later.
``integrity`` marks cryptographic integrity failures: the order's workflow
must halt and the error must be surfaced, not retried.
"""


class AppError(Exception):
    """Base application error."""

    retryable: bool = False
    integrity: bool = False

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 6xxx: Commitment integrity ---

class EncodingOverflowError(AppError):
    integrity = True

    def __init__(self, field: str, value: int) -> None:
        self.field = field
        super().__init__(
            6001, f"Field {field} is outside the hash field range: {value}", 422
        )


class SecretCorruptedError(AppError):
    integrity = True

    def __init__(self, commitment_hash: str, detail: str) -> None:
        self.commitment_hash = commitment_hash
        super().__init__(
            6002, f"Stored secret for {commitment_hash} is corrupted: {detail}", 500
        )


class SecretCollisionError(AppError):
    integrity = True

    def __init__(self, commitment_hash: str) -> None:
        self.commitment_hash = commitment_hash
        super().__init__(
            6003,
            f"A different secret is already stored for commitment {commitment_hash}",
            500,
        )


# --- 7xxx: Commit-reveal workflow ---

class CommitmentNotFoundError(AppError):
    def __init__(self, commitment_hash: str) -> None:
        self.commitment_hash = commitment_hash
        super().__init__(7001, f"No stored secret for commitment {commitment_hash}", 404)


class RevealTooEarlyError(AppError):
    retryable = True

    def __init__(self, commitment_hash: str, remaining_seconds: int) -> None:
        self.commitment_hash = commitment_hash
        self.remaining_seconds = remaining_seconds
        super().__init__(
            7002,
            f"Reveal delay for {commitment_hash} not elapsed: {remaining_seconds}s remaining",
            425,
        )


class OrderExpiredError(AppError):
    def __init__(self, expiry: int, now: int) -> None:
        self.expiry = expiry
        super().__init__(7003, f"Order expired at {expiry} (now {now})", 422)


class InvalidOrderParamsError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(7004, f"Invalid order parameters: {detail}", 422)


class InvalidPhaseError(AppError):
    def __init__(self, commitment_hash: str, phase: str, action: str) -> None:
        self.phase = phase
        super().__init__(
            7005, f"Commitment {commitment_hash} in phase {phase} cannot {action}", 409
        )


class RevealAbandonedError(AppError):
    retryable = True

    def __init__(self, commitment_hash: str) -> None:
        super().__init__(7006, f"Reveal of {commitment_hash} was abandoned", 409)


# --- 8xxx: External collaborators ---

class ProvingUnavailableError(AppError):
    retryable = True

    def __init__(self, detail: str) -> None:
        super().__init__(8001, f"Proving backend unavailable: {detail}", 503)


class SubmissionFailedError(AppError):
    retryable = True

    def __init__(self, action: str, detail: str, commitment_hash: str | None = None) -> None:
        self.action = action
        self.detail = detail
        self.commitment_hash = commitment_hash
        subject = f" for {commitment_hash}" if commitment_hash else ""
        super().__init__(8002, f"Ledger {action} submission failed{subject}: {detail}", 502)


class LedgerUnavailableError(AppError):
    retryable = True

    def __init__(self, detail: str) -> None:
        super().__init__(8003, f"Ledger query failed: {detail}", 502)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
