"""Error taxonomy shared by the registries, the orchestrator and the API."""

from typing import Optional


class BsktError(Exception):
    """Base class for all domain errors."""

    code = "ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BsktError):
    """Malformed or semantically invalid input. Never retried."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)


class InvalidWeightsError(ValidationError):
    """Basket weights do not sum to 100."""

    def __init__(self, actual_sum: int):
        self.actual_sum = actual_sum
        super().__init__(
            f"Asset weights must sum to 100 (current: {actual_sum})", field="assets"
        )


class NotFoundError(BsktError):
    """Entity id absent."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class ConflictError(BsktError):
    """Duplicate id or a structural invariant violation."""

    code = "CONFLICT"


class POREligibilityError(BsktError):
    """The Proof of Reserve gate rejected a mint."""

    code = "POR_INELIGIBLE"

    STALE = "stale_attestation"
    INSUFFICIENT_RESERVE = "insufficient_reserve"
    UNAVAILABLE = "oracle_unavailable"
    UNVERIFIED = "unverified_attestation"

    def __init__(self, reason: str, message: str, mint_id: Optional[str] = None):
        self.reason = reason
        self.mint_id = mint_id
        super().__init__(message)


class SubmissionError(BsktError):
    """The external transfer collaborator failed for one asset."""

    code = "SUBMISSION_FAILED"

    def __init__(
        self,
        message: str,
        asset_id: Optional[str] = None,
        mint_id: Optional[str] = None,
    ):
        self.asset_id = asset_id
        self.mint_id = mint_id
        super().__init__(message)
