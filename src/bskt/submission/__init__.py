"""Per-asset transfer submission clients."""

from bskt.submission.base import SubmissionClient, SubmissionRequest
from bskt.submission.factory import create_submission_client

__all__ = ["SubmissionClient", "SubmissionRequest", "create_submission_client"]
