"""Submission client factory."""

from bskt.config import Settings
from bskt.submission.base import SubmissionClient
from bskt.submission.dryrun import DryRunSubmissionClient
from bskt.submission.relayer import RelayerSubmissionClient


def create_submission_client(settings: Settings) -> SubmissionClient:
    """Build the submission client selected by SUBMISSION_PROVIDER.

    - dryrun (default): deterministic fake hashes
    - relayer: POST to SUBMISSION_RELAYER_URL
    """
    provider = settings.submission_provider.lower()

    if provider == "relayer":
        if not settings.submission_relayer_url:
            raise ValueError("SUBMISSION_RELAYER_URL is required when SUBMISSION_PROVIDER=relayer")
        return RelayerSubmissionClient(
            settings.submission_relayer_url,
            api_key=settings.submission_api_key,
            timeout=settings.submission_timeout_seconds,
        )

    return DryRunSubmissionClient()
