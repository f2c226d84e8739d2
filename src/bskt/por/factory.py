"""POR client factory."""

from bskt.config import Settings
from bskt.por.base import PORClient
from bskt.por.dryrun import DryRunPORClient
from bskt.por.http import HttpPORClient


def create_por_client(settings: Settings) -> PORClient:
    """Build the POR client selected by POR_PROVIDER.

    - dryrun (default): fixed reserve, always fresh
    - http: GET on POR_API_URL
    """
    provider = settings.por_provider.lower()

    if provider == "http":
        if not settings.por_api_url:
            raise ValueError("POR_API_URL is required when POR_PROVIDER=http")
        return HttpPORClient(settings.por_api_url, timeout=settings.por_request_timeout)

    return DryRunPORClient(reserve_balance=settings.dry_run_reserve_balance)
