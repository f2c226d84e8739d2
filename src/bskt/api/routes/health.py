"""Health check endpoints."""

from fastapi import APIRouter, Depends

from bskt import __version__
from bskt.api.deps import get_services
from bskt.services.container import Services

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "bskt"}


@router.get("/health/detailed")
async def detailed_health(services: Services = Depends(get_services)):
    """Detailed health check with configuration and backup info."""
    backup = services.backup
    return {
        "status": "healthy",
        "service": "bskt",
        "version": __version__,
        "config": services.settings.get_safe_dict(),
        "backup": {
            "enabled": backup is not None,
            "running": backup.running if backup else False,
            "written": backup.written if backup else 0,
            "failures": backup.failures if backup else 0,
        },
        "clients": {
            "por": services.orchestrator.por.name,
            "submission": services.orchestrator.submitter.name,
        },
    }
