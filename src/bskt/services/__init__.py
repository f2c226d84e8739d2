"""Service wiring and mint orchestration."""

from bskt.services.container import Services, build_services
from bskt.services.orchestrator import MintOrchestrator, MintPhase

__all__ = ["MintOrchestrator", "MintPhase", "Services", "build_services"]
