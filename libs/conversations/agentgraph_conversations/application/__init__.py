from .ledger_artifact_service import LedgerArtifactService, resolve_task_id, to_artifact

__all__ = ["LedgerArtifactService", "resolve_task_id", "to_artifact"]
