"""Long-lived services: refresh orchestration, scheduling, branch memory, file watching."""

from .branch_memory import BranchMemory
from .refresh import RefreshOrchestrator, Refreshable
from .scheduler import Debouncer, ManualScheduler, Scheduler, ThreadingScheduler
from .views import ActiveRepositoryView, BranchGroups, BranchesView
from .watcher import RepositoryEventHandler, WorkspaceWatcher

__all__ = [
    "ActiveRepositoryView",
    "BranchGroups",
    "BranchesView",
    "BranchMemory",
    "Debouncer",
    "ManualScheduler",
    "RefreshOrchestrator",
    "Refreshable",
    "RepositoryEventHandler",
    "Scheduler",
    "ThreadingScheduler",
    "WorkspaceWatcher",
]
