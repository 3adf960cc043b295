"""
Run-scoped state shared by the orchestrator and the capture workers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional
from uuid import uuid4

from capture.directories import DirectoryCreationCache
from shared.config import AppConfig
from shared.logging import get_logger

logger = get_logger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SERVER_STARTING = "server_starting"
    DISCOVERING = "discovering"
    CONTEXT_OPEN = "context_open"
    DRAINING = "draining"
    CONTEXT_CLOSED = "context_closed"
    SERVER_STOPPED = "server_stopped"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CaptureRun:
    """
    Everything a capture worker needs besides its browsing context.

    The directory cache is the only mutable member workers touch; claims on
    it happen on the single event loop between awaits.
    """

    config: AppConfig
    output_root: Path
    base_url: str = ""
    run_id: str = field(default_factory=lambda: uuid4().hex[:12])
    directories: DirectoryCreationCache = field(default_factory=DirectoryCreationCache)
    state: RunState = RunState.IDLE
    history: list[RunState] = field(default_factory=list)

    def transition(self, state: RunState, device: Optional[str] = None) -> None:
        self.history.append(state)
        logger.info(
            "run.state",
            from_state=self.state.value,
            to_state=state.value,
            device=device,
        )
        self.state = state


@dataclass
class PoolSummary:
    """Per-device capture counts."""

    captured: int = 0
    failed: int = 0


@dataclass
class RunSummary:
    pages_found: int = 0
    devices_processed: list[str] = field(default_factory=list)
    devices_skipped: list[str] = field(default_factory=list)
    devices_failed: list[str] = field(default_factory=list)
    captured: int = 0
    failed: int = 0

    def add(self, pool: PoolSummary) -> None:
        self.captured += pool.captured
        self.failed += pool.failed
