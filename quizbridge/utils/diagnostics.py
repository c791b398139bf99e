"""
Diagnostic sinks.

Every extraction run appends one structured record (input URL, ordered
steps, winning agent and strategy, winning candidate, notes) to the sink
injected into the orchestrator. Sinks are append-only and are the only state
shared between runs.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional


class RunLog:
    """Ordered step log for one extraction run."""

    def __init__(self, platform: str, url: str):
        self.platform = platform
        self.url = url
        self.started_at = datetime.now().isoformat()
        self.steps: List[Dict[str, Any]] = []
        self.notes: List[str] = []
        self.agent = ""
        self.strategy = ""
        self.candidate: Optional[Dict[str, Any]] = None
        self.status = ""

    def step(self, name: str, **details: Any) -> None:
        entry = {'step': name}
        entry.update(details)
        self.steps.append(entry)

    def note(self, message: str) -> None:
        self.notes.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'platform': self.platform,
            'url': self.url,
            'startedAt': self.started_at,
            'status': self.status,
            'agent': self.agent,
            'strategy': self.strategy,
            'candidate': self.candidate,
            'steps': list(self.steps),
            'notes': list(self.notes)
        }


class DiagnosticSink:
    """Receives one record per extraction run."""

    def record(self, run: RunLog) -> None:
        raise NotImplementedError


class NullDiagnosticSink(DiagnosticSink):
    def record(self, run: RunLog) -> None:
        return None


class MemoryDiagnosticSink(DiagnosticSink):
    """
    Keeps run records in memory, grouped by platform.

    Records are only ever appended; ``last_run`` returns the newest record
    for a platform.
    """

    def __init__(self):
        self.runs: Dict[str, List[Dict[str, Any]]] = {}

    def record(self, run: RunLog) -> None:
        self.runs.setdefault(run.platform, []).append(run.to_dict())

    def last_run(self, platform: str) -> Optional[Dict[str, Any]]:
        runs = self.runs.get(platform)
        return runs[-1] if runs else None

    def all_runs(self) -> List[Dict[str, Any]]:
        return [run for runs in self.runs.values() for run in runs]


class LoggingDiagnosticSink(DiagnosticSink):
    """Writes each run record as one JSON line to a logger."""

    def __init__(self, logger_name: str = 'quizbridge.diagnostics', level: int = logging.DEBUG):
        self.logger = logging.getLogger(logger_name)
        self.level = level

    def record(self, run: RunLog) -> None:
        self.logger.log(self.level, json.dumps(run.to_dict(), ensure_ascii=False, default=str))
