"""
Pipeline change notification.

Producers (the lead ledger and the reset operation) emit a reason string after
every successful change; consumers such as dashboards subscribe to refresh.
A failing listener is logged and never affects the producer or the other
listeners.
"""

from __future__ import annotations

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

PIPELINE_UPDATED = "pipeline_updated"
PIPELINE_RESET = "pipeline_reset"

Listener = Callable[[str], None]


class PipelineSignal:
    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def connect(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def disconnect(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, reason: str = PIPELINE_UPDATED) -> int:
        """Notify every listener; returns how many completed without error."""

        delivered = 0
        for listener in list(self._listeners):
            try:
                listener(reason)
            except Exception as e:
                logger.warning(
                    "Pipeline listener failed",
                    extra={"reason": reason, "listener": repr(listener), "error": str(e)},
                )
                continue
            delivered += 1
        return delivered


__all__ = ["PIPELINE_RESET", "PIPELINE_UPDATED", "PipelineSignal"]
