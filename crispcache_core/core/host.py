from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class HostChannel(Protocol):
    """Outbound signals from the renderer to the embedding host."""

    def paint_complete(self) -> None:
        ...

    def draw_executed(self) -> None:
        ...

    def request_repaint(self) -> None:
        ...

    def report_error(self, error: Exception) -> None:
        ...


@dataclass
class RecordingHostChannel:
    """Host channel that counts signals instead of forwarding them."""

    paints_completed: int = 0
    draws_executed: int = 0
    repaint_requests: int = 0
    errors: list[Exception] = field(default_factory=list)

    def paint_complete(self) -> None:
        self.paints_completed += 1

    def draw_executed(self) -> None:
        self.draws_executed += 1

    def request_repaint(self) -> None:
        self.repaint_requests += 1

    def report_error(self, error: Exception) -> None:
        self.errors.append(error)
