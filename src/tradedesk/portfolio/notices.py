from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Notice:
    message: str
    success: bool
    expires_at: float | None = None  # None: stays until replaced


class NoticeBoard:
    """Holds the single user-facing trade notice.

    Success notices clear themselves after ``duration`` seconds; errors
    stay until the next notice replaces them.
    """

    def __init__(
        self,
        duration: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._duration = duration
        self._clock = clock
        self._notice: Notice | None = None

    @property
    def duration(self) -> float:
        return self._duration

    def success(self, message: str) -> Notice:
        self._notice = Notice(message, True, self._clock() + self._duration)
        return self._notice

    def error(self, message: str) -> Notice:
        self._notice = Notice(message, False)
        return self._notice

    def current(self) -> Notice | None:
        notice = self._notice
        if notice and notice.expires_at is not None and self._clock() >= notice.expires_at:
            self._notice = None
        return self._notice

    def clear(self) -> None:
        self._notice = None
