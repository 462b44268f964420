from typing import Any, Generic, TypeVar

import msgspec

from .run_status import RunStatus


T = TypeVar('T')


class GateRun(msgspec.Struct, Generic[T], kw_only=True):
    run_id: int
    label: str
    status: RunStatus = RunStatus.PENDING
    result: Any = None
    error: str | None = None
    trace: str | None = None
    queued: float = 0
    start: float = 0
    end: float = 0
    elapsed: float = 0

    @property
    def token(self):
        return f"{self.label}:{self.run_id}"

    @property
    def completed(self):
        return self.status == RunStatus.COMPLETE

    @property
    def failed(self):
        return self.status == RunStatus.FAILED
