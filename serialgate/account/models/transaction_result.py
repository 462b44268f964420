import msgspec

from serialgate.gate.models import RunStatus


class TransactionResult(msgspec.Struct, kw_only=True):
    run_id: int
    label: str
    amount: float
    status: RunStatus
    balance_before: float | None = None
    balance_after: float | None = None
    error: str | None = None

    @property
    def completed(self):
        return self.status == RunStatus.COMPLETE

    @property
    def failed(self):
        return self.status == RunStatus.FAILED
