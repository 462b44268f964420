from .models import Entry, LogLevel


class AccountInfo(Entry, kw_only=True):
    account: str
    balance: float
    level: LogLevel = LogLevel.INFO

class TransactionInfo(Entry, kw_only=True):
    account: str
    label: str
    amount: float
    balance: float
    level: LogLevel = LogLevel.INFO

class TransactionError(Entry, kw_only=True):
    account: str
    label: str
    amount: float
    error: str
    level: LogLevel = LogLevel.ERROR

class GateDebug(Entry, kw_only=True):
    gate: str
    run_id: int
    label: str
    status: str
    pending: int
    level: LogLevel = LogLevel.DEBUG
