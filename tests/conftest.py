"""
Pytest configuration for serialgate tests.

Async tests are marked explicitly with ``@pytest.mark.asyncio``.
"""

import tempfile
from typing import Generator

import pytest

from serialgate.account import SharedAccount
from serialgate.exceptions import TransactionFailure
from serialgate.latency import NoDelay
from serialgate.logging import Logger
from serialgate.logging.models import Entry, LogLevel


class FailingAccount(SharedAccount):
    """
    Fails the load or store step of selected transactions. Steps are
    counted from zero in the order the gate admits transactions.
    """

    def __init__(
        self,
        *args,
        fail_loads: set[int] | None = None,
        fail_stores: set[int] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.fail_loads = fail_loads or set()
        self.fail_stores = fail_stores or set()
        self.loads = 0
        self.stores = 0

    async def _load_balance(self) -> float:
        load_idx = self.loads
        self.loads += 1

        balance = await super()._load_balance()
        if load_idx in self.fail_loads:
            raise TransactionFailure(f"load-{load_idx}", "load failed")

        return balance

    async def _save_balance(self, value: float):
        store_idx = self.stores
        self.stores += 1

        if store_idx in self.fail_stores:
            raise TransactionFailure(f"store-{store_idx}", "store failed")

        await super()._save_balance(value)


class FailingLogger(Logger):
    """
    Raises ``OSError`` for every entry whose message contains
    ``fail_on``, or for every entry when ``fail_on`` is empty.
    """

    def __init__(self, fail_on: str = "") -> None:
        super().__init__()
        self.fail_on = fail_on
        self.failures = 0

    async def log(self, entry: Entry, name: str | None = None):
        if self.fail_on in (entry.message or ""):
            self.failures += 1
            raise OSError(f"log sink unavailable for {name}")

        await super().log(entry, name=name)


@pytest.fixture
def temp_log_directory() -> Generator[str, None, None]:
    with tempfile.TemporaryDirectory() as temp_directory:
        yield temp_directory


@pytest.fixture
def sample_entry_factory():
    def create_entry(
        message: str = "Test log message",
        level: LogLevel = LogLevel.INFO,
    ) -> Entry:
        return Entry(
            message=message,
            level=level,
        )

    return create_entry


@pytest.fixture
def no_delay() -> NoDelay:
    return NoDelay()


@pytest.fixture
def failing_account_factory():
    def create_account(
        initial_balance: float = 0,
        fail_loads: set[int] | None = None,
        fail_stores: set[int] | None = None,
        delay=None,
        logger=None,
    ) -> FailingAccount:
        return FailingAccount(
            initial_balance,
            delay=delay or NoDelay(),
            logger=logger,
            fail_loads=fail_loads,
            fail_stores=fail_stores,
        )

    return create_account


@pytest.fixture
def failing_logger_factory():
    def create_logger(fail_on: str = "") -> FailingLogger:
        return FailingLogger(fail_on=fail_on)

    return create_logger


@pytest.fixture
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path):
    for envar_name in (
        "SERIALGATE_LOG_LEVEL",
        "SERIALGATE_LOG_OUTPUT",
        "SERIALGATE_LOGS_DIRECTORY",
        "SERIALGATE_LOG_TEMPLATE",
        "SERIALGATE_MIN_DELAY",
        "SERIALGATE_MAX_DELAY",
        "SERIALGATE_INITIAL_BALANCE",
    ):
        monkeypatch.delenv(envar_name, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
