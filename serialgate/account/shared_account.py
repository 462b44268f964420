import asyncio
import math
import sys
from numbers import Real
from typing import List

from serialgate.exceptions import (
    ConstructionError,
    InvalidAmountError,
    TransactionFailure,
)
from serialgate.gate import GateRun, SerialGate
from serialgate.latency import Delay, RandomDelay
from serialgate.logging import Logger, report_log_failure
from serialgate.logging.serialgate_logging_models import (
    AccountInfo,
    TransactionError,
    TransactionInfo,
)

from .models import TransactionResult


def _is_finite_number(value: object) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class SharedAccount:
    """
    A balance that is only ever read or written from inside a critical
    section admitted by the account's own ``SerialGate``.
    """

    def __init__(
        self,
        initial_balance: float = 0,
        name: str | None = None,
        delay: Delay | None = None,
        logger: Logger | None = None,
    ) -> None:
        if not _is_finite_number(initial_balance):
            raise ConstructionError(
                f"Initial balance must be a finite number, got {initial_balance!r}"
            )

        if name is None:
            name = "account"

        if delay is None:
            delay = RandomDelay(max_delay=0.1)

        self.name = name
        self._balance = initial_balance
        self._delay = delay
        self._logger = logger
        self._gate = SerialGate(
            name=f"{name}.gate",
            logger=logger,
        )
        self._created_logged = False
        self.history: List[TransactionResult] = []

    @property
    def gate(self) -> SerialGate:
        return self._gate

    def process_transaction(
        self,
        label: str,
        amount: float,
    ) -> asyncio.Task[TransactionResult]:
        if not _is_finite_number(amount):
            raise InvalidAmountError(
                f"Transaction {label} amount must be a finite number, got {amount!r}"
            )

        unit = self._gate.enqueue(
            lambda: self._transact(label, amount),
            label=label,
        )

        return asyncio.ensure_future(
            self._to_result(unit, label, amount)
        )

    async def get_final_balance(self) -> float:
        await self._gate.current_tail()
        return self._balance

    def snapshot(self) -> asyncio.Task[float]:
        label = f"{self.name}.snapshot"
        unit = self._gate.enqueue(
            self._load_balance,
            label=label,
        )

        return asyncio.ensure_future(
            self._to_balance(unit, label)
        )

    async def _transact(
        self,
        label: str,
        amount: float,
    ):
        await self._log_created()

        current_balance = await self._load_balance()
        await self._log(
            TransactionInfo(
                message=f"[{label}] balance before transaction: {current_balance}",
                account=self.name,
                label=label,
                amount=amount,
                balance=current_balance,
            )
        )

        new_balance = current_balance + amount

        await self._save_balance(new_balance)
        await self._log(
            TransactionInfo(
                message=f"[{label}] balance after transaction: {new_balance}",
                account=self.name,
                label=label,
                amount=amount,
                balance=new_balance,
            )
        )

        return current_balance, new_balance

    async def _load_balance(self) -> float:
        await self._delay()
        return self._balance

    async def _save_balance(self, value: float):
        await self._delay()
        self._balance = value

    async def _to_balance(
        self,
        unit: asyncio.Task[GateRun[float]],
        label: str,
    ) -> float:
        run = await unit

        if run.failed:
            raise TransactionFailure(label, run.error)

        return run.result

    async def _to_result(
        self,
        unit: asyncio.Task[GateRun[tuple[float, float]]],
        label: str,
        amount: float,
    ) -> TransactionResult:
        run = await unit

        result = TransactionResult(
            run_id=run.run_id,
            label=label,
            amount=amount,
            status=run.status,
            error=run.error,
        )

        if run.completed:
            result.balance_before, result.balance_after = run.result

        self.history.append(result)

        if run.failed:
            await self._log(
                TransactionError(
                    message=f"[{label}] transaction failed: {run.error}",
                    account=self.name,
                    label=label,
                    amount=amount,
                    error=run.error or "",
                )
            )

        return result

    async def _log_created(self):
        if self._created_logged:
            return

        self._created_logged = True
        await self._log(
            AccountInfo(
                message=f"Account {self.name} created with initial balance: {self._balance}",
                account=self.name,
                balance=self._balance,
            )
        )

    async def _log(self, entry):
        if self._logger is None:
            return

        frame = sys._getframe(1)

        try:
            await self._logger.log(
                entry,
                name=self.name,
            )

        except Exception as err:
            await report_log_failure(
                entry,
                err,
                frame.f_code.co_filename,
                frame.f_code.co_name,
                frame.f_lineno,
            )
