"""
serialgate - FIFO serialization of async read-modify-write transactions.

Example usage:
    >>> import asyncio
    >>> from serialgate import SharedAccount, NoDelay
    >>> async def transact():
    ...     account = SharedAccount(0, delay=NoDelay())
    ...     account.process_transaction("deposit", 50)
    ...     account.process_transaction("withdraw", -30)
    ...     return await account.get_final_balance()
    >>> asyncio.run(transact())
    20
"""

from serialgate.account import (
    SharedAccount as SharedAccount,
    TransactionResult as TransactionResult,
)
from serialgate.exceptions import (
    ConstructionError as ConstructionError,
    InvalidAmountError as InvalidAmountError,
    SerialGateError as SerialGateError,
    TransactionFailure as TransactionFailure,
)
from serialgate.gate import (
    GateRun as GateRun,
    RunStatus as RunStatus,
    SerialGate as SerialGate,
)
from serialgate.latency import (
    Delay as Delay,
    FixedDelay as FixedDelay,
    NoDelay as NoDelay,
    RandomDelay as RandomDelay,
    SequenceDelay as SequenceDelay,
)

__version__ = "0.1.0"
