import asyncio
from typing import Iterable, List, Tuple

from serialgate.account import SharedAccount, TransactionResult
from serialgate.env import Env, load_env
from serialgate.latency import Delay, delay_from_env
from serialgate.logging import Logger, LoggingConfig
from serialgate.logging.models import Entry, LogLevel


DEFAULT_TRANSACTIONS: List[Tuple[str, float]] = [
    ("sell grapes", 50),
    ("sell olives", 50),
    ("sell olives", 50),
    ("sell grapes", 50),
    ("buy fertilizer", -30),
    ("sell grapes", 50),
    ("sell grapes", 50),
]


async def run_demo(
    transactions: Iterable[Tuple[str, float]] | None = None,
    initial_balance: float = 0,
    delay: Delay | None = None,
    logger: Logger | None = None,
) -> Tuple[float, List[TransactionResult]]:
    if transactions is None:
        transactions = DEFAULT_TRANSACTIONS

    account = SharedAccount(
        initial_balance=initial_balance,
        delay=delay,
        logger=logger,
    )

    results = await asyncio.gather(*[
        account.process_transaction(label, amount)
        for label, amount in transactions
    ])

    final_balance = await account.get_final_balance()

    return final_balance, list(results)


async def run(env: Env):
    config = LoggingConfig()
    config.update(
        log_directory=env.SERIALGATE_LOGS_DIRECTORY,
        log_level=env.SERIALGATE_LOG_LEVEL,
        log_output=env.SERIALGATE_LOG_OUTPUT,
        log_template=env.SERIALGATE_LOG_TEMPLATE,
    )

    logger = Logger()

    final_balance, results = await run_demo(
        initial_balance=env.SERIALGATE_INITIAL_BALANCE,
        delay=delay_from_env(env),
        logger=logger,
    )

    failed = [result for result in results if result.failed]

    await logger.log(
        Entry(
            message=f"All {len(results)} transactions settled ({len(failed)} failed), final balance: {final_balance}",
            level=LogLevel.INFO,
        ),
    )

    await logger.close()

    return final_balance


def main():
    env = load_env(Env)
    asyncio.run(run(env))
