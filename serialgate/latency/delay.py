import asyncio
import itertools
import math
import random
from typing import Iterable, Protocol


class Delay(Protocol):
    async def __call__(self) -> None:
        ...


def _validate_seconds(name: str, value: float):
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")

    if math.isnan(value) or math.isinf(value) or value < 0:
        raise ValueError(f"{name} must be a finite non-negative number, got {value!r}")


class NoDelay:
    async def __call__(self) -> None:
        await asyncio.sleep(0)


class FixedDelay:
    __slots__ = ("seconds",)

    def __init__(self, seconds: float) -> None:
        _validate_seconds("seconds", seconds)
        self.seconds = seconds

    async def __call__(self) -> None:
        await asyncio.sleep(self.seconds)


class RandomDelay:
    """
    Uniformly distributed delay in ``[min_delay, max_delay)`` seconds.
    Passing a ``seed`` makes the sequence of delays reproducible.
    """

    __slots__ = ("min_delay", "max_delay", "_random")

    def __init__(
        self,
        max_delay: float = 0.1,
        min_delay: float = 0,
        seed: int | None = None,
    ) -> None:
        _validate_seconds("min_delay", min_delay)
        _validate_seconds("max_delay", max_delay)

        if min_delay > max_delay:
            raise ValueError(
                f"min_delay ({min_delay}) cannot exceed max_delay ({max_delay})"
            )

        self.min_delay = min_delay
        self.max_delay = max_delay
        self._random = random.Random(seed)

    def next_delay(self) -> float:
        return self._random.uniform(self.min_delay, self.max_delay)

    async def __call__(self) -> None:
        await asyncio.sleep(self.next_delay())


class SequenceDelay:
    """Replays a scripted list of delays, wrapping around when exhausted."""

    __slots__ = ("delays", "_cycle")

    def __init__(self, delays: Iterable[float]) -> None:
        self.delays = list(delays)

        if len(self.delays) < 1:
            raise ValueError("SequenceDelay requires at least one delay")

        for delay in self.delays:
            _validate_seconds("delay", delay)

        self._cycle = itertools.cycle(self.delays)

    def next_delay(self) -> float:
        return next(self._cycle)

    async def __call__(self) -> None:
        await asyncio.sleep(self.next_delay())
