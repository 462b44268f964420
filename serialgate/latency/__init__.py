from serialgate.env import Env

from .delay import (
    Delay as Delay,
    FixedDelay as FixedDelay,
    NoDelay as NoDelay,
    RandomDelay as RandomDelay,
    SequenceDelay as SequenceDelay,
)


def delay_from_env(env: Env) -> Delay:
    min_delay, max_delay = env.get_delay_bounds()

    if min_delay > max_delay:
        raise ValueError(
            f"SERIALGATE_MIN_DELAY ({min_delay}) cannot exceed SERIALGATE_MAX_DELAY ({max_delay})"
        )

    if max_delay == 0:
        return NoDelay()

    if min_delay == max_delay:
        return FixedDelay(max_delay)

    return RandomDelay(
        max_delay=max_delay,
        min_delay=min_delay,
    )
