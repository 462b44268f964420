from __future__ import annotations
from pydantic import BaseModel, StrictFloat, StrictStr
from typing import Callable, Dict, Literal, Union

from .time_parser import TimeParser

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    SERIALGATE_LOG_LEVEL: Literal["trace", "debug", "info", "warn", "error", "critical", "fatal"] = "info"
    SERIALGATE_LOG_OUTPUT: Literal["stdout", "stderr"] = "stdout"
    SERIALGATE_LOGS_DIRECTORY: StrictStr | None = None
    SERIALGATE_LOG_TEMPLATE: StrictStr | None = None
    SERIALGATE_MIN_DELAY: StrictStr = "0s"
    SERIALGATE_MAX_DELAY: StrictStr = "0.1s"
    SERIALGATE_INITIAL_BALANCE: StrictFloat = 0.0

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "SERIALGATE_LOG_LEVEL": str,
            "SERIALGATE_LOG_OUTPUT": str,
            "SERIALGATE_LOGS_DIRECTORY": str,
            "SERIALGATE_LOG_TEMPLATE": str,
            "SERIALGATE_MIN_DELAY": str,
            "SERIALGATE_MAX_DELAY": str,
            "SERIALGATE_INITIAL_BALANCE": float,
        }

    def get_delay_bounds(self) -> tuple[float, float]:
        parser = TimeParser()
        return (
            parser.parse(self.SERIALGATE_MIN_DELAY),
            parser.parse(self.SERIALGATE_MAX_DELAY),
        )
