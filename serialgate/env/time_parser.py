import math
import re
from datetime import timedelta


class TimeParser:
    def __init__(self) -> None:
        self._units = {
            "s": "seconds",
            "m": "minutes",
            "h": "hours",
            "d": "days",
            "w": "weeks",
        }
        self._amount = re.compile(
            r"(?P<val>\d+(\.\d+)?)(?P<unit>[smhdw]?)",
            flags=re.I,
        )
        self._duration = re.compile(
            r"\s*(?:\d+(?:\.\d+)?[smhdw]\s*)*(?:\d+(?:\.\d+)?[smhdw]?)?\s*",
            flags=re.I,
        )

    def parse(self, time_amount: str | int | float) -> float:
        if isinstance(time_amount, (int, float)) and not isinstance(time_amount, bool):
            if not math.isfinite(time_amount) or time_amount < 0:
                raise ValueError(f"Invalid duration: {time_amount!r}")

            return float(time_amount)

        if not isinstance(time_amount, str) or self._duration.fullmatch(time_amount) is None:
            raise ValueError(f"Invalid duration: {time_amount!r}")

        amounts = list(self._amount.finditer(time_amount))
        if len(amounts) < 1:
            raise ValueError(f"Invalid duration: {time_amount!r}")

        return float(
            timedelta(
                **{
                    self._units.get(
                        m.group("unit").lower(),
                        "seconds"
                    ): float(
                        m.group("val")
                    )
                    for m in amounts
                }
            ).total_seconds()
        )
