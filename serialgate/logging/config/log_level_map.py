from typing import Dict

from serialgate.logging.models import LogLevel


class LogLevelMap:
    """Severity rank of each level, following declaration order of ``LogLevel``."""

    def __init__(self) -> None:
        self._levels: Dict[LogLevel, int] = {
            level: rank for rank, level in enumerate(LogLevel)
        }

    def at_least(self, level: LogLevel, threshold: LogLevel) -> bool:
        return self._levels[level] >= self._levels[threshold]
