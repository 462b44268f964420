from .logger import Logger as Logger
from .logger_context import LoggerContext as LoggerContext
from .logger_stream import (
    LoggerStream as LoggerStream,
    report_log_failure as report_log_failure,
)
