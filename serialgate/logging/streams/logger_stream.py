import asyncio
import datetime
import io
import os
import pathlib
import sys
import threading
from collections import defaultdict
from typing import (
    Dict,
    TextIO,
    TypeVar,
)

import msgspec

from serialgate.logging.config import LoggingConfig, StreamType
from serialgate.logging.models import Entry, Log

T = TypeVar('T', bound=Entry)


DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id}.{filename}:{function_name}.{line_number} - {error}"
LOGFILE_NAME = "logs.json"


def _write_to_stream(
    stream: TextIO,
    message: str,
):
    stream.write(message + "\n")
    stream.flush()


async def report_log_failure(
    entry: Entry,
    err: Exception,
    filename: str,
    function_name: str,
    line_number: int,
):
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None,
        _write_to_stream,
        sys.stderr,
        entry.to_template(
            ERROR_TEMPLATE,
            context={
                "filename": filename,
                "function_name": function_name,
                "line_number": line_number,
                "error": str(err) or type(err).__name__,
                "thread_id": threading.get_native_id(),
                "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            },
        ),
    )


class LoggerStream:
    def __init__(self) -> None:
        self._init_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

        self._files: Dict[str, io.BufferedWriter] = {}
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

        self._config = LoggingConfig()
        self._initialized: bool = False

    async def initialize(self):

        async with self._init_lock:

            if self._initialized:
                return

            if self._loop is None:
                self._loop = asyncio.get_running_loop()

            self._initialized = True

    async def close(self):
        if self._initialized is False:
            return

        await asyncio.gather(*[
            self._close_file(logfile_path) for logfile_path in list(self._files.keys())
        ])

        self._files.clear()
        self._initialized = False

    async def _close_file(self, logfile_path: str):
        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                self._close_file_at_path,
                logfile_path,
            )

    def _close_file_at_path(self, logfile_path: str):
        if (
            logfile := self._files.get(logfile_path)
        ) and logfile.closed is False:
            logfile.close()

    async def log(
        self,
        entry: T | Log[T],
    ):
        if self._initialized is False:
            await self.initialize()

        entry_or_log = entry
        entry = self._unwrap(entry_or_log)

        if self._config.enabled(entry.level) is False:
            return

        log_file, line_number, function_name = self._caller_of(entry_or_log)

        try:
            if directory := self._config.directory:
                await self._log_to_file(
                    entry_or_log,
                    entry,
                    os.path.join(directory, LOGFILE_NAME),
                    log_file,
                    function_name,
                    line_number,
                )

            else:
                await self._log(
                    entry,
                    log_file,
                    function_name,
                    line_number,
                )

        except Exception as err:
            await report_log_failure(
                entry,
                err,
                log_file,
                function_name,
                line_number,
            )

    async def _log(
        self,
        entry: Entry,
        log_file: str,
        function_name: str,
        line_number: int,
    ):
        await self._loop.run_in_executor(
            None,
            _write_to_stream,
            self._get_stream(self._config.output),
            entry.to_template(
                self._config.template or DEFAULT_TEMPLATE,
                context={
                    "filename": log_file,
                    "function_name": function_name,
                    "line_number": line_number,
                    "thread_id": threading.get_native_id(),
                    "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
                },
            ),
        )

    async def _log_to_file(
        self,
        entry_or_log: T | Log[T],
        entry: Entry,
        logfile_path: str,
        log_file: str,
        function_name: str,
        line_number: int,
    ):
        if isinstance(entry_or_log, Log):
            log = entry_or_log

        else:
            log = Log(
                entry=entry,
                filename=log_file,
                function_name=function_name,
                line_number=line_number,
            )

        async with self._file_locks[logfile_path]:
            if self._files.get(logfile_path) is None or self._files[logfile_path].closed:
                await self._loop.run_in_executor(
                    None,
                    self._open_file,
                    logfile_path,
                )

            await self._loop.run_in_executor(
                None,
                self._write_to_file,
                log,
                logfile_path,
            )

    def _open_file(
        self,
        logfile_path: str,
    ):
        resolved_path = pathlib.Path(logfile_path).absolute().resolve()
        resolved_path.parent.mkdir(parents=True, exist_ok=True)

        self._files[logfile_path] = open(logfile_path, "ab+")

    def _write_to_file(
        self,
        log: Log,
        logfile_path: str,
    ):
        logfile = self._files[logfile_path]
        logfile.write(msgspec.json.encode(log) + b"\n")
        logfile.flush()

    def _unwrap(self, entry_or_log: T | Log[T]) -> Entry:
        if isinstance(entry_or_log, Log):
            return entry_or_log.entry

        return entry_or_log

    def _caller_of(self, entry_or_log: T | Log[T]):
        if isinstance(entry_or_log, Log):
            return (
                entry_or_log.filename,
                entry_or_log.line_number,
                entry_or_log.function_name,
            )

        return self._find_caller()

    def _get_stream(self, stream_type: StreamType) -> TextIO:
        if stream_type == StreamType.STDERR:
            return sys.stderr

        return sys.stdout

    def _find_caller(self):
        """
        Find the stack frame of the caller so that we can note the source
        file name, line number and function name.
        """
        frame = sys._getframe(3)
        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )
