# SPDX-License-Identifier: BUSL-1.1
"""Start a stopped container and follow its setup through the container logs.

The container entrypoint reports progress on its log stream:

    status: <text>          one setup step, reported once per run
    Warning: <text>         non-fatal problem
    Error: <text>           fatal problem, setup aborted
    container_setup_done    setup finished

Logs are polled with ``--since`` from the timestamp taken before the
previous poll, so consecutive polls overlap. Lines seen twice because of the
overlap are absorbed by the StatusLedger.
"""

import sys
import time
from datetime import datetime, timezone

from boxenter.config.resources import STATUS_RUNNING
from boxenter.utils import GREEN, RED, YELLOW, colorize

ERROR_MARKER = "Error:"
WARNING_MARKER = "Warning:"
STATUS_MARKER = "status:"
SETUP_DONE_MARKER = "container_setup_done"

LINE_ERROR = "error"
LINE_WARNING = "warning"
LINE_STATUS = "status"
LINE_DONE = "done"
LINE_IGNORED = "ignored"

STARTING_LABEL = "Starting container..."
LABEL_WIDTH = 40


class StartupError(Exception):
    """The container could not be started or its setup failed.

    ``logs`` holds the container output that explains the failure;
    ``reported`` is True when the triggering line was already printed.
    """
    def __init__(self, message: str, logs: list = None, reported: bool = False):
        super().__init__(message)
        self.logs = list(logs or [])
        self.reported = reported


class StartupTimeout(StartupError):
    """Setup did not report completion within the configured bound."""


def log_timestamp(now: datetime = None) -> str:
    """RFC 3339 timestamp with microseconds and offset, usable as --since."""
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec="microseconds")


def classify_line(line: str) -> tuple:
    """Return (kind, text) for one log line.

    Markers may appear anywhere in the line, after a program name or
    indentation. Shell trace lines (``+ ...``) never count.
    """
    if line.lstrip().startswith("+"):
        return LINE_IGNORED, line
    if ERROR_MARKER in line:
        return LINE_ERROR, line
    if WARNING_MARKER in line:
        return LINE_WARNING, line
    if STATUS_MARKER in line:
        return LINE_STATUS, line.split(STATUS_MARKER, 1)[1].strip()
    if SETUP_DONE_MARKER in line:
        return LINE_DONE, line
    return LINE_IGNORED, line


class StatusLedger:
    """Status texts already reported during one synchronization run."""

    def __init__(self):
        self._seen = {}

    def add(self, text: str) -> bool:
        """Record text; return False if it was already recorded."""
        if text in self._seen:
            return False
        self._seen[text] = None
        return True

    def clear(self):
        self._seen.clear()

    def __contains__(self, text) -> bool:
        return text in self._seen

    def __iter__(self):
        return iter(self._seen)

    def __len__(self) -> int:
        return len(self._seen)


class ProgressReporter:
    """Writes setup progress to a stream: one label per step, then [ OK ]."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stderr

    def _write(self, text: str):
        self.stream.write(text)
        self.stream.flush()

    def _ok(self) -> str:
        return colorize(" [ OK ]", GREEN, self.stream) + "\n"

    def begin(self, label: str = STARTING_LABEL):
        self._write(f"{label:<{LABEL_WIDTH}}\t")

    def step(self, label: str):
        self._write(self._ok() + f"{label:<{LABEL_WIDTH}}\t")

    def warning(self, line: str):
        self._write("\n" + colorize(f" {line}", YELLOW, self.stream))

    def error(self, line: str):
        self._write(colorize(f" {line}", RED, self.stream) + "\n")

    def done(self):
        self._write(self._ok())

    def complete(self):
        self._write("\nContainer Setup Complete!\n")


def consume_log_lines(lines, ledger: StatusLedger, reporter: ProgressReporter) -> bool:
    """Process one batch of log lines in order.

    Returns True once the setup-done marker is seen. Raises StartupError on
    an error line; later lines in the batch are not looked at.
    """
    for line in lines:
        kind, text = classify_line(line)
        if kind == LINE_ERROR:
            reporter.error(line)
            raise StartupError(line, reported=True)
        if kind == LINE_WARNING:
            reporter.warning(line)
        elif kind == LINE_STATUS:
            if ledger.add(text):
                reporter.step(text)
        elif kind == LINE_DONE:
            reporter.done()
            return True
    return False


class StartupSync:
    """Starts one container and blocks until its entrypoint finishes setup."""

    def __init__(self, manager, reporter: ProgressReporter = None,
                 timeout: float = 0.0, poll_interval: float = 0.2,
                 sleep=time.sleep, clock=time.monotonic):
        self.manager = manager
        self.reporter = reporter or ProgressReporter()
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    def start(self) -> str:
        """Start the container and verify it is running. Returns the start cursor."""
        since = log_timestamp()
        self.manager.start()
        status = self.manager.status()
        if status != STATUS_RUNNING:
            raise StartupError(
                f"could not start entrypoint (container status: {status})",
                logs=self.manager.logs(since=since),
            )
        return since

    def wait(self, since: str):
        """Poll the logs from `since` until setup completes or fails."""
        deadline = self._clock() + self.timeout if self.timeout > 0 else None
        ledger = StatusLedger()
        cursor = since
        try:
            while True:
                next_cursor = log_timestamp()
                lines = self.manager.logs(since=cursor)
                if consume_log_lines(lines, ledger, self.reporter):
                    break
                cursor = next_cursor
                if deadline is not None and self._clock() >= deadline:
                    raise StartupTimeout(
                        f"container setup did not complete within {self.timeout:g} seconds"
                    )
                self._sleep(self.poll_interval)
        finally:
            ledger.clear()

    def run(self):
        since = self.start()
        self.reporter.begin()
        self.wait(since)
        self.reporter.complete()
