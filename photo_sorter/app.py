"""
Main application controller for Photo Sorter.

Ties together configuration, logging, the seen cache, the sync engine,
the folder watcher and the run loop.  The run loop runs on its own
thread; the main thread only translates OS signals into a stop request
and waits for the loop to finish.
"""

import logging
import logging.handlers
import queue
import signal
import sys
import threading
from pathlib import Path

from photo_sorter import __app_name__, __version__
from photo_sorter.config import Config
from photo_sorter.errors import SorterError
from photo_sorter.platform_utils import get_seen_path
from photo_sorter.runloop import RunLoop
from photo_sorter.seen import SeenStore
from photo_sorter.sorter import PhotoSorter
from photo_sorter.watcher import FolderWatcher

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_installed_handlers: list[logging.Handler] = []


def setup_logging(config: Config) -> None:
    """Configure the stderr handler and, if configured, a rotating file log."""
    level = getattr(logging, config.log_level, logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    fmt = logging.Formatter(_LOG_FORMAT)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root_logger.addHandler(sh)
    _installed_handlers.append(sh)

    log_path = config.log_file
    if log_path is None:
        return
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            str(log_path),
            maxBytes=config.max_log_size_mb * 1024 * 1024,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
    except OSError as exc:
        logger.error("Could not open log file %s: %s", log_path, exc)
        return
    fh.setLevel(level)
    fh.setFormatter(fmt)
    root_logger.addHandler(fh)
    _installed_handlers.append(fh)


class App:
    """
    Central orchestrator.

    Resolving the seen-cache location happens here, once; CacheDirError
    propagates to the caller because there is nowhere safe to track state.
    """

    def __init__(self, config: Config, seen_path: Path | None = None) -> None:
        self.config = config
        self.signals: queue.Queue = queue.Queue(maxsize=config.signal_queue_size)
        self.store = SeenStore(seen_path if seen_path is not None else get_seen_path())
        self.sorter = PhotoSorter(
            config.source_folder,
            config.target_folder,
            retry_failed=config.retry_failed,
        )
        self.loop = RunLoop(self.sorter, self.store, self.signals)
        self.watcher = FolderWatcher(config.source_folder, self.signals)
        self.error: BaseException | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        """Run until stopped; return the process exit status."""
        logger.info("%s %s starting.", __app_name__, __version__)
        logger.info(
            "Sorting '%s' into '%s'",
            self.config.source_folder, self.config.target_folder,
        )
        self.store.prepare()

        try:
            self.watcher.start()
        except FileNotFoundError:
            return EXIT_FAILURE
        except OSError as exc:
            logger.error("Could not watch %s: %s", self.config.source_folder, exc)
            return EXIT_FAILURE

        worker = threading.Thread(target=self._run_loop, name="RunLoop", daemon=True)
        self._install_signal_handlers()
        worker.start()
        try:
            while worker.is_alive():
                worker.join(timeout=0.5)
        finally:
            self.watcher.stop()

        if self.error is not None:
            return EXIT_FAILURE
        return EXIT_OK

    def stop(self, reason: str = "stop request") -> None:
        """Request a graceful shutdown after the current pass."""
        self.loop.request_stop(reason)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run_loop(self) -> None:
        try:
            self.loop.run()
        except SorterError as exc:
            self.error = exc
            logger.critical("%s", exc)
        except Exception as exc:
            self.error = exc
            logger.exception("Unexpected error in run loop")

    def _install_signal_handlers(self) -> None:
        # The main thread never holds the queue or event locks, so the
        # handler can request the stop directly
        def _handler(signum, frame):
            self.stop(signal.Signals(signum).name)

        for name in ("SIGTERM", "SIGHUP", "SIGINT"):
            signum = getattr(signal, name, None)
            if signum is not None:
                signal.signal(signum, _handler)
