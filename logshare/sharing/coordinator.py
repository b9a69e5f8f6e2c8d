"""ExportCoordinator — debounced, single-flight export state machine.

States:
  IDLE                          no job running
  PREPARING                     one job reading/encoding in the background
  PREPARING_WITH_PENDING_RERUN  a trigger arrived mid-job; rerun on completion

Option changes are debounced; when they settle they are saved and a prepare
is requested. Only one job runs at a time. A job that finishes with a rerun
pending (or whose options are no longer current) has its artifact discarded,
so observers never see a stale result. The next job starts immediately with
the latest options, unless an option change is still debouncing; then the
settled options start it.

Every job gets its own temporary directory. On failure it is removed before
the error is published; on success it belongs to the ArtifactHandle, which
removes it on hand-off completion or when superseded.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from config.settings import ShareConfig
from logshare import pipeline
from logshare.analysis.filter_builder import FilterBuilder
from logshare.clients.log_store import LogStore
from logshare.errors import ArtifactUnavailableError, FilesystemError, ShareError
from logshare.io.settings_store import SharingSettingsStore
from logshare.io.temporary import TemporaryDirectory
from logshare.models.export import ExportJob
from logshare.models.options import ExportOptions
from logshare.rendering.text_renderer import TextRenderer
from logshare.sharing.artifact import ArtifactHandle
from logshare.sharing.debounce import Debouncer, TimerFactory
from logshare.sharing.presenter import Presenter

logger = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], None]], None]
Observer = Callable[["ShareState"], None]


class CoordinatorState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    PREPARING_WITH_PENDING_RERUN = "preparingWithPendingRerun"


@dataclass(frozen=True)
class ShareState:
    """Observable snapshot of the coordinator."""

    is_preparing: bool = False
    result: Optional[ArtifactHandle] = None
    error_message: Optional[str] = None

    @property
    def status_text(self) -> str:
        if self.is_preparing:
            return "Preparing for Sharing..."
        if self.result is not None:
            return f"Shared File Size: {self.result.formatted_file_size}"
        return self.error_message or "Unavailable"

    @property
    def can_share(self) -> bool:
        return not self.is_preparing and self.result is not None


def _run_inline(fn: Callable[[], None]) -> None:
    fn()


class ExportCoordinator:
    """Owns export jobs, their temporary artifacts and the published ShareState.

    Args:
        config: Runtime configuration (debounce interval, naming, temp root).
        settings: Persisted-options collaborator; initial options load from it.
        executor: Background executor for read/encode work. A private
            single-worker ThreadPoolExecutor is created (and shut down on
            close) when None.
        dispatch: Runs state updates on the foreground context. Defaults to
            running them inline on whichever thread completes the work.
        timer_factory: ``threading.Timer``-compatible factory for debouncing.
        filter_builder: Predicate builder (injectable clock/zone).
        renderer: Text renderer for text exports.
        options: Initial options; loaded from ``settings`` (or defaults) when None.
    """

    def __init__(
        self,
        config: Optional[ShareConfig] = None,
        settings: Optional[SharingSettingsStore] = None,
        executor: Optional[Executor] = None,
        dispatch: Optional[Dispatch] = None,
        timer_factory: Optional[TimerFactory] = None,
        filter_builder: Optional[FilterBuilder] = None,
        renderer: Optional[TextRenderer] = None,
        options: Optional[ExportOptions] = None,
    ) -> None:
        self.config = config or ShareConfig()
        self._settings = settings
        if options is None:
            options = settings.load() if settings is not None else ExportOptions()
        self._options = options

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="logshare-export"
        )
        self._dispatch = dispatch or _run_inline
        self._filter_builder = filter_builder or FilterBuilder()
        self._renderer = renderer or TextRenderer(
            separator=self.config.text_block_separator,
            body_limit=self.config.text_body_limit,
        )

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._store: Optional[LogStore] = None
        self._state = CoordinatorState.IDLE
        self._generation = 0
        self._active_job: Optional[ExportJob] = None
        self._result: Optional[ArtifactHandle] = None
        self._error_message: Optional[str] = None
        self._settle_pending = False
        # A stale result was dropped; the settled options start the next job
        self._awaiting_settle = False
        self._closed = False
        self._observers: List[Observer] = []

        self._debouncer = Debouncer(
            self.config.debounce_seconds,
            self._options_settled,
            timer_factory=timer_factory or threading.Timer,
        )

    def __enter__(self) -> "ExportCoordinator":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── Observable surface ────────────────────────────────────────────────────

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def share_state(self) -> ShareState:
        with self._lock:
            return ShareState(
                is_preparing=self._state is not CoordinatorState.IDLE or self._awaiting_settle,
                result=self._result,
                error_message=self._error_message,
            )

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` for every ShareState change.

        The current state is delivered immediately. Returns an unsubscribe callable.
        """
        with self._lock:
            self._observers.append(observer)
            observer(self.share_state)

        def _unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return _unsubscribe

    def _publish_locked(self) -> None:
        state = self.share_state
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception as exc:
                logger.exception("ShareState observer %r failed: %s", observer, exc)

    # ── Options ───────────────────────────────────────────────────────────────

    def current_options_snapshot(self) -> ExportOptions:
        with self._lock:
            return self._options

    def update_options(self, options: ExportOptions) -> None:
        """Make ``options`` current and schedule a debounced re-export."""
        with self._lock:
            if self._closed:
                return
            self._options = options
            self._settle_pending = True
        self._debouncer.submit(options)

    def _options_settled(self, options: ExportOptions) -> None:
        self._dispatch(lambda: self._apply_settled_options(options))

    def _apply_settled_options(self, options: ExportOptions) -> None:
        if self._settings is not None:
            self._settings.save(options)
        with self._lock:
            self._settle_pending = False
            self._awaiting_settle = False
            active = self._active_job
            if (
                self._state is CoordinatorState.PREPARING
                and active is not None
                and active.options == options
            ):
                logger.debug("Settled options already being exported (job %d)", active.generation)
            else:
                self.prepare()
            self._idle.notify_all()

    # ── Job lifecycle ─────────────────────────────────────────────────────────

    def display(self, store: LogStore) -> None:
        """Attach ``store`` and export it immediately. Re-attaching is a no-op."""
        with self._lock:
            if store is self._store:
                return
            self._store = store
            logger.info("Displaying store %r", store)
            self.prepare()

    def prepare(self) -> None:
        """Start an export now, or mark a rerun if one is already running."""
        with self._lock:
            if self._closed or self._store is None:
                return
            if self._state is CoordinatorState.IDLE:
                self._start_job_locked()
            elif self._state is CoordinatorState.PREPARING:
                logger.debug("Export in progress; rerun requested")
                self._state = CoordinatorState.PREPARING_WITH_PENDING_RERUN

    def _start_job_locked(self) -> None:
        self._discard_result_locked()
        self._awaiting_settle = False
        self._error_message = None
        self._generation += 1
        options = self._options
        store = self._store

        try:
            predicate = self._filter_builder.build(options, store.current_session_id())
        except Exception as exc:
            logger.exception("Could not build filter for job %d: %s", self._generation, exc)
            self._error_message = str(exc) or exc.__class__.__name__
            self._state = CoordinatorState.IDLE
            self._active_job = None
            self._publish_locked()
            self._idle.notify_all()
            return

        job = ExportJob(options=options, generation=self._generation, predicate=predicate)
        self._active_job = job
        self._state = CoordinatorState.PREPARING
        logger.info("Export job %d started (%s)", job.generation, options.to_dict())
        self._publish_locked()
        self._executor.submit(self._perform, job, store)

    def _discard_result_locked(self) -> None:
        handle = self._result
        self._result = None
        if handle is not None:
            handle.release()

    def _perform(self, job: ExportJob, store: LogStore) -> None:
        """Background body of one job: acquire directory, export, release on failure."""
        directory: Optional[TemporaryDirectory] = None
        try:
            directory = TemporaryDirectory(self.config.temp_root, self.config.temp_dir_prefix)
            handle = pipeline.prepare_artifact(
                job, store, directory, config=self.config, renderer=self._renderer
            )
        except Exception as exc:
            if directory is not None:
                directory.remove()
            if isinstance(exc, ShareError):
                logger.error("Export job %d failed: %s", job.generation, exc)
            else:
                logger.exception("Export job %d raised unexpected exception: %s", job.generation, exc)
            message = str(exc) or exc.__class__.__name__
            self._dispatch(lambda: self._finish(job, None, message))
            return
        self._dispatch(lambda: self._finish(job, handle, None))

    def _finish(
        self,
        job: ExportJob,
        handle: Optional[ArtifactHandle],
        error_message: Optional[str],
    ) -> None:
        with self._lock:
            self._active_job = None
            if self._closed:
                if handle is not None:
                    handle.release()
                self._state = CoordinatorState.IDLE
                self._idle.notify_all()
                return

            stale = job.options != self._options
            if self._state is CoordinatorState.PREPARING_WITH_PENDING_RERUN or stale:
                if handle is not None:
                    handle.release()
                self._state = CoordinatorState.IDLE
                if self._settle_pending:
                    # The debouncer delivers the final options and calls prepare()
                    logger.info(
                        "Discarding job %d result; waiting for option changes to settle",
                        job.generation,
                    )
                    self._awaiting_settle = True
                    self._publish_locked()
                    self._idle.notify_all()
                    return
                logger.info(
                    "Discarding job %d result (%s); rerunning with latest options",
                    job.generation,
                    "stale options" if stale else "rerun requested",
                )
                self._start_job_locked()
                return

            if handle is not None:
                handle.on_released = self._artifact_released
            self._result = handle
            self._error_message = error_message
            self._state = CoordinatorState.IDLE
            logger.info(
                "Export job %d finished: %s",
                job.generation,
                handle if handle is not None else f"error: {error_message}",
            )
            self._publish_locked()
            self._idle.notify_all()

    def _artifact_released(self, handle: ArtifactHandle) -> None:
        with self._lock:
            if self._result is handle:
                self._result = None
                self._publish_locked()

    # ── Hand-off ──────────────────────────────────────────────────────────────

    def share(self, presenter: Presenter) -> bool:
        """Hand the current artifact to ``presenter``.

        Only the last completed, still-available artifact can be shared; while a
        job is preparing there is nothing to share. A presenter that fails to
        write its copy still releases the artifact.

        Returns:
            True if the hand-off ran, False if nothing was available or the
            presenter failed.
        """
        with self._lock:
            if self._state is not CoordinatorState.IDLE:
                return False
            handle = self._result
        if handle is None:
            return False
        try:
            handle.hand_off(presenter)
        except ArtifactUnavailableError as exc:
            logger.warning("Share skipped: %s", exc)
            return False
        except FilesystemError as exc:
            logger.error("Share failed: %s", exc)
            return False
        return True

    # ── Waiting and teardown ──────────────────────────────────────────────────

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no job is running and no option change is waiting to settle.

        Returns:
            False if ``timeout`` elapsed first.
        """
        with self._idle:
            return self._idle.wait_for(
                lambda: self._state is CoordinatorState.IDLE and not self._settle_pending,
                timeout,
            )

    def close(self) -> None:
        """Cancel pending work, release the live artifact and stop the executor."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._settle_pending = False
            self._awaiting_settle = False
            self._debouncer.cancel()
            self._discard_result_locked()
            self._idle.notify_all()
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        logger.debug("Coordinator closed")
