"""Run orchestration: fan out generation and validation, then analyze and report."""

from __future__ import annotations

import queue
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, wait
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .analysis import ConsistencyAnalyzer, OptimizationAnalyzer
from .config import CompilerConfig
from .errors import ErrorKind, PolygenError, SchemaVersionUnsupported, SpecInvalid, TransientGenerationError
from .failsafe import failed_result, failed_validation, timeout_error
from .generators import Generator
from .logging import TargetLogger, get_logger, target_logger
from .models import EvidenceReport, GenerationError, GenerationResult, ValidationOutcome
from .report import build_report
from .spec.loader import load_specification, parse_specification
from .spec.model import SUPPORTED_SCHEMA_VERSIONS, Specification
from .targets.catalog import Target
from .targets.registry import TargetRegistry
from .validators import CompilationValidator, summarize_validation

# How often the collector wakes to check deadlines and the cancel signal.
_POLL_INTERVAL = 0.05


class RunState(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    VALIDATING = "validating"
    ANALYZING = "analyzing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RunOutcome:
    """Terminal state of one compilation run.

    ``report`` is present for every ``DONE`` run, including partially failed,
    cancelled or timed-out ones; a ``FAILED`` run carries only ``error``.
    """

    state: RunState
    results: Tuple[GenerationResult, ...] = ()
    report: Optional[EvidenceReport] = None
    missing: Tuple[str, ...] = ()
    interruption: Optional[ErrorKind] = None
    error: Optional[GenerationError] = None
    transitions: Tuple[RunState, ...] = ()

    @property
    def complete(self) -> bool:
        return self.report is not None and self.report.complete

    @property
    def exit_code(self) -> int:
        if self.state != RunState.DONE or self.report is None:
            return 2
        if self.complete and all(result.success for result in self.results):
            return 0
        return 1


class _WorkerPool:
    """Fixed set of daemon worker threads fed from one queue.

    Workers are daemons, so a task abandoned after a timeout never keeps the
    interpreter alive at exit (``ThreadPoolExecutor`` joins its workers).
    """

    def __init__(self, workers: int, name: str) -> None:
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._threads = [
            threading.Thread(target=self._work, name=f"{name}-{number}", daemon=True)
            for number in range(workers)
        ]
        for thread in self._threads:
            thread.start()

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        future: Future = Future()
        self._queue.put((future, fn, args))
        return future

    def shutdown(self) -> None:
        """Stop idle workers; a worker stuck in a task exits once the task returns."""
        for _ in self._threads:
            self._queue.put(None)

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                return
            future, fn, args = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = fn(*args)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)


class _Run:
    """Mutable bookkeeping for one run.

    Workers only write their own ``started`` entry; everything else is
    written by the orchestrator thread.
    """

    def __init__(self, targets: Sequence[Target]) -> None:
        self.targets = tuple(targets)
        self.slots: List[Optional[GenerationResult]] = [None] * len(self.targets)
        self.started: List[Optional[float]] = [None] * len(self.targets)
        self.transitions: List[RunState] = [RunState.PENDING]
        self.stop = threading.Event()
        self.interruption: Optional[ErrorKind] = None

    def missing(self) -> Tuple[str, ...]:
        return tuple(target.id for target, slot in zip(self.targets, self.slots) if slot is None)

    def results(self) -> Tuple[GenerationResult, ...]:
        return tuple(slot for slot in self.slots if slot is not None)


class Orchestrator:
    """Coordinates one compilation run per call to :meth:`compile`.

    Each enabled target gets one generation task and, once every generation
    task has settled, one validation task. Results land in a slot array
    indexed by target position, so the collected results always follow the
    selection order. The run deadline, the per-target budget and the cancel
    signal apply to both phases.
    """

    def __init__(
        self,
        registry: TargetRegistry | None = None,
        generator: Generator | None = None,
        validator: CompilationValidator | None = None,
        *,
        config: CompilerConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.registry = registry or TargetRegistry.default()
        self.generator = generator or Generator()
        self.validator = validator or CompilationValidator()
        self.config = config or CompilerConfig()
        self._sleep = sleep
        self._clock = clock
        self.consistency = ConsistencyAnalyzer()
        self.optimization = OptimizationAnalyzer(self.registry)
        self.logger = get_logger("orchestrator")

    # ------------------------------------------------------------------
    # Entry points

    def compile_path(
        self,
        path: Path,
        target_ids: Sequence[str] | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> RunOutcome:
        try:
            spec = load_specification(path)
        except (SpecInvalid, SchemaVersionUnsupported) as exc:
            return self._failed(exc)
        return self.compile(spec, target_ids, cancel=cancel)

    def compile_document(
        self,
        document: Mapping[str, Any],
        target_ids: Sequence[str] | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> RunOutcome:
        """Parse ``document`` and compile it; document errors yield a ``FAILED`` outcome."""
        try:
            spec = parse_specification(document)
        except (SpecInvalid, SchemaVersionUnsupported) as exc:
            return self._failed(exc)
        return self.compile(spec, target_ids, cancel=cancel)

    def compile(
        self,
        spec: Specification,
        target_ids: Sequence[str] | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> RunOutcome:
        """Compile ``spec`` for the selected targets (all registered targets by default).

        Unknown target ids raise :class:`~polygen.errors.TargetNotFound` before
        any work starts. Per-target failures never escape this method.
        """
        if spec.schema_version not in SUPPORTED_SCHEMA_VERSIONS:
            return self._failed(SchemaVersionUnsupported(spec.schema_version, SUPPORTED_SCHEMA_VERSIONS))

        targets = self.registry.select(target_ids or self.config.targets)
        cancel = cancel or threading.Event()
        run = _Run(targets)
        self.logger.info("Compiling %s for %d target(s)", spec.metadata.name, len(targets))

        config = self.config
        deadline = self._clock() + config.run_timeout if config.run_timeout else None
        workers = config.max_workers or max(1, min(8, len(targets)))

        self._transition(run, RunState.GENERATING)
        pool = _WorkerPool(workers, "polygen-generate")
        try:
            self._generate_all(pool, spec, run, cancel, deadline)
        finally:
            pool.shutdown()

        self._transition(run, RunState.VALIDATING)
        pool = _WorkerPool(workers, "polygen-validate")
        try:
            self._validate_all(pool, spec, run, cancel, deadline)
        finally:
            pool.shutdown()

        self._transition(run, RunState.ANALYZING)
        results = run.results()
        missing = run.missing()
        report = build_report(
            spec,
            results,
            self.consistency.analyze(results),
            self.optimization.analyze(results),
            summarize_validation(results),
            missing=missing,
        )
        self._transition(run, RunState.DONE)
        failed = [result.target_id for result in results if not result.success]
        if failed:
            self.logger.warning("Targets failed: %s", ", ".join(failed))
        if missing:
            self.logger.warning("Run incomplete; no result for: %s", ", ".join(missing))
        return RunOutcome(
            state=RunState.DONE,
            results=results,
            report=report,
            missing=missing,
            interruption=run.interruption,
            transitions=tuple(run.transitions),
        )

    # ------------------------------------------------------------------
    # Generation phase

    def _generate_all(
        self,
        pool: _WorkerPool,
        spec: Specification,
        run: _Run,
        cancel: threading.Event,
        deadline: Optional[float],
    ) -> None:
        pending: Dict[Future, int] = {}
        for index, target in enumerate(run.targets):
            future = pool.submit(self._generate_task, spec, target, index, run, cancel)
            pending[future] = index

        def collect(index: int, future: Future) -> None:
            result = future.result()
            if result is not None:
                run.slots[index] = result

        def expire(index: int, budget: float) -> None:
            target = run.targets[index]
            self._log(target).warning("Timed out after %gs", budget)
            run.slots[index] = failed_result(spec, target, timeout_error(target, budget))

        self._settle(run, pending, cancel, deadline, collect, expire)

    def _generate_task(
        self,
        spec: Specification,
        target: Target,
        index: int,
        run: _Run,
        cancel: threading.Event,
    ) -> Optional[GenerationResult]:
        if cancel.is_set() or run.stop.is_set():
            self._log(target).debug("Skipped: run stopped before it started")
            return None
        run.started[index] = self._clock()
        attempt = 0
        while True:
            attempt += 1
            try:
                result = self.generator.generate(spec, target)
            except TransientGenerationError as exc:
                if attempt > self.config.max_retries or cancel.is_set() or run.stop.is_set():
                    self._log(target).warning("Giving up after %d attempt(s): %s", attempt, exc)
                    error = GenerationError(kind=ErrorKind.TRANSIENT_FAILURE, message=str(exc))
                    return failed_result(spec, target, error, attempts=attempt)
                delay = self.config.retry_backoff * (2 ** (attempt - 1))
                self._log(target).info(
                    "Retrying in %.2fs after transient failure (attempt %d): %s",
                    delay,
                    attempt,
                    exc,
                )
                self._sleep(delay)
                continue
            except Exception as exc:
                self._log(target).warning("Generation failed: %s", exc)
                kind = exc.kind if isinstance(exc, PolygenError) else ErrorKind.GENERATION_ERROR
                error = GenerationError(kind=kind, message=str(exc))
                return failed_result(spec, target, error, attempts=attempt)
            if not result.success and result.error is not None:
                self._log(target).warning("Generation failed: %s", result.error.message)
            return replace(result, attempts=attempt)

    # ------------------------------------------------------------------
    # Validation phase

    def _validate_all(
        self,
        pool: _WorkerPool,
        spec: Specification,
        run: _Run,
        cancel: threading.Event,
        deadline: Optional[float],
    ) -> None:
        if run.interruption is not None:
            # Already interrupted: validate what was collected within the grace period only.
            deadline = self._clock() + self.config.cancel_grace
            cancel = threading.Event()

        run.started = [None] * len(run.targets)
        pending: Dict[Future, int] = {}
        for index, result in enumerate(run.slots):
            if result is not None:
                pending[pool.submit(self._validate_task, spec, index, result, run)] = index

        def collect(index: int, future: Future) -> None:
            result = run.slots[index]
            assert result is not None
            run.slots[index] = replace(result, validation=future.result())

        def expire(index: int, budget: float) -> None:
            target = run.targets[index]
            result = run.slots[index]
            assert result is not None
            self._log(target).warning("Validation timed out after %gs", budget)
            timed_out = replace(result, success=False, error=timeout_error(target, budget))
            run.slots[index] = replace(timed_out, validation=failed_validation(timed_out))

        self._settle(run, pending, cancel, deadline, collect, expire)

        for index, result in enumerate(run.slots):
            if result is not None and result.validation is None:
                self._log(run.targets[index]).debug("Dropping unvalidated result")
                run.slots[index] = None

    def _validate_task(
        self, spec: Specification, index: int, result: GenerationResult, run: _Run
    ) -> ValidationOutcome:
        run.started[index] = self._clock()
        return self.validator.validate(spec, run.targets[index], result)

    # ------------------------------------------------------------------
    # Shared collection loop

    def _settle(
        self,
        run: _Run,
        pending: Dict[Future, int],
        cancel: threading.Event,
        deadline: Optional[float],
        collect: Callable[[int, Future], None],
        expire: Callable[[int, float], None],
    ) -> None:
        """Collect tasks until all settle or the run is interrupted.

        A task running longer than ``target_timeout`` is handed to ``expire``
        and no longer waited for.
        """
        budget = self.config.target_timeout
        while pending:
            now = self._clock()
            if cancel.is_set():
                self._interrupt(run, ErrorKind.RUN_CANCELLED)
                break
            if deadline is not None and now >= deadline:
                self._interrupt(run, ErrorKind.RUN_TIMEOUT)
                break
            if budget:
                for future, index in list(pending.items()):
                    started = run.started[index]
                    if started is None or future.done() or now - started < budget:
                        continue
                    future.cancel()
                    del pending[future]
                    expire(index, budget)
                if not pending:
                    break
            done, _ = wait(list(pending), timeout=_POLL_INTERVAL, return_when=FIRST_COMPLETED)
            for future in done:
                index = pending.pop(future)
                if not future.cancelled():
                    collect(index, future)

        if pending:
            self._drain(pending, collect)

    def _drain(self, pending: Dict[Future, int], collect: Callable[[int, Future], None]) -> None:
        """Give in-flight tasks the grace period, then abandon whatever is left."""
        for future in pending:
            future.cancel()
        running = [future for future in pending if not future.cancelled()]
        if running:
            done, _ = wait(running, timeout=self.config.cancel_grace)
            for future in done:
                collect(pending[future], future)

    def _interrupt(self, run: _Run, kind: ErrorKind) -> None:
        if run.interruption is None:
            run.interruption = kind
        run.stop.set()
        self.logger.warning("Run interrupted (%s); waiting for in-flight tasks", kind.value)

    # ------------------------------------------------------------------
    # Helpers

    def _log(self, target: Target) -> TargetLogger:
        return target_logger(self.logger, target.id)

    def _transition(self, run: _Run, state: RunState) -> None:
        self.logger.debug("Run state %s -> %s", run.transitions[-1].value, state.value)
        run.transitions.append(state)

    def _failed(self, exc: PolygenError) -> RunOutcome:
        problems = tuple(getattr(exc, "problems", ()) or ())
        self.logger.error("Run failed: %s", exc)
        return RunOutcome(
            state=RunState.FAILED,
            error=GenerationError(kind=exc.kind, message=str(exc), problems=problems),
            transitions=(RunState.PENDING, RunState.FAILED),
        )


__all__ = ["Orchestrator", "RunOutcome", "RunState"]
