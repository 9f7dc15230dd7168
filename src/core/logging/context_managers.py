"""Context managers for structured logging."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from core.logging.context import get_log_context, set_log_context
from core.logging.utilities import log_with_context


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(stage="fetch", run_id=run_id):
            # All logs in this block will have stage and run_id
            await fetch_everything()
    """

    def __init__(
        self,
        run_id: Optional[str] = None,
        stage: Optional[str] = None,
        target_module: Optional[str] = None,
    ):
        self.new_context = {
            "run_id": run_id,
            "stage": stage,
            "target_module": target_module,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        for key, value in self.new_context.items():
            if value is not None:
                set_log_context(**{key: value})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        set_log_context(
            run_id=self.old_context.get("run_id", ""),
            stage=self.old_context.get("stage", ""),
            target_module=self.old_context.get("target_module", ""),
        )
        return False


class StageLogContext(LogContext):
    """
    Context manager for one pipeline stage with automatic timing.

    Logs stage completion with its duration and any result fields. Failures
    are not logged here; they propagate to the caller, which reports them once.

    Usage:
        with StageLogContext(logger, "resolve") as ctx:
            notifier = resolve_employee(employees, user_name)
            ctx.set_result(entity="employee")
    """

    def __init__(
        self,
        logger: logging.Logger,
        stage: str,
        run_id: Optional[str] = None,
        target_module: Optional[str] = None,
    ):
        super().__init__(stage=stage, run_id=run_id, target_module=target_module)
        self.logger = logger
        self.stage = stage
        self.start_time: Optional[float] = None
        self.result_context: Dict[str, Any] = {}

    def __enter__(self) -> "StageLogContext":
        super().__enter__()
        self.start_time = time.perf_counter()
        return self

    def set_result(self, **kwargs: Any) -> None:
        """Set result context to be logged on exit."""
        self.result_context.update(kwargs)

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.perf_counter() - self.start_time) * 1000
        self.result_context["duration_ms"] = round(duration_ms, 2)
        if exc_val is None:
            log_with_context(
                self.logger,
                logging.INFO,
                f"Stage complete: {self.stage}",
                **self.result_context,
            )
        super().__exit__(exc_type, exc_val, exc_tb)
        return False


@contextmanager
def log_phase(
    logger: logging.Logger,
    phase: str,
    level: int = logging.DEBUG,
    **context: Any,
):
    """
    Context manager for timing a phase within a stage.

    Completion is logged only when the block finishes without raising.

    Args:
        logger: Logger instance
        phase: Phase name
        level: Log level for completion message
        **context: Additional context fields

    Example:
        with log_phase(logger, "build_forest"):
            forest = build_forest(code_elements)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    start = time.perf_counter()
    yield
    duration_ms = (time.perf_counter() - start) * 1000
    log_with_context(
        logger,
        level,
        f"Phase complete: {phase}",
        phase=phase,
        duration_ms=round(duration_ms, 2),
        **context,
    )
