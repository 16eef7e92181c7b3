from enum import Enum
from threading import Event, Lock, RLock, Thread
from typing import Any, Callable, Dict, Optional
import logging
import time

from ..agents.specialist import SpecialistRunner
from ..architect.loop import ToolDispatchLoop
from ..architect.parser import SynthesisError
from ..architect.synthesis import ArchitectPayload, SynthesisApplier
from ..llm.client import OracleError
from .context import MissionContext
from .persistence import MissionPersistence

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


class SchedulerStateError(RuntimeError):
    """Raised when a control operation is not allowed in the current state."""
    pass


class CycleScheduler:
    """
    Drives research cycles: Idle → Running → Completed.

    `start()` runs the first cycle on the caller's thread, then a daemon
    thread fires one cycle every `interval_seconds` until the mission is
    stopped, completes, or fails. A tick that arrives while a cycle is
    still in progress is skipped.

    Every `start()` issues a fresh run token (an Event that `stop()`
    sets). A cycle holds on to the token it began under and abandons
    itself, unsaved, once that token is set, even if the mission has
    been started again in the meantime.

    Lock order is `_cycle_lock` before `_state_lock`.
    """

    def __init__(
        self,
        context: MissionContext,
        specialists: SpecialistRunner,
        architect: ToolDispatchLoop,
        persistence: MissionPersistence,
        applier: Optional[SynthesisApplier] = None,
        interval_seconds: Optional[float] = None,
    ) -> None:
        self.context = context
        self.specialists = specialists
        self.architect = architect
        self.persistence = persistence
        self.applier = applier or SynthesisApplier()
        self.interval_seconds = interval_seconds or context.config.cycle_interval_seconds

        self._state = SchedulerState.IDLE
        self._state_lock = RLock()
        self._cycle_lock = Lock()
        self._run_token = Event()
        self._run_token.set()
        self._ticker: Optional[Thread] = None

        self.last_error: Optional[str] = None
        self.final_proof: Optional[str] = None

    # ============================================================
    # STATE
    # ============================================================

    @property
    def state(self) -> SchedulerState:
        return self._state

    def is_running(self) -> bool:
        return not self._run_token.is_set()

    # ============================================================
    # CONTROL
    # ============================================================

    def start(self) -> None:
        with self._state_lock:
            if self._state is not SchedulerState.IDLE:
                raise SchedulerStateError(f"Cannot start while {self._state.value}")

            self._state = SchedulerState.RUNNING
            self._run_token = token = Event()
            self.last_error = None

        logger.info("[SCHEDULER] Mission started")

        # a cycle cancelled by an earlier stop() may still be unwinding
        self.run_cycle(token, wait=True)

        with self._state_lock:
            if not token.is_set():
                self._arm_ticker(token)

    def stop(self) -> bool:
        with self._state_lock:
            if self._state is not SchedulerState.RUNNING:
                return False

            self._state = SchedulerState.IDLE
            self._run_token.set()

        logger.info("[SCHEDULER] Mission paused")
        return True

    def _require_stopped(self, action: str) -> None:
        if self._state is SchedulerState.RUNNING:
            raise SchedulerStateError(f"Stop the mission before {action}")

    def reset(self, confirm: bool = False) -> bool:
        """Wipe the mission back to the six seed agents. Requires `confirm`."""
        if not confirm:
            return False

        self._require_stopped("resetting it")

        with self._cycle_lock, self._state_lock:
            self._require_stopped("resetting it")

            self.context.reset()
            self.persistence.clear()
            self._state = SchedulerState.IDLE
            self.last_error = None
            self.final_proof = None

        logger.info("[SCHEDULER] Mission reset")
        return True

    def resume_from_snapshot(self, progress: Optional[Callable[[int, int], None]] = None) -> bool:
        """
        Restore the persisted mission and rebuild the semantic index.

        Returns False when there is nothing to resume.
        """
        self._require_stopped("resuming a snapshot")

        with self._cycle_lock, self._state_lock:
            self._require_stopped("resuming a snapshot")

            snapshot = self.persistence.load()
            if snapshot is None:
                logger.info("[SCHEDULER] No snapshot to resume")
                return False

            self.context.restore(snapshot)
            self.context.index.rebuild_all(self.context.graph.all(), progress)
            self._state = SchedulerState.IDLE
            self.last_error = None
            self.final_proof = None

        logger.info("[SCHEDULER] Resumed at cycle %d", self.context.cycle)
        return True

    # ============================================================
    # INTERVAL TIMER
    # ============================================================

    def _arm_ticker(self, token: Event) -> None:
        self._ticker = Thread(
            target=self._tick_loop,
            args=(token,),
            name="metacog-scheduler",
            daemon=True,
        )
        self._ticker.start()

    def _tick_loop(self, token: Event) -> None:
        while not token.wait(self.interval_seconds):
            self.run_cycle(token)

    # ============================================================
    # CYCLE
    # ============================================================

    def run_cycle(self, token: Optional[Event] = None, wait: bool = False) -> bool:
        """
        Run one full cycle for the current run.

        A tick that finds a cycle in progress is skipped unless `wait` is
        set. Returns True when the cycle ran to the end (saved or
        completed).
        """
        if not self._cycle_lock.acquire(blocking=wait):
            logger.info("[SCHEDULER] Previous cycle still running; tick skipped")
            return False

        try:
            with self._state_lock:
                if token is None:
                    token = self._run_token
                current = token is self._run_token and not token.is_set()

            if not current:
                return False

            return self._run_cycle(token)
        except (OracleError, SynthesisError) as e:
            self._halt(token, e)
            return False
        except Exception as e:
            logger.exception("[SCHEDULER] Unexpected cycle failure")
            self._halt(token, e)
            return False
        finally:
            self._cycle_lock.release()

    def _run_cycle(self, token: Event) -> bool:

        def still_running() -> bool:
            return not token.is_set()

        ctx = self.context
        ctx.cycle += 1
        started = time.monotonic()

        logger.info("====================================================")
        logger.info("[SCHEDULER] Cycle %d", ctx.cycle)
        logger.info("====================================================")

        retired = ctx.check_expirations()
        if retired:
            logger.info("[SCHEDULER] Lifespans expired: %s", retired)

        outputs = self.specialists.run_phase(ctx, ctx.agents.runnable(), still_running)
        if not still_running():
            return self._abandon()

        outputs = [o for o in outputs if not o.is_empty]
        if not still_running():
            return self._abandon()

        turn = self.architect.run(ctx, outputs)

        # stop() either lands before this commit or waits for it
        with self._state_lock:
            if not still_running():
                return self._abandon()

            payload = turn.payload
            if payload.is_terminal(ctx.config.completion_marker):
                self._complete(token, payload)
                return True

            self.applier.apply(ctx, payload)
            self.persistence.save(ctx.snapshot())

        logger.info(
            "[SCHEDULER] Cycle %d done in %.2fs | tool_rounds=%d | nodes=%d",
            ctx.cycle,
            time.monotonic() - started,
            turn.rounds,
            len(ctx.graph),
        )
        return True

    def _abandon(self) -> bool:
        logger.info("[SCHEDULER] Cycle %d abandoned (stopped)", self.context.cycle)
        return False

    def _complete(self, token: Event, payload: ArchitectPayload) -> None:
        # caller holds _state_lock
        self.final_proof = payload.final_proof(self.context.config.completion_marker)
        self._state = SchedulerState.COMPLETED
        token.set()

        self.context.journal.architect(payload.summary)
        self.persistence.clear()

        logger.info("[SCHEDULER] BREAKTHROUGH ACHIEVED at cycle %d", self.context.cycle)

    def _halt(self, token: Event, error: Exception) -> None:
        message = str(error) or error.__class__.__name__

        with self._state_lock:
            if token.is_set():
                logger.warning(
                    "[SCHEDULER] Cycle %d failed after stop; ignored: %s",
                    self.context.cycle,
                    message,
                )
                return

            token.set()
            self.last_error = message
            self._state = SchedulerState.IDLE
            self.context.journal.architect(
                f"**FATAL SYNTHESIS ERROR**\n\n{message}\n\nAnalysis has been halted.",
                kind="chaos",
            )

        logger.error("[SCHEDULER] Cycle %d failed; mission halted: %s", self.context.cycle, message)

    # ============================================================
    # STATUS
    # ============================================================

    def status(self) -> Dict[str, Any]:
        ctx = self.context
        signals = ctx.signals()

        return {
            "state": self._state.value,
            "cycle": ctx.cycle,
            "stagnation": signals["stagnation_counter"],
            "chaos_intervention": signals["chaos_intervention"],
            "objective": ctx.objective,
            "research_vector": ctx.research_vector,
            "bias_warning": signals["bias_warning"],
            "recent_focus": signals["recent_focus"],
            "performance": signals["performance"],
            "active_agents": ctx.agents.active_ids(),
            "node_count": len(ctx.graph),
            "last_error": self.last_error,
            "final_proof": self.final_proof,
            "has_snapshot": self.persistence.exists(),
        }
