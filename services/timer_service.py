# -*- coding: utf-8 -*-

import logging
from typing import Callable, Optional

from core.project import Project
from core.tomato import TomatoSnapshot, TomatoState

logger = logging.getLogger(__name__)


class TimerService:
    """
    Orchestrates:
    - Tomato timer state of the open project
    - modified flag of the project
    - Callbacks for UI (tick, state change, timeouts)
    """

    def __init__(self, project: Project):
        self.project = project

        self._on_tick: Optional[Callable[[Optional[TomatoSnapshot]], None]] = None
        self._on_state_change: Optional[Callable[[Optional[TomatoSnapshot]], None]] = None
        self._on_working_timeout: Optional[Callable[[TomatoSnapshot], None]] = None
        self._on_resting_timeout: Optional[Callable[[TomatoSnapshot], None]] = None

    # ----- Callbacks -----
    def set_on_tick(self, fn: Callable[[Optional[TomatoSnapshot]], None]) -> None:
        self._on_tick = fn

    def set_on_state_change(self, fn: Callable[[Optional[TomatoSnapshot]], None]) -> None:
        self._on_state_change = fn

    def set_on_working_timeout(self, fn: Callable[[TomatoSnapshot], None]) -> None:
        self._on_working_timeout = fn

    def set_on_resting_timeout(self, fn: Callable[[TomatoSnapshot], None]) -> None:
        self._on_resting_timeout = fn

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.get_snapshot())

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.get_snapshot())

    # ----- Public API -----
    def get_snapshot(self) -> Optional[TomatoSnapshot]:
        if not self.project.is_open:
            return None
        return self.project.tomato.snapshot()

    def _tomato(self):
        if not self.project.is_open:
            raise ValueError("No project is open.")
        return self.project.tomato

    def set_active_task(self, task_id: Optional[int]) -> None:
        tomato = self._tomato()
        if task_id == tomato.active_task_id:
            return
        tomato.set_active_task(task_id)
        self.project.mark_modified()
        self._emit_state_change()

    def start_working(self) -> None:
        tomato = self._tomato()
        tomato.start_working()
        logger.debug("Working on task %s", tomato.active_task_id)
        self.project.mark_modified()
        self._emit_state_change()
        self._emit_tick()

    def start_resting(self) -> None:
        self._tomato().start_resting()
        logger.debug("Resting")
        self.project.mark_modified()
        self._emit_state_change()
        self._emit_tick()

    def stop(self) -> None:
        self._tomato().stop()
        logger.debug("Stopped")
        self.project.mark_modified()
        self._emit_state_change()
        self._emit_tick()

    def tick(self) -> None:
        """
        Should be called once per second by UI loop.
        """
        if not self.project.is_open:
            self._emit_tick()
            return

        tomato = self.project.tomato
        state_changed = tomato.tick()

        # always emit tick
        self._emit_tick()

        if not state_changed:
            return

        snap = tomato.snapshot()
        self._emit_state_change()
        if snap.state == TomatoState.OVER_WORKING:
            logger.info("Working time is over")
            if self._on_working_timeout:
                self._on_working_timeout(snap)
        elif snap.state == TomatoState.OVER_RESTING:
            logger.info("Resting time is over")
            if self._on_resting_timeout:
                self._on_resting_timeout(snap)
