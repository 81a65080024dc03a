# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable, Optional

from core.tomato import RESTING_STATES, WORKING_STATES, TomatoSnapshot, TomatoState
from services.timer_service import TimerService
from ui.status_projector import (
    StatusIcon,
    render,
    resting_timeout_message,
    working_timeout_message,
)

ICON_COLORS = {
    StatusIcon.IDLE: "#9CA3AF",
    StatusIcon.WORKING: "#4A90E2",  # blue for deep work
    StatusIcon.RESTING: "#7ED321",  # green for rest
    StatusIcon.TIMEOUT: "#EF4444",
}

APP_TITLE = "Tomato task tracker"


class StatusWidget(ttk.Frame):
    def __init__(
        self,
        master,
        timer_service: TimerService,
        on_request_refresh: Callable[[], None],
        tick_interval_ms: int = 1000,
    ):
        super().__init__(master)

        self.timer_service = timer_service
        self.on_request_refresh = on_request_refresh
        self.tick_interval_ms = tick_interval_ms

        self._tick_job = None

        self._build_ui()

        # wire callbacks from service -> widget UI
        self.timer_service.set_on_tick(self._on_tick)
        self.timer_service.set_on_state_change(self._on_state_change)
        self.timer_service.set_on_working_timeout(self._on_working_timeout)
        self.timer_service.set_on_resting_timeout(self._on_resting_timeout)

        # initial render
        self.refresh()
        self._ensure_tick_loop()

    def _build_ui(self):
        self.columnconfigure(1, weight=1)

        self.indicator = tk.Label(self, width=2, bg=ICON_COLORS[StatusIcon.IDLE])
        self.indicator.grid(row=0, column=0, sticky="ns", padx=(0, 8))

        self.status_var = tk.StringVar(value="IDLE")
        ttk.Label(
            self, textvariable=self.status_var, font=("Sans", 20, "bold")
        ).grid(row=0, column=1, sticky="w")

        btns = ttk.Frame(self)
        btns.grid(row=1, column=0, columnspan=2, sticky="w", pady=(8, 0))

        self.work_btn = ttk.Button(btns, text="Work", command=self._work)
        self.rest_btn = ttk.Button(btns, text="Rest", command=self._rest)
        self.stop_btn = ttk.Button(btns, text="Stop", command=self._stop)

        self.work_btn.grid(row=0, column=0, padx=(0, 6))
        self.rest_btn.grid(row=0, column=1, padx=(0, 6))
        self.stop_btn.grid(row=0, column=2)

    def _update_buttons(self, snap: Optional[TomatoSnapshot]):
        if snap is None:
            for b in (self.work_btn, self.rest_btn, self.stop_btn):
                b.state(["disabled"])
            return

        can_work = snap.active_task_id is not None and snap.state not in WORKING_STATES
        self.work_btn.state(["!disabled"] if can_work else ["disabled"])
        self.rest_btn.state(
            ["disabled"] if snap.state in RESTING_STATES else ["!disabled"]
        )
        self.stop_btn.state(
            ["disabled"] if snap.state == TomatoState.IDLE else ["!disabled"]
        )

    def _run_action(self, action: Callable[[], None]):
        try:
            action()
        except ValueError as e:
            messagebox.showerror(APP_TITLE, str(e), parent=self)
        self.on_request_refresh()

    def _work(self):
        self._run_action(self.timer_service.start_working)

    def _rest(self):
        self._run_action(self.timer_service.start_resting)

    def _stop(self):
        self._run_action(self.timer_service.stop)

    # ---- Tick loop (UI-driven) ----
    def _ensure_tick_loop(self):
        if self._tick_job is None:
            self._tick_job = self.after(self.tick_interval_ms, self._tick_once)

    def stop_tick_loop(self):
        if self._tick_job is not None:
            self.after_cancel(self._tick_job)
            self._tick_job = None

    def _tick_once(self):
        self._tick_job = None
        self.timer_service.tick()
        self._tick_job = self.after(self.tick_interval_ms, self._tick_once)

    # ---- Service callbacks ----
    def _on_tick(self, snap: Optional[TomatoSnapshot]):
        self._render(snap)

    def _on_state_change(self, snap: Optional[TomatoSnapshot]):
        self._render(snap)
        self.on_request_refresh()

    def _on_working_timeout(self, snap: TomatoSnapshot):
        self.bell()
        messagebox.showinfo(APP_TITLE, working_timeout_message(), parent=self)

    def _on_resting_timeout(self, snap: TomatoSnapshot):
        self.bell()
        messagebox.showinfo(APP_TITLE, resting_timeout_message(), parent=self)

    def refresh(self):
        self._render(self.timer_service.get_snapshot())

    def _render(self, snap: Optional[TomatoSnapshot]):
        view = render(self.timer_service.project)
        self.status_var.set(view.text)
        self.indicator.config(bg=ICON_COLORS[view.icon])
        self.winfo_toplevel().title(f"{view.text} - {APP_TITLE}")
        self._update_buttons(snap)
