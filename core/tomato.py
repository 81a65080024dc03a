# -*- coding: utf-8 -*-

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from core.consts import DEFAULT_RESTING_TIME, DEFAULT_WORKING_TIME, ROOT_TASK_ID
from core.utils import now_ts
from domain.models import Task, TaskData, TaskTime


class TomatoState(Enum):
    IDLE = "idle"
    WORKING = "working"
    OVER_WORKING = "overworking"
    RESTING = "resting"
    OVER_RESTING = "overresting"


WORKING_STATES = (TomatoState.WORKING, TomatoState.OVER_WORKING)
RESTING_STATES = (TomatoState.RESTING, TomatoState.OVER_RESTING)


@dataclass
class TomatoSnapshot:
    state: TomatoState
    working_time: int
    resting_time: int
    elapsed: int
    active_task_id: Optional[int]


class Tomato:
    """
    Task tree + tomato timer (no Tkinter).

    The tracker is the only owner of task identity: every node, whether
    loaded from a project file or created by the user, goes through
    add_task(). The caller drives time by calling tick() periodically;
    `clock` returns epoch seconds and can be replaced in tests.
    """

    def __init__(
        self,
        working_time: int = DEFAULT_WORKING_TIME,
        resting_time: int = DEFAULT_RESTING_TIME,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._clock = clock or now_ts

        self.working_time = DEFAULT_WORKING_TIME
        self.resting_time = DEFAULT_RESTING_TIME
        self.set_working_time(working_time)
        self.set_resting_time(resting_time)

        self._root = Task(ROOT_TASK_ID, TaskData())
        self._tasks: Dict[int, Task] = {ROOT_TASK_ID: self._root}
        self._next_id = ROOT_TASK_ID + 1

        self.state = TomatoState.IDLE
        self.active_task_id: Optional[int] = None
        self._period_started_at = 0
        self._task_started_at = 0

    def _now(self) -> int:
        return int(self._clock())

    # ----- Settings -----
    def set_working_time(self, seconds: int) -> None:
        seconds = int(seconds)
        if seconds <= 0:
            raise ValueError("Working time must be > 0.")
        self.working_time = seconds

    def set_resting_time(self, seconds: int) -> None:
        seconds = int(seconds)
        if seconds <= 0:
            raise ValueError("Resting time must be > 0.")
        self.resting_time = seconds

    # ----- Task tree -----
    @property
    def root_task(self) -> Task:
        return self._root

    @property
    def root_task_id(self) -> int:
        return ROOT_TASK_ID

    def task(self, task_id: int) -> Task:
        t = self._tasks.get(task_id)
        if t is None:
            raise ValueError(f"Task not found: {task_id}")
        return t

    def has_task(self, task_id: int) -> bool:
        return task_id in self._tasks

    def tasks(self) -> List[Task]:
        """All tasks except the hidden root, depth-first."""
        return list(self._root.walk())[1:]

    def add_task(self, parent_id: int, data: TaskData) -> int:
        parent = self.task(parent_id)
        task_id = self._next_id
        self._next_id += 1

        child = Task(task_id, data.copy(), parent)
        parent.children.append(child)
        self._tasks[task_id] = child
        return task_id

    def _editable(self, task_id: int) -> Task:
        if task_id == ROOT_TASK_ID:
            raise ValueError("Root task cannot be modified.")
        return self.task(task_id)

    def set_task_data(self, task_id: int, data: TaskData) -> None:
        self._editable(task_id).data = data.copy()

    def set_task_completed(self, task_id: int, completed: bool) -> None:
        self._editable(task_id).data.is_completed = bool(completed)

    def remove_task(self, task_id: int) -> None:
        task = self._editable(task_id)
        removed = [t.id for t in task.walk()]

        if self.active_task_id in removed:
            self.stop()
            self.active_task_id = None

        task.parent.children.remove(task)
        for tid in removed:
            del self._tasks[tid]

    # ----- Active task -----
    def is_active_task(self, task_id: int) -> bool:
        return self.active_task_id is not None and self.active_task_id == task_id

    def set_active_task(self, task_id: Optional[int]) -> None:
        if task_id is not None:
            self._editable(task_id)
        if task_id == self.active_task_id:
            return

        if self.state in WORKING_STATES:
            if task_id is None:
                self.stop()
            else:
                # close the interval of the previous task, open one for the new task
                self._commit_active_task_time()

        self.active_task_id = task_id

    # ----- Timer -----
    def snapshot(self) -> TomatoSnapshot:
        return TomatoSnapshot(
            state=self.state,
            working_time=self.working_time,
            resting_time=self.resting_time,
            elapsed=self.calc_tomato_time(),
            active_task_id=self.active_task_id,
        )

    def start_working(self) -> None:
        if self.active_task_id is None:
            raise ValueError("Task must be selected before starting work.")
        if self.state in WORKING_STATES:
            return

        now = self._now()
        self.state = TomatoState.WORKING
        self._period_started_at = now
        self._task_started_at = now

    def start_resting(self) -> None:
        if self.state in RESTING_STATES:
            return
        if self.state in WORKING_STATES:
            self._commit_active_task_time()

        self.state = TomatoState.RESTING
        self._period_started_at = self._now()

    def stop(self) -> None:
        if self.state in WORKING_STATES:
            self._commit_active_task_time()

        self.state = TomatoState.IDLE
        self._period_started_at = 0
        self._task_started_at = 0

    def tick(self) -> bool:
        """
        Returns True if the state changed on this tick.
        """
        elapsed = self.calc_tomato_time()
        if self.state == TomatoState.WORKING and elapsed >= self.working_time:
            self.state = TomatoState.OVER_WORKING
            return True
        if self.state == TomatoState.RESTING and elapsed >= self.resting_time:
            self.state = TomatoState.OVER_RESTING
            return True
        return False

    def calc_tomato_time(self) -> int:
        if self.state == TomatoState.IDLE:
            return 0
        return max(0, self._now() - self._period_started_at)

    def calc_active_task_time(self) -> TaskTime:
        if self.active_task_id is None or self.state not in WORKING_STATES:
            return TaskTime(0, 0)
        return TaskTime(self._task_started_at, self._now())

    def _commit_active_task_time(self) -> None:
        task_time = self.calc_active_task_time()
        if not task_time.is_empty:
            self.task(self.active_task_id).data.times.append(task_time)
        self._task_started_at = self._now()
