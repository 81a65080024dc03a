# -*- coding: utf-8 -*-

from dataclasses import dataclass, field
from typing import Iterator, List, Optional


@dataclass(frozen=True)
class TaskTime:
    start: int  # epoch seconds
    end: int

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start

    @property
    def duration(self) -> int:
        return max(0, self.end - self.start)


@dataclass
class TaskData:
    title: str = ""
    desc: str = ""
    time_limit: int = 0  # seconds, 0 = unlimited
    is_completed: bool = False
    times: List[TaskTime] = field(default_factory=list)

    def copy(self) -> "TaskData":
        return TaskData(
            title=self.title,
            desc=self.desc,
            time_limit=self.time_limit,
            is_completed=self.is_completed,
            times=list(self.times),
        )


class Task:
    """
    Node of the task tree. Created and owned by Tomato only.
    """

    def __init__(self, task_id: int, data: TaskData, parent: Optional["Task"] = None):
        self.id = task_id
        self.data = data
        self.parent = parent
        self.children: List["Task"] = []

    def __repr__(self) -> str:
        return f"Task(id={self.id}, title={self.data.title!r})"

    def walk(self) -> Iterator["Task"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def total_time(self) -> int:
        return sum(t.duration for t in self.data.times)

    def total_time_recursive(self) -> int:
        return sum(t.total_time() for t in self.walk())
