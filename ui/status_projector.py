# -*- coding: utf-8 -*-

from dataclasses import dataclass
from enum import Enum

from core.project import Project
from core.tomato import TomatoState
from core.utils import format_time


class StatusIcon(Enum):
    IDLE = "idle"
    WORKING = "working"
    RESTING = "resting"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class StatusView:
    text: str
    icon: StatusIcon


def render(project: Project) -> StatusView:
    """Status text and icon for the current timer state of `project`."""
    if not project.is_open:
        return StatusView("IDLE", StatusIcon.IDLE)

    tomato = project.tomato
    state = tomato.state
    elapsed = tomato.calc_tomato_time()

    if state == TomatoState.WORKING:
        return StatusView(
            f"WORKING: {format_time(tomato.working_time - elapsed)}",
            StatusIcon.WORKING,
        )
    if state == TomatoState.OVER_WORKING:
        return StatusView(
            f"OVERWORKING: {format_time(elapsed - tomato.working_time)}",
            StatusIcon.TIMEOUT,
        )
    if state == TomatoState.RESTING:
        return StatusView(
            f"RESTING: {format_time(tomato.resting_time - elapsed)}",
            StatusIcon.RESTING,
        )
    if state == TomatoState.OVER_RESTING:
        return StatusView(
            f"OVERRESTING: {format_time(elapsed - tomato.resting_time)}",
            StatusIcon.TIMEOUT,
        )
    return StatusView(f"IDLE: {format_time(tomato.working_time)}", StatusIcon.IDLE)


def working_timeout_message() -> str:
    return "The work time is over"


def resting_timeout_message() -> str:
    return "The rest time is over"
