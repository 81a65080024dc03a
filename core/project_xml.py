# -*- coding: utf-8 -*-
"""
Project file persistence (XML).

    <!DOCTYPE tomatotaskstracker-1.0>
    <TomatoTaskTracker>
      <Settings workingtime="1500" restingtime="300"/>
      <RootTask>
        <Task title="..." desc="..." timelimit="0" isdone="0">
          <Time starttime="..." endtime="..."/>
          <Task ...>...</Task>
        </Task>
      </RootTask>
    </TomatoTaskTracker>

Loading is permissive: unknown elements are skipped and missing or broken
attributes fall back to defaults. A document that is not well-formed XML,
or whose root element is not TomatoTaskTracker, is rejected as a whole.
"""

import re
import xml.etree.ElementTree as ET
from typing import Dict, List, Mapping, Optional

from core.consts import DEFAULT_RESTING_TIME, DEFAULT_WORKING_TIME
from core.tomato import WORKING_STATES, Tomato
from domain.models import Task, TaskData, TaskTime

DOC_TYPE = "tomatotaskstracker-1.0"
NS_PROJECT = "TomatoTaskTracker"
NS_SETTINGS = "Settings"
NS_ROOT_TASK = "RootTask"
NS_TASK = "Task"
NS_TASK_TIME = "Time"

ATTR_WORKING_TIME = "workingtime"
ATTR_RESTING_TIME = "restingtime"
ATTR_START_TIME = "starttime"
ATTR_END_TIME = "endtime"
ATTR_TITLE = "title"
ATTR_DESC = "desc"
ATTR_TIME_LIMIT = "timelimit"
ATTR_IS_DONE = "isdone"

_XML_HEADER = (
    '<?xml version="1.0" encoding="utf-8"?>\n' f"<!DOCTYPE {DOC_TYPE}>\n"
).encode("utf-8")

# characters outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(
    r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)


class ProjectFileError(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


# ---------- tolerant attribute lookup ----------
def _attr(elem: ET.Element, name: str, default: str = "") -> str:
    return elem.get(name, default)


def _int_attr(elem: ET.Element, name: str, default: int = 0) -> int:
    try:
        return int(elem.get(name, "").strip())
    except ValueError:
        return default


def _local_name(tag: str) -> str:
    # "{uri}Task" -> "Task"
    return tag.rsplit("}", 1)[-1]


def _child_elements(elem: ET.Element, tag: str):
    for child in elem:
        if _local_name(child.tag) == tag:
            yield child


# ---------- save ----------
def active_task_times(tomato: Tomato) -> Dict[int, TaskTime]:
    """
    Time accrued on the active task that is not yet part of its recorded
    intervals. Non-empty only while working.
    """
    if tomato.active_task_id is None or tomato.state not in WORKING_STATES:
        return {}
    task_time = tomato.calc_active_task_time()
    if task_time.is_empty:
        return {}
    return {tomato.active_task_id: task_time}


def _append_time_elem(parent: ET.Element, task_time: TaskTime) -> None:
    ET.SubElement(
        parent,
        NS_TASK_TIME,
        {ATTR_START_TIME: str(task_time.start), ATTR_END_TIME: str(task_time.end)},
    )


def _append_task_elem(
    parent: ET.Element, task: Task, extra_times: Mapping[int, TaskTime]
) -> None:
    elem = ET.SubElement(
        parent,
        NS_TASK,
        {
            ATTR_TITLE: task.data.title,
            ATTR_DESC: task.data.desc,
            ATTR_TIME_LIMIT: str(task.data.time_limit),
            ATTR_IS_DONE: "1" if task.data.is_completed else "0",
        },
    )

    for task_time in task.data.times:
        _append_time_elem(elem, task_time)

    extra = extra_times.get(task.id)
    if extra is not None:
        _append_time_elem(elem, extra)

    for child in task.children:
        _append_task_elem(elem, child, extra_times)


def build_project_document(
    tomato: Tomato, extra_times: Optional[Mapping[int, TaskTime]] = None
) -> ET.Element:
    extra_times = extra_times or {}

    project_elem = ET.Element(NS_PROJECT)
    ET.SubElement(
        project_elem,
        NS_SETTINGS,
        {
            ATTR_WORKING_TIME: str(tomato.working_time),
            ATTR_RESTING_TIME: str(tomato.resting_time),
        },
    )

    root_elem = ET.SubElement(project_elem, NS_ROOT_TASK)
    for task in tomato.root_task.children:
        _append_task_elem(root_elem, task, extra_times)

    return project_elem


def project_to_bytes(project_elem: ET.Element) -> bytes:
    ET.indent(project_elem, space=" ")
    body = ET.tostring(project_elem, encoding="utf-8", xml_declaration=False)
    return _XML_HEADER + body + b"\n"


def check_xml_text(tomato: Tomato) -> None:
    """Reject task text that XML 1.0 cannot carry, before anything is written."""
    for task in tomato.tasks():
        fields = (("title", task.data.title), ("description", task.data.desc))
        for field_name, text in fields:
            m = _INVALID_XML_CHARS.search(text)
            if m:
                raise ProjectFileError(
                    f"Task '{task.data.title}': {field_name} contains a character "
                    f"not allowed in XML (U+{ord(m.group()):04X})"
                )


def save_project_to_xml(file_name: str, tomato: Tomato) -> None:
    check_xml_text(tomato)
    xml_data = project_to_bytes(
        build_project_document(tomato, active_task_times(tomato))
    )

    try:
        with open(file_name, "wb") as output:
            written = output.write(xml_data)
    except OSError as e:
        raise ProjectFileError(str(e))

    if written != len(xml_data):
        raise ProjectFileError(
            f"Short write to {file_name}: {written} of {len(xml_data)} bytes"
        )


# ---------- load ----------
def _task_times_from_elem(task_elem: ET.Element) -> List[TaskTime]:
    times: List[TaskTime] = []
    for elem in _child_elements(task_elem, NS_TASK_TIME):
        start = _int_attr(elem, ATTR_START_TIME, 0)
        end = _int_attr(elem, ATTR_END_TIME, 0)
        if start > 0 and end > 0:
            times.append(TaskTime(start, end))
    return times


def _task_data_from_elem(task_elem: ET.Element) -> TaskData:
    return TaskData(
        title=_attr(task_elem, ATTR_TITLE, ""),
        desc=_attr(task_elem, ATTR_DESC, ""),
        time_limit=_int_attr(task_elem, ATTR_TIME_LIMIT, 0),
        is_completed=_int_attr(task_elem, ATTR_IS_DONE, 0) != 0,
        times=_task_times_from_elem(task_elem),
    )


def _parse_task_elem(task_elem: ET.Element, tomato: Tomato, parent_id: int) -> None:
    task_id = tomato.add_task(parent_id, _task_data_from_elem(task_elem))
    for child in _child_elements(task_elem, NS_TASK):
        _parse_task_elem(child, tomato, task_id)


def _positive_or(value: int, default: int) -> int:
    return value if value > 0 else default


def load_project_from_xml(file_name: str, tomato: Tomato) -> None:
    try:
        project_elem = ET.parse(file_name).getroot()
    except OSError as e:
        raise ProjectFileError(str(e))
    except ET.ParseError as e:
        raise ProjectFileError(f"{file_name}: {e}")

    if _local_name(project_elem.tag) != NS_PROJECT:
        raise ProjectFileError("incorrect file format")

    for elem in project_elem:
        tag = _local_name(elem.tag)
        if tag == NS_SETTINGS:
            tomato.set_working_time(
                _positive_or(
                    _int_attr(elem, ATTR_WORKING_TIME, DEFAULT_WORKING_TIME),
                    DEFAULT_WORKING_TIME,
                )
            )
            tomato.set_resting_time(
                _positive_or(
                    _int_attr(elem, ATTR_RESTING_TIME, DEFAULT_RESTING_TIME),
                    DEFAULT_RESTING_TIME,
                )
            )
        elif tag == NS_ROOT_TASK:
            for task_elem in _child_elements(elem, NS_TASK):
                _parse_task_elem(task_elem, tomato, tomato.root_task_id)
