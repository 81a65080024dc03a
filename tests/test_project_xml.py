from pathlib import Path
import textwrap
import xml.etree.ElementTree as ET

import pytest

import core.project_xml as project_xml
from core.consts import DEFAULT_RESTING_TIME, DEFAULT_WORKING_TIME
from core.project_xml import (
    ProjectFileError,
    active_task_times,
    build_project_document,
    load_project_from_xml,
    save_project_to_xml,
)
from core.tomato import Tomato, TomatoState
from domain.models import TaskData, TaskTime


def write_project(path: Path, body: str) -> Path:
    path.write_text(textwrap.dedent(body).strip(), encoding="utf-8")
    return path


def tree_of(tomato: Tomato):
    def node(task):
        return (task.data, [node(child) for child in task.children])

    return [node(task) for task in tomato.root_task.children]


def build_sample(tomato: Tomato) -> None:
    tomato.set_working_time(1800)
    tomato.set_resting_time(420)
    a = tomato.add_task(
        tomato.root_task_id,
        TaskData(
            title="Write report",
            desc="Line one\nLine <two> & \"three\"",
            time_limit=3600,
            times=[TaskTime(1000, 1600), TaskTime(2000, 2300)],
        ),
    )
    tomato.add_task(a, TaskData(title="Outline", is_completed=True))
    tomato.add_task(a, TaskData(title="Draft", times=[TaskTime(5000, 5100)]))
    tomato.add_task(tomato.root_task_id, TaskData(title="Inbox"))


def test_round_trip(tmp_path: Path, tomato: Tomato) -> None:
    build_sample(tomato)
    path = tmp_path / "project.xml"

    save_project_to_xml(str(path), tomato)
    loaded = Tomato()
    load_project_from_xml(str(path), loaded)

    assert loaded.working_time == 1800
    assert loaded.resting_time == 420
    assert tree_of(loaded) == tree_of(tomato)


def test_saved_document_layout(tmp_path: Path, tomato: Tomato) -> None:
    build_sample(tomato)
    path = tmp_path / "project.xml"
    save_project_to_xml(str(path), tomato)

    text = path.read_text(encoding="utf-8")
    assert "<!DOCTYPE tomatotaskstracker-1.0>" in text
    assert '<Settings workingtime="1800" restingtime="420"' in text
    assert 'isdone="1"' in text


def test_empty_project_round_trip(tmp_path: Path, tomato: Tomato) -> None:
    path = tmp_path / "empty.xml"
    save_project_to_xml(str(path), tomato)
    loaded = Tomato()
    load_project_from_xml(str(path), loaded)

    assert loaded.tasks() == []
    assert loaded.working_time == DEFAULT_WORKING_TIME


def test_invalid_intervals_are_dropped(tmp_path: Path) -> None:
    path = write_project(
        tmp_path / "p.xml",
        """
        <TomatoTaskTracker>
          <RootTask>
            <Task title="a">
              <Time starttime="0" endtime="100"/>
              <Time starttime="10" endtime="-5"/>
              <Time starttime="abc" endtime="100"/>
              <Time endtime="100"/>
            </Task>
          </RootTask>
        </TomatoTaskTracker>
        """,
    )
    tomato = Tomato()
    load_project_from_xml(str(path), tomato)

    assert tomato.tasks()[0].data.times == []


def test_missing_attributes_use_defaults(tmp_path: Path) -> None:
    path = write_project(
        tmp_path / "p.xml",
        """
        <TomatoTaskTracker>
          <Settings workingtime="900"/>
          <RootTask>
            <Task/>
          </RootTask>
        </TomatoTaskTracker>
        """,
    )
    tomato = Tomato()
    load_project_from_xml(str(path), tomato)

    assert tomato.working_time == 900
    assert tomato.resting_time == DEFAULT_RESTING_TIME
    assert tomato.tasks()[0].data == TaskData()


@pytest.mark.parametrize("value", ["", "soon", "0", "-60"])
def test_unusable_settings_fall_back_to_defaults(tmp_path: Path, value: str) -> None:
    path = write_project(
        tmp_path / "p.xml",
        f"""
        <TomatoTaskTracker>
          <Settings workingtime="{value}" restingtime="{value}"/>
        </TomatoTaskTracker>
        """,
    )
    tomato = Tomato(working_time=60, resting_time=60)
    load_project_from_xml(str(path), tomato)

    assert tomato.working_time == DEFAULT_WORKING_TIME
    assert tomato.resting_time == DEFAULT_RESTING_TIME


def test_unknown_elements_are_ignored(tmp_path: Path) -> None:
    path = write_project(
        tmp_path / "p.xml",
        """
        <TomatoTaskTracker version="2">
          <!-- comment -->
          <Plugins><Plugin name="x"/></Plugins>
          <RootTask>
            <Label>skip me</Label>
            <Task title="parent" timelimit="60" isdone="1" color="red">
              <Note>ignored</Note>
              <Task title="child"/>
            </Task>
            <Task title="second"/>
          </RootTask>
        </TomatoTaskTracker>
        """,
    )
    tomato = Tomato()
    load_project_from_xml(str(path), tomato)

    assert [t.data.title for t in tomato.tasks()] == ["parent", "child", "second"]
    parent = tomato.root_task.children[0]
    assert parent.data.time_limit == 60
    assert parent.data.is_completed is True
    assert [c.data.title for c in parent.children] == ["child"]


def test_root_tag_mismatch(tmp_path: Path) -> None:
    path = write_project(
        tmp_path / "p.xml",
        """
        <SomethingElse>
          <Settings workingtime="900" restingtime="300"/>
          <RootTask><Task title="a"/></RootTask>
        </SomethingElse>
        """,
    )
    with pytest.raises(ProjectFileError) as exc:
        load_project_from_xml(str(path), Tomato())

    assert exc.value.reason == "incorrect file format"


def test_malformed_document_aborts(tmp_path: Path) -> None:
    path = write_project(
        tmp_path / "p.xml",
        """
        <TomatoTaskTracker>
          <RootTask>
            <Task title="a"></Time>
          </RootTask>
        </TomatoTaskTracker>
        """,
    )
    with pytest.raises(ProjectFileError) as exc:
        load_project_from_xml(str(path), Tomato())

    assert exc.value.reason


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ProjectFileError):
        load_project_from_xml(str(tmp_path / "missing.xml"), Tomato())


def test_unwritable_destination(tmp_path: Path, tomato: Tomato) -> None:
    with pytest.raises(ProjectFileError):
        save_project_to_xml(str(tmp_path / "no_such_dir" / "p.xml"), tomato)


def test_active_task_interval_is_saved_while_working(
    tmp_path: Path, tomato: Tomato, clock
) -> None:
    task_id = tomato.add_task(
        tomato.root_task_id, TaskData(title="a", times=[TaskTime(100, 200)])
    )
    tomato.set_active_task(task_id)
    start = clock.now
    tomato.start_working()
    clock.advance(300)

    path = tmp_path / "p.xml"
    save_project_to_xml(str(path), tomato)
    loaded = Tomato()
    load_project_from_xml(str(path), loaded)

    assert loaded.tasks()[0].data.times == [
        TaskTime(100, 200),
        TaskTime(start, start + 300),
    ]
    # live state is not changed by saving
    assert tomato.task(task_id).data.times == [TaskTime(100, 200)]


def test_active_task_times_when_overworking(tomato: Tomato, clock) -> None:
    task_id = tomato.add_task(tomato.root_task_id, TaskData(title="a"))
    tomato.set_working_time(60)
    tomato.set_active_task(task_id)
    tomato.start_working()
    clock.advance(90)
    tomato.tick()

    assert active_task_times(tomato) == {task_id: TaskTime(clock.now - 90, clock.now)}


def test_no_active_task_interval_when_idle_or_resting(tomato: Tomato, clock) -> None:
    task_id = tomato.add_task(tomato.root_task_id, TaskData(title="a"))
    tomato.set_active_task(task_id)
    assert active_task_times(tomato) == {}

    tomato.start_working()
    assert active_task_times(tomato) == {}  # nothing accrued yet

    clock.advance(30)
    tomato.start_resting()
    clock.advance(30)
    assert active_task_times(tomato) == {}


def test_extra_interval_follows_recorded_ones(tomato: Tomato) -> None:
    a = tomato.add_task(tomato.root_task_id, TaskData(title="a", times=[TaskTime(1, 2)]))
    tomato.add_task(a, TaskData(title="child"))

    elem = build_project_document(tomato, {a: TaskTime(5, 9)})
    task_elem = elem.find("RootTask/Task")

    assert [child.tag for child in task_elem] == ["Time", "Time", "Task"]
    assert task_elem[1].get("starttime") == "5"
    assert task_elem[1].get("endtime") == "9"


def test_single_task_round_trip(tmp_path: Path, tomato: Tomato) -> None:
    tomato.add_task(
        tomato.root_task_id,
        TaskData(title="only", time_limit=120, times=[TaskTime(10, 20)]),
    )
    path = tmp_path / "p.xml"

    save_project_to_xml(str(path), tomato)
    loaded = Tomato()
    load_project_from_xml(str(path), loaded)

    assert tree_of(loaded) == tree_of(tomato)
    assert len(loaded.tasks()) == 1


def test_deep_nesting_round_trip(tmp_path: Path, tomato: Tomato) -> None:
    parent = tomato.root_task_id
    for depth in range(4):
        first = tomato.add_task(parent, TaskData(title=f"level{depth}-a"))
        tomato.add_task(parent, TaskData(title=f"level{depth}-b"))
        parent = first
    path = tmp_path / "p.xml"

    save_project_to_xml(str(path), tomato)
    loaded = Tomato()
    load_project_from_xml(str(path), loaded)

    assert tree_of(loaded) == tree_of(tomato)
    assert [t.data.title for t in loaded.tasks()] == [
        t.data.title for t in tomato.tasks()
    ]


def test_overworking_save_writes_one_extra_interval(
    tmp_path: Path, tomato: Tomato, clock
) -> None:
    task_id = tomato.add_task(
        tomato.root_task_id,
        TaskData(title="a", times=[TaskTime(100, 200), TaskTime(300, 400)]),
    )
    tomato.set_working_time(60)
    tomato.set_active_task(task_id)
    start = clock.now
    tomato.start_working()
    clock.advance(90)
    tomato.tick()
    assert tomato.state == TomatoState.OVER_WORKING

    path = tmp_path / "p.xml"
    save_project_to_xml(str(path), tomato)

    task_elem = ET.parse(str(path)).getroot().find("RootTask/Task")
    times = task_elem.findall("Time")
    assert len(times) == 3
    assert times[-1].get("starttime") == str(start)
    assert times[-1].get("endtime") == str(start + 90)


class ShortWriteFile:
    def __init__(self, path, mode):
        self.path = path
        self.mode = mode

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def write(self, data: bytes) -> int:
        return len(data) - 1


def test_short_write_is_reported(
    tmp_path: Path, tomato: Tomato, monkeypatch: pytest.MonkeyPatch
) -> None:
    tomato.add_task(tomato.root_task_id, TaskData(title="a"))
    monkeypatch.setattr(project_xml, "open", ShortWriteFile, raising=False)

    with pytest.raises(ProjectFileError) as exc:
        save_project_to_xml(str(tmp_path / "p.xml"), tomato)

    assert "Short write" in exc.value.reason


@pytest.mark.parametrize(
    "title, desc",
    [("bell\x07", ""), ("ok", "null\x00byte"), ("ok", "\ufffe")],
)
def test_text_not_representable_in_xml_is_rejected(
    tmp_path: Path, tomato: Tomato, title: str, desc: str
) -> None:
    path = tmp_path / "p.xml"
    path.write_text("previous contents", encoding="utf-8")
    tomato.add_task(tomato.root_task_id, TaskData(title=title, desc=desc))

    with pytest.raises(ProjectFileError):
        save_project_to_xml(str(path), tomato)

    assert path.read_text(encoding="utf-8") == "previous contents"


def test_tabs_newlines_and_astral_text_are_kept(tmp_path: Path, tomato: Tomato) -> None:
    tomato.add_task(
        tomato.root_task_id, TaskData(title="tab\there", desc="a\r\nb \U0001F345")
    )
    path = tmp_path / "p.xml"

    save_project_to_xml(str(path), tomato)
    loaded = Tomato()
    load_project_from_xml(str(path), loaded)

    assert loaded.tasks()[0].data.title == "tab\there"
    assert loaded.tasks()[0].data.desc == "a\r\nb \U0001F345"


def test_default_namespace_document_loads(tmp_path: Path) -> None:
    path = write_project(
        tmp_path / "p.xml",
        """
        <TomatoTaskTracker xmlns="urn:tomato">
          <Settings workingtime="900" restingtime="120"/>
          <RootTask>
            <Task title="parent">
              <Time starttime="10" endtime="20"/>
              <Task title="child"/>
            </Task>
          </RootTask>
        </TomatoTaskTracker>
        """,
    )
    tomato = Tomato()
    load_project_from_xml(str(path), tomato)

    assert tomato.working_time == 900
    assert tomato.resting_time == 120
    assert [t.data.title for t in tomato.tasks()] == ["parent", "child"]
    assert tomato.tasks()[0].data.times == [TaskTime(10, 20)]
