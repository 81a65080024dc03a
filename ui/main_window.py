# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from typing import Optional

from tkinterweb import HtmlFrame

from core.project import Project
from core.project_xml import ProjectFileError
from core.utils import fmt_hms
from domain.models import TaskData
from services.timer_service import TimerService
from storage.repos import AppStateRepo
from ui.markdown_renderer import MarkdownRenderer
from ui.status_widget import APP_TITLE, StatusWidget

FILE_TYPES = [("Tomato projects", "*.xml"), ("All files", "*")]


class MainWindow:
    def __init__(
        self,
        project: Project,
        timer_service: TimerService,
        state_repo: AppStateRepo,
        tick_interval_ms: int = 1000,
    ):
        self.project = project
        self.timer_service = timer_service
        self.state_repo = state_repo
        self.tick_interval_ms = tick_interval_ms

        self._md = MarkdownRenderer()
        # task whose description is loaded in the editor
        self._shown_task_id: Optional[int] = None

        self.root = tk.Tk()
        self.root.title(APP_TITLE)
        self.root.geometry("980x560")
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

        self._build_ui()
        self._refresh_all()

    def _build_ui(self):
        root = self.root

        outer = ttk.Frame(root, padding=10)
        outer.pack(fill="both", expand=True)
        outer.columnconfigure(0, weight=3)
        outer.columnconfigure(1, weight=2)
        outer.rowconfigure(1, weight=1)

        # project actions
        bar = ttk.Frame(outer)
        bar.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 8))
        for text, cmd in (
            ("New", self._new_project),
            ("Open...", self._open_project),
            ("Save", self._save_project),
            ("Save As...", self._save_project_as),
            ("Close", self._close_project),
        ):
            ttk.Button(bar, text=text, command=cmd).pack(side="left", padx=(0, 6))

        # LEFT: task tree
        left = ttk.Labelframe(outer, text="Tasks", padding=10)
        left.grid(row=1, column=0, sticky="nsew", padx=(0, 10))
        left.columnconfigure(0, weight=1)
        left.rowconfigure(1, weight=1)

        add_row = ttk.Frame(left)
        add_row.grid(row=0, column=0, sticky="ew", pady=(0, 6))
        add_row.columnconfigure(0, weight=1)

        self.new_task_var = tk.StringVar()
        ttk.Entry(add_row, textvariable=self.new_task_var).grid(
            row=0, column=0, sticky="ew"
        )
        ttk.Button(add_row, text="Add", command=self._add_task).grid(
            row=0, column=1, padx=(6, 0)
        )
        ttk.Button(add_row, text="Add subtask", command=self._add_subtask).grid(
            row=0, column=2, padx=(6, 0)
        )

        self.tree = ttk.Treeview(left, columns=("done", "time"), selectmode="browse")
        self.tree.heading("#0", text="Title")
        self.tree.heading("done", text="Done")
        self.tree.heading("time", text="Time")
        self.tree.column("done", width=50, anchor="center", stretch=False)
        self.tree.column("time", width=90, anchor="e", stretch=False)
        self.tree.grid(row=1, column=0, sticky="nsew")
        self.tree.bind("<<TreeviewSelect>>", self._on_select_task)
        self.tree.bind("<Double-1>", self._activate_selected)

        actions = ttk.Frame(left)
        actions.grid(row=2, column=0, sticky="ew", pady=(8, 0))
        ttk.Button(actions, text="Toggle done", command=self._toggle_done).pack(
            side="left"
        )
        ttk.Button(actions, text="Remove", command=self._remove_task).pack(
            side="left", padx=(6, 0)
        )

        # RIGHT: status + description
        right = ttk.Frame(outer)
        right.grid(row=1, column=1, sticky="nsew")
        right.columnconfigure(0, weight=1)
        right.rowconfigure(1, weight=1)

        self.status = StatusWidget(
            right,
            timer_service=self.timer_service,
            on_request_refresh=self._refresh_tasks_only,
            tick_interval_ms=self.tick_interval_ms,
        )
        self.status.grid(row=0, column=0, sticky="ew", pady=(0, 10))

        desc = ttk.Labelframe(right, text="Description", padding=6)
        desc.grid(row=1, column=0, sticky="nsew")
        desc.columnconfigure(0, weight=1)
        desc.rowconfigure(0, weight=1)
        desc.rowconfigure(1, weight=1)

        self.desc_view = HtmlFrame(desc, horizontal_scrollbar="auto")
        self.desc_view.grid(row=0, column=0, sticky="nsew")

        self.desc_edit = tk.Text(desc, wrap="word", height=6, undo=True)
        self.desc_edit.grid(row=1, column=0, sticky="nsew", pady=(6, 0))

        ttk.Button(desc, text="Save description", command=self._save_desc).grid(
            row=2, column=0, sticky="e", pady=(6, 0)
        )

    def run(self):
        self.root.mainloop()

    # ----- helpers -----
    def _selected_task_id(self) -> Optional[int]:
        sel = self.tree.selection()
        return int(sel[0]) if sel else None

    def _show_error(self, e: Exception):
        messagebox.showerror(APP_TITLE, str(e), parent=self.root)

    def _confirm_discard(self) -> bool:
        """False if the user cancelled; saves first when asked to."""
        if not (self.project.is_open and self.project.is_modified):
            return True
        answer = messagebox.askyesnocancel(
            APP_TITLE, "Save changes to the current project?", parent=self.root
        )
        if answer is None:
            return False
        if answer:
            return self._save_project()
        return True

    # ----- project actions -----
    def _new_project(self):
        if not self._confirm_discard():
            return
        self.project.create()
        self.state_repo.set_last_project(None)
        self._refresh_all()

    def _open_project(self):
        if not self._confirm_discard():
            return
        path = filedialog.askopenfilename(parent=self.root, filetypes=FILE_TYPES)
        if not path:
            return
        try:
            self.project.open(path)
        except ProjectFileError as e:
            self._show_error(e)
            return
        self.state_repo.set_last_project(path)
        self._refresh_all()

    def _save_project(self) -> bool:
        if not self.project.is_open:
            return False
        if not self.project.file_name:
            return self._save_project_as()
        try:
            self.project.save()
        except ProjectFileError as e:
            self._show_error(e)
            return False
        return True

    def _save_project_as(self) -> bool:
        if not self.project.is_open:
            return False
        path = filedialog.asksaveasfilename(
            parent=self.root, filetypes=FILE_TYPES, defaultextension=".xml"
        )
        if not path:
            return False
        try:
            self.project.save_as(path)
        except ProjectFileError as e:
            self._show_error(e)
            return False
        self.state_repo.set_last_project(path)
        return True

    def _close_project(self):
        if not self._confirm_discard():
            return
        self.project.close()
        self._refresh_all()

    # ----- task actions -----
    def _create_task(self, parent_id: int):
        title = self.new_task_var.get().strip()
        if not title:
            self._show_error(ValueError("Task title cannot be empty."))
            return
        task_id = self.project.tomato.add_task(parent_id, TaskData(title=title))
        self.project.mark_modified()
        self.new_task_var.set("")
        self._refresh_tasks_only()
        self.tree.selection_set(str(task_id))
        self.tree.see(str(task_id))
        # show the new task without making it the active one
        self._refresh_selected_details()

    def _add_task(self):
        if self.project.is_open:
            self._create_task(self.project.tomato.root_task_id)

    def _add_subtask(self):
        task_id = self._selected_task_id()
        if self.project.is_open and task_id is not None:
            self._create_task(task_id)

    def _toggle_done(self):
        task_id = self._selected_task_id()
        if task_id is None:
            return
        tomato = self.project.tomato
        tomato.set_task_completed(task_id, not tomato.task(task_id).data.is_completed)
        self.project.mark_modified()
        self._refresh_tasks_only()

    def _remove_task(self):
        task_id = self._selected_task_id()
        if task_id is None:
            return
        title = self.project.tomato.task(task_id).data.title
        if not messagebox.askyesno(
            APP_TITLE, f"Remove '{title}' and its subtasks?", parent=self.root
        ):
            return
        self.project.tomato.remove_task(task_id)
        self.project.mark_modified()
        self._refresh_all()

    def _save_desc(self):
        task_id = self._selected_task_id()
        if task_id is None:
            return
        tomato = self.project.tomato
        data = tomato.task(task_id).data.copy()
        data.desc = self.desc_edit.get("1.0", "end-1c")
        tomato.set_task_data(task_id, data)
        self.project.mark_modified()
        self._refresh_selected_details()

    def _on_select_task(self, event=None):
        task_id = self._selected_task_id()
        if task_id == self._shown_task_id:
            # re-selection after a tree rebuild; keep unsaved edits
            return
        self._activate_selected()
        self._refresh_selected_details()

    def _activate_selected(self, event=None):
        task_id = self._selected_task_id()
        if self.project.is_open and task_id is not None:
            try:
                self.timer_service.set_active_task(task_id)
            except ValueError as e:
                self._show_error(e)

    # ----- refresh -----
    def _refresh_all(self):
        self._refresh_tasks_only()
        self._refresh_selected_details()
        self.status.refresh()

    def _refresh_tasks_only(self):
        selected = self._selected_task_id()
        self.tree.delete(*self.tree.get_children())
        if not self.project.is_open:
            return

        tomato = self.project.tomato
        for task in tomato.tasks():
            parent = "" if task.parent.id == tomato.root_task_id else str(task.parent.id)
            self.tree.insert(
                parent,
                "end",
                iid=str(task.id),
                text=task.data.title,
                values=(
                    "✔" if task.data.is_completed else "",
                    fmt_hms(task.total_time_recursive()),
                ),
                open=True,
            )

        if selected is not None and tomato.has_task(selected):
            self.tree.selection_set(str(selected))

    def _refresh_selected_details(self):
        task_id = self._selected_task_id()
        desc = ""
        if self.project.is_open and task_id is not None:
            desc = self.project.tomato.task(task_id).data.desc

        self.desc_edit.delete("1.0", tk.END)
        self.desc_edit.insert("1.0", desc)
        self.desc_view.load_html(self._md.to_html(desc))
        self._shown_task_id = task_id

    def _on_close(self):
        if not self._confirm_discard():
            return
        self.status.stop_tick_loop()
        self.project.close()
        self.root.destroy()
