#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
import os
import sys

from core.config import get_config
from core.project import Project
from core.project_xml import ProjectFileError
from services.timer_service import TimerService
from storage.db import Database
from storage.repos import AppStateRepo

logger = logging.getLogger(__name__)


def open_initial_project(project: Project, state_repo: AppStateRepo, argv) -> None:
    """Project named on the command line, else the last one, else a new one."""
    path = argv[1] if len(argv) > 1 else state_repo.get_last_project()
    if path and os.path.exists(path):
        try:
            project.open(path)
            state_repo.set_last_project(path)
            return
        except ProjectFileError:
            logger.warning("Starting with a new project instead of %s", path)
    project.create()


def main():
    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = Database(db_path=config.state_db_path)
    db.init_schema()
    state_repo = AppStateRepo(db)

    project = Project()
    open_initial_project(project, state_repo, sys.argv)

    timer_service = TimerService(project)

    # Tk is only needed for the window itself
    from ui.main_window import MainWindow

    app = MainWindow(
        project, timer_service, state_repo, tick_interval_ms=config.tick_interval_ms
    )
    try:
        app.run()
    finally:
        db.close()


if __name__ == "__main__":
    main()
