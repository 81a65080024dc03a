# -*- coding: utf-8 -*-

import logging
from typing import Callable, Optional

from core.project_xml import ProjectFileError, load_project_from_xml, save_project_to_xml
from core.tomato import Tomato

logger = logging.getLogger(__name__)


class Project:
    """
    Open/closed unit around one Tomato. Save and load always cover the
    whole task tree.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock
        self.tomato: Optional[Tomato] = None
        self.file_name: Optional[str] = None
        self.is_modified = False

    @property
    def is_open(self) -> bool:
        return self.tomato is not None

    def _new_tomato(self) -> Tomato:
        return Tomato(clock=self._clock)

    def create(self) -> None:
        self.close()
        self.tomato = self._new_tomato()
        self.file_name = None
        self.is_modified = False
        logger.info("Created new project")

    def open(self, file_name: str) -> None:
        tomato = self._new_tomato()
        try:
            load_project_from_xml(file_name, tomato)
        except ProjectFileError as e:
            # partially loaded tree is dropped, current project stays as is
            logger.warning("Failed to open %s: %s", file_name, e.reason)
            raise

        self.close()
        self.tomato = tomato
        self.file_name = file_name
        self.is_modified = False
        logger.info(
            "Opened project %s (%d tasks)", file_name, len(tomato.tasks())
        )

    def save(self) -> None:
        if not self.file_name:
            raise ProjectFileError("Project has no file name.")
        self.save_as(self.file_name)

    def save_as(self, file_name: str) -> None:
        if not self.is_open:
            raise ProjectFileError("No project is open.")
        try:
            save_project_to_xml(file_name, self.tomato)
        except ProjectFileError as e:
            logger.warning("Failed to save %s: %s", file_name, e.reason)
            raise

        self.file_name = file_name
        self.is_modified = False
        logger.info("Saved project %s", file_name)

    def close(self) -> None:
        if not self.is_open:
            return
        self.tomato.stop()
        self.tomato = None
        self.file_name = None
        self.is_modified = False
        logger.info("Closed project")

    def mark_modified(self) -> None:
        if self.is_open:
            self.is_modified = True
