# -*- coding: utf-8 -*-

from typing import Optional

from storage.db import Database

KEY_LAST_PROJECT = "last_project_path"


class AppStateRepo:
    def __init__(self, db: Database):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        row = self.db.conn.execute(
            "SELECT value FROM app_state WHERE key=?",
            (key,),
        ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.db.conn.execute(
            """
            INSERT INTO app_state(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
        self.db.conn.commit()

    def delete(self, key: str) -> None:
        self.db.conn.execute("DELETE FROM app_state WHERE key=?", (key,))
        self.db.conn.commit()

    # ---- last project ----
    def get_last_project(self) -> Optional[str]:
        return self.get(KEY_LAST_PROJECT)

    def set_last_project(self, path: Optional[str]) -> None:
        if path:
            self.set(KEY_LAST_PROJECT, path)
        else:
            self.delete(KEY_LAST_PROJECT)
