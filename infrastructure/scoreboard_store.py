"""
Scoreboard Store - Persistenza SQLite dei punteggi tra sessioni
Un record per utente: l'ultimo tabellone salvato a fine sessione.
"""

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Optional


class ScoreboardStore:

    def __init__(self, db_path: str):
        self.logger = logging.getLogger(__name__)
        self.db_path = db_path

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        if db_path != ":memory:":
            self.conn.execute("PRAGMA journal_mode=WAL;")
        self.cursor = self.conn.cursor()
        self.create_tables()

    def create_tables(self):
        self.cursor.execute('''
            CREATE TABLE IF NOT EXISTS scoreboard (
                user_id TEXT PRIMARY KEY,
                record TEXT NOT NULL,
                ts DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        ''')
        self.conn.commit()

    def save(self, user_id: str, record: dict) -> None:
        """Sovrascrive il tabellone dell'utente"""
        if not user_id:
            raise ValueError("user_id is required to save a scoreboard")
        payload = json.dumps(record)
        with self._lock:
            self.cursor.execute(
                "INSERT OR REPLACE INTO scoreboard (user_id, record, ts) "
                "VALUES (?, ?, CURRENT_TIMESTAMP)",
                (user_id, payload)
            )
            self.conn.commit()
        self.logger.info(f"💾 Scoreboard saved for {user_id} (round {record.get('round')})")

    def load(self, user_id: str) -> Optional[dict]:
        """Ultimo tabellone salvato per l'utente, None se assente o illeggibile"""
        with self._lock:
            self.cursor.execute("SELECT record FROM scoreboard WHERE user_id = ?", (user_id,))
            row = self.cursor.fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            self.logger.error(f"❌ Corrupted scoreboard for {user_id}: {e}")
            return None

    def close(self):
        with self._lock:
            self.conn.close()
