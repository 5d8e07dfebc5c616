"""
Tests per ScoreboardStore (SQLite)
"""

import pytest

from infrastructure.scoreboard_store import ScoreboardStore

RECORD = {"round": 2, "players": [{"color": "red", "score": 3}, {"color": "blue", "score": 1}]}


@pytest.fixture
def store(tmp_path):
    s = ScoreboardStore(str(tmp_path / "db" / "scoreboard.db"))
    yield s
    s.close()


class TestScoreboardStore:
    """Test persistenza tabelloni"""

    def test_load_missing(self, store):
        """Utente senza tabellone -> None"""
        assert store.load("nobody") is None

    def test_save_and_load(self, store):
        """Il record salvato viene riletto identico"""
        store.save("u1", RECORD)

        assert store.load("u1") == RECORD

    def test_overwrite(self, store):
        """Un nuovo salvataggio sostituisce il precedente"""
        store.save("u1", RECORD)
        store.save("u1", {"round": 1, "players": []})

        assert store.load("u1") == {"round": 1, "players": []}

    def test_users_isolated(self, store):
        """Ogni utente ha il proprio tabellone"""
        store.save("u1", RECORD)

        assert store.load("u2") is None

    def test_save_requires_user(self, store):
        """user_id mancante solleva ValueError"""
        with pytest.raises(ValueError):
            store.save("", RECORD)

    def test_corrupted_record(self, store):
        """Record illeggibile -> None"""
        store.cursor.execute("INSERT INTO scoreboard (user_id, record) VALUES (?, ?)", ("u1", "{broken"))
        store.conn.commit()

        assert store.load("u1") is None

    def test_persistent_across_instances(self, tmp_path):
        """Il tabellone sopravvive alla chiusura dello store"""
        path = str(tmp_path / "scoreboard.db")
        first = ScoreboardStore(path)
        first.save("u1", RECORD)
        first.close()

        second = ScoreboardStore(path)
        try:
            assert second.load("u1") == RECORD
        finally:
            second.close()

    def test_in_memory(self):
        """':memory:' non crea directory"""
        s = ScoreboardStore(":memory:")
        s.save("u1", RECORD)

        assert s.load("u1") == RECORD
        s.close()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
