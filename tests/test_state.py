"""
Tests per lo stato di sessione - Roster, Scoreboard, SessionStore
"""

import pytest

from core.session_store import SessionStore
from core.state import DeviceRoster, RequestContext, Scoreboard, SessionState, SkillMode


class TestDeviceRoster:
    """Test vincoli della registrazione"""

    def test_strict_order_enrollment(self):
        """Ruoli assegnati in ordine di arrivo, conteggio coerente"""
        roster = DeviceRoster()

        assert roster.enroll(1, "A")
        assert roster.enroll(2, "B")
        assert roster.enroll(3, "C")

        assert roster.count == 3
        assert roster.device_ids == ["A", "B", "C"]
        assert roster.role_of("B") == 2

    def test_out_of_order_discarded(self):
        """Un ordinale diverso dal successivo atteso non modifica nulla"""
        roster = DeviceRoster()

        assert not roster.enroll(2, "B")
        assert len(roster) == 0

        roster.enroll(1, "A")
        assert not roster.enroll(3, "C")
        assert roster.device_ids == ["A"]

    def test_duplicate_discarded(self):
        """Lo stesso bottone non può avere due ruoli"""
        roster = DeviceRoster()
        roster.enroll(1, "A")

        assert not roster.enroll(2, "A")
        assert not roster.enroll(1, "A")
        assert roster.device_ids == ["A"]

    def test_empty_id_discarded(self):
        """Id mancante non viene registrato"""
        roster = DeviceRoster()

        assert not roster.enroll(1, None)
        assert not roster.enroll(1, "")
        assert roster.count == 0

    def test_clear_and_membership(self):
        """clear() azzera ruoli e conteggio"""
        roster = DeviceRoster()
        roster.enroll(1, "A")

        assert "A" in roster
        roster.clear()
        assert "A" not in roster
        assert roster.role_of("A") is None


class TestScoreboard:
    """Test tabellone"""

    def test_fresh(self):
        """Nuovo tabellone: punteggi a zero, viste parallele allineate"""
        board = Scoreboard.fresh(["A", "B"], ["red", "blue"])

        assert board.device_ids == ["A", "B"]
        assert board.colors == ["red", "blue"]
        assert board.scores == [0, 0]
        assert board.presses_scored == 0

    def test_fresh_length_mismatch(self):
        """Un colore per dispositivo, altrimenti ValueError"""
        with pytest.raises(ValueError):
            Scoreboard.fresh(["A", "B"], ["red"])

    def test_entry_for(self):
        """Lookup per device id"""
        board = Scoreboard.fresh(["A", "B"], ["red", "blue"])

        assert board.entry_for("B").color == "blue"
        assert board.entry_for("Z") is None

    def test_to_record(self):
        """Formato persistito"""
        board = Scoreboard.fresh(["A", "B"], ["red", "blue"])
        board.entries[0].score = 2

        assert board.to_record(3) == {
            "round": 3,
            "players": [{"color": "red", "score": 2}, {"color": "blue", "score": 0}],
        }


class TestSessionState:
    """Test stato di sessione e contesto richiesta"""

    def test_defaults(self):
        """Una nuova sessione parte dal roll call"""
        session = SessionState(session_id="s1")

        assert session.mode == SkillMode.ROLL_CALL
        assert session.registered_count == 0
        assert not session.roll_call_complete
        assert session.scoreboard is None
        assert session.pending_input_handler_id is None

    def test_request_context_accumulates(self):
        """say() e add_directive() preservano l'ordine"""
        ctx = RequestContext(request_id="r1")
        ctx.say("one")
        ctx.say("two", "three")
        ctx.add_directive("d1")

        assert ctx.output_speech == ["one", "two", "three"]
        assert ctx.directives == ["d1"]
        assert not ctx.open_microphone


class TestSessionStore:
    """Test store delle sessioni"""

    def test_create_get_end(self):
        """Ciclo di vita di una sessione"""
        store = SessionStore()
        session = store.create("s1", "u1")

        assert store.get("s1") is session
        assert len(store) == 1
        assert store.end("s1") is session
        assert store.get("s1") is None
        assert store.end("s1") is None

    def test_relaunch_replaces_state(self):
        """Un nuovo lancio scarta lo stato precedente"""
        store = SessionStore()
        first = store.create("s1")
        first.roster.enroll(1, "A")

        second = store.create("s1")

        assert second is not first
        assert second.registered_count == 0

    def test_sessions_are_isolated(self):
        """Sessioni diverse non condividono stato"""
        store = SessionStore()
        store.create("s1").roster.enroll(1, "A")

        assert store.create("s2").registered_count == 0
        assert store.get("s1").registered_count == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
