"""
Tests per il Roll Call Controller
"""

import pytest

from core.commands import LightTrigger, SetLight, StartInputHandler
from core.rollcall import RollCallController, build_events, build_recognizers
from core.state import RequestContext, SessionState, SkillMode


def check_in_ctx(request_id, *gadget_ids):
    ctx = RequestContext(request_id=request_id)
    ctx.input_events = [{"gadgetId": gid, "action": "down"} for gid in gadget_ids]
    return ctx


class TestInputHandlerDefinition:
    """Test recognizer ed eventi della finestra di registrazione"""

    def test_recognizers_two_devices(self):
        """Il recognizer n richiede i bottoni 1..n in ordine"""
        recognizers = build_recognizers(2)

        first = recognizers["roll_call_first_button_recognizer"]
        second = recognizers["roll_call_second_button_recognizer"]

        assert first["fuzzy"] is False
        assert second["fuzzy"] is True
        assert second["anchor"] == "end"
        assert [p["gadgetIds"] for p in second["pattern"]] == [["first_button"], ["second_button"]]

    def test_last_required_event_ends_handler(self):
        """Solo l'evento dell'ultimo ordinale richiesto chiude la finestra"""
        events = build_events(4)

        assert events["first_button_checked_in"]["shouldEndInputHandler"] is False
        assert events["third_button_checked_in"]["shouldEndInputHandler"] is False
        assert events["forth_button_checked_in"]["shouldEndInputHandler"] is True
        assert events["timeout"]["meets"] == ["timed out"]

    def test_events_fire_once(self):
        """Ogni evento di check-in scatta al massimo una volta"""
        events = build_events(2)

        assert events["first_button_checked_in"]["maximumInvocations"] == 1
        assert "third_button_checked_in" not in events


class TestRollCallController:
    """Test del protocollo di registrazione"""

    def test_invalid_required_devices(self, make_game_config):
        """required_devices fuori da 2..4 è un errore di configurazione"""
        with pytest.raises(ValueError):
            RollCallController(make_game_config(required_devices=1))
        with pytest.raises(ValueError):
            RollCallController(make_game_config(required_devices=5))

    def test_start(self, game_config):
        """start() apre la finestra e resetta la sessione"""
        controller = RollCallController(game_config)
        session = SessionState(session_id="s1")
        session.roster.enroll(1, "OLD")
        ctx = RequestContext(request_id="r1")

        controller.start(session, ctx)

        handler = ctx.directives[0]
        assert isinstance(handler, StartInputHandler)
        assert handler.timeout_ms == 30000
        assert handler.proxies == ["first_button", "second_button"]
        assert [d.trigger for d in ctx.directives[1:]] == [
            LightTrigger.BUTTON_DOWN, LightTrigger.BUTTON_UP
        ]
        assert session.registered_count == 0
        assert session.mode == SkillMode.ROLL_CALL
        assert session.pending_input_handler_id == "r1"
        assert ctx.open_microphone is False

    def test_start_custom_timeout(self, game_config):
        """Il timeout può essere sovrascritto (finestra di lancio)"""
        controller = RollCallController(game_config)
        ctx = RequestContext(request_id="r1")

        controller.start(SessionState(session_id="s1"), ctx, timeout_ms=60000)

        assert ctx.directives[0].timeout_ms == 60000

    def test_check_in_sequence(self, game_config):
        """A poi B: ruoli [A, B], roll call completo, modalità PLAY"""
        controller = RollCallController(game_config)
        session = SessionState(session_id="s1")

        ctx1 = controller.handle_check_in(session, check_in_ctx("r2", "A"), 1)
        assert ctx1.output_speech == ["Hello, button 1."]
        assert not session.roll_call_complete

        ctx2 = controller.handle_check_in(session, check_in_ctx("r3", "A", "B"), 2)

        assert session.roster.device_ids == ["A", "B"]
        assert session.roll_call_complete
        assert session.mode == SkillMode.PLAY
        assert ctx2.output_speech == ["Hello, button 2.", "Awesome. I've registered 2 buttons."]

        idle = [d for d in ctx2.directives if d.trigger == LightTrigger.NONE]
        assert idle[0].target_gadgets == ["B"]
        assert idle[1].target_gadgets == ["A", "B"]

    def test_check_in_idempotent(self, make_game_config):
        """Ripetere un check-in già accettato non cambia nulla"""
        controller = RollCallController(make_game_config(required_devices=3))
        session = SessionState(session_id="s1")

        controller.handle_check_in(session, check_in_ctx("r2", "A"), 1)
        ctx = controller.handle_check_in(session, check_in_ctx("r3", "A"), 1)

        assert session.roster.device_ids == ["A"]
        assert ctx.output_speech == []
        assert ctx.directives == []

    def test_duplicate_device_second_slot(self, make_game_config):
        """Lo stesso bottone riportato come secondo viene scartato"""
        controller = RollCallController(make_game_config(required_devices=3))
        session = SessionState(session_id="s1")

        controller.handle_check_in(session, check_in_ctx("r2", "A"), 1)
        controller.handle_check_in(session, check_in_ctx("r3", "A", "A"), 2)

        assert session.registered_count == 1

    def test_out_of_order_discarded(self, game_config):
        """Il secondo check-in prima del primo viene scartato"""
        controller = RollCallController(game_config)
        session = SessionState(session_id="s1")

        ctx = controller.handle_check_in(session, check_in_ctx("r2", "B"), 2)

        assert session.registered_count == 0
        assert ctx.output_speech == []

    def test_short_payload_uses_last_event(self, make_game_config):
        """Payload più corto dell'ordinale: si usa l'ultimo evento"""
        controller = RollCallController(make_game_config(required_devices=3))
        session = SessionState(session_id="s1")
        controller.handle_check_in(session, check_in_ctx("r2", "A"), 1)

        controller.handle_check_in(session, check_in_ctx("r3", "B"), 2)

        assert session.roster.device_ids == ["A", "B"]

    def test_ordinal_beyond_required_ignored(self, game_config):
        """Con 2 bottoni richiesti, il terzo evento è ignorato"""
        controller = RollCallController(game_config)
        session = SessionState(session_id="s1")
        session.roster.enroll(1, "A")
        session.roster.enroll(2, "B")

        controller.handle_check_in(session, check_in_ctx("r2", "A", "B", "C"), 3)

        assert session.registered_count == 2

    def test_waiting_audio_between_check_ins(self, make_game_config):
        """L'audio di attesa segue ogni check-in non conclusivo"""
        controller = RollCallController(make_game_config(waiting_audio="<audio/>"))
        session = SessionState(session_id="s1")

        ctx = controller.handle_check_in(session, check_in_ctx("r2", "A"), 1)

        assert ctx.output_speech == ["Hello, button 1.", "<audio/>"]

    def test_no_auto_start_opens_microphone(self, make_game_config):
        """Senza avvio automatico la skill chiede di dire start"""
        controller = RollCallController(make_game_config(auto_start_round=False))
        session = SessionState(session_id="s1")
        controller.handle_check_in(session, check_in_ctx("r2", "A"), 1)

        ctx = controller.handle_check_in(session, check_in_ctx("r3", "A", "B"), 2)

        assert ctx.open_microphone is True
        assert "Say start when you are ready to play." in ctx.output_speech

    def test_timeout(self, game_config):
        """Timeout: modalità invariata, conferma attesa, microfono aperto"""
        controller = RollCallController(game_config)
        session = SessionState(session_id="s1", pending_input_handler_id="r1")
        controller.handle_check_in(session, check_in_ctx("r2", "A"), 1)

        ctx = controller.handle_timeout(session, RequestContext(request_id="r3"))

        assert session.mode == SkillMode.ROLL_CALL
        assert session.expecting_end_confirmation is True
        assert session.pending_input_handler_id is None
        assert ctx.open_microphone is True
        assert ctx.output_speech == [
            "For this skill we need 2 buttons.",
            "Would you like more time to press the buttons?",
        ]
        assert all(isinstance(d, SetLight) and d.target_gadgets == ["A"] for d in ctx.directives)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
