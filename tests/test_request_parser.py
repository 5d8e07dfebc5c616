"""
Tests per la conversione delle richieste in eventi (piattaforma, tastiera, pipe)
"""

import json
import queue

import pytest

from adapters.input.keyboard_input import KeyboardInput, parse_command
from adapters.input.pipe_input import PipeInputAdapter
from adapters.request_parser import parse_request
from core.events import EventPriority, InputEventType


def envelope(request, session_id="s1", user_id="u1"):
    return {
        "session": {"sessionId": session_id, "user": {"userId": user_id}},
        "request": request,
    }


class TestParseRequest:
    """Test della busta di richiesta"""

    def test_launch(self):
        """LaunchRequest -> LAUNCH con metadata di sessione"""
        events = parse_request(envelope({"type": "LaunchRequest", "requestId": "r1"}), "pipe")

        assert len(events) == 1
        event = events[0]
        assert event.type == InputEventType.LAUNCH
        assert event.metadata == {"session_id": "s1", "user_id": "u1", "request_id": "r1"}
        assert event.source == "pipe"

    def test_session_ended(self):
        """SessionEndedRequest -> SESSION_ENDED critico"""
        events = parse_request(envelope({"type": "SessionEndedRequest", "reason": "USER_INITIATED"}), "pipe")

        assert events[0].type == InputEventType.SESSION_ENDED
        assert events[0].priority == EventPriority.CRITICAL

    @pytest.mark.parametrize("intent,expected", [
        ("AMAZON.YesIntent", InputEventType.YES),
        ("AMAZON.NoIntent", InputEventType.NO),
        ("AMAZON.StopIntent", InputEventType.STOP),
        ("AMAZON.CancelIntent", InputEventType.STOP),
        ("StartRoundIntent", InputEventType.START_ROUND),
        ("AMAZON.HelpIntent", InputEventType.HELP),
        ("AMAZON.FallbackIntent", InputEventType.HELP),
    ])
    def test_intents(self, intent, expected):
        """Intent vocali mappati sugli eventi del dispatcher"""
        request = {"type": "IntentRequest", "requestId": "r1", "intent": {"name": intent}}

        assert parse_request(envelope(request), "pipe")[0].type == expected

    def test_unknown_intent_becomes_help(self):
        """Intent sconosciuto -> HELP, la richiesta riceve comunque risposta"""
        request = {"type": "IntentRequest", "requestId": "r1",
                   "intent": {"name": "AMAZON.NavigateHomeIntent"}}

        events = parse_request(envelope(request), "pipe")

        assert [e.type for e in events] == [InputEventType.HELP]
        assert events[0].content == "AMAZON.NavigateHomeIntent"

    def test_input_handler_event(self):
        """InputHandlerEvent: un evento per nome, con finestra d'origine"""
        request = {
            "type": "GameEngine.InputHandlerEvent",
            "requestId": "r5",
            "originatingRequestId": "r1",
            "events": [
                {"name": "first_button_checked_in",
                 "inputEvents": [{"gadgetId": "A", "action": "down"}]},
                {"name": "second_button_checked_in",
                 "inputEvents": [{"gadgetId": "A", "action": "down"},
                                 {"gadgetId": "B", "action": "down"}]},
            ],
        }

        events = parse_request(envelope(request), "pipe")

        assert [e.content["name"] for e in events] == [
            "first_button_checked_in", "second_button_checked_in"
        ]
        assert events[1].content["input_events"][1]["gadgetId"] == "B"
        assert all(e.type == InputEventType.GADGET_EVENT for e in events)
        assert all(e.metadata["originating_request_id"] == "r1" for e in events)
        assert events[0].metadata is not events[1].metadata

    def test_unknown_request_type(self):
        """Tipo di richiesta sconosciuto solleva ValueError"""
        with pytest.raises(ValueError, match="Unknown request type"):
            parse_request(envelope({"type": "Display.ElementSelected"}), "pipe")

    def test_missing_request(self):
        """Busta senza 'request' solleva ValueError"""
        with pytest.raises(ValueError):
            parse_request({"session": {}}, "pipe")


class TestKeyboardCommands:
    """Test dei comandi da tastiera"""

    def test_simple_commands(self):
        """Comandi di sessione e intent"""
        metadata = {"session_id": "k"}

        assert parse_command("launch", "kb", metadata).type == InputEventType.LAUNCH
        assert parse_command("YES", "kb", metadata).type == InputEventType.YES
        assert parse_command("start", "kb", metadata).type == InputEventType.START_ROUND
        assert parse_command("end", "kb", metadata).type == InputEventType.SESSION_ENDED
        assert parse_command("help", "kb", metadata).type == InputEventType.HELP

    def test_press(self):
        """press <id> -> button_down_event"""
        event = parse_command("press A", "kb", {})

        assert event.type == InputEventType.GADGET_EVENT
        assert event.content["name"] == "button_down_event"
        assert event.content["input_events"][0]["gadgetId"] == "A"

    def test_named_event(self):
        """Evento nominato con più bottoni"""
        event = parse_command("second_button_checked_in A B", "kb", {})

        assert event.content["name"] == "second_button_checked_in"
        assert [e["gadgetId"] for e in event.content["input_events"]] == ["A", "B"]

    def test_timeout(self):
        """timeout non richiede bottoni"""
        event = parse_command("timeout", "kb", {})

        assert event.content == {"name": "timeout", "input_events": []}

    def test_invalid(self):
        """Riga vuota o bottone mancante sollevano ValueError"""
        with pytest.raises(ValueError):
            parse_command("   ", "kb", {})
        with pytest.raises(ValueError):
            parse_command("press", "kb", {})

    def test_adapter_publishes_with_session(self):
        """KeyboardInput pubblica eventi con la sessione simulata"""
        input_queue = queue.PriorityQueue()
        adapter = KeyboardInput("KeyboardInput", {"session_id": "ks", "user_id": "ku"}, input_queue)

        assert adapter.handle_line("press A") is True
        assert adapter.handle_line("press") is False

        event = input_queue.get_nowait()
        assert event.metadata["session_id"] == "ks"
        assert event.metadata["user_id"] == "ku"
        assert event.metadata["request_id"]
        assert input_queue.empty()


class TestPipeInput:
    """Test del parsing delle righe JSON (senza FIFO)"""

    def test_process_line(self, tmp_path):
        """Una riga JSON valida produce eventi sulla coda"""
        input_queue = queue.PriorityQueue()
        adapter = PipeInputAdapter("PipeInputAdapter", {"pipe_path": str(tmp_path / "in")}, input_queue)

        count = adapter.process_line(json.dumps(envelope({"type": "LaunchRequest", "requestId": "r1"})))

        assert count == 1
        assert input_queue.get_nowait().type == InputEventType.LAUNCH

    def test_invalid_json(self, tmp_path):
        """JSON non valido solleva ValueError"""
        adapter = PipeInputAdapter("PipeInputAdapter", {"pipe_path": str(tmp_path / "in")},
                                   queue.PriorityQueue())

        with pytest.raises(ValueError):
            adapter.process_line("{not json")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
