"""
Fixture condivise per i test di Color Crash
"""

import random

import pytest

from core.events import create_gadget_event, create_input_event, EventPriority


@pytest.fixture
def make_game_config():
    """Factory per la sezione 'game' della configurazione"""
    def _make(required_devices=2, auto_start_round=True, clamp_at_zero=False,
              waiting_audio="", rollcall_timeout_ms=30000, round_timeout_ms=10000):
        return {
            "rollcall": {
                "required_devices": required_devices,
                "timeout_ms": rollcall_timeout_ms,
                "launch_timeout_ms": 50000,
                "auto_start_round": auto_start_round,
            },
            "round": {"timeout_ms": round_timeout_ms},
            "scoring": {"clamp_at_zero": clamp_at_zero},
            "audio": {"waiting_audio": waiting_audio},
        }
    return _make


@pytest.fixture
def game_config(make_game_config):
    return make_game_config()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def gadget_event():
    """Factory per GADGET_EVENT con payload di bottoni premuti"""
    def _make(name, gadget_ids=(), request_id="req-x", originating=None,
              session_id="s1", user_id="u1"):
        input_events = [
            {"gadgetId": gid, "action": "down", "color": "000000"} for gid in gadget_ids
        ]
        metadata = {
            "session_id": session_id,
            "user_id": user_id,
            "request_id": request_id,
            "originating_request_id": originating,
        }
        return create_gadget_event(name, input_events, "test", metadata=metadata)
    return _make


@pytest.fixture
def intent_event():
    """Factory per eventi di sessione e intent"""
    def _make(event_type, request_id="req-i", session_id="s1", user_id="u1"):
        return create_input_event(
            event_type, None, "test",
            priority=EventPriority.HIGH,
            metadata={"session_id": session_id, "user_id": user_id, "request_id": request_id}
        )
    return _make
