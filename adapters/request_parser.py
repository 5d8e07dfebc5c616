"""
Request Parser - Converte la busta di richiesta della piattaforma in eventi di input

Formato atteso:
{
    "session": {"sessionId": "...", "user": {"userId": "..."}},
    "request": {
        "type": "LaunchRequest" | "IntentRequest" |
                "GameEngine.InputHandlerEvent" | "SessionEndedRequest",
        "requestId": "...",
        "originatingRequestId": "...",          # solo InputHandlerEvent
        "intent": {"name": "AMAZON.YesIntent"},  # solo IntentRequest
        "events": [{"name": "...", "inputEvents": [...]}]
    }
}
"""

import logging
from typing import List

from core.events import (
    Event, EventPriority, InputEventType,
    create_gadget_event, create_input_event,
)

logger = logging.getLogger(__name__)

INTENT_TO_EVENT = {
    "AMAZON.YesIntent": InputEventType.YES,
    "AMAZON.NoIntent": InputEventType.NO,
    "AMAZON.StopIntent": InputEventType.STOP,
    "AMAZON.CancelIntent": InputEventType.STOP,
    "StartRoundIntent": InputEventType.START_ROUND,
    "AMAZON.HelpIntent": InputEventType.HELP,
    "AMAZON.FallbackIntent": InputEventType.HELP,
}


def parse_request(envelope: dict, source: str) -> List[Event]:
    """
    Args:
        envelope: Busta di richiesta già decodificata da JSON
        source: Nome dell'adapter che ha ricevuto la richiesta

    Returns:
        Lista di eventi (un InputHandlerEvent può riportarne più di uno)

    Raises:
        ValueError: Se il tipo di richiesta non è riconosciuto
    """
    if not isinstance(envelope, dict) or "request" not in envelope:
        raise ValueError("Request envelope must be a dict with a 'request' section")

    request = envelope["request"]
    session = envelope.get("session") or {}
    metadata = {
        "session_id": session.get("sessionId"),
        "user_id": (session.get("user") or {}).get("userId"),
        "request_id": request.get("requestId"),
    }
    request_type = request.get("type")

    if request_type == "LaunchRequest":
        return [create_input_event(InputEventType.LAUNCH, None, source,
                                   priority=EventPriority.HIGH, metadata=metadata)]

    if request_type == "SessionEndedRequest":
        return [create_input_event(InputEventType.SESSION_ENDED, request.get("reason"), source,
                                   priority=EventPriority.CRITICAL, metadata=metadata)]

    if request_type == "IntentRequest":
        intent_name = (request.get("intent") or {}).get("name")
        event_type = INTENT_TO_EVENT.get(intent_name)
        if event_type is None:
            logger.warning(f"Unknown intent '{intent_name}', answering with help")
            event_type = InputEventType.HELP
        return [create_input_event(event_type, intent_name, source,
                                   priority=EventPriority.HIGH, metadata=metadata)]

    if request_type == "GameEngine.InputHandlerEvent":
        metadata["originating_request_id"] = request.get("originatingRequestId")
        events = []
        for gadget_event in request.get("events") or []:
            events.append(create_gadget_event(
                gadget_event.get("name"),
                gadget_event.get("inputEvents") or [],
                source,
                metadata=dict(metadata)
            ))
        if not events:
            logger.warning("InputHandlerEvent without events")
        return events

    raise ValueError(f"Unknown request type: {request_type}")
