"""
Response Builder - Assembla la risposta per la piattaforma vocale
dal RequestContext prodotto dai controller.
"""

from typing import List

from core.state import RequestContext
from .directive_builder import build_directives

RESPONSE_VERSION = "1.0"


def to_ssml(lines: List[str]) -> str:
    """Concatena le righe nell'ordine in cui sono state prodotte"""
    return "<speak>" + " ".join(line for line in lines if line) + "</speak>"


def build_response(ctx: RequestContext) -> dict:
    """
    Serializza il contesto.

    Microfono aperto -> shouldEndSession=False + reprompt.
    Microfono chiuso -> shouldEndSession assente: la sessione resta aperta
    in attesa degli eventi hardware, senza ascoltare.
    end_session -> shouldEndSession=True.
    """
    response: dict = {}

    if ctx.output_speech:
        response["outputSpeech"] = {"type": "SSML", "ssml": to_ssml(ctx.output_speech)}

    if ctx.open_microphone and not ctx.end_session:
        response["shouldEndSession"] = False
        if ctx.reprompt:
            response["reprompt"] = {
                "outputSpeech": {"type": "SSML", "ssml": to_ssml(ctx.reprompt)}
            }

    if ctx.end_session:
        response["shouldEndSession"] = True

    response["directives"] = build_directives(ctx.directives)

    return {"version": RESPONSE_VERSION, "response": response}
