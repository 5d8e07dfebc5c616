"""
Event Router - Smista eventi agli adapter corretti
Il Brain NON conosce gli output, il Router sì.
"""

import threading
import logging
from typing import Dict, List
from collections import defaultdict

from .events import Event, OutputEventType

logger = logging.getLogger(__name__)


class EventRouter:
    """
    Router che smista eventi output agli adapter registrati.

    Caratteristiche:
    - Un OutputEventType può avere N destinazioni (broadcast)
    - Thread-safe
    - Statistiche di routing
    - Gestione code piene (send_event() == False)
    """

    def __init__(self):
        # Mapping: OutputEventType -> List[adapter con send_event()]
        self._routes: Dict[OutputEventType, list] = defaultdict(list)

        # Lock per operazioni thread-safe
        self._lock = threading.Lock()

        # Statistiche
        self._stats = {
            'routed': 0,
            'dropped': 0,
            'no_route': 0
        }

        logger.info("📍 EventRouter initialized")

    def register_route(
        self,
        event_type: OutputEventType,
        destination,
        adapter_name: str = "unknown"
    ) -> None:
        """
        Registra un output adapter per un tipo di evento.

        Args:
            event_type: Tipo di evento da instradare
            destination: Adapter di destinazione (espone send_event())
            adapter_name: Nome adapter (per logging)
        """
        with self._lock:
            self._routes[event_type].append(destination)

            route_count = len(self._routes[event_type])
            logger.info(
                f"📍 Route registered: {event_type.value} -> "
                f"{adapter_name} (#{route_count})"
            )

    def route_event(self, event: Event) -> int:
        """
        Smista un singolo evento a tutti gli adapter registrati.

        Returns:
            Numero di destinazioni raggiunte con successo
        """
        with self._lock:
            if event.type not in self._routes or not self._routes[event.type]:
                logger.debug(f"⚠️ No route for event: {event.type.value}")
                self._stats['no_route'] += 1
                return 0

            routed_count = 0

            for destination in self._routes[event.type]:
                if destination.send_event(event):
                    routed_count += 1
                    self._stats['routed'] += 1
                else:
                    logger.error(f"❌ Event dropped for {event.type.value}: {event}")
                    self._stats['dropped'] += 1

            return routed_count

    def route_events(self, events: List[Event]) -> int:
        """
        Smista una lista di eventi.

        Returns:
            Numero totale di routing effettuati
        """
        total_routed = 0
        for event in events:
            total_routed += self.route_event(event)
        return total_routed

    def get_routes(self) -> Dict[OutputEventType, int]:
        """Ritorna il numero di destinazioni per ogni tipo di evento"""
        with self._lock:
            return {
                event_type: len(destinations)
                for event_type, destinations in self._routes.items()
            }

    def get_stats(self) -> dict:
        """Statistiche di routing"""
        with self._lock:
            return {
                **self._stats,
                'routes_count': len(self._routes),
                'total_destinations': sum(
                    len(destinations) for destinations in self._routes.values()
                )
            }
