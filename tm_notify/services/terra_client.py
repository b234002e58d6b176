"""
Service: terra_client.py
- Centralise les appels HTTP : récupération de l'état d'une partie (view-game) et
  envoi des notifications au webhook.
- Une seule tentative par appel (pas de retry) : le planificateur relance au prochain tick.

Fonctions principales:
- TerraClient.fetch_game_state(game_id): octets bruts du document JSON de la partie.
- TerraClient.dispatch_notification(game_id, message, webhook_url): POST {"message": ...}.
"""
import logging
from typing import Optional, Tuple

import requests

from tm_notify.config.settings import settings
from .errors import DispatchFailure, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Tuple[float, float] = (5.0, 30.0)  # connect, read


class TerraClient:
    """
    Client HTTP du serveur de jeu et du webhook.
    - Journalise chaque requête avec le game_id comme identifiant de corrélation.
    """

    def __init__(
        self,
        view_game_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.view_game_url = view_game_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_game_state(self, game_id: str) -> bytes:
        logger.info("Requesting latest game information", extra={"game_id": game_id})
        try:
            response = self.session.post(
                self.view_game_url,
                data={"game": game_id},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            logger.warning("Game request timeout", extra={"game_id": game_id})
            raise UpstreamError(game_id, "game request timed out") from exc
        except requests.RequestException as exc:
            raise UpstreamError(game_id, f"game request failed: {exc}") from exc
        return response.content

    def dispatch_notification(self, game_id: str, message: str, webhook_url: str) -> int:
        """Envoie `message` au webhook ; lève `DispatchFailure` si le statut n'est pas 2xx."""
        try:
            response = self.session.post(webhook_url, json={"message": message}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise DispatchFailure(game_id, None, message) from exc

        if not 200 <= response.status_code < 300:
            raise DispatchFailure(game_id, response.status_code, message)
        logger.info("Notification sent", extra={"game_id": game_id, "status_code": response.status_code})
        return response.status_code


def build_client(config=settings) -> TerraClient:
    return TerraClient(config.VIEW_GAME_URL, timeout=config.http_timeout)
