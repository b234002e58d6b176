"""
Service: monitor.py
Rôle:
- Orchestrer une passe de surveillance : pour chaque partie
  fetch → détection de changement → composition du message → notification → sauvegarde du snapshot.

Politique:
- Pas de changement → rien n'est envoyé ni sauvegardé.
- Changement sans message (ex: plus d'action exploitable) → snapshot sauvegardé, pas d'envoi.
- Pas de webhook configuré → on logge le message et on sauvegarde quand même.
- `ConsistencyError` → remontée, snapshot NON sauvegardé (réévalué au prochain passage).
- `DispatchFailure` → snapshot sauvegardé D'ABORD, puis l'erreur est remontée :
  mieux vaut une notification manquée qu'un message périmé renvoyé à chaque passage.
- `run()` traite les parties séquentiellement ; l'échec d'une partie n'arrête pas les suivantes.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from tm_notify.config.settings import Settings
from tm_notify.models.game import parse_game_state
from .change_detector import has_changed
from .errors import DispatchFailure, TmNotifyError
from .notification_composer import compose, looks_finished_legacy
from .snapshot_store import SnapshotStore, build_store, check_game_id
from .terra_client import TerraClient, build_client

logger = logging.getLogger(__name__)


def _outcome(game_id: str, **values: Any) -> Dict[str, Any]:
    outcome: Dict[str, Any] = {
        "game_id": game_id,
        "changed": False,
        "message": None,
        "notified": False,
        "persisted": False,
    }
    outcome.update(values)
    return outcome


class GameMonitor:
    def __init__(
        self,
        client: TerraClient,
        store: SnapshotStore,
        *,
        webhook_url: Optional[str] = None,
        dry_run: bool = False,
    ) -> None:
        self.client = client
        self.store = store
        self.webhook_url = webhook_url
        self.dry_run = dry_run

    def check_game(self, game_id: str) -> Dict[str, Any]:
        """Une passe complète pour `game_id`. Lève les `TmNotifyError` rencontrées."""
        game_id = check_game_id(game_id)
        raw = self.client.fetch_game_state(game_id)
        current = parse_game_state(raw, game_id)

        stored = self.store.get(game_id)
        previous = parse_game_state(stored, game_id) if stored is not None else None

        if not has_changed(previous, current):
            logger.info("Game has not been updated", extra={"game_id": game_id})
            return _outcome(game_id)
        logger.info("Game has been updated", extra={"game_id": game_id, "first_seen": previous is None})

        message = compose(current, game_id)
        if message is None and looks_finished_legacy(current):
            logger.info("No required actions and no finished flag, game is probably over", extra={"game_id": game_id})

        if self.dry_run:
            logger.info("Dry run, not notifying nor saving", extra={"game_id": game_id, "notification": message})
            return _outcome(game_id, changed=True, message=message)

        notified = False
        failure: Optional[DispatchFailure] = None
        if message is not None:
            if self.webhook_url:
                try:
                    self.client.dispatch_notification(game_id, message, self.webhook_url)
                    notified = True
                except DispatchFailure as exc:
                    failure = exc
            else:
                logger.info("No webhook, not sending a notification", extra={"game_id": game_id, "notification": message})

        self.store.put(game_id, raw)
        if failure is not None:
            raise failure
        return _outcome(game_id, changed=True, message=message, notified=notified, persisted=True)

    def run(self, game_ids: Iterable[str]) -> List[Dict[str, Any]]:
        """Traite chaque partie ; les erreurs sont journalisées et consignées dans `error`."""
        outcomes: List[Dict[str, Any]] = []
        for game_id in game_ids:
            try:
                outcomes.append(self.check_game(game_id))
            except DispatchFailure as exc:
                # le snapshot a déjà été sauvegardé avant la remontée de l'erreur
                logger.error("Notification failed", exc_info=True, extra={"game_id": game_id, "status_code": exc.status_code})
                outcomes.append(_outcome(exc.game_id or game_id, changed=True, message=exc.message, persisted=True, error=str(exc)))
            except (TmNotifyError, ValueError) as exc:
                logger.error("Game check failed", exc_info=True, extra={"game_id": game_id})
                outcomes.append(_outcome(game_id, error=str(exc)))
        return outcomes


def run_configured(config: Settings, game_ids: Optional[Iterable[str]] = None, *, dry_run: bool = False) -> List[Dict[str, Any]]:
    """Construit client/stockage/monitor depuis la configuration puis lance une passe."""
    monitor = GameMonitor(
        build_client(config),
        build_store(config),
        webhook_url=config.WEBHOOK_URL,
        dry_run=dry_run,
    )
    ids = list(game_ids) if game_ids is not None else config.game_ids
    logger.info("Running", extra={"games": ids})
    return monitor.run(ids)
