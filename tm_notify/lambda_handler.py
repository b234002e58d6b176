"""
Point d'entrée serverless (AWS Lambda, déclenché par une règle planifiée).

- `handler(event, context)` lance une passe sur les parties configurées
  (ou sur `event["games"]` si fourni) et renvoie les résultats.
- Aucune partie à surveiller → `TmNotifyError` (erreur de configuration, comme la CLI).
- Si au moins une partie échoue, une `TmNotifyError` est levée pour que le
  planificateur voie l'échec et applique sa propre politique de relance.
"""
import logging
from typing import Any, Dict, List, Optional

from tm_notify.config.settings import settings
from tm_notify.main import LOG_FORMAT, resolve_log_level
from tm_notify.services.errors import TmNotifyError
from tm_notify.services.monitor import run_configured

logger = logging.getLogger(__name__)


def _event_games(event: Optional[Dict[str, Any]]) -> Optional[List[str]]:
    if not isinstance(event, dict):
        return None
    games = event.get("games")
    if isinstance(games, str):
        games = games.split(",")
    if not isinstance(games, list):
        return None
    ids = [str(g).strip() for g in games if str(g).strip()]
    return ids or None


def handler(event: Optional[Dict[str, Any]], context: Any = None) -> List[Dict[str, Any]]:
    # Le runtime Lambda installe déjà un handler racine : on ajuste seulement le niveau.
    level = resolve_log_level(settings.LOG_LEVEL)
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    game_ids = _event_games(event) or settings.game_ids
    if not game_ids:
        raise TmNotifyError(None, "no game to monitor (GAMES or event['games'])")

    outcomes = run_configured(settings, game_ids)
    failed = [o["game_id"] for o in outcomes if o.get("error")]
    if failed:
        raise TmNotifyError(None, f"{len(failed)} game(s) failed: {', '.join(failed)}")
    return outcomes
