"""
Service: errors.py
Rôle:
- Taxonomie des erreurs du notifieur. Chaque erreur transporte le `game_id` concerné
  (identifiant de corrélation dans les logs) et un détail lisible.

Notes:
- L'absence de snapshot n'est PAS une erreur : `SnapshotStore.get` renvoie None.
- Le détecteur de changement et le compositeur ne lèvent rien sur des entrées bien formées,
  sauf `ConsistencyError` (données amont contradictoires).
"""
from typing import Optional


class TmNotifyError(RuntimeError):
    """Erreur de base du notifieur."""

    def __init__(self, game_id: Optional[str], detail: str) -> None:
        self.game_id = game_id
        self.detail = detail
        prefix = f"[{game_id}] " if game_id else ""
        super().__init__(f"{prefix}{detail}")


class MalformedResponse(TmNotifyError):
    """Le document (récupéré ou stocké) ne se lit pas comme un état de partie."""


class ConsistencyError(TmNotifyError):
    """Tour complet requis mais aucune faction active signalée par l'amont."""


class UpstreamError(TmNotifyError):
    """Échec de récupération de l'état de partie auprès du serveur de jeu."""


class SnapshotStoreError(TmNotifyError):
    """Échec du backend de stockage (autre qu'un snapshot absent)."""


class DispatchFailure(TmNotifyError):
    """Le webhook a répondu avec un statut non-2xx (ou n'a pas répondu du tout)."""

    def __init__(self, game_id: Optional[str], status_code: Optional[int], message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.message = message  # notification perdue
        if status_code is None:
            detail = "webhook request failed"
        else:
            detail = f"webhook failed with {status_code}"
        super().__init__(game_id, detail)
