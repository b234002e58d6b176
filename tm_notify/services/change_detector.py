"""
Service: change_detector.py
Rôle:
- Décider si l'état fraîchement récupéré diffère du dernier snapshot connu.

Notes:
- Pas de snapshot (première observation) → changé.
- Comparaison structurelle des modèles (champs connus + ordre des listes), jamais des octets bruts.
"""
from typing import Optional

from tm_notify.models.game import GameState


def has_changed(previous: Optional[GameState], current: GameState) -> bool:
    """True si `previous` est absent ou structurellement différent de `current`."""
    if previous is None:
        return True
    return previous.model_dump() != current.model_dump()
