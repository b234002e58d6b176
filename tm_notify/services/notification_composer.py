"""
Service: notification_composer.py
Rôle:
- Dériver au plus UN message de notification depuis un `GameState`.

Priorités (la première règle qui s'applique gagne):
1) Partie terminée (`finished == 1`) → "gameover".
2) Pas de liste d'actions (`action_required` absent) → rien.
3) Une action de type "full" → "<faction active> should take their turn"
   (les actions secondaires sont ignorées pour ce passage).
4) Sinon, une ligne par action secondaire exploitable, jointes par "\\n".

Notes:
- Liste vide et liste absente sont traitées pareil : rien à signaler.
- "leech", "transform"... ne sont pas spécialisés : phrase générique "<faction> may <kind>".
"""
from typing import List, Optional, Sequence

from tm_notify.models.game import ActionRequirement, GameState
from tm_notify.services.errors import ConsistencyError

GAMEOVER_MESSAGE = "gameover"
FULL_TURN_KIND = "full"

# Phrases dédiées pour les actions de faction ; le reste tombe sur "<faction> may <kind>"
FACTION_PHRASES = {
    "dwelling": "{faction} should place a dwelling",
    "cult": "{faction} may advance on a cult track",
    "bonus": "{faction} should pick a bonus tile",
}
PLAYER_PHRASES = {
    "faction": "{player} should pick a faction",
}


def is_full_turn(actions: Sequence[ActionRequirement]) -> bool:
    """True si au moins une action attend un tour complet."""
    return any(action.kind == FULL_TURN_KIND for action in actions)


def looks_finished_legacy(state: GameState) -> bool:
    """
    Heuristique historique : avant l'existence de `finished`, l'absence de
    `action_required` était interprétée comme une fin de partie.
    Ne produit jamais de message ; sert uniquement au diagnostic (logs).
    """
    return state.finished is None and state.required_actions is None


def notify_full_turn(state: GameState, game_id: Optional[str] = None) -> str:
    if state.active_faction is None:
        raise ConsistencyError(game_id, "full turn required but no active faction")
    return f"{state.active_faction} should take their turn"


def _faction_line(action: ActionRequirement) -> Optional[str]:
    if action.faction is None or action.kind is None:
        return None
    template = FACTION_PHRASES.get(action.kind)
    if template:
        return template.format(faction=action.faction)
    return f"{action.faction} may {action.kind}"


def _player_line(action: ActionRequirement) -> Optional[str]:
    if action.player is None or action.kind is None:
        return None
    template = PLAYER_PHRASES.get(action.kind)
    if template:
        return template.format(player=action.player)
    # normalement inatteignable côté amont, mais ne doit pas planter
    return f"{action.player} may {action.kind}"


def notify_lingering(actions: Sequence[ActionRequirement]) -> Optional[str]:
    """Une ligne par action exploitable ; None si aucune ligne n'est produite."""
    lines: List[str] = []
    for action in actions:
        for line in (_faction_line(action), _player_line(action)):
            if line:
                lines.append(line)
    message = "\n".join(lines)
    return message or None


def compose(state: GameState, game_id: Optional[str] = None) -> Optional[str]:
    """
    Compose le message à envoyer pour `state`, ou None s'il n'y a rien à signaler.
    Lève `ConsistencyError` si un tour complet est requis sans faction active.
    """
    if state.is_finished:
        return GAMEOVER_MESSAGE

    actions = state.required_actions
    if actions is None:
        return None

    if is_full_turn(actions):
        return notify_full_turn(state, game_id)
    return notify_lingering(actions)
