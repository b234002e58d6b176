"""
Models / game.py
Rôle:
- Représentation typée du sous-ensemble du document `view-game` que le notifieur comprend.
- Parsing tolérant : chaque champ peut être absent ou null, les champs inconnus sont ignorés.

Champs (noms amont entre parenthèses):
- finished: drapeau de fin de partie (1 = terminée), ajouté tardivement côté serveur.
- active_faction: faction dont le tour complet est attendu.
- required_actions (`action_required`): actions en attente, ordre conservé.
- ActionRequirement.kind (`type`): catégorie d'action ("full", "dwelling", "cult", "leech"...).

Notes:
- Types stricts : `"1"` pour `finished` ou un nombre pour une faction sont refusés
  (→ `MalformedResponse`) au lieu d'être convertis silencieusement.
- L'égalité entre deux `GameState` est structurelle (champs + ordre des listes) ;
  on ne compare jamais les octets bruts, l'ordre des clés JSON amont n'est pas stable.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from tm_notify.services.errors import MalformedResponse
from tm_notify.services.io_utils import JSONDecodeError, loads


class ActionRequirement(BaseModel):
    """Une action requise, adressée à une faction ou directement à un joueur."""
    from_faction: Optional[StrictStr] = None  # faction à l'origine (non utilisée pour les messages)
    kind: Optional[StrictStr] = Field(default=None, alias="type")
    faction: Optional[StrictStr] = None  # portée faction
    player: Optional[StrictStr] = None  # portée joueur (avant attribution des factions)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GameState(BaseModel):
    """Snapshot d'une partie tel que renvoyé par l'amont (sous-ensemble utile)."""
    finished: Optional[StrictInt] = None
    active_faction: Optional[StrictStr] = None
    required_actions: Optional[List[ActionRequirement]] = Field(default=None, alias="action_required")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def is_finished(self) -> bool:
        return self.finished == 1


def parse_game_state(raw: Union[bytes, str, Dict[str, Any]], game_id: Optional[str] = None) -> GameState:
    """
    Construit un `GameState` depuis des octets JSON (ou un dict déjà décodé).
    Lève `MalformedResponse` si le JSON est invalide, si la racine n'est pas un objet
    ou si un champ connu a un type inattendu.
    """
    if isinstance(raw, (bytes, bytearray, str)):
        try:
            doc = loads(raw)
        except JSONDecodeError as exc:
            raise MalformedResponse(game_id, f"invalid JSON: {exc}") from exc
    else:
        doc = raw

    if not isinstance(doc, dict):
        raise MalformedResponse(game_id, f"expected a JSON object, got {type(doc).__name__}")

    try:
        return GameState.model_validate(doc)
    except ValidationError as exc:
        raise MalformedResponse(game_id, f"unexpected game document: {exc.error_count()} invalid field(s)") from exc
