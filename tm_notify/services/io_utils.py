"""
Utilitaires IO (rapides) basés sur orjson.
- read_bytes(Path) → bytes | None (None si fichier manquant)
- write_bytes(Path, data) → écrit en binaire (création des dossiers si besoin)
- loads(data) → objet Python depuis des bytes/str JSON

Attention:
- orjson renvoie/attend des bytes; on lit/écrit en mode binaire.
- Les snapshots sont stockés tels quels (octets bruts reçus de l'amont), sans re-sérialisation.
"""
import orjson as json
from pathlib import Path
from typing import Any, Optional, Union

JSONDecodeError = json.JSONDecodeError


def read_bytes(path: Path) -> Optional[bytes]:
    """Lit un fichier binaire (ou None s'il n'existe pas)."""
    if not path.exists():
        return None
    with path.open("rb") as f:
        return f.read()


def write_bytes(path: Path, data: bytes) -> None:
    """Écrit un fichier binaire en écrasant l'existant (dossier parent créé si absent)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        f.write(data)


def loads(data: Union[bytes, str]) -> Any:
    return json.loads(data)
