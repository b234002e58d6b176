"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du notifieur (parties suivies, webhook, stockage, HTTP, logs).
- Les valeurs par défaut conviennent pour un lancement local (stockage disque dans /tmp).
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement,
  puis via les options de la ligne de commande (`tm_notify.main`).

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services importent `from tm_notify.config.settings import settings`.

Bonnes pratiques
----------------
- *Ne commitez pas* l'URL réelle du webhook (`WEBHOOK_URL`) : c'est un secret.
- `GAMES` est une liste séparée par des virgules (ex: `"game1,game2"`).
- `STORE_BACKEND="s3"` exige `S3_BUCKET`.

Exemples de `.env`
------------------
GAMES="terramysticians20210714"
WEBHOOK_URL="https://hooks.slack.com/workflows/XXX"
STORE_BACKEND="s3"
S3_BUCKET="tm-notify-state"
LOG_LEVEL="DEBUG"
"""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Identifiants de parties suivies, séparés par des virgules
    GAMES: str = ""
    # Webhook de notification (optionnel : sans webhook, on se contente de logger)
    WEBHOOK_URL: Optional[str] = None

    # Endpoint amont qui renvoie l'état d'une partie
    VIEW_GAME_URL: str = "https://terra.snellman.net/app/view-game/"

    # Stockage du dernier snapshot : "local" (disque) ou "s3"
    STORE_BACKEND: str = "local"
    DATA_DIR: str = "/tmp/tm-notify"
    S3_BUCKET: Optional[str] = None
    S3_PREFIX: str = "games"

    # Timeouts HTTP (connect, read), une seule tentative par appel
    HTTP_CONNECT_TIMEOUT: float = 5.0
    HTTP_READ_TIMEOUT: float = 30.0

    LOG_LEVEL: str = "INFO"

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def game_ids(self) -> List[str]:
        """Liste nettoyée des parties (vides et doublons retirés, ordre conservé)."""
        ids: List[str] = []
        for raw in self.GAMES.split(","):
            gid = raw.strip()
            if gid and gid not in ids:
                ids.append(gid)
        return ids

    @property
    def http_timeout(self) -> tuple[float, float]:
        return (self.HTTP_CONNECT_TIMEOUT, self.HTTP_READ_TIMEOUT)


# Instance unique importable partout : `settings`
settings = Settings()
