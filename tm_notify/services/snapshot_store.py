"""
Service: snapshot_store.py
Rôle:
- Lire/écrire les octets bruts du dernier état vu, un snapshot par partie (clé = game_id).
- Deux backends : disque local (lancement CLI) et S3 (déploiement serverless).

Stockage:
- local : `<DATA_DIR>/<game_id>.json`
- s3    : `s3://<bucket>/<prefix>/<game_id>.json`

Contrat:
- get(game_id) → bytes | None (None = aucun snapshot, première observation)
- put(game_id, data) → écrase la valeur précédente (aucun historique conservé)
"""
import logging
from pathlib import Path
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from tm_notify.config.settings import Settings
from .errors import SnapshotStoreError
from .io_utils import read_bytes, write_bytes

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".json"
NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def check_game_id(game_id: str) -> str:
    """Normalise un game_id (espaces retirés) ; ValueError s'il ne peut pas servir de clé."""
    gid = (game_id or "").strip()
    if not gid or "/" in gid or "\\" in gid or gid in (".", ".."):
        raise ValueError(f"invalid game id: {game_id!r}")
    return gid


class SnapshotStore:
    """Interface commune des backends de snapshot."""

    def get(self, game_id: str) -> Optional[bytes]:
        raise NotImplementedError

    def put(self, game_id: str, data: bytes) -> None:
        raise NotImplementedError


class LocalSnapshotStore(SnapshotStore):
    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, game_id: str) -> Path:
        return self.data_dir / f"{check_game_id(game_id)}{SNAPSHOT_SUFFIX}"

    def get(self, game_id: str) -> Optional[bytes]:
        path = self._path(game_id)
        try:
            data = read_bytes(path)
        except OSError as exc:
            raise SnapshotStoreError(game_id, f"cannot read {path}: {exc}") from exc
        if data is None:
            logger.info("No previous snapshot", extra={"game_id": game_id, "snapshot_path": str(path)})
        return data

    def put(self, game_id: str, data: bytes) -> None:
        path = self._path(game_id)
        logger.info("Saving snapshot", extra={"game_id": game_id, "snapshot_path": str(path)})
        try:
            write_bytes(path, data)
        except OSError as exc:
            raise SnapshotStoreError(game_id, f"cannot write {path}: {exc}") from exc


class S3SnapshotStore(SnapshotStore):
    def __init__(self, bucket: str, prefix: str = "games", *, client: Optional[Any] = None) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.client = client or boto3.client("s3")

    def _key(self, game_id: str) -> str:
        name = f"{check_game_id(game_id)}{SNAPSHOT_SUFFIX}"
        return f"{self.prefix}/{name}" if self.prefix else name

    def get(self, game_id: str) -> Optional[bytes]:
        key = self._key(game_id)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                # clé absente → nouvelle partie
                logger.info("No such key, assuming this is a new game", extra={"game_id": game_id, "s3_key": key})
                return None
            raise SnapshotStoreError(game_id, f"cannot read s3://{self.bucket}/{key}: {code}") from exc
        except BotoCoreError as exc:
            raise SnapshotStoreError(game_id, f"cannot read s3://{self.bucket}/{key}: {exc}") from exc

    def put(self, game_id: str, data: bytes) -> None:
        key = self._key(game_id)
        logger.info("Saving snapshot", extra={"game_id": game_id, "s3_key": key})
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data)
        except (ClientError, BotoCoreError) as exc:
            raise SnapshotStoreError(game_id, f"cannot write s3://{self.bucket}/{key}: {exc}") from exc


def build_store(config: Settings) -> SnapshotStore:
    """Sélectionne le backend selon `STORE_BACKEND` ("local" ou "s3")."""
    backend = (config.STORE_BACKEND or "local").strip().lower()
    if backend == "local":
        return LocalSnapshotStore(config.DATA_DIR)
    if backend == "s3":
        if not config.S3_BUCKET:
            raise ValueError("S3_BUCKET is required when STORE_BACKEND is 's3'")
        return S3SnapshotStore(config.S3_BUCKET, config.S3_PREFIX)
    raise ValueError(f"unknown store backend: {config.STORE_BACKEND!r}")
