import io
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from tm_notify.config.settings import Settings
from tm_notify.models.game import parse_game_state
from tm_notify.services.errors import SnapshotStoreError
from tm_notify.services.snapshot_store import (
    LocalSnapshotStore,
    S3SnapshotStore,
    build_store,
)

RAW = b'{"active_faction": "witches", "action_required": [{"type": "full", "faction": "witches"}], "ledger": []}'


def _client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_local_store_missing_snapshot(tmp_path):
    store = LocalSnapshotStore(tmp_path / "snapshots")
    assert store.get("g1") is None


def test_local_store_round_trip(tmp_path):
    store = LocalSnapshotStore(tmp_path / "snapshots")

    store.put("g1", RAW)

    assert (tmp_path / "snapshots" / "g1.json").read_bytes() == RAW
    loaded = store.get("g1")
    assert loaded == RAW
    assert parse_game_state(loaded).model_dump() == parse_game_state(RAW).model_dump()


def test_local_store_overwrites(tmp_path):
    store = LocalSnapshotStore(tmp_path)
    store.put("g1", b'{"finished": 0}')
    store.put("g1", b'{"finished": 1}')
    assert store.get("g1") == b'{"finished": 1}'


@pytest.mark.parametrize("game_id", ["", "  ", "../escape", "a/b", "a\\b", ".."])
def test_local_store_rejects_unsafe_ids(tmp_path, game_id):
    store = LocalSnapshotStore(tmp_path)
    with pytest.raises(ValueError):
        store.put(game_id, RAW)


def test_s3_store_reads_body():
    client = Mock()
    client.get_object.return_value = {"Body": io.BytesIO(RAW)}
    store = S3SnapshotStore("bucket", client=client)

    assert store.get("g1") == RAW
    client.get_object.assert_called_once_with(Bucket="bucket", Key="games/g1.json")


def test_s3_store_missing_key_is_first_observation():
    client = Mock()
    client.get_object.side_effect = _client_error("NoSuchKey")
    store = S3SnapshotStore("bucket", client=client)

    assert store.get("g1") is None


def test_s3_store_other_errors_surface():
    client = Mock()
    client.get_object.side_effect = _client_error("AccessDenied")
    store = S3SnapshotStore("bucket", client=client)

    with pytest.raises(SnapshotStoreError) as excinfo:
        store.get("g1")
    assert excinfo.value.game_id == "g1"


def test_s3_store_put():
    client = Mock()
    store = S3SnapshotStore("bucket", prefix="/state/", client=client)

    store.put("g1", RAW)

    client.put_object.assert_called_once_with(Bucket="bucket", Key="state/g1.json", Body=RAW)


def test_s3_store_put_failure():
    client = Mock()
    client.put_object.side_effect = _client_error("InternalError", "PutObject")
    store = S3SnapshotStore("bucket", client=client)

    with pytest.raises(SnapshotStoreError):
        store.put("g1", RAW)


def test_build_store_local(tmp_path):
    store = build_store(Settings(STORE_BACKEND="local", DATA_DIR=str(tmp_path)))
    assert isinstance(store, LocalSnapshotStore)
    assert store.data_dir == tmp_path


def test_build_store_s3(monkeypatch):
    fake_client = SimpleNamespace(get_object=Mock(), put_object=Mock())
    monkeypatch.setattr("tm_notify.services.snapshot_store.boto3.client", lambda service: fake_client)

    store = build_store(Settings(STORE_BACKEND="s3", S3_BUCKET="bucket", S3_PREFIX="games"))

    assert isinstance(store, S3SnapshotStore)
    assert store.client is fake_client
    assert store.bucket == "bucket"


@pytest.mark.parametrize(
    "config",
    [
        Settings(STORE_BACKEND="s3", S3_BUCKET=None),
        Settings(STORE_BACKEND="dynamo"),
    ],
)
def test_build_store_rejects_bad_config(config):
    with pytest.raises(ValueError):
        build_store(config)
