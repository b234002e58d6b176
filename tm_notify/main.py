"""
Point d'entrée CLI
==================

Rôle
----
- Lance une passe de surveillance sur une ou plusieurs parties (cron, systemd timer...).
- Les options surchargent la configuration (`.env` / environnement).

Usage
-----
    tm-notify --game terramysticians20210714 --webhook https://hooks.example/XXX
    tm-notify --game g1 --game g2 --store s3 --bucket tm-notify-state
    tm-notify --dry-run                    # compose et logge sans envoyer ni sauvegarder

Codes de sortie
---------------
- 0 : toutes les parties traitées sans erreur
- 1 : au moins une partie en échec
- 2 : configuration incomplète (aucune partie, bucket manquant...)
"""
import argparse
import logging
import sys
from typing import List, Optional

from tm_notify.config.settings import Settings, settings
from tm_notify.services.monitor import run_configured

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def resolve_log_level(level: str) -> int:
    """Niveau numérique pour `level` ; INFO si le nom est inconnu."""
    value = getattr(logging, (level or "").upper(), None)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str) -> None:
    logging.basicConfig(level=resolve_log_level(level), format=LOG_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tm-notify",
        description="Monitor Terra Mystica games and send updates to a webhook",
    )
    parser.add_argument("--game", action="append", dest="games", help="game to monitor (repeatable)")
    parser.add_argument("--webhook", help="webhook to beep boop in")
    parser.add_argument("--store", choices=["local", "s3"], help="where the last snapshot is kept")
    parser.add_argument("--data-dir", help="directory for local snapshots")
    parser.add_argument("--bucket", help="S3 bucket for snapshots")
    parser.add_argument("--dry-run", action="store_true", help="compose messages without sending or saving")
    parser.add_argument("--log-level", help="logging level (default: LOG_LEVEL setting)")
    return parser


def apply_overrides(args: argparse.Namespace, base: Settings) -> Settings:
    """Retourne une copie de `base` avec les options CLI appliquées."""
    overrides = {}
    if args.games:
        overrides["GAMES"] = ",".join(args.games)
    if args.webhook:
        overrides["WEBHOOK_URL"] = args.webhook
    if args.store:
        overrides["STORE_BACKEND"] = args.store
    if args.data_dir:
        overrides["DATA_DIR"] = args.data_dir
    if args.bucket:
        overrides["S3_BUCKET"] = args.bucket
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    return base.model_copy(update=overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = apply_overrides(args, settings)
    configure_logging(config.LOG_LEVEL)

    if not config.game_ids:
        logger.error("No game to monitor (use --game or GAMES)")
        return 2

    try:
        outcomes = run_configured(config, dry_run=args.dry_run)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    failed = [o["game_id"] for o in outcomes if o.get("error")]
    if failed:
        logger.error("Some games failed", extra={"games": failed})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
