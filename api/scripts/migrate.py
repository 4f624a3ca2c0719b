#!/usr/bin/env python
"""
Helper de migraciones con Alembic (API de Python, sin subprocess).

Uso:
    python scripts/migrate.py upgrade              # Aplicar migraciones pendientes
    python scripts/migrate.py downgrade [-1]       # Revertir migraciones
    python scripts/migrate.py revision "desc"      # Nueva migracion (autogenerate)
    python scripts/migrate.py current              # Version actual
    python scripts/migrate.py history              # Historial
"""
import argparse
from pathlib import Path

from alembic import command
from alembic.config import Config


API_DIR = Path(__file__).resolve().parent.parent


def _alembic_config() -> Config:
    config = Config(str(API_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(API_DIR / "alembic"))
    config.set_main_option("prepend_sys_path", str(API_DIR))
    return config


def main() -> int:
    parser = argparse.ArgumentParser(description="Migraciones del subregistro")
    sub = parser.add_subparsers(dest="command", required=True)

    up = sub.add_parser("upgrade", help="Aplicar migraciones (default: head)")
    up.add_argument("target", nargs="?", default="head")

    down = sub.add_parser("downgrade", help="Revertir migraciones (default: -1)")
    down.add_argument("target", nargs="?", default="-1")

    rev = sub.add_parser("revision", help="Crear nueva migracion con autogenerate")
    rev.add_argument("message")
    rev.add_argument("--empty", action="store_true", help="Sin autogenerate")

    sub.add_parser("current", help="Ver version actual")
    sub.add_parser("history", help="Ver historial de migraciones")

    args = parser.parse_args()
    config = _alembic_config()

    if args.command == "upgrade":
        command.upgrade(config, args.target)
    elif args.command == "downgrade":
        command.downgrade(config, args.target)
    elif args.command == "revision":
        command.revision(config, message=args.message, autogenerate=not args.empty)
    elif args.command == "current":
        command.current(config, verbose=True)
    elif args.command == "history":
        command.history(config, verbose=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
