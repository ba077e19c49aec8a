"""Seed (or, with --reset, recreate) the super-admin user."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app  # noqa: E402
from bootstrap import ensure_super_admin, reset_super_admin  # noqa: E402
from config import Config  # noqa: E402


class _ScriptConfig(Config):
    # The script performs the seeding itself.
    SEED_SUPER_ADMIN = False


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--reset",
        action="store_true",
        help="remove and recreate the super-admin with the default password",
    )
    args = parser.parse_args(argv)

    app = create_app(_ScriptConfig)
    with app.app_context():
        if args.reset:
            credentials = reset_super_admin()
            print(f"Super-admin reset: {credentials['email']}")
        else:
            user = ensure_super_admin()
            print(f"Super-admin present: {user.email} (id={user.id})")


if __name__ == "__main__":
    main()
