#!/usr/bin/env python3
"""
Change the role of an existing account

Usage:
    python scripts/set_role.py --email EMAIL [--role admin|coach]

Examples:
    # Promote a coach to administrator
    python scripts/set_role.py --email coach@club.org

    # Demote an administrator back to coach
    python scripts/set_role.py --email head@club.org --role coach
"""
import sys
import argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from coachhub.exceptions import CoachHubError
from coachhub.models.base import SessionLocal, init_db
from coachhub.services.admin_accounts import ROLES, set_role
from coachhub.utils.logger import log


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Change the role of an existing account')
    parser.add_argument('--email', required=True, help='Email address of the account')
    parser.add_argument('--role', default='admin', choices=ROLES, help='New role (default: admin)')

    args = parser.parse_args(argv)

    init_db()
    db = SessionLocal()
    try:
        user, changed = set_role(db, args.email, args.role)
    except CoachHubError as e:
        log.error(f"{e.message}: {args.email}")
        return 1
    else:
        if changed:
            log.info(f"{user.email} is now {args.role}")
        else:
            log.info(f"{user.email} already has role {args.role}, nothing to do")
        return 0
    finally:
        db.close()


if __name__ == '__main__':
    sys.exit(main())
