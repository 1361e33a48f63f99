#!/usr/bin/env python3
"""
Create an administrator account

The account is created verified and active, so it can log in immediately.
The password must meet the same rules as coach registration (12+ characters,
upper and lower case, a number and a special character).

Usage:
    python scripts/create_admin.py --email EMAIL --password PASSWORD [--first-name NAME] [--last-name NAME]

Examples:
    python scripts/create_admin.py --email head@club.org --password 'Backstroke#2024x'

    python scripts/create_admin.py --email ops@club.org --password 'Backstroke#2024x' \\
        --first-name Grace --last-name Hopper
"""
import sys
import argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from coachhub.exceptions import CoachHubError, RegistrationValidationError
from coachhub.models.base import SessionLocal, init_db
from coachhub.services.admin_accounts import create_admin
from coachhub.utils.logger import log


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Create a verified administrator account')
    parser.add_argument('--email', required=True, help='Email address for the new admin')
    parser.add_argument('--password', required=True, help='Password for the new admin')
    parser.add_argument('--first-name', default='Admin', help='First name (default: Admin)')
    parser.add_argument('--last-name', default='User', help='Last name (default: User)')

    args = parser.parse_args(argv)

    init_db()
    db = SessionLocal()
    try:
        user = create_admin(db, args.email, args.password, args.first_name, args.last_name)
    except RegistrationValidationError as e:
        for field, problems in e.errors.items():
            for problem in problems:
                log.error(f"{field}: {problem}")
        return 1
    except CoachHubError as e:
        log.error(e.message)
        return 1
    else:
        log.info(f"Admin user created: {user.email} (id {user.id})")
        return 0
    finally:
        db.close()


if __name__ == '__main__':
    sys.exit(main())
