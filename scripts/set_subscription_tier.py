#!/usr/bin/env python3
"""
Change the subscription tier of an account (billing/admin tooling).

Run from project root with DATABASE_URL set:
  python scripts/set_subscription_tier.py user@example.com STANDARD
  DATABASE_URL='postgresql://...' python scripts/set_subscription_tier.py user@example.com PRO
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
load_dotenv(project_root / ".env")

from fraudlr.core.config import Settings
from fraudlr.core.exceptions import FraudlrError
from fraudlr.db.session import build_engine, build_session_factory
from fraudlr.models.subscription import SubscriptionTier
from fraudlr.services.accounts import get_account_by_email
from fraudlr.services.usage import change_subscription_tier


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("email")
    parser.add_argument("tier", choices=[t.value for t in SubscriptionTier], type=str.upper)
    args = parser.parse_args()

    settings = Settings()
    engine = build_engine(settings.DATABASE_URL)
    sess = build_session_factory(engine)()

    try:
        account = get_account_by_email(sess, args.email)
        if account is None:
            print(f"ERROR: no account with email {args.email}")
            return 1
        subscription = change_subscription_tier(sess, account.id, args.tier)
        print(f"{account.email}: {subscription.tier.value} (uploads this month: {subscription.csv_uploads_this_month})")
        return 0
    except FraudlrError as e:
        print(f"ERROR: {e.message}")
        return 1
    finally:
        sess.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
