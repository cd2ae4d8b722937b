"""
Plan enforcement for CSV uploads and integrations.

The monthly upload counter is reset lazily: whenever a subscription is read
for enforcement or display, a counter that belongs to an earlier calendar
month (UTC) is zeroed and re-stamped with the current month.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from fraudlr.core.exceptions import NotFoundError, PlanLimitError, ValidationError
from fraudlr.core.plan_limits import UNLIMITED, get_plan_limit
from fraudlr.models.integration import Integration
from fraudlr.models.subscription import Subscription, SubscriptionTier

logger = logging.getLogger(__name__)


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def check_and_reset_usage(subscription: Subscription, now: Optional[datetime] = None) -> bool:
    """
    Zero the upload counter when it belongs to a past month.
    Returns True if the subscription was modified; the caller commits.
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    current_period = month_start(now)

    period = subscription.usage_period_start
    if period is not None and _as_utc(period) >= current_period:
        return False

    if subscription.csv_uploads_this_month:
        logger.info(
            "Monthly usage reset for subscription %s (was %s uploads)",
            subscription.id, subscription.csv_uploads_this_month,
        )
    subscription.csv_uploads_this_month = 0
    subscription.usage_period_start = current_period
    return True


def _tier_name(subscription: Subscription) -> str:
    return subscription.tier.value if subscription.tier else SubscriptionTier.FREE.value


def check_upload_limit(subscription: Subscription, now: Optional[datetime] = None) -> None:
    """Raise PlanLimitError if the subscription cannot take another CSV upload this month."""
    if not subscription.is_active:
        raise PlanLimitError("Your subscription is inactive")

    check_and_reset_usage(subscription, now)
    tier = _tier_name(subscription)
    max_uploads = get_plan_limit(tier, "max_csv_uploads_per_month")
    if max_uploads == UNLIMITED:
        return

    if subscription.csv_uploads_this_month >= max_uploads:
        raise PlanLimitError(
            f"Upload limit reached. Your {tier.title()} plan allows {max_uploads} CSV upload(s) per month. "
            "Upgrade to upload more."
        )


def record_upload(db: Session, subscription: Subscription) -> None:
    """
    Count one upload. The increment runs in SQL so concurrent uploads
    against the same row are all counted; the caller commits.
    """
    # Pending changes (e.g. a monthly reset) must land before the increment
    db.flush()
    db.execute(
        update(Subscription)
        .where(Subscription.id == subscription.id)
        .values(csv_uploads_this_month=Subscription.csv_uploads_this_month + 1)
        .execution_options(synchronize_session=False)
    )
    db.expire(subscription, ["csv_uploads_this_month"])


def check_integration_limit(db: Session, subscription: Subscription, exclude_id: Optional[str] = None) -> None:
    """Raise PlanLimitError if the account cannot have another active integration."""
    if not subscription.is_active:
        raise PlanLimitError("Your subscription is inactive")

    tier = _tier_name(subscription)
    max_integrations = get_plan_limit(tier, "max_active_integrations")
    if max_integrations == UNLIMITED:
        return

    query = db.query(Integration).filter(
        Integration.account_id == subscription.account_id,
        Integration.is_active.is_(True),
    )
    if exclude_id:
        query = query.filter(Integration.id != exclude_id)

    if query.count() >= max_integrations:
        raise PlanLimitError(
            f"Integration limit reached. Your {tier.title()} plan allows {max_integrations} active integration(s). "
            "Upgrade to add more."
        )


def change_subscription_tier(db: Session, account_id: str, tier: str) -> Subscription:
    """Move an account to another tier. Used by billing tooling, not exposed over HTTP."""
    try:
        new_tier = SubscriptionTier(tier.upper())
    except ValueError:
        raise ValidationError(f"Unknown tier: {tier}")

    subscription = db.query(Subscription).filter(Subscription.account_id == account_id).first()
    if subscription is None:
        raise NotFoundError("Subscription not found")

    subscription.tier = new_tier
    subscription.is_active = True
    db.commit()
    db.refresh(subscription)
    logger.info("Subscription %s moved to %s", subscription.id, new_tier.value)
    return subscription
