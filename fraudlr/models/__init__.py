from fraudlr.models.account import Account
from fraudlr.models.case import Case, CaseStatus
from fraudlr.models.integration import Integration, IntegrationType
from fraudlr.models.subscription import Subscription, SubscriptionTier

__all__ = [
    "Account",
    "Case",
    "CaseStatus",
    "Integration",
    "IntegrationType",
    "Subscription",
    "SubscriptionTier",
]
