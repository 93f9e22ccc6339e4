"""
Subscription Plans Configuration
Feature flags, member limits and pricing per plan. Used by the seed script,
the subscription manager and the feature-gate dependency.
"""

PLAN_ORDER = ["free", "starter", "professional", "enterprise"]

FEATURES = {
    "basicManagement": "Basic club management",
    "teamManagement": "Team management",
    "facilityBooking": "Facility booking",
    "financialReports": "Financial reports",
    "advancedReports": "Advanced reports",
    "automatedEmails": "Automated emails",
    "apiAccess": "API access",
    "prioritySupport": "Priority support",
    "whiteLabel": "White label branding",
    "customIntegrations": "Custom integrations",
    "multiAdmin": "Multiple administrators",
    "bulkImport": "Bulk import",
    "exportData": "Data export",
    "smsNotifications": "SMS notifications",
    "customFields": "Custom fields",
}

_STARTER_FEATURES = {
    "basicManagement", "teamManagement", "facilityBooking",
    "financialReports", "automatedEmails", "exportData",
}

PLAN_FEATURES = {
    "free": {feature: feature == "basicManagement" for feature in FEATURES},
    "starter": {feature: feature in _STARTER_FEATURES for feature in FEATURES},
    "professional": {feature: feature != "whiteLabel" for feature in FEATURES},
    "enterprise": {feature: True for feature in FEATURES},
}

# None means unlimited
MEMBER_LIMITS = {
    "free": 50,
    "starter": 150,
    "professional": 500,
    "enterprise": None,
}

PLAN_PRICING = {
    "free": {"monthly": 0, "yearly": 0},
    "starter": {"monthly": 19, "yearly": 190},
    "professional": {"monthly": 49, "yearly": 490},
    "enterprise": {"monthly": 99, "yearly": 990},
}

PLAN_DISPLAY_NAMES = {
    "free": "Kostenlos",
    "starter": "Vereins-Starter",
    "professional": "Vereins-Profi",
    "enterprise": "Verbands-Lösung",
}

DEFAULT_PLAN = "free"


def required_plan_for(feature: str) -> str:
    """Cheapest plan that enables the feature (enterprise when no plan does)."""
    for plan_type in PLAN_ORDER:
        if PLAN_FEATURES[plan_type].get(feature):
            return plan_type
    return PLAN_ORDER[-1]


def get_plan_definitions():
    """Rows for the subscription_plans table, in plan order."""
    return [
        {
            "name": PLAN_DISPLAY_NAMES[plan_type],
            "plan_type": plan_type,
            "price_monthly": PLAN_PRICING[plan_type]["monthly"],
            "price_yearly": PLAN_PRICING[plan_type]["yearly"],
            "member_limit": MEMBER_LIMITS[plan_type],
            "features": PLAN_FEATURES[plan_type],
            "is_active": True,
            "sort_order": index,
        }
        for index, plan_type in enumerate(PLAN_ORDER)
    ]
