from menuhost.models.plan import Plan, BillingPeriodUnit, BILLING_TERMS
from menuhost.models.tenant import Tenant
from menuhost.models.user import User, UserRole
from menuhost.models.subscription import Subscription, SubscriptionStatus
