"""
Subscription Application Layer
Service, command handler and the charge job
"""
from subscription.application.charge_subscription_job import ChargeSubscriptionJob
from subscription.application.subscription_service import SubscriptionService
from subscription.application.update_subscription_command_handler import UpdateSubscriptionCommandHandler

__all__ = [
    "ChargeSubscriptionJob",
    "SubscriptionService",
    "UpdateSubscriptionCommandHandler",
]
