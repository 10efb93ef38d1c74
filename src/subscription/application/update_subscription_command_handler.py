"""
UpdateSubscriptionCommand handler
Applies pause/activate transitions; activation advances the plan's billing date
"""
from __future__ import annotations

from typing import Optional

from shared.application.command_handler import CommandHandler
from shared.application.commands import UpdateSubscriptionCommand
from shared.exceptions import NotFoundError
from shared.infrastructure.observability.logger import get_logger
from shared.utils.clock import Clock, utc_today
from subscription.application.ports import EmailMessage, EmailService
from subscription.domain.repositories import ISubscriptionPlanRepository, ISubscriptionRepository
from subscription.domain.subscription import Subscription

logger = get_logger(__name__)


class UpdateSubscriptionCommandHandler(CommandHandler[UpdateSubscriptionCommand, None]):
    """
    Pause (``pause_subscription=True``) or activate/resume a subscription.

    On activation the owning plan is advanced by one billing period and
    persisted before the subscription, so a failed plan write leaves the
    subscription in its previous state and the command can be retried.
    This is the only caller of ``SubscriptionPlan.update_next_billing_date``.
    """

    def __init__(
        self,
        subscription_repository: ISubscriptionRepository,
        subscription_plan_repository: ISubscriptionPlanRepository,
        email_service: Optional[EmailService] = None,
        today: Clock = utc_today,
    ) -> None:
        self._subscription_repository = subscription_repository
        self._subscription_plan_repository = subscription_plan_repository
        self._email_service = email_service
        self._today = today

    async def handle(self, command: UpdateSubscriptionCommand) -> None:
        subscription = await self._subscription_repository.get_subscription_by_id(command.subscription_id)
        if subscription is None:
            raise NotFoundError("notfound.subscription", details={"subscription_id": str(command.subscription_id)})

        if command.pause_subscription:
            subscription.pause()
        else:
            plan = await self._subscription_plan_repository.get_subscription_plan_by_id(
                subscription.subscription_plan_id
            )
            if plan is None:
                raise NotFoundError(
                    "notfound.subscription_plan",
                    details={"subscription_plan_id": str(subscription.subscription_plan_id)},
                )
            subscription.activate()
            next_billing_date = plan.update_next_billing_date(today=self._today())
            await self._subscription_plan_repository.update_subscription_plan(plan)
            logger.info(
                "subscription_plan_billing_date_advanced",
                subscription_plan_id=str(plan.id),
                next_billing_date=next_billing_date.isoformat(),
            )

        await self._subscription_repository.update_subscription(subscription)
        logger.info(
            "subscription_updated",
            subscription_id=str(subscription.id),
            status=subscription.status.value,
        )

        await self._notify(subscription, command)

    async def _notify(self, subscription: Subscription, command: UpdateSubscriptionCommand) -> None:
        if self._email_service is None or not command.customer_email:
            return

        if subscription.is_paused():
            message = EmailMessage(
                email=command.customer_email,
                title="Subscription paused",
                message=f"Your subscription was paused for the following reason: {command.reason}",
            )
        else:
            message = EmailMessage(
                email=command.customer_email,
                title="Subscription renewed",
                message="Your subscription was renewed successfully",
            )
        await self._email_service.send(message)
