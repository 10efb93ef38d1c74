"""
ORM models of the subscription context
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.infrastructure.database.base_model import Base


class SubscriptionModel(Base):
    __tablename__ = "subscriptions"

    subscriber_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    subscription_plan_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    tenant_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class SubscriptionPlanModel(Base):
    __tablename__ = "subscription_plans"

    tenant_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    recurrence_type: Mapped[str] = mapped_column(String(20), nullable=False)
    term_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    billing_day: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    next_billing_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)

    items: Mapped[list[SubscriptionPlanItemModel]] = relationship(
        back_populates="subscription_plan",
        cascade="all, delete-orphan",
        order_by="SubscriptionPlanItemModel.position",
        lazy="selectin",
    )


class SubscriptionPlanItemModel(Base):
    __tablename__ = "subscription_plan_items"

    subscription_plan_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("subscription_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    subscription_plan: Mapped[SubscriptionPlanModel] = relationship(back_populates="items")
