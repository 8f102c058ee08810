"""Subscription of the signed-in user.

Users who never subscribed have no row; they are on the free plan.
"""

from __future__ import annotations

from typing import Optional

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.keys import QueryKeys
from tenderdesk.features.plans import PLANS, PlanFeatures, PlanLimits
from tenderdesk.shared.constants import Tables
from tenderdesk.shared.models.database import Subscription
from tenderdesk.shared.models.table_query import TableQuery
from tenderdesk.shared.types import ModelConverter


def default_subscription(user_id: str) -> Subscription:
    return Subscription(user_id=user_id, plan="free", status="active")


class SubscriptionService(FeatureService):
    def subscription_query(self) -> QuerySpec:
        user_id = self.company.user_id

        async def load() -> Subscription:
            row = await self.data.select(
                TableQuery(Tables.SUBSCRIPTIONS, eq={"user_id": user_id}).maybe_single()
            )
            if row is None:
                return default_subscription(user_id)
            return ModelConverter.to_model(row, Subscription)

        key = QueryKeys.subscription(user_id) if user_id else None
        return query_spec(key, load)

    async def get_subscription(self) -> Optional[Subscription]:
        return await self.subscription_query().fetch(self.client)

    async def plan_features(self) -> PlanFeatures:
        subscription = await self.get_subscription()
        return PLANS[subscription.plan if subscription else "free"].features

    async def plan_limits(self) -> PlanLimits:
        subscription = await self.get_subscription()
        return PlanLimits.for_plan(subscription.plan if subscription else None)
