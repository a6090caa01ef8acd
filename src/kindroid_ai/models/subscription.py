"""
Subscription models: POST /check-user-subscription.

Platform and grace-period fields are nullable upstream. ``None`` means the
server sent ``null``; whether a field was sent at all is visible through
``model_fields_set``.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class SubscriptionInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    status: str = ""
    is_subscribed_base: bool = Field(default=False, alias="isSubscribedBase")
    subscription_platform_base: Optional[str] = Field(default=None, alias="subscriptionPlatformBase")
    grace_period_base: Optional[int] = Field(default=None, alias="gracePeriodBase")
    is_subscribed_addon1: bool = Field(default=False, alias="isSubscribedAddon1")
    subscription_platform_addon1: Optional[str] = Field(default=None, alias="subscriptionPlatformAddon1")
    grace_period_addon1: Optional[int] = Field(default=None, alias="gracePeriodAddon1")
    is_subscribed_addon2: bool = Field(default=False, alias="isSubscribedAddon2")
    subscription_platform_addon2: Optional[str] = Field(default=None, alias="subscriptionPlatformAddon2")
    grace_period_addon2: Optional[int] = Field(default=None, alias="gracePeriodAddon2")

    def has_field(self, name: str) -> bool:
        """True if the server included ``name`` in the response (even as null)."""
        return name in self.model_fields_set
