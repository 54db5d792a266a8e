"""
Owner capability passed in by the authentication layer.

Creation policy branches on this one value instead of having separate
anonymous and authenticated code paths.
"""

from dataclasses import dataclass

from shortlink_app.config import settings

ANONYMOUS_OWNER_ID = 0


@dataclass(frozen=True)
class Owner:
    id: int
    is_premium: bool = False

    @property
    def is_anonymous(self) -> bool:
        return self.id == ANONYMOUS_OWNER_ID

    @property
    def can_choose_code(self) -> bool:
        return not self.is_anonymous

    @property
    def min_custom_code_length(self) -> int:
        if self.is_premium:
            return settings.premium_custom_code_min_length
        return settings.custom_code_min_length


ANONYMOUS = Owner(id=ANONYMOUS_OWNER_ID)
