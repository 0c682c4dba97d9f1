# API endpoints
from . import (
    auth,
    mosques,
    businesses,
    business,
    business_products,
    business_offers,
    announcements,
    shop,
    volunteers,
    user_volunteer,
    imam,
    prayer_times,
)

__all__ = [
    "auth",
    "mosques",
    "businesses",
    "business",
    "business_products",
    "business_offers",
    "announcements",
    "shop",
    "volunteers",
    "user_volunteer",
    "imam",
    "prayer_times",
]
