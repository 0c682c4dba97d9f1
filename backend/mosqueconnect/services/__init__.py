from mosqueconnect.services.activity_logger import log_admin_action
from mosqueconnect.services.review_workflow import (
    review_mosque,
    review_business,
    review_volunteer,
    review_certification,
    respond_to_application,
    withdraw_application,
)
from mosqueconnect.services.offer_service import redeem_offer, compute_offer_stats
from mosqueconnect.services.offer_sweeper import OfferStatusSweeper, offer_sweeper, sweep_offer_statuses
from mosqueconnect.services.prayer_times import PrayerTimesClient, prayer_times_client

__all__ = [
    # Audit
    "log_admin_action",
    # Status review
    "review_mosque",
    "review_business",
    "review_volunteer",
    "review_certification",
    "respond_to_application",
    "withdraw_application",
    # Offers
    "redeem_offer",
    "compute_offer_stats",
    "OfferStatusSweeper",
    "offer_sweeper",
    "sweep_offer_statuses",
    # External
    "PrayerTimesClient",
    "prayer_times_client",
]
