# Re-export all models for convenient imports
from mosqueconnect.models.user import User, UserRole, VolunteerStatus
from mosqueconnect.models.mosque import Mosque, MosqueStatus, MosqueService
from mosqueconnect.models.business import Business, BusinessCategory, BusinessStatus, VerificationStatus
from mosqueconnect.models.product import Product, ProductStatus
from mosqueconnect.models.offer import Offer, OfferStatus, DiscountType
from mosqueconnect.models.volunteer import (
    Volunteer, VolunteerProfile, VolunteerRegistrationStatus, VolunteerCategory
)
from mosqueconnect.models.volunteer_application import VolunteerApplication, ApplicationStatus, Priority
from mosqueconnect.models.volunteer_need import VolunteerNeed, VolunteerNeedApplicant, NeedStatus, ApplicantStatus
from mosqueconnect.models.volunteer_offer import (
    VolunteerOffer, VolunteerOfferInterest, VolunteerOfferStatus, InterestStatus
)
from mosqueconnect.models.announcement import (
    Announcement, AnnouncementType, AnnouncementPriority, TargetAudience
)
from mosqueconnect.models.halal_certification import HalalCertification, CertificationStatus
from mosqueconnect.models.activity_log import ActivityLog

__all__ = [
    # Users
    "User",
    "UserRole",
    "VolunteerStatus",
    # Mosques
    "Mosque",
    "MosqueStatus",
    "MosqueService",
    # Businesses
    "Business",
    "BusinessCategory",
    "BusinessStatus",
    "VerificationStatus",
    "Product",
    "ProductStatus",
    "Offer",
    "OfferStatus",
    "DiscountType",
    "Announcement",
    "AnnouncementType",
    "AnnouncementPriority",
    "TargetAudience",
    "HalalCertification",
    "CertificationStatus",
    # Volunteers
    "Volunteer",
    "VolunteerProfile",
    "VolunteerRegistrationStatus",
    "VolunteerCategory",
    "VolunteerApplication",
    "ApplicationStatus",
    "Priority",
    "VolunteerNeed",
    "VolunteerNeedApplicant",
    "NeedStatus",
    "ApplicantStatus",
    "VolunteerOffer",
    "VolunteerOfferInterest",
    "VolunteerOfferStatus",
    "InterestStatus",
    # Audit
    "ActivityLog",
]
