from fastapi import APIRouter
from mosqueconnect.api.v1.endpoints import (
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
from mosqueconnect.api.v1.endpoints.admin import admin_router

api_router = APIRouter()

# Public directory
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(mosques.router, prefix="/mosques", tags=["Mosques"])
api_router.include_router(businesses.router, prefix="/businesses", tags=["Businesses"])
api_router.include_router(announcements.public_router, prefix="/announcements", tags=["Announcements"])
api_router.include_router(shop.router, prefix="/shop", tags=["Shop"])
api_router.include_router(prayer_times.router, tags=["Prayer Times"])

# Business owner dashboard
api_router.include_router(business_products.router, prefix="/business/products", tags=["Business Products"])
api_router.include_router(business_offers.router, prefix="/business/offers", tags=["Business Offers"])
api_router.include_router(announcements.router, prefix="/business/announcements", tags=["Business Announcements"])
api_router.include_router(business.router, prefix="/business", tags=["Business"])

# Volunteering
api_router.include_router(volunteers.router, prefix="/volunteers", tags=["Volunteers"])
api_router.include_router(user_volunteer.router, prefix="/user/volunteer", tags=["My Volunteering"])
api_router.include_router(user_volunteer.registration_router, prefix="/volunteer", tags=["Volunteer Registration"])

# Imam and admin
api_router.include_router(imam.router, prefix="/imam", tags=["Imam"])
api_router.include_router(admin_router)
