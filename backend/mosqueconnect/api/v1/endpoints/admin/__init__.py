"""
Admin API endpoints for the MosqueConnect admin panel.
All endpoints require the admin role.
"""
from fastapi import APIRouter

from mosqueconnect.api.v1.endpoints.admin import (
    dashboard,
    mosques,
    businesses,
    volunteers,
    halal_certifications,
    announcements,
    users,
    activity_logs,
    user_management,
)

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

# Dashboard routes live directly under /admin (/dashboard, /stats, /activity, /mosque-statistics, /analytics)
admin_router.include_router(dashboard.router, tags=["Admin Dashboard"])
admin_router.include_router(mosques.router, prefix="/mosques", tags=["Admin Mosques"])
admin_router.include_router(businesses.router, prefix="/businesses", tags=["Admin Businesses"])
admin_router.include_router(volunteers.router, prefix="/volunteers", tags=["Admin Volunteers"])
admin_router.include_router(halal_certifications.router, prefix="/halal-certifications", tags=["Admin Halal Certifications"])
admin_router.include_router(announcements.router, prefix="/announcements", tags=["Admin Announcements"])
admin_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
admin_router.include_router(activity_logs.router, prefix="/activity-logs", tags=["Admin Activity Logs"])
admin_router.include_router(user_management.router, prefix="/user-management", tags=["Admin User Management"])
