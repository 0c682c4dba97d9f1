"""
Admin Dashboard endpoints - KPIs, platform stats, activity feed and mosque statistics.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.models import (
    User,
    Mosque,
    MosqueStatus,
    Business,
    VerificationStatus,
    Volunteer,
    VolunteerRegistrationStatus,
    HalalCertification,
    CertificationStatus,
    Product,
    Offer,
    OfferStatus,
    Announcement,
    MosqueService,
    VolunteerApplication,
    VolunteerOffer,
)
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.admin import (
    DashboardStats,
    EntityCounts,
    ActivityFeedResponse,
    ActivityItem,
    PlatformStats,
    MosqueStatistics,
    TimeRange,
    LocationCount,
    GrowthRates,
    AnalyticsOverview,
    UserAnalytics,
    MosqueAnalytics,
    BusinessAnalytics,
    TopMosque,
    VolunteerAnalytics,
    AnalyticsResponse,
)
from mosqueconnect.utils.queries import json_contains

router = APIRouter()


async def count_by(db: AsyncSession, column) -> Dict[str, int]:
    """{enum value: row count} for a status-like column; NULLs are skipped"""
    result = await db.execute(select(column, func.count()).group_by(column))
    return {
        getattr(key, "value", str(key)): count
        for key, count in result.all()
        if key is not None
    }


async def service_counts(db: AsyncSession, limit: Optional[int] = None) -> Dict[str, int]:
    """Mosques offering each service, most common first"""
    counts = {}
    for service in MosqueService:
        total = await db.scalar(
            select(func.count(Mosque.id)).where(json_contains(Mosque.services, service.value))
        )
        if total:
            counts[service.value] = total
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return dict(ranked[:limit] if limit else ranked)


async def top_locations(db: AsyncSession, city, state=None, limit: int = 10) -> List[LocationCount]:
    """Busiest city (and state) pairs"""
    columns = [city] if state is None else [city, state]
    total = func.count().label("total")
    result = await db.execute(
        select(*columns, total)
        .where(city.is_not(None))
        .group_by(*columns)
        .order_by(total.desc(), city.asc())
        .limit(limit)
    )
    return [
        LocationCount(city=row[0], state=row[1] if state is not None else None, count=row[-1])
        for row in result.all()
    ]


async def count_created(db: AsyncSession, model, start: datetime, end: Optional[datetime] = None) -> int:
    query = select(func.count()).select_from(model).where(model.created_at >= start)
    if end is not None:
        query = query.where(model.created_at < end)
    return await db.scalar(query) or 0


def growth_rate(current: int, previous: int) -> int:
    if previous <= 0:
        return 0
    return round((current - previous) / previous * 100)


def entity_counts(by_status: Dict[str, int], approved_key: str = "approved") -> EntityCounts:
    return EntityCounts(
        total=sum(by_status.values()),
        pending=by_status.get("pending", 0),
        approved=by_status.get(approved_key, 0),
        rejected=by_status.get("rejected", 0),
    )


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Get dashboard KPI statistics"""
    now = datetime.utcnow()
    week_start = now - timedelta(days=7)

    total_users = await db.scalar(select(func.count(User.id))) or 0
    new_users_week = await db.scalar(
        select(func.count(User.id)).where(User.created_at >= week_start)
    ) or 0

    mosques = await count_by(db, Mosque.status)
    businesses = await count_by(db, Business.verification_status)
    volunteers = await count_by(db, Volunteer.status)
    certifications = await count_by(db, HalalCertification.status)

    total_products = await db.scalar(select(func.count(Product.id))) or 0
    active_offers = await db.scalar(
        select(func.count(Offer.id)).where(Offer.status == OfferStatus.ACTIVE)
    ) or 0
    active_announcements = await db.scalar(
        select(func.count(Announcement.id)).where(
            Announcement.is_active.is_(True),
            Announcement.start_date <= now,
            or_(Announcement.end_date.is_(None), Announcement.end_date >= now),
        )
    ) or 0

    pending_reviews = (
        mosques.get(MosqueStatus.PENDING.value, 0)
        + businesses.get(VerificationStatus.PENDING.value, 0)
        + volunteers.get(VolunteerRegistrationStatus.PENDING.value, 0)
        + certifications.get(CertificationStatus.PENDING.value, 0)
        + certifications.get(CertificationStatus.UNDER_REVIEW.value, 0)
    )

    return DashboardStats(
        total_users=total_users,
        new_users_this_week=new_users_week,
        users_by_role=await count_by(db, User.role),
        mosques=entity_counts(mosques),
        businesses=entity_counts(businesses, approved_key=VerificationStatus.VERIFIED.value),
        volunteers=entity_counts(volunteers),
        halal_certifications=certifications,
        total_products=total_products,
        active_offers=active_offers,
        active_announcements=active_announcements,
        pending_reviews=pending_reviews,
    )


@router.get("/stats", response_model=PlatformStats)
async def get_platform_stats(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Raw status breakdowns for every reviewed entity"""
    return PlatformStats(
        users=await count_by(db, User.role),
        mosques=await count_by(db, Mosque.status),
        businesses=await count_by(db, Business.verification_status),
        volunteers=await count_by(db, Volunteer.status),
        offers=await count_by(db, Offer.status),
        certifications=await count_by(db, HalalCertification.status),
    )


@router.get("/activity", response_model=ActivityFeedResponse)
async def get_activity_feed(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Recent sign-ups and submissions across the platform"""
    items = []

    users = (await db.execute(
        select(User).order_by(User.created_at.desc()).limit(limit)
    )).scalars().all()
    for user in users:
        items.append(ActivityItem(
            id=f"user-{user.id}",
            type="user_signup",
            title="New user registered",
            description=f"{user.name} joined as {user.role.value}",
            timestamp=user.created_at,
            metadata={"user_id": str(user.id), "role": user.role.value},
        ))

    mosques = (await db.execute(
        select(Mosque).order_by(Mosque.created_at.desc()).limit(limit)
    )).scalars().all()
    for mosque in mosques:
        items.append(ActivityItem(
            id=f"mosque-{mosque.id}",
            type="mosque_submitted",
            title="Mosque submitted",
            description=f"{mosque.name} ({mosque.status.value})",
            timestamp=mosque.created_at,
            metadata={"mosque_id": str(mosque.id), "status": mosque.status.value},
        ))

    businesses = (await db.execute(
        select(Business).order_by(Business.created_at.desc()).limit(limit)
    )).scalars().all()
    for business in businesses:
        items.append(ActivityItem(
            id=f"business-{business.id}",
            type="business_registered",
            title="Business registered",
            description=f"{business.name} ({business.verification_status.value})",
            timestamp=business.created_at,
            metadata={"business_id": str(business.id), "status": business.verification_status.value},
        ))

    volunteers = (await db.execute(
        select(Volunteer).order_by(Volunteer.created_at.desc()).limit(limit)
    )).scalars().all()
    for volunteer in volunteers:
        items.append(ActivityItem(
            id=f"volunteer-{volunteer.id}",
            type="volunteer_registered",
            title="Volunteer registered",
            description=f"{volunteer.name} ({volunteer.status.value})",
            timestamp=volunteer.created_at,
            metadata={"volunteer_id": str(volunteer.id), "status": volunteer.status.value},
        ))

    certifications = (await db.execute(
        select(HalalCertification).order_by(HalalCertification.request_date.desc()).limit(limit)
    )).scalars().all()
    for certification in certifications:
        items.append(ActivityItem(
            id=f"certification-{certification.id}",
            type="certification_requested",
            title="Halal certification requested",
            description=f"{certification.business_name} ({certification.status.value})",
            timestamp=certification.request_date,
            metadata={"certification_id": str(certification.id), "status": certification.status.value},
        ))

    items.sort(key=lambda item: item.timestamp, reverse=True)
    return ActivityFeedResponse(items=items[:limit], total=len(items))


@router.get("/mosque-statistics", response_model=MosqueStatistics)
async def get_mosque_statistics(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Mosque breakdown by status, location and services"""
    by_status = await count_by(db, Mosque.status)
    total_capacity, average_capacity = (await db.execute(
        select(func.sum(Mosque.capacity), func.avg(Mosque.capacity)).where(Mosque.capacity > 0)
    )).one()
    verified = await db.scalar(select(func.count(Mosque.id)).where(Mosque.verified.is_(True))) or 0

    return MosqueStatistics(
        total_mosques=sum(by_status.values()),
        by_status=by_status,
        by_state=await count_by(db, Mosque.state),
        by_city=await count_by(db, Mosque.city),
        services=await service_counts(db),
        total_capacity=int(total_capacity or 0),
        average_capacity=round(float(average_capacity), 1) if average_capacity else 0,
        verified_mosques=verified,
    )


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    time_range: TimeRange = Query(TimeRange.MONTH, alias="timeRange"),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """
    Platform analytics for a time window.

    Growth rates compare sign-ups inside the window with the window of the
    same length right before it; a previous count of zero reports 0%.
    Active users are those who logged in or changed their account within the window.
    """
    now = datetime.utcnow()
    start = now - timedelta(days=time_range.days)
    previous_start = start - (now - start)

    growth = {}
    for key, model in (("users", User), ("mosques", Mosque), ("businesses", Business), ("volunteers", Volunteer)):
        growth[key] = growth_rate(
            await count_created(db, model, start),
            await count_created(db, model, previous_start, start),
        )

    active_users = await db.scalar(
        select(func.count(User.id)).where(or_(User.last_login >= start, User.updated_at >= start))
    ) or 0
    users_by_role = await count_by(db, User.role)
    mosque_status = await count_by(db, Mosque.status)
    business_status = await count_by(db, Business.verification_status)

    total = func.count(VolunteerApplication.id).label("total")
    top_mosques = (await db.execute(
        select(Mosque.id, Mosque.name, Mosque.city, total)
        .join(VolunteerApplication, VolunteerApplication.mosque_id == Mosque.id)
        .group_by(Mosque.id, Mosque.name, Mosque.city)
        .order_by(total.desc(), Mosque.name.asc())
        .limit(5)
    )).all()

    return AnalyticsResponse(
        time_range=time_range,
        start_date=start,
        overview=AnalyticsOverview(
            total_users=sum(users_by_role.values()),
            total_mosques=sum(mosque_status.values()),
            total_businesses=sum(business_status.values()),
            total_volunteers=await db.scalar(select(func.count(Volunteer.id))) or 0,
            active_users=active_users,
            pending_approvals=(
                mosque_status.get(MosqueStatus.PENDING.value, 0)
                + business_status.get(VerificationStatus.PENDING.value, 0)
            ),
            growth_rates=GrowthRates(**growth),
        ),
        user_analytics=UserAnalytics(
            users_by_role=users_by_role,
            users_by_location=await top_locations(db, User.city),
            active_users=active_users,
        ),
        mosque_analytics=MosqueAnalytics(
            mosques_by_location=await top_locations(db, Mosque.city, Mosque.state),
            status_distribution=mosque_status,
            services_popularity=await service_counts(db, limit=10),
        ),
        business_analytics=BusinessAnalytics(
            businesses_by_category=await count_by(db, Business.category),
            businesses_by_location=await top_locations(db, Business.city, Business.state),
            status_distribution=business_status,
        ),
        volunteer_analytics=VolunteerAnalytics(
            applications_by_category=await count_by(db, VolunteerApplication.category),
            status_distribution=await count_by(db, VolunteerApplication.status),
            offers_by_category=await count_by(db, VolunteerOffer.category),
            top_mosques=[
                TopMosque(mosque_id=str(mosque_id), name=name, city=city, total_applications=count)
                for mosque_id, name, city, count in top_mosques
            ],
        ),
    )
