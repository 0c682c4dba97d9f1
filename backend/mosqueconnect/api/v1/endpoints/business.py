"""
Business owner endpoints: public registration, profile and analytics.

Products, offers and announcements live in their own modules and share
`get_owned_business` to resolve the caller's business.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import DuplicateEmailError, ResourceNotFoundError
from mosqueconnect.core.logging_config import logger
from mosqueconnect.core.security import get_password_hash
from mosqueconnect.models import (
    User,
    UserRole,
    Business,
    Product,
    ProductStatus,
    Offer,
    OfferStatus,
    Announcement,
    HalalCertification,
)
from mosqueconnect.modules.auth.dependencies import get_current_business
from mosqueconnect.schemas.business import (
    BusinessRegister,
    BusinessRegisterResponse,
    BusinessResponse,
    BusinessUpdate,
    BusinessAnalytics,
)
from mosqueconnect.api.v1.endpoints.auth import find_user_by_email

router = APIRouter()


async def get_owned_business(db: AsyncSession, owner: User) -> Business:
    """The caller's business (404 when the account has none)"""
    result = await db.execute(
        select(Business).where(Business.owner_id == owner.id).order_by(Business.created_at.asc()).limit(1)
    )
    business = result.scalar_one_or_none()
    if business is None:
        raise ResourceNotFoundError("Business", f"owner:{owner.id}")
    return business


async def refresh_product_count(db: AsyncSession, business: Business) -> None:
    business.total_products = await db.scalar(
        select(func.count(Product.id)).where(Product.business_id == business.id)
    ) or 0


def business_fields(data) -> dict:
    fields = data.model_dump()
    if fields.get("hours") is None:
        fields.pop("hours", None)
    return fields


@router.post("/register", response_model=BusinessRegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_business(
    request: Request,
    payload: BusinessRegister,
    db: AsyncSession = Depends(get_db)
):
    """Create owner account, business and optional halal certification request together"""
    email = payload.email.lower()
    if await find_user_by_email(db, email):
        logger.log_auth_event(
            event="business_register",
            success=False,
            user_email=email,
            reason="Email already registered",
            client_ip=request.client.host if request.client else "unknown",
        )
        raise DuplicateEmailError(email)

    owner = User(
        name=payload.owner_name,
        email=email,
        hashed_password=get_password_hash(payload.password),
        role=UserRole.BUSINESS,
        phone=payload.phone,
        city=payload.business.city,
    )
    db.add(owner)
    await db.flush()

    business = Business(**business_fields(payload.business), owner_id=owner.id)
    db.add(business)
    await db.flush()

    certification = None
    if payload.request_halal_certification:
        halal = payload.halal_certification
        certification = HalalCertification(
            business_id=business.id,
            business_name=business.name,
            business_type=business.category.value,
            address=business.street,
            city=business.city,
            postcode=(halal.postcode if halal and halal.postcode else business.zip_code),
            contact_name=owner.name,
            contact_email=owner.email,
            details=halal.details if halal else None,
            supplier_info=halal.supplier_info if halal else None,
            submitted_documents=halal.submitted_documents if halal else [],
        )
        db.add(certification)

    await db.commit()
    await db.refresh(business)

    logger.log_auth_event(
        event="business_register",
        success=True,
        user_email=email,
        business_id=str(business.id),
        halal_requested=certification is not None,
        client_ip=request.client.host if request.client else "unknown",
    )

    return BusinessRegisterResponse(
        message="Business registered successfully. Verification is pending review.",
        user_id=str(owner.id),
        business=BusinessResponse.model_validate(business),
        halal_certification_id=str(certification.id) if certification else None,
    )


@router.get("/profile", response_model=BusinessResponse)
async def get_profile(
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's business profile"""
    return await get_owned_business(db, current_user)


@router.put("/profile", response_model=BusinessResponse)
async def update_profile(
    updates: BusinessUpdate,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Update the caller's business profile"""
    business = await get_owned_business(db, current_user)

    data = updates.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(business, field, value)

    await db.commit()
    await db.refresh(business)
    return business


@router.get("/analytics", response_model=BusinessAnalytics)
async def get_analytics(
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Headline numbers for the business dashboard"""
    business = await get_owned_business(db, current_user)
    now = datetime.utcnow()

    products = list((await db.execute(
        select(Product).where(Product.business_id == business.id)
    )).scalars().all())
    offers = list((await db.execute(
        select(Offer).where(Offer.business_id == business.id)
    )).scalars().all())
    announcements = list((await db.execute(
        select(Announcement).where(Announcement.business_id == business.id)
    )).scalars().all())

    return BusinessAnalytics(
        business_id=str(business.id),
        views=business.views or 0,
        total_products=len(products),
        active_products=sum(1 for p in products if p.status == ProductStatus.ACTIVE),
        out_of_stock_products=sum(1 for p in products if p.availability_status == "out_of_stock"),
        low_stock_products=sum(1 for p in products if p.availability_status == "low_stock"),
        total_offers=len(offers),
        active_offers=sum(1 for o in offers if o.status == OfferStatus.ACTIVE),
        total_offer_redemptions=sum(o.used_count or 0 for o in offers),
        total_announcements=len(announcements),
        active_announcements=sum(1 for a in announcements if a.is_visible(now)),
        product_views=sum(p.views or 0 for p in products),
        revenue=round(sum(p.revenue or 0 for p in products), 2),
        average_rating=business.average_rating or 0,
    )
