"""
Public storefront.

Everything here is readable without a token except redeeming an offer.
Only active businesses and active products are exposed.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_
from datetime import datetime
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import OfferNotValidError, ResourceNotFoundError, ValidationError
from mosqueconnect.models import (
    User,
    Business,
    BusinessCategory,
    BusinessStatus,
    Product,
    ProductStatus,
    Offer,
    OfferStatus,
)
from mosqueconnect.modules.auth.dependencies import get_current_user
from mosqueconnect.schemas.business import BusinessResponse, BusinessListResponse
from mosqueconnect.schemas.offer import OfferResponse, OfferListResponse, OfferUseRequest, OfferUseResponse
from mosqueconnect.schemas.product import ProductResponse, ProductListResponse
from mosqueconnect.schemas.shop import ShopDetailResponse, ProductViewResponse
from mosqueconnect.services.offer_service import redeem_offer
from mosqueconnect.api.v1.endpoints.business_products import ProductSort, PRODUCT_SORT_ORDERS, product_search
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


def valid_offers_query(business_id: str, now: datetime):
    return select(Offer).where(
        Offer.business_id == business_id,
        Offer.status == OfferStatus.ACTIVE,
        Offer.valid_from <= now,
        Offer.valid_to >= now,
        or_(Offer.usage_limit.is_(None), Offer.used_count < Offer.usage_limit),
    )


async def get_active_business(db: AsyncSession, business_id: str) -> Business:
    business = await get_or_404(db, Business, business_id, "Business")
    if business.status != BusinessStatus.ACTIVE:
        raise ResourceNotFoundError("Business", business_id)
    return business


async def get_shop_product(db: AsyncSession, business_id: str, product_id: str) -> Product:
    product = await get_or_404(db, Product, product_id, "Product")
    if str(product.business_id) != str(business_id) or product.status != ProductStatus.ACTIVE:
        raise ResourceNotFoundError("Product", product_id)
    return product


@router.get("", response_model=BusinessListResponse)
async def list_shops(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    search: Optional[str] = None,
    category: Optional[BusinessCategory] = None,
    city: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Active businesses that have products, most stocked first"""
    query = select(Business).where(
        Business.status == BusinessStatus.ACTIVE,
        Business.total_products > 0,
    )
    if search:
        query = query.where(search_filter(search, [Business.name, Business.description]))
    if category:
        query = query.where(Business.category == category)
    if city:
        query = query.where(search_filter(city, [Business.city]))
    query = query.order_by(Business.featured.desc(), Business.total_products.desc(), Business.name.asc())

    businesses, pagination = await paginate(db, query, page, limit)
    return BusinessListResponse(
        businesses=[BusinessResponse.model_validate(b) for b in businesses],
        pagination=pagination,
    )


@router.get("/{business_id}", response_model=ShopDetailResponse)
async def get_shop(
    business_id: str,
    db: AsyncSession = Depends(get_db)
):
    business = await get_active_business(db, business_id)
    now = datetime.utcnow()

    featured = (await db.execute(
        select(Product)
        .where(
            Product.business_id == business.id,
            Product.status == ProductStatus.ACTIVE,
            Product.featured.is_(True),
        )
        .order_by(Product.created_at.desc())
        .limit(8)
    )).scalars().all()

    offers = (await db.execute(
        valid_offers_query(business.id, now).order_by(Offer.priority.desc(), Offer.valid_to.asc())
    )).scalars().all()

    categories = (await db.execute(
        select(Product.category)
        .where(Product.business_id == business.id, Product.status == ProductStatus.ACTIVE)
        .distinct()
        .order_by(Product.category)
    )).scalars().all()

    await db.execute(
        update(Business)
        .where(Business.id == business.id)
        .values(views=Business.views + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    return ShopDetailResponse(
        business=BusinessResponse.model_validate(business),
        is_open=business.is_currently_open(),
        featured_products=[ProductResponse.model_validate(p) for p in featured],
        active_offers=[OfferResponse.from_offer(o, now) for o in offers],
        categories=list(categories),
    )


@router.get("/{business_id}/products", response_model=ProductListResponse)
async def list_shop_products(
    business_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    featured: Optional[bool] = None,
    sort: ProductSort = ProductSort.NEWEST,
    db: AsyncSession = Depends(get_db)
):
    business = await get_active_business(db, business_id)

    query = select(Product).where(
        Product.business_id == business.id,
        Product.status == ProductStatus.ACTIVE,
    )
    if search:
        query = query.where(product_search(search))
    if category:
        query = query.where(Product.category == category)
    if min_price is not None:
        query = query.where(Product.price >= min_price)
    if max_price is not None:
        query = query.where(Product.price <= max_price)
    if featured is not None:
        query = query.where(Product.featured == featured)
    query = query.order_by(*PRODUCT_SORT_ORDERS[sort])

    products, pagination = await paginate(db, query, page, limit)
    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        pagination=pagination,
    )


@router.get("/{business_id}/products/{product_id}", response_model=ProductResponse)
async def get_shop_product_detail(
    business_id: str,
    product_id: str,
    db: AsyncSession = Depends(get_db)
):
    await get_active_business(db, business_id)
    return await get_shop_product(db, business_id, product_id)


@router.post("/{business_id}/products/{product_id}/view", response_model=ProductViewResponse)
async def record_product_view(
    business_id: str,
    product_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Increment a product's view counter"""
    await get_active_business(db, business_id)
    product = await get_shop_product(db, business_id, product_id)

    await db.execute(
        update(Product)
        .where(Product.id == product.id)
        .values(views=Product.views + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(product)
    return ProductViewResponse(product_id=str(product.id), views=product.views)


@router.get("/{business_id}/offers", response_model=OfferListResponse)
async def list_shop_offers(
    business_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """Offers that can be redeemed right now"""
    business = await get_active_business(db, business_id)
    now = datetime.utcnow()

    query = valid_offers_query(business.id, now).order_by(
        Offer.featured.desc(), Offer.priority.desc(), Offer.valid_to.asc()
    )
    offers, pagination = await paginate(db, query, page, limit)
    return OfferListResponse(
        offers=[OfferResponse.from_offer(o, now) for o in offers],
        pagination=pagination,
    )


@router.post("/{business_id}/offers/{offer_id}/use", response_model=OfferUseResponse)
async def use_offer(
    business_id: str,
    offer_id: str,
    body: Optional[OfferUseRequest] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Redeem an offer once; fails with 409 past the usage limit"""
    await get_active_business(db, business_id)
    offer = await get_or_404(db, Offer, offer_id, "Offer")
    if str(offer.business_id) != str(business_id):
        raise ResourceNotFoundError("Offer", offer_id)

    body = body or OfferUseRequest()
    now = datetime.utcnow()

    if body.product_id and not offer.is_applicable_to_product(body.product_id, body.category):
        raise ValidationError("Offer does not apply to this product", field="product_id")
    if body.amount is not None and body.amount < (offer.minimum_purchase or 0):
        raise OfferNotValidError(
            str(offer.id), f"Minimum purchase of {offer.minimum_purchase:.2f} required for this offer"
        )

    discount = offer.calculate_discount(body.amount, now) if body.amount is not None else 0
    offer = await redeem_offer(db, offer, now)

    return OfferUseResponse(
        message="Offer applied successfully",
        offer=OfferResponse.from_offer(offer, now),
        discount=round(discount, 2),
    )
