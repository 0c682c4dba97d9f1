from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, and_, cast, String
from typing import Optional
from collections import Counter
import enum

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import ResourceNotFoundError
from mosqueconnect.core.logging_config import logger
from mosqueconnect.core.types import generate_uuid
from mosqueconnect.models import User, Product, ProductStatus
from mosqueconnect.modules.auth.dependencies import get_current_business
from mosqueconnect.schemas.common import MessageResponse
from mosqueconnect.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductStats,
)
from mosqueconnect.api.v1.endpoints.business import get_owned_business, refresh_product_count
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


class ProductSort(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    NAME = "name"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
    POPULAR = "popular"


PRODUCT_SORT_ORDERS = {
    ProductSort.NEWEST: (Product.created_at.desc(),),
    ProductSort.OLDEST: (Product.created_at.asc(),),
    ProductSort.NAME: (Product.name.asc(),),
    ProductSort.PRICE_LOW: (Product.price.asc(),),
    ProductSort.PRICE_HIGH: (Product.price.desc(),),
    ProductSort.POPULAR: (Product.views.desc(), Product.orders.desc()),
}


def product_search(term: str):
    return search_filter(term, [Product.name, Product.description, Product.category, cast(Product.tags, String)])


def stock_filter(stock_status: str):
    """SQL counterpart of Product.availability_status"""
    tracked = and_(Product.track_inventory.is_(True), Product.unlimited_stock.is_(False))
    if stock_status == "out_of_stock":
        return and_(tracked, Product.stock <= 0)
    if stock_status == "low_stock":
        return and_(tracked, Product.stock > 0, Product.stock <= Product.low_stock_threshold)
    return or_(~tracked, Product.stock > Product.low_stock_threshold)


async def get_owned_product(db: AsyncSession, business_id: str, product_id: str) -> Product:
    product = await get_or_404(db, Product, product_id, "Product")
    if str(product.business_id) != str(business_id):
        raise ResourceNotFoundError("Product", product_id)
    return product


@router.get("", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    category: Optional[str] = None,
    status_filter: Optional[ProductStatus] = Query(None, alias="status"),
    stock: Optional[str] = Query(None, pattern="^(in_stock|low_stock|out_of_stock)$"),
    featured: Optional[bool] = None,
    sort: ProductSort = ProductSort.NEWEST,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's products"""
    business = await get_owned_business(db, current_user)

    query = select(Product).where(Product.business_id == business.id)
    if search:
        query = query.where(product_search(search))
    if category:
        query = query.where(Product.category == category)
    if status_filter:
        query = query.where(Product.status == status_filter)
    if stock:
        query = query.where(stock_filter(stock))
    if featured is not None:
        query = query.where(Product.featured == featured)
    query = query.order_by(*PRODUCT_SORT_ORDERS[sort])

    products, pagination = await paginate(db, query, page, limit)
    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        pagination=pagination,
    )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Add a product to the caller's business"""
    business = await get_owned_business(db, current_user)

    data = product_data.model_dump()
    data["images"] = Product.normalize_images(data["images"])

    # Slugs are unique; suffix with the new id when the name repeats
    product_id = generate_uuid()
    slug = Product.build_slug(product_data.name, business.id)
    if await db.scalar(select(Product.id).where(Product.slug == slug)):
        slug = f"{slug}-{product_id[:8]}"

    product = Product(**data, id=product_id, business_id=business.id, slug=slug)
    db.add(product)
    await db.flush()

    await refresh_product_count(db, business)
    await db.commit()
    await db.refresh(product)

    logger.info(f"Product created: {product.name} ({product.id}) for business {business.id}")
    return product


@router.get("/stats", response_model=ProductStats)
async def product_stats(
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Inventory and sales summary"""
    business = await get_owned_business(db, current_user)
    result = await db.execute(select(Product).where(Product.business_id == business.id))
    products = list(result.scalars().all())

    total = len(products)
    return ProductStats(
        total_products=total,
        active_products=sum(1 for p in products if p.status == ProductStatus.ACTIVE),
        inactive_products=sum(1 for p in products if p.status == ProductStatus.INACTIVE),
        out_of_stock_products=sum(1 for p in products if p.availability_status == "out_of_stock"),
        low_stock_products=sum(1 for p in products if p.availability_status == "low_stock"),
        featured_products=sum(1 for p in products if p.featured),
        total_views=sum(p.views or 0 for p in products),
        total_orders=sum(p.orders or 0 for p in products),
        total_revenue=round(sum(p.revenue or 0 for p in products), 2),
        average_price=round(sum(p.price for p in products) / total, 2) if total else 0,
        categories=dict(Counter(p.category for p in products)),
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)
    return await get_owned_product(db, business.id, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    updates: ProductUpdate,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)
    product = await get_owned_product(db, business.id, product_id)

    data = updates.model_dump(exclude_unset=True)
    if data.get("images") is not None:
        data["images"] = Product.normalize_images(data["images"])
    for field, value in data.items():
        setattr(product, field, value)

    # A compare price at or below the price carries no discount
    if product.compare_at_price is not None and product.compare_at_price <= product.price:
        product.compare_at_price = None

    await db.commit()
    await db.refresh(product)
    return product


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)
    product = await get_owned_product(db, business.id, product_id)

    await db.delete(product)
    await db.flush()
    await refresh_product_count(db, business)
    await db.commit()

    logger.info(f"Product {product_id} deleted from business {business.id}")
    return MessageResponse(message="Product deleted successfully")
