from pydantic import BaseModel
from typing import List

from mosqueconnect.schemas.business import BusinessResponse
from mosqueconnect.schemas.offer import OfferResponse
from mosqueconnect.schemas.product import ProductResponse


class ShopDetailResponse(BaseModel):
    """Storefront landing data for one business"""
    business: BusinessResponse
    is_open: bool
    featured_products: List[ProductResponse]
    active_offers: List[OfferResponse]
    categories: List[str]


class ProductViewResponse(BaseModel):
    product_id: str
    views: int
