from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from mosqueconnect.models.product import ProductStatus
from mosqueconnect.schemas.common import PaginationInfo, PartialUpdate


class ProductImage(BaseModel):
    url: str
    alt: Optional[str] = None
    is_primary: bool = False


class ProductFields(BaseModel):
    description: Optional[str] = Field(None, max_length=2000)
    compare_at_price: Optional[float] = Field(None, ge=0)
    subcategory: Optional[str] = Field(None, max_length=100)
    images: List[ProductImage] = []
    specifications: Dict[str, Any] = {}
    variants: List[Dict[str, Any]] = []
    availability: Dict[str, bool] = {}
    tags: List[str] = []
    stock: int = Field(0, ge=0)
    unlimited_stock: bool = False
    track_inventory: bool = True
    low_stock_threshold: int = Field(10, ge=0)
    status: ProductStatus = ProductStatus.ACTIVE
    featured: bool = False


class ProductCreate(ProductFields):
    name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=100)

    @model_validator(mode="after")
    def drop_meaningless_compare_price(self):
        if self.compare_at_price is not None and self.compare_at_price <= self.price:
            self.compare_at_price = None
        return self


class ProductUpdate(PartialUpdate):
    CLEARABLE = frozenset({"description", "compare_at_price", "subcategory"})

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[float] = Field(None, gt=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    images: Optional[List[ProductImage]] = None
    specifications: Optional[Dict[str, Any]] = None
    variants: Optional[List[Dict[str, Any]]] = None
    availability: Optional[Dict[str, bool]] = None
    tags: Optional[List[str]] = None
    stock: Optional[int] = Field(None, ge=0)
    unlimited_stock: Optional[bool] = None
    track_inventory: Optional[bool] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    status: Optional[ProductStatus] = None
    featured: Optional[bool] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    name: str
    description: Optional[str] = None
    price: float
    compare_at_price: Optional[float] = None
    discount_percentage: int = 0
    category: str
    subcategory: Optional[str] = None
    images: List[Dict[str, Any]] = []
    primary_image: Optional[Dict[str, Any]] = None
    specifications: Dict[str, Any] = {}
    variants: List[Dict[str, Any]] = []
    availability: Dict[str, Any] = {}
    tags: List[str] = []
    stock: int
    unlimited_stock: bool
    track_inventory: bool
    low_stock_threshold: int
    availability_status: str
    status: ProductStatus
    featured: bool
    slug: Optional[str] = None
    views: int = 0
    orders: int = 0
    revenue: float = 0
    average_rating: float = 0
    total_reviews: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    pagination: PaginationInfo


class ProductStats(BaseModel):
    total_products: int
    active_products: int
    inactive_products: int
    out_of_stock_products: int
    low_stock_products: int
    featured_products: int
    total_views: int
    total_orders: int
    total_revenue: float
    average_price: float
    categories: Dict[str, int]
