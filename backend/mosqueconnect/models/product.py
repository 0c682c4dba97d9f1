from sqlalchemy import Column, String, Boolean, DateTime, Integer, Float, Text, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
from typing import Optional
import enum
import re

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class ProductStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"
    DISCONTINUED = "discontinued"


class Product(Base):
    """Product sold by a business"""
    __tablename__ = "products"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    business_id = Column(GUID, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    description = Column(String(2000), nullable=True)
    price = Column(Float, nullable=False)
    compare_at_price = Column(Float, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    subcategory = Column(String(100), nullable=True)

    images = Column(JSON, default=list)  # [{url, alt, is_primary}]
    specifications = Column(JSON, default=dict)
    variants = Column(JSON, default=list)
    availability = Column(JSON, default=dict)  # {in_store, online, delivery}
    tags = Column(JSON, default=list)

    # Inventory
    stock = Column(Integer, default=0, nullable=False)
    unlimited_stock = Column(Boolean, default=False, nullable=False)
    track_inventory = Column(Boolean, default=True, nullable=False)
    low_stock_threshold = Column(Integer, default=10, nullable=False)

    status = Column(SQLEnum(ProductStatus), default=ProductStatus.ACTIVE, nullable=False, index=True)
    featured = Column(Boolean, default=False, nullable=False)
    slug = Column(String(150), unique=True, index=True, nullable=True)

    # Stats
    views = Column(Integer, default=0)
    orders = Column(Integer, default=0)
    revenue = Column(Float, default=0)
    average_rating = Column(Float, default=0)
    total_reviews = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def build_slug(name: str, business_id: str) -> str:
        base = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
        return f"{base}-{str(business_id).replace('-', '')[-6:]}"

    @staticmethod
    def normalize_images(images) -> list:
        """First image becomes primary when none is flagged"""
        images = [dict(img) for img in images or []]
        if images and not any(img.get("is_primary") for img in images):
            images[0]["is_primary"] = True
        return images

    @property
    def discount_percentage(self) -> int:
        if self.compare_at_price and self.price and self.compare_at_price > self.price:
            return round((self.compare_at_price - self.price) / self.compare_at_price * 100)
        return 0

    @property
    def primary_image(self) -> Optional[dict]:
        images = self.images or []
        for img in images:
            if img.get("is_primary"):
                return img
        return images[0] if images else None

    @property
    def availability_status(self) -> str:
        if self.unlimited_stock or not self.track_inventory:
            return "in_stock"
        stock = self.stock or 0
        if stock <= 0:
            return "out_of_stock"
        if stock <= (self.low_stock_threshold or 0):
            return "low_stock"
        return "in_stock"

    def __repr__(self):
        return f"<Product {self.name}>"
