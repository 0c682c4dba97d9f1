"""
Offer model - time-bounded business discounts with an optional usage cap.

Status is derived from the validity window: a draft offer becomes active once
now falls inside [valid_from, valid_to] and an active offer expires after
valid_to. `refresh_status` applies that rule to one offer; the periodic sweep
in services/offer_sweeper.py applies it in bulk.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Float, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
from typing import Optional
import enum
import math
import secrets
import string

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    BUY_ONE_GET_ONE = "buy_one_get_one"
    FREE_SHIPPING = "free_shipping"


class OfferStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_PERCENTAGE = 100


class Offer(Base):
    __tablename__ = "offers"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    business_id = Column(GUID, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    discount_type = Column(SQLEnum(DiscountType), nullable=False)
    discount_value = Column(Float, nullable=False, default=0)

    applicable_product_ids = Column(JSON, default=list)
    applicable_categories = Column(JSON, default=list)
    minimum_purchase = Column(Float, default=0)

    valid_from = Column(DateTime, nullable=False)
    valid_to = Column(DateTime, nullable=False, index=True)
    status = Column(SQLEnum(OfferStatus), default=OfferStatus.DRAFT, nullable=False, index=True)
    featured = Column(Boolean, default=False, nullable=False)
    terms_and_conditions = Column(String(1000), nullable=True)

    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, default=0, nullable=False)
    customer_limit = Column(Integer, nullable=True)
    code = Column(String(20), unique=True, index=True, nullable=True)
    auto_apply = Column(Boolean, default=False, nullable=False)
    priority = Column(Integer, default=0)
    image = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # ---------- derived values ----------

    def in_window(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.utcnow()
        return self.valid_from <= now <= self.valid_to

    def limit_reached(self) -> bool:
        return self.usage_limit is not None and (self.used_count or 0) >= self.usage_limit

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return (
            self.status == OfferStatus.ACTIVE
            and self.in_window(now)
            and not self.limit_reached()
        )

    def days_remaining(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.utcnow()
        if self.valid_to <= now:
            return 0
        return math.ceil((self.valid_to - now).total_seconds() / 86400)

    @property
    def usage_percentage(self) -> int:
        if not self.usage_limit:
            return 0
        return round((self.used_count or 0) / self.usage_limit * 100)

    def is_applicable_to_product(self, product_id: str, category: Optional[str] = None) -> bool:
        products = self.applicable_product_ids or []
        categories = self.applicable_categories or []
        # A product list takes precedence over categories
        if products:
            return str(product_id) in [str(p) for p in products]
        if categories:
            return category is not None and category in categories
        return True

    def calculate_discount(self, amount: float, now: Optional[datetime] = None) -> float:
        if not self.is_valid(now):
            return 0
        if amount < (self.minimum_purchase or 0):
            return 0
        if self.discount_type == DiscountType.PERCENTAGE:
            return min(amount * self.discount_value / 100, amount)
        if self.discount_type == DiscountType.FIXED_AMOUNT:
            return min(self.discount_value, amount)
        return 0

    # ---------- mutation helpers ----------

    @staticmethod
    def generate_code(business_id: str) -> str:
        prefix = str(business_id).replace("-", "")[-3:].upper()
        suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(6))
        return f"{prefix}{suffix}"

    def refresh_status(self, now: Optional[datetime] = None) -> bool:
        """Apply the window rule; returns True if status changed"""
        now = now or datetime.utcnow()
        previous = self.status
        if self.status == OfferStatus.ACTIVE and now > self.valid_to:
            self.status = OfferStatus.EXPIRED
        elif self.status == OfferStatus.DRAFT and self.in_window(now):
            self.status = OfferStatus.ACTIVE
        return self.status != previous

    def normalize(self) -> None:
        """Clamp percentage, upper-case the code, and generate one if missing"""
        if self.discount_type == DiscountType.PERCENTAGE and (self.discount_value or 0) > MAX_PERCENTAGE:
            self.discount_value = MAX_PERCENTAGE
        if self.code:
            self.code = self.code.strip().upper()
        elif self.discount_type != DiscountType.FREE_SHIPPING and self.business_id:
            self.code = self.generate_code(self.business_id)

    def __repr__(self):
        return f"<Offer {self.title} ({self.status})>"
