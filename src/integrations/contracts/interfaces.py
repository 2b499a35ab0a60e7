from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Gender(str, Enum):
    MEN = "men"
    WOMEN = "women"
    UNISEX = "unisex"


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: float
    category: str
    original_price: Optional[float] = None
    brand: Optional[str] = None
    gender: Optional[Gender] = None
    images: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    status: Optional[ProductStatus] = None
    average_rating: Optional[float] = None
    total_reviews: Optional[int] = None
    sales_count: Optional[int] = None
    featured: Optional[bool] = None
    created_at: Optional[str] = None          # ISO datetime string

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """Build a Product from a bundled JSON record (camelCase keys)."""
        images = list(data.get("images") or [])
        if not images and data.get("image"):
            images = [data["image"]]
        gender = data.get("gender")
        status = data.get("status")
        return cls(
            id=str(data.get("id") or data.get("_id") or ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            price=float(data.get("price", 0)),
            category=data.get("category", ""),
            original_price=data.get("originalPrice"),
            brand=data.get("brand"),
            gender=Gender(gender) if gender else None,
            images=images,
            tags=list(data.get("tags") or []),
            status=ProductStatus(status) if status else None,
            average_rating=data.get("averageRating"),
            total_reviews=data.get("totalReviews"),
            sales_count=data.get("salesCount"),
            featured=data.get("featured"),
            created_at=data.get("createdAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the camelCase shape the storefront frontend expects."""
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "images": list(self.images),
            "tags": list(self.tags),
        }
        optional = {
            "originalPrice": self.original_price,
            "brand": self.brand,
            "gender": self.gender.value if self.gender else None,
            "status": self.status.value if self.status else None,
            "averageRating": self.average_rating,
            "totalReviews": self.total_reviews,
            "salesCount": self.sales_count,
            "featured": self.featured,
            "createdAt": self.created_at,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out


@dataclass
class SubscriptionRequest:
    email: str
    source: str = "website"
    consent: bool = True
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    list_id: Optional[int] = None


@dataclass
class SubscriptionResult:
    success: bool
    message: str = ""
    is_new_subscription: Optional[bool] = None
    is_already_registered: Optional[bool] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.is_new_subscription is not None:
            out["isNewSubscription"] = self.is_new_subscription
        if self.is_already_registered is not None:
            out["isAlreadyRegistered"] = self.is_already_registered
        return out


# ---------------------------------------------------------------------------
# Abstract client interfaces
# ---------------------------------------------------------------------------

class CatalogueClient(ABC):
    """Every product catalogue source must implement this interface."""

    @abstractmethod
    def list_products(self, gender: Optional[Gender] = None) -> List[Product]:
        """Return the catalogue snapshot, optionally restricted to one gender collection."""

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[Product]:
        """Fetch a single product by ID."""

    @abstractmethod
    def featured_products(self) -> List[Product]:
        """Return the homepage featured selection."""


class NewsletterClient(ABC):
    """Email/CRM service used for newsletter capture."""

    @abstractmethod
    async def subscribe(self, request: SubscriptionRequest) -> SubscriptionResult:
        """Add a contact. Already-registered emails return a distinct non-error result."""

    @abstractmethod
    async def unsubscribe(self, email: str) -> SubscriptionResult:
        """Remove a contact from the newsletter list."""
