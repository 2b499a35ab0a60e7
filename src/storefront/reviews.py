"""
Product reviews.

Submitted reviews and "helpful" votes are kept in memory only and are lost on
restart, matching the storefront's review widget.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from src.chatbot.validation import parse_int, raise_if_errors, require_str


@dataclass
class Review:
    id: str
    product_id: str
    author: str
    rating: int
    title: str
    body: str
    created_at: datetime
    helpful: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "author": self.author,
            "rating": self.rating,
            "title": self.title,
            "body": self.body,
            "helpful": self.helpful,
            "createdAt": self.created_at.isoformat(),
        }


class ReviewBoard:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._by_product: Dict[str, List[Review]] = {}
        self._by_id: Dict[str, Review] = {}

    def submit(self, product_id: str, payload: Dict[str, Any]) -> Review:
        errors: Dict[str, str] = {}
        author = require_str(payload, "author", errors, label="Name", max_length=50)
        title = require_str(payload, "title", errors, label="Title", max_length=120)
        body = require_str(payload, "body", errors, label="Review", max_length=2000)
        rating = parse_int(payload, "rating", errors, min_value=1, max_value=5, required=True)
        raise_if_errors(errors)

        review = Review(
            id=str(uuid.uuid4()),
            product_id=product_id,
            author=author,
            rating=rating,
            title=title,
            body=body,
            created_at=self._clock(),
        )
        # Newest first.
        self._by_product.setdefault(product_id, []).insert(0, review)
        self._by_id[review.id] = review
        return review

    def list_reviews(self, product_id: str) -> List[Review]:
        return list(self._by_product.get(product_id, []))

    def mark_helpful(self, review_id: str) -> Review:
        review = self._by_id.get(review_id)
        if review is None:
            raise KeyError(review_id)
        review.helpful += 1
        return review

    def summary(self, product_id: str) -> Dict[str, Any]:
        reviews = self._by_product.get(product_id, [])
        if not reviews:
            return {"averageRating": 0, "totalReviews": 0}
        average = sum(r.rating for r in reviews) / len(reviews)
        return {"averageRating": round(average, 1), "totalReviews": len(reviews)}
