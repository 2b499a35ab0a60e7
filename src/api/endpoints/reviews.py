from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from src.api.services import get_catalogue, get_review_board

api = APIRouter()
reviews_api = api


@api.get("/products/{product_id}/reviews", tags=["Reviews"])
async def list_reviews(product_id: str, board=Depends(get_review_board)):
    return {
        "success": True,
        "data": {
            "reviews": [r.to_dict() for r in board.list_reviews(product_id)],
            "summary": board.summary(product_id),
        },
    }


@api.post("/products/{product_id}/reviews", status_code=201, tags=["Reviews"])
async def submit_review(
    product_id: str,
    payload: Dict[str, Any] = Body(...),
    board=Depends(get_review_board),
    catalogue=Depends(get_catalogue),
):
    if catalogue.get_product(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    review = board.submit(product_id, payload)
    return {"success": True, "data": review.to_dict()}


@api.post("/reviews/{review_id}/helpful", tags=["Reviews"])
async def mark_review_helpful(review_id: str, board=Depends(get_review_board)):
    try:
        review = board.mark_helpful(review_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Review not found")
    return {"success": True, "data": review.to_dict()}
