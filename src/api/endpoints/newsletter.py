import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.api.services import get_cache, get_newsletter_client
from src.integrations.contracts.interfaces import SubscriptionRequest
from src.integrations.contracts.newsletter import validate_subscription_request
from src.storefront.newsletter_prompt import TRIGGERS, NewsletterPromptPolicy, VisitorStorage

logger = logging.getLogger(__name__)

api = APIRouter()
newsletter_api = api


class SubscribeBody(BaseModel):
    email: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    source: str = "website"
    consent: bool = True
    visitor_id: Optional[str] = Field(default=None, alias="visitorId")

    model_config = {"populate_by_name": True}


class UnsubscribeBody(BaseModel):
    email: str


class PromptShownBody(BaseModel):
    visitor_id: str = Field(alias="visitorId")
    trigger: str
    source: str = "homepage"

    model_config = {"populate_by_name": True}


def _policy(cache, visitor_id: str) -> NewsletterPromptPolicy:
    return NewsletterPromptPolicy(VisitorStorage(cache, visitor_id))


def _check_trigger(trigger: str) -> None:
    if trigger not in TRIGGERS:
        raise HTTPException(status_code=422, detail=f"Unknown trigger. Expected one of: {', '.join(TRIGGERS)}")


@api.post("/newsletter/subscribe", tags=["Newsletter"])
async def subscribe(body: SubscribeBody, client=Depends(get_newsletter_client), cache=Depends(get_cache)):
    request = SubscriptionRequest(
        email=body.email.strip(),
        source=body.source,
        consent=body.consent,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    errors = validate_subscription_request(request)
    if errors:
        return JSONResponse(status_code=422, content={"success": False, "message": "Validation failed", "errors": errors})

    result = await client.subscribe(request)
    if result.is_already_registered:
        return JSONResponse(status_code=409, content=result.to_dict())
    if not result.success:
        logger.warning("Newsletter subscribe failed for %s: %s", request.email, result.message)
        return JSONResponse(status_code=502, content=result.to_dict())

    if body.visitor_id:
        _policy(cache, body.visitor_id).record_subscription()
    return JSONResponse(status_code=201, content=result.to_dict())


@api.post("/newsletter/unsubscribe", tags=["Newsletter"])
async def unsubscribe(body: UnsubscribeBody, client=Depends(get_newsletter_client)):
    result = await client.unsubscribe(body.email)
    if not result.success:
        return JSONResponse(status_code=404, content=result.to_dict())
    return result.to_dict()


@api.get("/newsletter/prompt", tags=["Newsletter"])
async def should_show_prompt(
    visitor_id: str = Query(..., alias="visitorId"),
    trigger: str = "time-delay",
    source: str = "homepage",
    cache=Depends(get_cache),
):
    _check_trigger(trigger)
    return {"success": True, "data": {"show": _policy(cache, visitor_id).should_show(trigger, source)}}


@api.post("/newsletter/prompt/shown", tags=["Newsletter"])
async def mark_prompt_shown(body: PromptShownBody, cache=Depends(get_cache)):
    _check_trigger(body.trigger)
    _policy(cache, body.visitor_id).mark_shown(body.trigger, body.source)
    return {"success": True}
