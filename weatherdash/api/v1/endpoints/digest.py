from fastapi import APIRouter, Depends, Request

from weatherdash.api.v1.deps import get_advice_service, get_digest_dispatcher, get_weather_aggregator, limiter
from weatherdash.schemas.digest import DigestSendRequest, DigestSendResponse, Subscription
from weatherdash.services.advice import AdviceService
from weatherdash.services.digest.base import DigestDispatcher
from weatherdash.services.digest.job import send_digest
from weatherdash.services.weather.aggregator import WeatherAggregator


router = APIRouter()


@router.post("/send", response_model=DigestSendResponse)
@limiter.limit("5/minute")
async def send_now(
    request: Request,
    payload: DigestSendRequest,
    aggregator: WeatherAggregator = Depends(get_weather_aggregator),
    advisor: AdviceService = Depends(get_advice_service),
    dispatcher: DigestDispatcher = Depends(get_digest_dispatcher),
):
    sent = await send_digest(
        Subscription(recipient=payload.recipient, city=payload.city),
        aggregator=aggregator,
        advisor=advisor,
        dispatcher=dispatcher,
    )
    return DigestSendResponse(recipient=payload.recipient, city=payload.city, sent=sent)
