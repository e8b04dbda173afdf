from __future__ import annotations

from typing import Iterable

from weatherdash.core.errors import WeatherDashError
from weatherdash.core.logging import get_logger
from weatherdash.schemas.digest import DigestReport, Subscription
from weatherdash.services.advice import AdviceService
from weatherdash.services.digest.base import DigestDispatcher
from weatherdash.services.weather.aggregator import WeatherAggregator


async def send_digest(
    subscription: Subscription,
    *,
    aggregator: WeatherAggregator,
    advisor: AdviceService,
    dispatcher: DigestDispatcher,
) -> bool:
    """Fetch, advise and dispatch for one subscriber. Weather errors propagate."""
    snapshot = await aggregator.fetch(subscription.city)
    advice = await advisor.advise(snapshot)
    return await dispatcher.send(subscription.recipient, snapshot, advice)


async def run_daily_digest(
    subscriptions: Iterable[Subscription],
    *,
    aggregator: WeatherAggregator,
    advisor: AdviceService,
    dispatcher: DigestDispatcher,
    logger=None,
) -> DigestReport:
    """Process subscribers one at a time; one bad city never stops the run."""
    log = logger or get_logger(__name__)
    report = DigestReport()

    for sub in subscriptions:
        if not sub.recipient.strip() or not sub.city.strip():
            report.skipped += 1
            log.info("digest_skipped", recipient=sub.recipient, reason="missing recipient or city")
            continue

        try:
            sent = await send_digest(sub, aggregator=aggregator, advisor=advisor, dispatcher=dispatcher)
        except WeatherDashError as exc:
            report.skipped += 1
            log.warning("digest_skipped", recipient=sub.recipient, city=sub.city, reason=str(exc))
            continue
        except Exception as exc:
            report.failed += 1
            log.error("digest_failed", recipient=sub.recipient, city=sub.city, error=str(exc))
            continue

        if sent:
            report.sent += 1
        else:
            report.failed += 1

    log.info("digest_run_finished", sent=report.sent, skipped=report.skipped, failed=report.failed)
    return report
