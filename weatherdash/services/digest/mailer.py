from __future__ import annotations

from email.message import EmailMessage
from html import escape
from typing import Awaitable, Callable

import aiosmtplib

from weatherdash.core.config import Settings
from weatherdash.core.errors import ConfigurationError
from weatherdash.core.logging import get_logger
from weatherdash.schemas.advice import AdvicePayload
from weatherdash.schemas.weather import WeatherSnapshot


SendFn = Callable[..., Awaitable[object]]


def digest_subject(snapshot: WeatherSnapshot) -> str:
    return f"The Atmosphere in {snapshot.city} ☁️"


def render_digest(snapshot: WeatherSnapshot, advice: AdvicePayload) -> tuple[str, str]:
    """Return ``(plain_text, html)`` bodies for one digest."""
    place = snapshot.city if not snapshot.country else f"{snapshot.city}, {snapshot.country}"
    lines = [
        place,
        f"{snapshot.current_temp:.0f}°C, {snapshot.description}",
        f"High {snapshot.max_temp:.0f}°C / Low {snapshot.min_temp:.0f}°C",
        f"Humidity {snapshot.humidity}% | Wind {snapshot.wind_speed} m/s | AQI {snapshot.aqi}",
        f"Sunrise {snapshot.sunrise} | Sunset {snapshot.sunset} | Day length {snapshot.day_length}",
    ]
    lines += [f"{part.name}: {part.temp:.0f}°C, {part.condition}" for part in snapshot.day_parts]
    lines += ["", advice.summary, f"Outfit: {advice.outfit}", f"Safety: {advice.safety}"]
    text = "\n".join(lines)

    parts_html = "".join(
        f"<td><strong>{escape(part.name)}</strong><br>{part.temp:.0f}°C<br>{escape(part.condition)}</td>"
        for part in snapshot.day_parts
    )
    html = (
        "<html><body style=\"font-family: sans-serif;\">"
        f"<h2>{escape(place)}</h2>"
        f"<p style=\"font-size: 28px; margin: 0;\">{snapshot.current_temp:.0f}°C</p>"
        f"<p>{escape(snapshot.description)} &middot; High {snapshot.max_temp:.0f}°C / Low {snapshot.min_temp:.0f}°C</p>"
        f"<p>Humidity {snapshot.humidity}% &middot; Wind {snapshot.wind_speed} m/s &middot; AQI {snapshot.aqi}</p>"
        f"<p>Sunrise {escape(snapshot.sunrise)} &middot; Sunset {escape(snapshot.sunset)} "
        f"&middot; {escape(snapshot.day_length)} of daylight</p>"
        + (f"<table><tr>{parts_html}</tr></table>" if parts_html else "")
        + f"<p><em>{escape(advice.summary)}</em></p>"
        f"<p><strong>Outfit:</strong> {escape(advice.outfit)}</p>"
        f"<p><strong>Safety:</strong> {escape(advice.safety)}</p>"
        "</body></html>"
    )
    return text, html


class EmailDigestDispatcher:
    """Sends weather digests over SMTP."""

    def __init__(self, settings: Settings, *, send: SendFn = aiosmtplib.send, logger=None) -> None:
        sender = settings.email_from or settings.smtp_username
        if not sender:
            raise ConfigurationError("Digest sender address is not configured")
        self._sender = sender
        self._settings = settings
        self._send = send
        self._log = logger or get_logger(__name__)

    def build_message(self, recipient: str, snapshot: WeatherSnapshot, advice: AdvicePayload) -> EmailMessage:
        if "\r" in recipient or "\n" in recipient:
            raise ValueError("Recipient may not contain line breaks")
        text, html = render_digest(snapshot, advice)
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = recipient
        message["Subject"] = digest_subject(snapshot)
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    async def send(self, recipient: str, snapshot: WeatherSnapshot, advice: AdvicePayload) -> bool:
        try:
            message = self.build_message(recipient, snapshot, advice)
            await self._send(
                message,
                hostname=self._settings.smtp_host,
                port=self._settings.smtp_port,
                username=self._settings.smtp_username,
                password=self._settings.smtp_password,
                start_tls=self._settings.smtp_use_tls,
                timeout=self._settings.http_timeout_seconds,
            )
        except (aiosmtplib.SMTPException, OSError, ValueError) as exc:
            self._log.error("digest_failed", recipient=recipient, city=snapshot.city, error=str(exc))
            return False
        self._log.info("digest_sent", recipient=recipient, city=snapshot.city)
        return True
