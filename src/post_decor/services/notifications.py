"""Post-owner notifications emitted when someone decorates their images.

Delivery is best effort. Sinks may raise; the placement engine catches and
logs anything a sink throws so a failed notification never fails a placement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from post_decor.core.settings import settings

logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """Raised when a notification could not be delivered."""


class NotificationSink(Protocol):
    """Contract for delivering a message from one user to another."""

    def notify(self, actor_id: int, recipient_id: int, message: str) -> None: ...


class LoggingNotificationSink:
    """Record notifications in the application log only."""

    def notify(self, actor_id: int, recipient_id: int, message: str) -> None:
        logger.info(
            "Notification from user %s to user %s: %s",
            actor_id,
            recipient_id,
            message,
        )


@dataclass(frozen=True)
class WebhookConfig:
    """Immutable configuration for webhook delivery."""

    url: str
    timeout_seconds: float


class WebhookNotificationSink:
    """POST each notification as JSON to an external endpoint."""

    def __init__(self, config: WebhookConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._client = client

    def _ensure_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(self.config.timeout_seconds))
        return self._client

    def notify(self, actor_id: int, recipient_id: int, message: str) -> None:
        payload = {
            "actor_id": actor_id,
            "recipient_id": recipient_id,
            "message": message,
        }
        try:
            response = self._ensure_client().post(self.config.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationError(f"Webhook delivery failed: {exc}") from exc
        logger.debug("Delivered notification to user %s via webhook", recipient_id)

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        if self._client is not None:
            self._client.close()
            self._client = None


def load_webhook_config() -> WebhookConfig | None:
    """Build webhook configuration from global settings, if enabled."""
    if not settings.notifications_via_webhook:
        return None
    return WebhookConfig(
        url=settings.notification_webhook_url,
        timeout_seconds=float(settings.notification_timeout_seconds),
    )


class _NotificationSinkSingleton:
    """Singleton wrapper for the configured notification sink."""

    _instance: NotificationSink | None = None

    @classmethod
    def get_instance(cls) -> NotificationSink:
        if cls._instance is None:
            config = load_webhook_config()
            if config is None:
                cls._instance = LoggingNotificationSink()
            else:
                cls._instance = WebhookNotificationSink(config)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        instance = cls._instance
        cls._instance = None
        if isinstance(instance, WebhookNotificationSink):
            instance.close()


def get_notification_sink() -> NotificationSink:
    """Return the process-wide notification sink."""
    return _NotificationSinkSingleton.get_instance()


def reset_notification_sink() -> None:
    """Drop the cached sink so the next call re-reads settings."""
    _NotificationSinkSingleton.reset()


__all__ = [
    "LoggingNotificationSink",
    "NotificationError",
    "NotificationSink",
    "WebhookConfig",
    "WebhookNotificationSink",
    "get_notification_sink",
    "load_webhook_config",
    "reset_notification_sink",
]
