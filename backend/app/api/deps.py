"""Shared API dependencies: single import point for all routers.

Re-exports the database session and agent authentication, and builds the
reservation engine from settings so routers never read configuration
themselves::

    from app.api.deps import get_db, get_reservation_engine
"""

from fastapi import Depends

from app.auth.dependencies import get_current_agent
from app.config import settings
from app.database import get_db
from app.reservations.authorization import AuthorizationResolver
from app.reservations.config import ReservationConfig
from app.reservations.engine import ReservationEngine
from app.reservations.notifications import NotificationDispatcher, build_dispatcher


def get_reservation_config() -> ReservationConfig:
    return settings.reservation_config()


def get_notification_dispatcher() -> NotificationDispatcher:
    return build_dispatcher(settings.smtp_config())


def get_authorization_resolver(
    config: ReservationConfig = Depends(get_reservation_config),
) -> AuthorizationResolver:
    return AuthorizationResolver(config)


def get_reservation_engine(
    config: ReservationConfig = Depends(get_reservation_config),
    resolver: AuthorizationResolver = Depends(get_authorization_resolver),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> ReservationEngine:
    return ReservationEngine(config, resolver, dispatcher)


__all__ = [
    "get_db",
    "get_current_agent",
    "get_reservation_config",
    "get_notification_dispatcher",
    "get_authorization_resolver",
    "get_reservation_engine",
]
