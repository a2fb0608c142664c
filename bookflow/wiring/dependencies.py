from functools import lru_cache
import logging

from fastapi import Header

from bookflow.core.config import settings
from bookflow.application.ports.auth import AuthPort
from bookflow.application.ports.booking_api import BookingApiPort
from bookflow.application.ports.favorites_store import FavoritesStorePort
from bookflow.application.ports.provider_source import ProviderSourcePort
from bookflow.application.ports.session_store import BookingSessionStorePort
from bookflow.application.use_cases.booking_flow import BookingFlow, flat_rate_discount
from bookflow.application.use_cases.booking_session import BookingSessionUseCase
from bookflow.application.use_cases.provider_search import ProviderSearchUseCase
from bookflow.domain.entities.user import User
from bookflow.infrastructure.api.mock_booking_api import MockBookingApi
from bookflow.infrastructure.api.rest_booking_api import RestBookingApi
from bookflow.infrastructure.auth.session_auth import DevBypassAuth, SessionAuth
from bookflow.infrastructure.search.graphql_provider_source import GraphQLProviderSource
from bookflow.infrastructure.search.static_providers import DEFAULT_FAVORITES, StaticProviderSource
from bookflow.infrastructure.store.json_store import JsonFavoritesStore
from bookflow.infrastructure.store.memory_store import MemoryBookingSessionStore, MemoryFavoritesStore


logger = logging.getLogger(__name__)


@lru_cache
def get_booking_api() -> BookingApiPort:
    if settings.BOOKING_API_PROVIDER.lower() == "rest":
        logger.info("Using RestBookingApi base_url=%s", settings.API_BASE_URL)
        return RestBookingApi()
    logger.info("Using MockBookingApi")
    return MockBookingApi()


@lru_cache
def get_provider_source() -> ProviderSourcePort:
    if settings.PROVIDER_SOURCE.lower() == "graphql":
        return GraphQLProviderSource()
    return StaticProviderSource()


@lru_cache
def get_favorites_store() -> FavoritesStorePort:
    if settings.FAVORITES_STORE.lower() == "json":
        return JsonFavoritesStore(data_dir=settings.FAVORITES_DATA_DIR, defaults=DEFAULT_FAVORITES)
    return MemoryFavoritesStore(defaults=DEFAULT_FAVORITES)


@lru_cache
def get_session_store() -> BookingSessionStorePort:
    return MemoryBookingSessionStore()


def build_booking_flow() -> BookingFlow:
    return BookingFlow(
        booking_api=get_booking_api(),
        special_requests_limit=settings.SPECIAL_REQUESTS_LIMIT,
        discount_policy=flat_rate_discount(settings.PROMO_DISCOUNT_RATE),
        login_path=settings.LOGIN_PATH,
    )


def get_booking_session_use_case() -> BookingSessionUseCase:
    return BookingSessionUseCase(
        booking_api=get_booking_api(),
        sessions=get_session_store(),
        flow_factory=build_booking_flow,
    )


def get_provider_search_use_case() -> ProviderSearchUseCase:
    return ProviderSearchUseCase(source=get_provider_source(), favorites=get_favorites_store())


@lru_cache
def _dev_bypass_auth() -> AuthPort:
    return DevBypassAuth()


def get_auth(
    x_user_id: str | None = Header(None),
    x_user_email: str | None = Header(None),
    x_user_name: str | None = Header(None),
) -> AuthPort:
    """
    Token handling happens upstream; the gateway forwards the resolved user
    as X-User-* headers.
    """
    if settings.AUTH_BYPASS_ENABLED:
        return _dev_bypass_auth()
    if not x_user_id:
        return SessionAuth()
    return SessionAuth(User(id=x_user_id, name=x_user_name or "", email=x_user_email or ""))
