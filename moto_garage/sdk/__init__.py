from .auth_store import AuthStore
from .clients import BikesClient, ProfileClient
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionError,
    ServerError,
    TransportError,
    UnexpectedResponseError,
    ValidationError,
)
from .http_client import HttpClient
from .image_utils import resolve_image_url, resolve_listing_images
from .models import EDITABLE_LISTING_FIELDS, PROFILE_FIELDS, Buyer, EditDraft, Listing, SessionData, UserProfile
from .session import ApiSession
from .tracing import TraceContext, new_trace_id
from .ui_errors import UserFacingError, server_message, to_user_facing_error, user_message

__all__ = [
    "ApiError",
    "ApiSession",
    "AuthError",
    "AuthStore",
    "BikesClient",
    "Buyer",
    "ClientConfig",
    "ConfigError",
    "ConflictError",
    "EDITABLE_LISTING_FIELDS",
    "EditDraft",
    "HttpClient",
    "Listing",
    "NotFoundError",
    "PROFILE_FIELDS",
    "PermissionError",
    "ProfileClient",
    "ServerError",
    "SessionData",
    "TraceContext",
    "TransportError",
    "UnexpectedResponseError",
    "UserFacingError",
    "UserProfile",
    "ValidationError",
    "load_config",
    "new_trace_id",
    "resolve_image_url",
    "resolve_listing_images",
    "server_message",
    "to_user_facing_error",
    "user_message",
]
