from .bikes_client import BikesClient
from .profile_client import ProfileClient

__all__ = ["BikesClient", "ProfileClient"]
