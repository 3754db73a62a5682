from .buyer_roster import EMPTY_ROSTER_TEXT, BuyerRoster, BuyerRow, customer_rosters
from .edit_session import EditSession, EditStatus
from .listing_collection import ListingCollection
from .notices import MutationOutcome, Notice, NoticeKind
from .profile_store import ProfileStore
from .tab_controller import Tab, TabController

__all__ = [
    "BuyerRoster",
    "BuyerRow",
    "EMPTY_ROSTER_TEXT",
    "EditSession",
    "EditStatus",
    "ListingCollection",
    "MutationOutcome",
    "Notice",
    "NoticeKind",
    "ProfileStore",
    "Tab",
    "TabController",
    "customer_rosters",
]
