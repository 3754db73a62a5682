from __future__ import annotations

from typing import Any

from moto_garage.app.stores.buyer_roster import BuyerRoster
from moto_garage.app.stores.notices import Notice
from moto_garage.app.stores.profile_store import ProfileStore
from moto_garage.sdk.exceptions import ApiError
from moto_garage.sdk.image_utils import resolve_listing_images
from moto_garage.sdk.models import Listing

LISTING_COLUMNS = [
    ("id", "ID"),
    ("title", "Bike"),
    ("model_year", "Year"),
    ("price", "Price"),
    ("location", "Location"),
    ("status", "Status"),
    ("buyers", "Buyers"),
]
BUYER_COLUMNS = [("index", "#"), ("username", "Buyer"), ("contact", "Contact"), ("location", "Location")]


def normalize_value(value: Any) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def print_table(title: str, rows: list[dict[str, Any]], columns: list[tuple[str, str]], empty: str = "(no rows)") -> None:
    print(f"\n{title}")
    if not rows:
        print(empty)
        return

    widths = []
    for key, header in columns:
        max_cell = max(len(normalize_value(row.get(key))) for row in rows)
        widths.append(max(len(header), max_cell))

    print(" | ".join(header.ljust(widths[idx]) for idx, (_, header) in enumerate(columns)))
    print("-+-".join("-" * width for width in widths))
    for row in rows:
        print(" | ".join(normalize_value(row.get(key)).ljust(widths[idx]) for idx, (key, _) in enumerate(columns)))


def listing_row(listing: Listing) -> dict[str, Any]:
    return {
        "id": listing.id,
        "title": listing.title,
        "model_year": listing.model_year,
        "price": listing.price,
        "location": listing.location,
        "status": "sold" if listing.sold else "available",
        "buyers": len(listing.booked_buyers),
    }


def print_profile(store: ProfileStore) -> None:
    profile = store.profile
    print(f"\n[{store.avatar_initial}] {profile.username or '-'} ({store.role_label})")
    for name in ("email", "phone", "location"):
        print(f"  {name}: {normalize_value(getattr(profile, name))}")
    if store.error:
        print_error(store.error)
    if store.message:
        print(f"[success] {store.message}")


def print_listings(listings: tuple[Listing, ...], origin: str | None = None) -> None:
    print_table("My listings", [listing_row(listing) for listing in listings], LISTING_COLUMNS, empty="(no listings)")
    if origin:
        for listing in listings:
            images = resolve_listing_images(listing.images, origin)
            if images:
                print(f"  {listing.id}: {images[0]}")


def print_roster(roster: BuyerRoster) -> None:
    rendered = roster.render()
    title = f"Buyers for {rendered['title'] or roster.listing_id}"
    print_table(title, rendered["buyers"], BUYER_COLUMNS, empty=rendered["empty_text"] or "(no rows)")


def print_notice(notice: Notice | None) -> None:
    if notice is None:
        return
    if notice.is_error:
        print_error(notice.text, trace_id=notice.trace_id)
    else:
        print(f"[success] {notice.text} listing={notice.listing_id}")


def print_error(message: str, trace_id: str | None = None) -> None:
    print(f"[ERROR] message={message} trace_id={trace_id or 'n/a'}")


def print_api_error(exc: ApiError) -> None:
    print(f"[ERROR] code={exc.code} message={exc.message} trace_id={exc.trace_id or 'n/a'}")
