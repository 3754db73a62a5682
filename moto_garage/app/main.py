from __future__ import annotations

import argparse
import logging
from typing import Callable, Sequence

from moto_garage.app.bootstrap import Garage, garage_from_api_session
from moto_garage.app.config import load_app_config
from moto_garage.app.stores.buyer_roster import BuyerRoster, customer_rosters
from moto_garage.app.stores.tab_controller import Tab
from moto_garage.app.ui.printer import (
    print_api_error,
    print_error,
    print_listings,
    print_notice,
    print_profile,
    print_roster,
)
from moto_garage.sdk import ApiSession, ConfigError, load_config
from moto_garage.sdk.exceptions import ApiError

STORE_LOGGERS = ("moto_garage.profile", "moto_garage.listings")


def confirm_prompt(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ").strip().lower()
    return answer in {"y", "yes"}


def _auto_confirm(_prompt: str) -> bool:
    return True


def _open_garage(args: argparse.Namespace, initial_tab: Tab) -> tuple[Garage, ApiSession]:
    config = load_config(args.env_file)
    app_config = load_app_config(args.env_file)
    for name in STORE_LOGGERS:
        logging.getLogger(name).setLevel(app_config.log_level)
    api = ApiSession(config)
    if not api.token:
        raise SystemExit("Not signed in. Run `moto-garage login --token ... --user-id ...` first.")
    confirm: Callable[[str], bool] = _auto_confirm if getattr(args, "yes", False) else confirm_prompt
    garage = garage_from_api_session(api, app_config=app_config, confirm=confirm, initial_tab=initial_tab)
    return garage, api


def _open_listings(args: argparse.Namespace, tab: Tab = Tab.LISTINGS) -> tuple[Garage, ApiSession]:
    garage, api = _open_garage(args, tab)
    garage.tabs.start()
    if garage.listings.load_error:
        print_error(garage.listings.load_error)
        raise SystemExit(1)
    return garage, api


def cmd_profile(args: argparse.Namespace) -> None:
    garage, _ = _open_garage(args, Tab.PROFILE)
    garage.profile.load()
    if garage.profile.error:
        print_profile(garage.profile)
        raise SystemExit(1)
    if args.field:
        for name, value in _parse_fields(args.field):
            garage.profile.change_field(name, value)
        garage.profile.save()
    print_profile(garage.profile)
    if garage.profile.error:
        raise SystemExit(1)


def cmd_listings(args: argparse.Namespace) -> None:
    garage, api = _open_listings(args)
    print_listings(garage.listings.listings, api.config.asset_origin)


def cmd_customers(args: argparse.Namespace) -> None:
    garage, _ = _open_listings(args, Tab.CUSTOMERS)
    rosters = [BuyerRoster(garage.listings, args.listing_id)] if args.listing_id else customer_rosters(garage.listings)
    if not rosters:
        print("(no listings)")
    for roster in rosters:
        print_roster(roster)


def cmd_sold(args: argparse.Namespace) -> None:
    garage, _ = _open_listings(args)
    listing = _require_listing(garage, args.listing_id)
    if listing.sold:
        print(f"Listing {listing.id} is already sold.")
        return
    garage.listings.toggle_sold(listing)
    _finish(garage)


def cmd_available(args: argparse.Namespace) -> None:
    garage, _ = _open_listings(args)
    listing = _require_listing(garage, args.listing_id)
    if not listing.sold:
        print(f"Listing {listing.id} is already available.")
        return
    garage.listings.toggle_sold(listing)
    _finish(garage)


def cmd_delete(args: argparse.Namespace) -> None:
    garage, _ = _open_listings(args)
    _require_listing(garage, args.listing_id)
    if not garage.listings.delete(args.listing_id):
        print("Cancelled.")
        return
    _finish(garage)


def cmd_remove_buyer(args: argparse.Namespace) -> None:
    garage, _ = _open_listings(args, Tab.CUSTOMERS)
    _require_listing(garage, args.listing_id)
    if not garage.listings.remove_buyer(args.listing_id, args.buyer_id):
        print("Cancelled.")
        return
    _finish(garage)


def cmd_edit(args: argparse.Namespace) -> None:
    garage, _ = _open_listings(args)
    editor = garage.editor
    editor.open(_require_listing(garage, args.listing_id))
    for name, value in _parse_fields(args.field):
        editor.change_field(name, value)
    editor.submit()
    if editor.error:
        print_error(editor.error)
        raise SystemExit(1)
    print(f"[success] {editor.message}")


def cmd_login(args: argparse.Namespace) -> None:
    api = ApiSession(load_config(args.env_file))
    api.establish(args.token, user_id=args.user_id, role=args.role)
    print(f"Signed in as {args.user_id} ({api.config.env_name})")


def cmd_logout(args: argparse.Namespace) -> None:
    api = ApiSession(load_config(args.env_file))
    api.clear()
    print("Signed out.")


def _require_listing(garage: Garage, listing_id: str):
    listing = garage.listings.get(listing_id)
    if listing is None:
        print_error(f"Listing {listing_id} is not one of your listings.")
        raise SystemExit(1)
    return listing


def _finish(garage: Garage) -> None:
    notice = garage.listings.notice
    print_notice(notice)
    if notice is not None and notice.is_error:
        raise SystemExit(1)


def _parse_fields(raw: Sequence[str]) -> list[tuple[str, str]]:
    fields = []
    for item in raw:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise SystemExit(f"Invalid --field {item!r}: expected name=value")
        fields.append((name.strip(), value))
    return fields


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="moto-garage", description="My Garage console")
    parser.add_argument("--env-file", default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)

    profile_parser = subparsers.add_parser("profile", help="show or update your profile")
    profile_parser.add_argument("--field", action="append", default=[], metavar="NAME=VALUE")
    profile_parser.set_defaults(func=cmd_profile)

    subparsers.add_parser("listings", help="list your bikes").set_defaults(func=cmd_listings)

    customers_parser = subparsers.add_parser("customers", help="show interested buyers")
    customers_parser.add_argument("listing_id", nargs="?")
    customers_parser.set_defaults(func=cmd_customers)

    for name, func in (("sold", cmd_sold), ("available", cmd_available), ("delete", cmd_delete)):
        mutation = subparsers.add_parser(name)
        mutation.add_argument("listing_id")
        mutation.add_argument("-y", "--yes", action="store_true", help="skip the confirmation prompt")
        mutation.set_defaults(func=func)

    remove_parser = subparsers.add_parser("remove-buyer")
    remove_parser.add_argument("listing_id")
    remove_parser.add_argument("buyer_id")
    remove_parser.add_argument("-y", "--yes", action="store_true", help="skip the confirmation prompt")
    remove_parser.set_defaults(func=cmd_remove_buyer)

    edit_parser = subparsers.add_parser("edit")
    edit_parser.add_argument("listing_id")
    edit_parser.add_argument("--field", action="append", required=True, metavar="NAME=VALUE")
    edit_parser.set_defaults(func=cmd_edit)

    login_parser = subparsers.add_parser("login", help="store an access token")
    login_parser.add_argument("--token", required=True)
    login_parser.add_argument("--user-id", required=True)
    login_parser.add_argument("--role", default=None)
    login_parser.set_defaults(func=cmd_login)

    subparsers.add_parser("logout").set_defaults(func=cmd_logout)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(2) from exc
    except ApiError as exc:
        print_api_error(exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
