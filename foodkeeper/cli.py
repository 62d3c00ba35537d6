"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date, timedelta

from dotenv import load_dotenv

from .app import SORT_MODES, FoodKeeper
from .config import DEFAULT_CONFIG_PATH, load_config
from .errors import FoodKeeperError, ValidationError
from .models import FoodItem, GroceryItem, Location
from .preferences import DAY_OPTIONS
from .sizes import SizeUnit, format_size, parse_size


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="foodkeeper",
        description="Track food expiration dates, keep a shopping list and get reminders",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help=f"Config file path (TOML, default {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")
    locations = [loc.value for loc in Location]

    # add
    add_parser = sub.add_parser("add", help="Add a food item")
    add_parser.add_argument("name")
    add_parser.add_argument("--location", "-l", choices=locations, default="fridge")
    add_parser.add_argument(
        "--expires", "-e", required=True,
        help="YYYY-MM-DD, today, tomorrow or +N (days from today)",
    )
    add_parser.add_argument("--notes", default=None)
    add_parser.add_argument("--remaining", type=float, default=1.0, help="0.0-1.0")
    add_parser.add_argument("--qty", default="", help="Package size quantity, e.g. 2")
    add_parser.add_argument(
        "--unit", default="", choices=[u.value for u in SizeUnit],
        help="Package size unit",
    )

    # list
    list_parser = sub.add_parser("list", help="List active food items")
    list_parser.add_argument("--location", "-l", choices=locations, default=None)
    list_parser.add_argument("--sort", choices=SORT_MODES, default="expiration")
    list_parser.add_argument("--json", action="store_true", help="Output JSON")

    # search
    search_parser = sub.add_parser("search", help="Search active items by name or notes")
    search_parser.add_argument("text", nargs="?", default="")
    search_parser.add_argument("--json", action="store_true", help="Output JSON")

    # edit
    edit_parser = sub.add_parser("edit", help="Edit a food item")
    edit_parser.add_argument("id", help="Item id (a unique prefix is enough)")
    edit_parser.add_argument("--name", default=None)
    edit_parser.add_argument("--location", "-l", choices=locations, default=None)
    edit_parser.add_argument("--expires", "-e", default=None)
    edit_parser.add_argument("--notes", default=None)
    edit_parser.add_argument("--remaining", type=float, default=None)
    edit_parser.add_argument("--size", default=None, help='e.g. "2 gal"; "" clears it')

    # use / discard / delete
    for name, help_text in (
        ("use", "Mark an item as used"),
        ("discard", "Mark an item as thrown away"),
        ("delete", "Delete an item permanently"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("id", help="Item id (a unique prefix is enough)")

    # move
    move_parser = sub.add_parser("move", help="Reorder an item within a location")
    move_parser.add_argument("location", choices=locations)
    move_parser.add_argument("from_index", type=int)
    move_parser.add_argument("to_index", type=int)

    # grocery
    grocery_parser = sub.add_parser("grocery", help="Shopping list")
    grocery_sub = grocery_parser.add_subparsers(dest="grocery_command")
    g_list = grocery_sub.add_parser("list", help="Show the shopping list")
    g_list.add_argument("--json", action="store_true", help="Output JSON")
    g_add = grocery_sub.add_parser("add", help="Add an entry")
    g_add.add_argument("name")
    g_check = grocery_sub.add_parser("check", help="Toggle an entry's purchased flag")
    g_check.add_argument("id")
    g_remove = grocery_sub.add_parser("remove", help="Remove an entry")
    g_remove.add_argument("id")
    grocery_sub.add_parser("clear", help="Remove purchased entries")
    grocery_sub.add_parser("sync", help="Update the list from the inventory now")

    # settings
    settings_parser = sub.add_parser("settings", help="Reminder settings")
    settings_sub = settings_parser.add_subparsers(dest="settings_command")
    settings_sub.add_parser("show", help="Show current settings")
    s_set = settings_sub.add_parser("set", help="Change reminder timing")
    s_set.add_argument("--days-before", type=int, choices=DAY_OPTIONS, default=None)
    s_set.add_argument(
        "--notify-on-day", action=argparse.BooleanOptionalAction, default=None,
        help="Remind on the expiration day",
    )
    settings_sub.add_parser("authorize", help="Allow or deny reminders")

    # reminders
    rem_parser = sub.add_parser("reminders", help="Show upcoming reminders")
    rem_parser.add_argument("--json", action="store_true", help="Output JSON")

    # watch
    sub.add_parser("watch", help="Run in the background: deliver reminders and keep the list in sync")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config(args.config or DEFAULT_CONFIG_PATH)
    except ValueError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "watch":
        try:
            asyncio.run(_cmd_watch(config))
        except KeyboardInterrupt:
            print("Stopped.")
        return

    try:
        with FoodKeeper(config, prompt=_ask_permission) as app:
            match args.command:
                case "add":
                    _cmd_add(app, args)
                case "list":
                    _print_items(app.list_items(args.location, args.sort), args.json)
                case "search":
                    _print_items(app.search(args.text), args.json)
                case "edit":
                    _cmd_edit(app, args)
                case "use":
                    item = app.mark_used(_resolve_food(app, args.id))
                    print(f"Marked {item.name} as used.")
                case "discard":
                    item = app.mark_discarded(_resolve_food(app, args.id))
                    print(f"Marked {item.name} as discarded.")
                case "delete":
                    item_id = _resolve_food(app, args.id)
                    name = app.get_item(item_id).name
                    app.delete_item(item_id)
                    print(f"Deleted {name}.")
                case "move":
                    items = app.move_item(args.location, args.from_index, args.to_index)
                    _print_items(items, as_json=False)
                case "grocery":
                    _cmd_grocery(app, args, grocery_parser)
                case "settings":
                    _cmd_settings(app, args, settings_parser)
                case "reminders":
                    _cmd_reminders(app, args)
    except FoodKeeperError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def parse_expires(text: str, today: date | None = None) -> date:
    """Parse YYYY-MM-DD, "today", "tomorrow" or "+N"."""
    today = today or date.today()
    value = text.strip().lower()
    if value == "today":
        return today
    if value == "tomorrow":
        return today + timedelta(days=1)
    if value.startswith("+"):
        try:
            return today + timedelta(days=int(value[1:]))
        except ValueError:
            raise ValidationError(f"Invalid day offset: {text!r}") from None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            f"Invalid date {text!r} (use YYYY-MM-DD, today, tomorrow or +N)"
        ) from None


def _resolve(ids: list[str], prefix: str, kind: str) -> str:
    matches = [i for i in ids if i.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise ValidationError(f"No {kind} matches id {prefix!r}")
    raise ValidationError(f"Id {prefix!r} is ambiguous ({len(matches)} {kind}s match)")


def _resolve_food(app: FoodKeeper, prefix: str) -> str:
    return _resolve([i.id for i in app.store.query_food_items()], prefix, "item")


def _resolve_grocery(app: FoodKeeper, prefix: str) -> str:
    return _resolve([g.id for g in app.store.query_grocery_items()], prefix, "grocery entry")


def _ask_permission() -> bool:
    answer = input("Allow foodkeeper to show expiry reminders? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _item_to_dict(item: FoodItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "location": item.location.value,
        "expiration_date": item.expiration_date.isoformat(),
        "expiration_status": item.expiration_status().value,
        "expiration_text": item.expiration_text(),
        "remaining_amount": item.remaining_amount,
        "size": item.size,
        "notes": item.notes,
        "sort_order": item.sort_order,
    }


_STATUS_MARK = {"safe": "✓", "warning": "!", "expired": "✗"}


def _print_items(items: list[FoodItem], as_json: bool) -> None:
    if as_json:
        print(json.dumps([_item_to_dict(i) for i in items], ensure_ascii=False, indent=2))
        return
    if not items:
        print("No items.")
        return
    for i in items:
        mark = _STATUS_MARK[i.expiration_status().value]
        size = f" ({i.size})" if i.size else ""
        print(
            f"  {mark} {i.id[:8]}  {i.name + size:<24} {i.location.value:<8} "
            f"{i.expiration_text():<20} {i.remaining_amount:.0%}"
        )


def _cmd_add(app: FoodKeeper, args) -> None:
    size = format_size(args.qty, SizeUnit(args.unit))
    item = app.add_item(
        args.name,
        args.location,
        parse_expires(args.expires),
        notes=args.notes,
        remaining_amount=args.remaining,
        size=size,
    )
    print(f"Added {item.name} ({item.id[:8]}): {item.expiration_text()}")


def _cmd_edit(app: FoodKeeper, args) -> None:
    fields: dict = {}
    if args.name is not None:
        fields["name"] = args.name
    if args.location is not None:
        fields["location"] = args.location
    if args.expires is not None:
        fields["expiration_date"] = parse_expires(args.expires)
    if args.notes is not None:
        fields["notes"] = args.notes
    if args.remaining is not None:
        fields["remaining_amount"] = args.remaining
    if args.size is not None:
        # normalise through the size codec; "" clears the size
        fields["size"] = format_size(*parse_size(args.size))
    if not fields:
        print("Nothing to change.")
        return
    item = app.edit_item(_resolve_food(app, args.id), **fields)
    print(f"Updated {item.name}: {item.expiration_text()}")


def _grocery_to_dict(item: GroceryItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "is_completed": item.is_completed,
        "date_added": item.date_added.isoformat(),
    }


def _cmd_grocery(app: FoodKeeper, args, parser: argparse.ArgumentParser) -> None:
    match args.grocery_command:
        case "list":
            items = app.grocery_list()
            if args.json:
                print(json.dumps([_grocery_to_dict(g) for g in items], ensure_ascii=False, indent=2))
            elif not items:
                print("The grocery list is empty.")
            else:
                for g in items:
                    box = "[x]" if g.is_completed else "[ ]"
                    print(f"  {box} {g.id[:8]}  {g.name}")
        case "add":
            item = app.add_grocery(args.name)
            print(f"Added {item.name} to the grocery list.")
        case "check":
            item = app.toggle_grocery(_resolve_grocery(app, args.id))
            state = "purchased" if item.is_completed else "not purchased"
            print(f"{item.name}: {state}")
        case "remove":
            app.delete_grocery(_resolve_grocery(app, args.id))
            print("Removed.")
        case "clear":
            count = app.clear_completed()
            print(f"Removed {count} purchased entries.")
        case "sync":
            result = app.sync()
            print(f"{len(result.added)} added, {len(result.removed)} removed.")
        case _:
            parser.print_help()


def _cmd_settings(app: FoodKeeper, args, parser: argparse.ArgumentParser) -> None:
    match args.settings_command:
        case "show":
            prefs = app.preferences
            status = "Enabled" if app.reminders.is_authorized() else "Disabled"
            days = prefs.days_before_notification
            print(f"Reminders:              {status}")
            print(f"Remind me:              {days} day{'s' if days != 1 else ''} before")
            print(f"On expiration day:      {'yes' if prefs.notify_on_expiration_day else 'no'}")
            rem = app.config.reminders
            print(f"Reminder time:          {rem.hour:02d}:{rem.minute:02d}")
        case "set":
            app.set_preferences(days_before=args.days_before, notify_on_day=args.notify_on_day)
            print("Settings saved.")
        case "authorize":
            granted = asyncio.run(app.authorize())
            print("Reminders enabled." if granted else "Reminders disabled.")
        case _:
            parser.print_help()


def _cmd_reminders(app: FoodKeeper, args) -> None:
    pending = app.reminders.pending()
    if args.json:
        data = [
            {"id": r.id, "fire_at": r.fire_at.isoformat(), "title": r.title, "body": r.body}
            for r in pending
        ]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return
    if not app.reminders.is_authorized():
        print("Reminders are disabled. Run `foodkeeper settings authorize` to enable them.")
        return
    if not pending:
        print("No upcoming reminders.")
        return
    for r in pending:
        print(f"  {r.fire_at:%Y-%m-%d %H:%M}  {r.body}")


async def _cmd_watch(config) -> None:
    from .watch import SyncScheduler

    with FoodKeeper(config) as app:
        watcher = SyncScheduler(app)
        print("Watching for expiring food. Press Ctrl+C to stop.")
        await watcher.run_forever()
