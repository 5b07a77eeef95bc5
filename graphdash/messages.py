from __future__ import annotations

from typing import Iterable, List
from zoneinfo import ZoneInfo

from rich.markup import escape

from graphdash.models import CalendarEvent, Room, RoomList, Subscription, UserPage
from graphdash.utils import format_local_dt, format_utc_dt, mask_secret


HELP_TEXT = """[yellow]Navigation Help:[/yellow]
  • Press [green]ESC[/green] to switch focus between menu and output
  • Use [green]PgUp[/green]/[green]PgDn[/green] to scroll when output has focus
  • Use mouse wheel to scroll (if your terminal supports it)
  • Use arrow keys [green]↑[/green]/[green]↓[/green] to scroll line by line
  • [green]Alt+o[/green] output, [green]Alt+m[/green] menu, [green]Alt+w[/green] webhook events
  • Menu hotkeys are shown next to each item, [green]q[/green] quits"""


def _flag(value: bool) -> str:
    color = "green" if value else "red"
    return f"[{color}]{str(value).lower()}[/{color}]"


def build_users_list(page: UserPage) -> str:
    if not page.users:
        return "[yellow]No users found[/yellow]"
    lines: List[str] = []
    for user in page.users:
        enabled = "-" if user.account_enabled is None else str(user.account_enabled).lower()
        lines.append(f"[yellow]User Id: [green]{escape(user.id)}[/green][/yellow]")
        lines.append(f"  Name: {escape(user.display_name)}")
        lines.append(f"  Email: {escape(user.mail or 'NO EMAIL')}")
        lines.append(f"  Enabled: {enabled}")
        lines.append("")
    more = "true" if page.more_available else "false"
    lines.append(f"More users available? {more}")
    return "\n".join(lines)


def build_rooms_list(rooms: Iterable[Room]) -> str:
    lines: List[str] = []
    for room in rooms:
        capacity = "-" if room.capacity is None else str(room.capacity)
        lines.append(f"[yellow]Room ID: [green]{escape(room.id)}[/green][/yellow]")
        lines.append(f"  Name: {escape(room.display_name)}")
        lines.append(f"  Capacity: {capacity}")
        lines.append(f"  Email: {escape(room.email_address)}")
        lines.append("")
    if not lines:
        return "[yellow]No rooms found[/yellow]"
    return "\n".join(lines)


def build_room_lists(room_lists: Iterable[RoomList]) -> str:
    lines: List[str] = []
    for room_list in room_lists:
        lines.append(f"[yellow]Room List ID: [green]{escape(room_list.id)}[/green][/yellow]")
        lines.append(f"  Name: {escape(room_list.display_name)}")
        lines.append(f"  Email: {escape(room_list.email_address)}")
        lines.append("")
    if not lines:
        return "[yellow]No room lists found[/yellow]"
    return "\n".join(lines)


def build_event(event: CalendarEvent, tz: ZoneInfo) -> str:
    lines = [
        f"[yellow]Event Id : [green]{escape(event.id)}[/green][/yellow]",
        f"  Subject: [blue]{escape(event.subject)}[/blue]",
        f"  Start: {format_utc_dt(event.start_utc)}, End: {format_utc_dt(event.end_utc)}",
        f"  Local Start: {format_local_dt(event.start_utc, tz)}",
        f"  Local End: {format_local_dt(event.end_utc, tz)}",
        f"  OnlineMeeting: {str(event.is_online_meeting).lower()}",
        f"  isOrganiser: {_flag(event.is_organizer)}",
        f"  isCancelled: {str(event.is_cancelled).lower()}",
        f"  Organiser: [yellow]{escape(event.organizer or '-')}[/yellow]",
    ]
    return "\n".join(lines)


def build_bookings_list(events: Iterable[CalendarEvent], tz: ZoneInfo) -> str:
    blocks = [build_event(event, tz) for event in events]
    if not blocks:
        return "[yellow]No bookings in the next 7 days[/yellow]"
    return "\n\n".join(blocks)


def build_subscription(subscription: Subscription) -> str:
    lines = [
        f"[yellow]SubscriptionId: [green]{escape(subscription.id)}[/green][/yellow]",
        f"  ChangeType: {escape(subscription.change_type)}",
        f"  ExpirationDateTime: {format_utc_dt(subscription.expiration_utc)}",
        f"  Resource: {escape(subscription.resource)}",
        f"  NotificationURL: {escape(subscription.notification_url)}",
    ]
    if subscription.creator_id:
        lines.append(f"  CreatorId: {escape(subscription.creator_id)}")
    if subscription.application_id:
        lines.append(f"  ApplicationId: {escape(subscription.application_id)}")
    return "\n".join(lines)


def build_subscriptions_list(subscriptions: Iterable[Subscription]) -> str:
    items = list(subscriptions)
    if not items:
        return "[yellow]No active subscriptions found[/yellow]"
    header = f"[green]Found {len(items)} subscription(s):[/green]"
    return "\n\n".join([header] + [build_subscription(item) for item in items])


def build_env_listing(contents: str) -> str:
    lines: List[str] = []
    for raw_line in contents.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith("#"):
            lines.append(f"[bright_black]{escape(line)}[/bright_black]")
            continue
        key, sep, value = line.partition("=")
        if not sep:
            lines.append(escape(line))
            continue
        key = key.strip()
        value = value.strip()
        if "SECRET" in key.upper():
            value = mask_secret(value)
        lines.append(f"[yellow]{escape(key)}[/yellow]={escape(value)}")
    return "\n".join(lines)
