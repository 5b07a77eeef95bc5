from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from graphdash.messages import (
    build_bookings_list,
    build_env_listing,
    build_event,
    build_room_lists,
    build_rooms_list,
    build_subscriptions_list,
    build_users_list,
)
from graphdash.models import (
    CalendarEvent,
    DirectoryUser,
    Room,
    RoomList,
    Subscription,
    UserPage,
)


def _event(**overrides) -> CalendarEvent:
    values = dict(
        id="evt-1",
        subject="Quarterly [review]",
        start_utc=datetime(2025, 3, 11, 10, 0, tzinfo=timezone.utc),
        end_utc=datetime(2025, 3, 11, 10, 30, tzinfo=timezone.utc),
        organizer="organiser@example.com",
        is_online_meeting=True,
        is_organizer=False,
        is_cancelled=False,
    )
    values.update(overrides)
    return CalendarEvent(**values)


def test_users_list_marks_missing_mail_and_next_page():
    page = UserPage(
        users=[
            DirectoryUser(id="u1", display_name="Ada", mail="ada@example.com", account_enabled=True),
            DirectoryUser(id="u2", display_name="Bob", mail=None, account_enabled=None),
        ],
        more_available=True,
    )

    text = build_users_list(page)

    assert "[yellow]User Id: [green]u1[/green][/yellow]" in text
    assert "  Email: NO EMAIL" in text
    assert "  Enabled: true" in text
    assert "  Enabled: -" in text
    assert text.endswith("More users available? true")


def test_empty_collections():
    assert build_users_list(UserPage()) == "[yellow]No users found[/yellow]"
    assert build_rooms_list([]) == "[yellow]No rooms found[/yellow]"
    assert build_room_lists([]) == "[yellow]No room lists found[/yellow]"
    assert build_subscriptions_list([]) == "[yellow]No active subscriptions found[/yellow]"
    assert "No bookings" in build_bookings_list([], ZoneInfo("UTC"))


def test_rooms_list():
    text = build_rooms_list(
        [Room(id="r1", display_name="Boardroom", capacity=None, email_address="b@example.com")]
    )

    assert "Room ID: [green]r1" in text
    assert "  Capacity: -" in text
    assert "  Email: b@example.com" in text


def test_room_lists():
    text = build_room_lists(
        [RoomList(id="l1", display_name="Building 1", email_address="bldg1@example.com")]
    )

    assert "Room List ID: [green]l1" in text
    assert "Building 1" in text


def test_event_renders_local_times_and_flags():
    text = build_event(_event(), ZoneInfo("Europe/Berlin"))

    assert "Subject: [blue]Quarterly \\[review][/blue]" in text
    assert "Start: 2025-03-11T10:00:00Z, End: 2025-03-11T10:30:00Z" in text
    assert "Local Start: 2025-03-11 11:00:00 CET" in text
    assert "isOrganiser: [red]false[/red]" in text
    assert "OnlineMeeting: true" in text


def test_organiser_flag_is_green_when_true():
    text = build_event(_event(is_organizer=True), ZoneInfo("UTC"))

    assert "isOrganiser: [green]true[/green]" in text


def test_subscriptions_list_counts():
    subscription = Subscription(
        id="sub-1",
        change_type="created,updated,deleted",
        resource="/users/room1@example.com/events",
        expiration_utc=datetime(2025, 3, 12, 8, 0, tzinfo=timezone.utc),
        notification_url="https://hooks.example.com/webhook",
        creator_id="creator",
        application_id=None,
    )

    text = build_subscriptions_list([subscription])

    assert text.startswith("[green]Found 1 subscription(s):[/green]")
    assert "ExpirationDateTime: 2025-03-12T08:00:00Z" in text
    assert "CreatorId: creator" in text
    assert "ApplicationId" not in text


def test_env_listing_skips_blank_lines_and_keeps_plain_lines():
    text = build_env_listing("\n# comment\nPORT = 8080\n\nexport-less line\n")

    assert text.splitlines() == [
        "[bright_black]# comment[/bright_black]",
        "[yellow]PORT[/yellow]=8080",
        "export-less line",
    ]
