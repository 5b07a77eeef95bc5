from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from rich.markup import escape

from graphdash.config import Settings
from graphdash.graph_client import GraphClient, describe_error
from graphdash.messages import (
    HELP_TEXT,
    build_bookings_list,
    build_env_listing,
    build_event,
    build_room_lists,
    build_rooms_list,
    build_subscription,
    build_subscriptions_list,
    build_users_list,
)
from graphdash.sink import DisplaySink
from graphdash.utils import format_local_dt, tomorrow_slot


class Actions:
    """Menu actions writing into the output panel.

    Each action holds ``lock`` for its whole run, so two actions never
    interleave their output. Graph failures end up as a single red line.
    """

    def __init__(self, client: GraphClient, settings: Settings, output: DisplaySink) -> None:
        self.client = client
        self.settings = settings
        self.output = output
        self.lock = asyncio.Lock()
        self._logger = logging.getLogger("graphdash.actions")

    def _start(self, header: str) -> None:
        self.output.clear()
        self.output.write(header)

    def _fail(self, doing: str, exc: BaseException) -> None:
        self._logger.error("Error %s", doing, exc_info=exc)
        self.output.write(f"[red]Error {doing}: {escape(describe_error(exc))}[/red]")

    async def show_env(self) -> None:
        async with self.lock:
            path = Path(self.settings.env_file)
            self._start(f"Showing the contents of the {escape(str(path))} file...\n")
            try:
                contents = path.read_text(encoding="utf-8")
            except OSError as exc:
                self._fail(f"reading {escape(str(path))}", exc)
                return
            self.output.write(build_env_listing(contents))

    async def show_access_token(self) -> None:
        async with self.lock:
            self._start("Displaying the access token...")
            try:
                token = await self.client.get_access_token()
            except Exception as exc:
                self._fail("getting access token", exc)
                return
            self.output.write(f"App-only token: {escape(token)}")

    async def list_users(self) -> None:
        async with self.lock:
            self._start("Listing users...")
            try:
                page = await self.client.list_users()
            except Exception as exc:
                self._fail("listing users", exc)
                return
            self.output.write(build_users_list(page))

    async def list_subscriptions(self) -> None:
        async with self.lock:
            self._start("Listing subscriptions...")
            try:
                subscriptions = await self.client.list_subscriptions()
            except Exception as exc:
                self._fail("making Graph call", exc)
                return
            self.output.write(build_subscriptions_list(subscriptions))

    async def list_rooms(self) -> None:
        async with self.lock:
            self._start("Listing rooms...")
            try:
                rooms = await self.client.list_rooms()
            except Exception as exc:
                self._fail("listing rooms", exc)
                return
            self.output.write(build_rooms_list(rooms))

    async def list_room_lists(self) -> None:
        async with self.lock:
            self._start("Listing room lists...")
            try:
                room_lists = await self.client.list_room_lists()
            except Exception as exc:
                self._fail("listing room lists", exc)
                return
            self.output.write(build_room_lists(room_lists))

    async def list_bookings(self, identity: str) -> None:
        async with self.lock:
            self._start(f"Listing room bookings for [yellow]{escape(identity)}[/yellow]...")
            try:
                events = await self.client.list_bookings(identity)
            except Exception as exc:
                self._fail("getting calendar view", exc)
                return
            self.output.write(build_bookings_list(events, self.settings.local_timezone))

    async def subscribe(self, identity: str) -> None:
        async with self.lock:
            self._start(
                f"Creating a 1 day subscription for [yellow]{escape(identity)}[/yellow]..."
            )
            try:
                subscription = await self.client.create_subscription(identity)
            except Exception as exc:
                self._fail("creating subscription", exc)
                return
            self.output.write("[green]Subscription created[/green]")
            self.output.write(build_subscription(subscription))

    async def prompt_subscription_id(self) -> None:
        async with self.lock:
            self._start(
                "Please enter the subscription ID in the input box below and press Enter"
            )

    async def delete_subscription(self, subscription_id: str) -> None:
        async with self.lock:
            subscription_id = subscription_id.strip()
            if not subscription_id:
                self.output.write("[red]Error: Subscription ID cannot be empty[/red]")
                return
            self.output.write(
                f"Deleting subscription [yellow]{escape(subscription_id)}[/yellow]..."
            )
            try:
                await self.client.delete_subscription(subscription_id)
            except Exception as exc:
                self._fail("deleting subscription", exc)
                return
            self.output.write("[green]Subscription deleted[/green]")

    async def prompt_event_id(self, identity: str) -> None:
        async with self.lock:
            self._start("Please enter the event ID in the input box below and press Enter")
            self.output.write(
                f"Will delete event for [yellow]{escape(identity)}[/yellow]...\n"
            )

    async def delete_event(self, identity: str, event_id: str) -> None:
        async with self.lock:
            event_id = event_id.strip()
            if not event_id:
                self.output.write("[red]Error: Event ID cannot be empty[/red]")
                return
            self.output.write(
                f"Attempting to delete event [yellow]{escape(event_id)}[/yellow] "
                f"for [yellow]{escape(identity)}[/yellow]..."
            )
            try:
                await self.client.delete_event(identity, event_id)
            except Exception as exc:
                self._fail(f"deleting event {escape(event_id)}", exc)
                return
            self.output.write("[green]Event deleted[/green]")

    async def create_event(self, owner: str) -> None:
        async with self.lock:
            tz = self.settings.local_timezone
            self._start(f"Creating an event for [yellow]{escape(owner)}[/yellow]...")
            start, end = tomorrow_slot(tz)
            self.output.write(f"Tomorrow at 10:00 AM: {format_local_dt(start, tz)}")
            self.output.write(f"Tomorrow at 10:30 AM: {format_local_dt(end, tz)}")
            try:
                event = await self.client.create_event(
                    owner, self.settings.room_email, start, end
                )
            except Exception as exc:
                self._fail("creating event", exc)
                return
            self.output.write(build_event(event, tz))

    async def check_room(self, email: str) -> None:
        async with self.lock:
            self._start(f"Checking whether [yellow]{escape(email)}[/yellow] is a room...")
            try:
                room = await self.client.find_room(email)
            except Exception as exc:
                self._fail("checking room", exc)
                return
            if room is None:
                self.output.write(f"[red]Room {escape(email)} does not exist[/red]")
                return
            self.output.write(f"[green]Room {escape(email)} exists[/green]")
            self.output.write(build_rooms_list([room]))

    async def show_help(self) -> None:
        async with self.lock:
            self._start("Showing the help text...\n")
            self.output.write(HELP_TEXT)

    async def echo_input(self, text: str) -> None:
        async with self.lock:
            self._start("[yellow]You entered:[/yellow]")
            self.output.write(escape(text))
