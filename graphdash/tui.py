from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Header, Input, OptionList, RichLog
from textual.widgets.option_list import Option

from graphdash.actions import Actions
from graphdash.config import Settings
from graphdash.graph_client import GraphClient
from graphdash.notifications import NotificationAggregator


@dataclass(frozen=True)
class MenuItem:
    key: str
    label: str
    description: str
    run: Callable[[], None]


class PanelSink:
    def __init__(self, log: RichLog) -> None:
        self.log = log

    def write(self, text: str) -> None:
        self.log.write(text)

    def clear(self) -> None:
        self.log.clear()


class Menu(OptionList):
    def set_items(self, items: List[MenuItem]) -> None:
        self._hotkeys = [item.key for item in items]
        self.clear_options()
        self.add_options(
            Option(
                Text.assemble(
                    (f" {item.key} ", "bold green"),
                    f" {item.label}  ",
                    (item.description, "dim"),
                ),
                id=item.key,
            )
            for item in items
        )

    def on_key(self, event: events.Key) -> None:
        hotkeys = getattr(self, "_hotkeys", [])
        if event.character is None or event.character not in hotkeys:
            return
        event.stop()
        self.highlighted = hotkeys.index(event.character)
        self.action_select()


class Dashboard(App[None]):
    TITLE = "Microsoft Graph Room Booking CLI"

    CSS = """
    #output {
        height: 8fr;
        border-top: solid $accent;
        border-title-align: left;
    }

    #input {
        height: 3;
    }

    #webhook {
        height: 10;
        border: round $secondary;
    }

    #menu {
        height: 3fr;
        border: round $primary;
    }
    """

    BINDINGS = [
        Binding("escape", "toggle_focus", "Menu/Output"),
        Binding("alt+o", "focus('output')", "Output", show=False),
        Binding("alt+m", "focus('menu')", "Menu", show=False),
        Binding("alt+w", "focus('webhook')", "Webhook", show=False),
    ]

    def __init__(
        self,
        settings: Settings,
        client: GraphClient,
        queue: asyncio.Queue[str],
    ) -> None:
        super().__init__()
        self.settings = settings
        self.output_log = RichLog(id="output", markup=True, wrap=True)
        self.webhook_log = RichLog(id="webhook", markup=True, wrap=True)
        self.input_field = Input(placeholder="Input", id="input")
        self.menu = Menu(id="menu")
        self.actions = Actions(client, settings, PanelSink(self.output_log))
        self.aggregator = NotificationAggregator(queue, PanelSink(self.webhook_log))
        self._menu_items: Dict[str, MenuItem] = {}
        self._pending_input: Optional[Callable[[str], Awaitable[None]]] = None
        self._tui_logger = logging.getLogger("graphdash.tui")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield self.output_log
        yield self.input_field
        yield self.webhook_log
        yield self.menu

    def on_mount(self) -> None:
        self.output_log.border_title = "Output"
        self.webhook_log.border_title = "Webhook Events"
        self.menu.border_title = "Menu"
        items = self.build_menu()
        self._menu_items = {item.key: item for item in items}
        self.menu.set_items(items)
        self.run_worker(self.aggregator.run(), name="aggregator", group="webhook")
        self.menu.focus()

    def on_unmount(self) -> None:
        self.aggregator.stop()

    def build_menu(self) -> List[MenuItem]:
        actions = self.actions
        organiser = self.settings.organiser_email
        room = self.settings.room_email
        return [
            MenuItem("e", "Env", f"Show the contents of {self.settings.env_file}",
                     lambda: self._run(actions.show_env())),
            MenuItem("t", "Access Token", "Show the current access token",
                     lambda: self._run(actions.show_access_token())),
            MenuItem("u", "All Users", "List all users",
                     lambda: self._run(actions.list_users())),
            MenuItem("s", "All Subscriptions", "List all subscriptions",
                     lambda: self._run(actions.list_subscriptions())),
            MenuItem("r", "All Rooms", "List all rooms",
                     lambda: self._run(actions.list_rooms())),
            MenuItem("l", "Room Lists", "List all room lists",
                     lambda: self._run(actions.list_room_lists())),
            MenuItem("O", "Room Bookings (Organiser)", f"List room bookings for {organiser}",
                     lambda: self._run(actions.list_bookings(organiser))),
            MenuItem("R", "Room Bookings (Room)", f"List room bookings for {room}",
                     lambda: self._run(actions.list_bookings(room))),
            MenuItem("7", "Org Subscribe", f"Create a 1 day subscription for {organiser}",
                     lambda: self._run(actions.subscribe(organiser))),
            MenuItem("8", "Room Subscribe", f"Create a 1 day subscription for {room}",
                     lambda: self._run(actions.subscribe(room))),
            MenuItem("x", "Delete subscription", "by subscription id",
                     self._ask_subscription_id),
            MenuItem("9", "Delete event", f"id - By Room {room}",
                     lambda: self._ask_event_id(room)),
            MenuItem("0", "Delete event", f"id - By Organiser {organiser}",
                     lambda: self._ask_event_id(organiser)),
            MenuItem("c", "Create Event", f"at 10 to 10:30 tomorrow - By Room [{room}]",
                     lambda: self._run(actions.create_event(room))),
            MenuItem("C", "Create Event", f"at 10 to 10:30 tomorrow - By Organiser [{organiser}]",
                     lambda: self._run(actions.create_event(organiser))),
            MenuItem("k", "Check room", f"exists - By Room [{room}]",
                     lambda: self._run(actions.check_room(room))),
            MenuItem("K", "Check room", f"exists - By Organiser [{organiser}]",
                     lambda: self._run(actions.check_room(organiser))),
            MenuItem("i", "Enter Text", "Display text from input field",
                     self.input_field.focus),
            MenuItem("h", "Help", "Show the help text",
                     lambda: self._run(actions.show_help())),
            MenuItem("q", "Quit", "Exit the application", self.exit),
        ]

    def _run(self, work: Awaitable[None]) -> None:
        self.run_worker(work, group="actions")

    def _ask_event_id(self, identity: str) -> None:
        async def _delete(event_id: str) -> None:
            await self.actions.delete_event(identity, event_id)

        self._pending_input = _delete
        self._run(self.actions.prompt_event_id(identity))
        self.input_field.focus()

    def _ask_subscription_id(self) -> None:
        self._pending_input = self.actions.delete_subscription
        self._run(self.actions.prompt_subscription_id())
        self.input_field.focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        item = self._menu_items.get(event.option_id or "")
        if item is None:
            return
        self._tui_logger.debug("Menu item %s selected", item.key)
        item.run()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value
        event.input.value = ""
        pending, self._pending_input = self._pending_input, None
        if pending is not None:
            self._run(pending(text))
        else:
            self._run(self.actions.echo_input(text))
        self.menu.focus()

    def action_toggle_focus(self) -> None:
        if self.menu.has_focus:
            self.output_log.focus()
        else:
            self.menu.focus()
