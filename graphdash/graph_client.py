from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
import logging
from typing import List, Optional

from azure.identity.aio import ClientSecretCredential
from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph import GraphServiceClient
from msgraph.generated.models.attendee import Attendee
from msgraph.generated.models.attendee_type import AttendeeType
from msgraph.generated.models.body_type import BodyType
from msgraph.generated.models.date_time_time_zone import DateTimeTimeZone
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.event import Event
from msgraph.generated.models.item_body import ItemBody
from msgraph.generated.models.location import Location
from msgraph.generated.models.o_data_errors.o_data_error import ODataError
from msgraph.generated.models.subscription import Subscription as GraphSubscription
from msgraph.generated.users.item.calendar_view.calendar_view_request_builder import (
    CalendarViewRequestBuilder,
)
from msgraph.generated.users.users_request_builder import UsersRequestBuilder

from graphdash.cache import RoomCache
from graphdash.config import Settings
from graphdash.models import (
    CalendarEvent,
    DirectoryUser,
    Room,
    RoomList,
    Subscription,
    UserPage,
)
from graphdash.utils import parse_graph_datetime, to_graph_datetime


GRAPH_SCOPE = "https://graph.microsoft.com/.default"
PAGE_SIZE = 25
BOOKING_WINDOW = timedelta(days=7)
SUBSCRIPTION_LIFETIME = timedelta(hours=24)
SUBSCRIPTION_CHANGE_TYPE = "created,updated,deleted"
EVENT_CREATE_TIMEOUT = 30
EVENT_SUBJECT = "Plan summer company picnic"
EVENT_BODY = "Let's kick-start this event planning!"
_PREFER_UTC = 'outlook.timezone="UTC"'


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, ODataError) and exc.error is not None:
        code = exc.error.code or "ODataError"
        if exc.error.message:
            return f"{code}: {exc.error.message}"
        return code
    if isinstance(exc, asyncio.TimeoutError):
        return "request timed out"
    return str(exc) or type(exc).__name__


def _to_user(item) -> DirectoryUser:
    return DirectoryUser(
        id=item.id or "",
        display_name=item.display_name or "",
        mail=item.mail,
        account_enabled=item.account_enabled,
    )


def _to_room(item) -> Room:
    return Room(
        id=item.id or "",
        display_name=item.display_name or "",
        capacity=item.capacity,
        email_address=item.email_address or "",
    )


def _to_room_list(item) -> RoomList:
    return RoomList(
        id=item.id or "",
        display_name=item.display_name or "",
        email_address=item.email_address or "",
    )


def _to_event(item) -> CalendarEvent:
    organizer = ""
    if item.organizer is not None and item.organizer.email_address is not None:
        address = item.organizer.email_address
        organizer = address.address or address.name or ""
    start = item.start.date_time if item.start is not None else None
    end = item.end.date_time if item.end is not None else None
    return CalendarEvent(
        id=item.id or "",
        subject=item.subject or "(no subject)",
        start_utc=parse_graph_datetime(start),
        end_utc=parse_graph_datetime(end),
        organizer=organizer,
        is_online_meeting=bool(item.is_online_meeting),
        is_organizer=bool(item.is_organizer),
        is_cancelled=bool(item.is_cancelled),
    )


def _to_subscription(item) -> Subscription:
    expiration = item.expiration_date_time
    if expiration is not None and expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    return Subscription(
        id=item.id or "",
        change_type=item.change_type or "",
        resource=item.resource or "",
        expiration_utc=expiration,
        notification_url=item.notification_url or "",
        creator_id=item.creator_id,
        application_id=item.application_id,
    )


def _prefer_utc() -> RequestConfiguration:
    config = RequestConfiguration()
    config.headers.add("Prefer", _PREFER_UTC)
    return config


class GraphClient:
    def __init__(self, settings: Settings, room_cache: RoomCache | None = None) -> None:
        self.settings = settings
        self.room_cache = room_cache or RoomCache()
        self._credential: ClientSecretCredential | None = None
        self._client: GraphServiceClient | None = None
        self._logger = logging.getLogger("graphdash.graph")

    def _credential_or_create(self) -> ClientSecretCredential:
        if self._credential is None:
            self._credential = ClientSecretCredential(
                tenant_id=self.settings.tenant_id,
                client_id=self.settings.client_id,
                client_secret=self.settings.client_secret,
            )
        return self._credential

    def _client_or_create(self) -> GraphServiceClient:
        if self._client is None:
            self._client = GraphServiceClient(
                credentials=self._credential_or_create(), scopes=[GRAPH_SCOPE]
            )
        return self._client

    async def close(self) -> None:
        if self._credential is not None:
            await self._credential.close()
            self._credential = None
        self._client = None

    async def get_access_token(self) -> str:
        token = await self._credential_or_create().get_token(GRAPH_SCOPE)
        return token.token

    async def list_users(self) -> UserPage:
        query = UsersRequestBuilder.UsersRequestBuilderGetQueryParameters(
            select=["displayName", "id", "mail", "accountEnabled"],
            top=PAGE_SIZE,
            orderby=["displayName"],
        )
        response = await self._client_or_create().users.get(
            request_configuration=RequestConfiguration(query_parameters=query)
        )
        if response is None:
            return UserPage()
        users = [_to_user(item) for item in response.value or []]
        return UserPage(users=users, more_available=response.odata_next_link is not None)

    async def list_rooms(self) -> List[Room]:
        response = await self._client_or_create().places.graph_room.get()
        if response is None:
            return []
        return [_to_room(item) for item in response.value or []]

    async def list_room_lists(self) -> List[RoomList]:
        response = await self._client_or_create().places.graph_room_list.get()
        if response is None:
            return []
        return [_to_room_list(item) for item in response.value or []]

    async def find_room(self, email: str) -> Optional[Room]:
        async with self.room_cache.lock:
            if not self.room_cache.is_fresh():
                self._logger.info("Refreshing room cache")
                self.room_cache.replace(await self.list_rooms())
            return self.room_cache.get(email)

    async def list_bookings(
        self, identity: str, now: datetime | None = None
    ) -> List[CalendarEvent]:
        if now is None:
            now = datetime.now(timezone.utc)
        query = CalendarViewRequestBuilder.CalendarViewRequestBuilderGetQueryParameters(
            start_date_time=to_graph_datetime(now),
            end_date_time=to_graph_datetime(now + BOOKING_WINDOW),
            top=PAGE_SIZE,
            orderby=["start/dateTime"],
        )
        config = _prefer_utc()
        config.query_parameters = query
        response = await (
            self._client_or_create()
            .users.by_user_id(identity)
            .calendar_view.get(request_configuration=config)
        )
        if response is None:
            return []
        return [_to_event(item) for item in response.value or []]

    async def create_event(
        self, owner: str, room: str, start: datetime, end: datetime
    ) -> CalendarEvent:
        body = Event(
            subject=EVENT_SUBJECT,
            body=ItemBody(content_type=BodyType.Html, content=EVENT_BODY),
            start=DateTimeTimeZone(date_time=to_graph_datetime(start), time_zone="UTC"),
            end=DateTimeTimeZone(date_time=to_graph_datetime(end), time_zone="UTC"),
            attendees=[
                Attendee(
                    email_address=EmailAddress(address=room),
                    type=AttendeeType.Resource,
                )
            ],
            location=Location(display_name=room, location_email_address=room),
            allow_new_time_proposals=False,
        )
        request = (
            self._client_or_create()
            .users.by_user_id(owner)
            .events.post(body, request_configuration=_prefer_utc())
        )
        created = await asyncio.wait_for(request, timeout=EVENT_CREATE_TIMEOUT)
        if created is None:
            raise RuntimeError("Graph returned no event")
        self._logger.info("Event %s created for %s", created.id, owner)
        return _to_event(created)

    async def delete_event(self, identity: str, event_id: str) -> None:
        await (
            self._client_or_create()
            .users.by_user_id(identity)
            .events.by_event_id(event_id)
            .delete()
        )
        self._logger.info("Event %s deleted for %s", event_id, identity)

    async def list_subscriptions(self) -> List[Subscription]:
        response = await self._client_or_create().subscriptions.get()
        if response is None:
            return []
        return [_to_subscription(item) for item in response.value or []]

    async def create_subscription(
        self, identity: str, now: datetime | None = None
    ) -> Subscription:
        if now is None:
            now = datetime.now(timezone.utc)
        body = GraphSubscription(
            change_type=SUBSCRIPTION_CHANGE_TYPE,
            notification_url=self.settings.endpoint,
            resource=f"/users/{identity}/events",
            expiration_date_time=now + SUBSCRIPTION_LIFETIME,
        )
        created = await self._client_or_create().subscriptions.post(body)
        if created is None:
            raise RuntimeError("Graph returned no subscription")
        self._logger.info("Subscription created with ID: %s", created.id)
        return _to_subscription(created)

    async def delete_subscription(self, subscription_id: str) -> None:
        await (
            self._client_or_create()
            .subscriptions.by_subscription_id(subscription_id)
            .delete()
        )
        self._logger.info("Subscription %s deleted", subscription_id)
