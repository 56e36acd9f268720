"""Calendar exports for a scheduled instance: an ICS file and a Google Calendar link.

Both formats share the same title, location, description and time bounds:

  * timed events run from ``starts_at`` to ``ends_at`` (or start plus the
    default duration), always expressed in UTC;
  * all-day events are date-valued and the end date is exclusive, one day
    after the last day of the event.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from urllib.parse import urlencode

from icalendar import Calendar, Event, vCalAddress, vText

from socialiser.core.config import settings
from socialiser.models.instance import ActivityInstance

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
PRODID = "-//Social Organizer//EN"


@dataclass
class EventBounds:
    start: datetime | date
    end: datetime | date
    all_day: bool


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def event_bounds(instance: ActivityInstance) -> EventBounds:
    start = _utc(instance.starts_at)
    if instance.ends_at is not None:
        end = _utc(instance.ends_at)
    else:
        end = start + timedelta(hours=settings.DEFAULT_EVENT_DURATION_HOURS)

    if instance.is_all_day:
        return EventBounds(start=start.date(), end=end.date() + timedelta(days=1), all_day=True)
    return EventBounds(start=start, end=end, all_day=False)


def event_location(instance: ActivityInstance) -> str:
    """Venue plus address parts when a venue is known, else the free-text location."""
    if instance.venue:
        text = instance.venue
        if instance.address:
            text += f", {instance.address}"
        if instance.city:
            text += f", {instance.city}"
        if instance.state:
            text += f", {instance.state}"
        if instance.zip_code:
            text += f" {instance.zip_code}"
        return text
    return instance.location or ""


def event_description(instance: ActivityInstance) -> str:
    parts = [instance.detailed_description or instance.activity.description or ""]
    if instance.requirements:
        parts.append(f"\n\nWhat to bring: {instance.requirements}")
    if instance.contact_info:
        parts.append(f"\n\nContact: {instance.contact_info}")
    if instance.price_info:
        parts.append(f"\n\nPrice: {instance.price_info}")
    if instance.capacity:
        parts.append(f"\n\nCapacity: {instance.capacity} people")
    return "".join(parts)


def ics_filename(instance: ActivityInstance) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", instance.title) + ".ics"


# ─── ICS ───

def build_ics(instance: ActivityInstance) -> bytes:
    """Render a single-event VCALENDAR for the instance."""
    bounds = event_bounds(instance)

    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")

    event = Event()
    event.add("uid", f"{instance.id}@{settings.CALENDAR_UID_DOMAIN}")
    event.add("summary", instance.title)
    event.add("dtstart", bounds.start)
    event.add("dtend", bounds.end)
    event.add("dtstamp", datetime.now(timezone.utc))

    location = event_location(instance)
    if location:
        event.add("location", location)
    description = event_description(instance)
    if description:
        event.add("description", description)

    for participation in instance.participations:
        friend = participation.friend
        attendee = vCalAddress(f"mailto:{friend.email}" if friend.email else "invalid:nomail")
        attendee.params["cn"] = vText(friend.name)
        attendee.params["partstat"] = vText(_partstat(participation.status))
        event.add("attendee", attendee, encode=0)

    if instance.created_at is not None:
        event.add("created", _utc(instance.created_at))
    if instance.updated_at is not None:
        event.add("last-modified", _utc(instance.updated_at))

    cal.add_component(event)
    return cal.to_ical()


def _partstat(status: str) -> str:
    return {"CONFIRMED": "ACCEPTED", "DECLINED": "DECLINED"}.get(status, "NEEDS-ACTION")


# ─── Google Calendar ───

def _google_datetime(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%SZ")


def _google_date(value: date) -> str:
    return value.strftime("%Y%m%d")


def google_calendar_url(instance: ActivityInstance) -> str:
    bounds = event_bounds(instance)
    if bounds.all_day:
        dates = f"{_google_date(bounds.start)}/{_google_date(bounds.end)}"
    else:
        dates = f"{_google_datetime(bounds.start)}/{_google_datetime(bounds.end)}"

    params = {
        "action": "TEMPLATE",
        "text": instance.title,
        "dates": dates,
        "details": event_description(instance),
        "location": event_location(instance),
    }
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"
