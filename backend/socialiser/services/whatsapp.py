"""WhatsApp share text for an instance invitation."""
from datetime import datetime, timezone
from urllib.parse import quote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from socialiser.models.instance import ActivityInstance
from socialiser.services.calendar_export import event_location

WHATSAPP_SHARE_URL = "https://wa.me/?text="


def _local(value: datetime, tz_name: str | None) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if tz_name:
        try:
            return value.astimezone(ZoneInfo(tz_name))
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return value.astimezone(timezone.utc)


def format_date(value: datetime) -> str:
    """e.g. 'Saturday, March 15, 2025'."""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def format_time(value: datetime) -> str:
    """e.g. '7:05 PM'."""
    hour = value.hour % 12 or 12
    return f"{hour}:{value:%M} {'AM' if value.hour < 12 else 'PM'}"


def build_message(instance: ActivityInstance, tz_name: str | None = None) -> str:
    """Invitation text listing when, where, what and who.

    Times are shown in ``tz_name`` (the owner's timezone) when it is a known
    zone, otherwise in UTC.
    """
    formatted_date = "Date TBD"
    formatted_time = "Time TBD"
    if instance.starts_at is not None:
        local = _local(instance.starts_at, tz_name)
        formatted_date = format_date(local)
        formatted_time = format_time(local)

    activity = instance.activity
    participant_names = ", ".join(p.friend.name for p in instance.participations)
    values = ", ".join(av.value.name for av in activity.values)
    location = event_location(instance)
    description = instance.detailed_description or activity.description

    message = f"🎉 You're invited to: {instance.title}!\n\n"
    if instance.is_all_day:
        message += f"📅 When: {formatted_date} (all day)\n"
    else:
        message += f"📅 When: {formatted_date} at {formatted_time}\n"
    if location:
        message += f"📍 Where: {location}\n"
    if description:
        message += f"📝 About: {description}\n"
    if values:
        message += f"💡 Values: {values}\n"
    message += f"👥 Who's coming: {participant_names}\n\n"
    message += "Please confirm your attendance! Looking forward to seeing you there! 😊"
    return message


def share_url(message: str) -> str:
    return WHATSAPP_SHARE_URL + quote(message, safe="-_.!~*'()")
