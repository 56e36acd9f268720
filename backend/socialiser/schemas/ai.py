from pydantic import ConfigDict

from socialiser.schemas.common import CamelModel


class DateRange(CamelModel):
    start: str | None = None
    end: str | None = None


class DiscoveryRequest(CamelModel):
    activity_name: str = ""
    location: str | None = None
    preferences: str | None = None
    date_range: DateRange | None = None


class DiscoveryOption(CamelModel):
    # Models sometimes answer durations or urls as numbers.
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    description: str | None = None
    suggested_location: str | None = None
    suggested_time: str | None = None
    estimated_duration: str | None = None
    reasoning: str | None = None
    url: str | None = None


class DiscoveryResponse(CamelModel):
    success: bool = True
    options: list[DiscoveryOption]
    activity_type: str
