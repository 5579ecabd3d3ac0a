"""
Data models for the Vacancy Bot.
"""

import math
import time
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


NOT_SPECIFIED = "не указано"


class BotState(Enum):
    """Machine states for the application flow."""
    START = "start"
    CHOOSING_VACANCY = "choosing_vacancy"
    REQUESTING_LOCATION = "requesting_location"
    SHOWING_SHOPS = "showing_shops"
    SHOWING_VACANCY_DETAILS = "showing_vacancy_details"
    REQUESTING_FIO = "requesting_fio"
    REQUESTING_PHONE = "requesting_phone"
    REQUESTING_AGE = "requesting_age"
    CONFIRMATION = "confirmation"


class EventKind(Enum):
    """Kinds of inbound transport events."""
    COMMAND = "command"
    TEXT = "text"
    CONTACT = "contact"
    LOCATION = "location"


@dataclass(frozen=True)
class Coordinates:
    """A point on the globe in decimal degrees."""
    latitude: float
    longitude: float

    @classmethod
    def parse(cls, latitude, longitude) -> Optional["Coordinates"]:
        """
        Build coordinates from raw values.

        Returns None unless both values are finite numbers within
        [-90, 90] and [-180, 180] respectively.
        """
        try:
            lat = float(latitude)
            lon = float(longitude)
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            return None
        return cls(latitude=lat, longitude=lon)


@dataclass
class Shop:
    """Employer site hiring for a vacancy (one spreadsheet row)."""
    city: str = ""
    address: str = ""
    full_address: str = ""
    vacancy: str = ""
    rate: str = ""
    schedule: str = ""
    age_requirement: str = ""
    description: str = ""
    project: str = ""
    coordinates: Optional[Coordinates] = None
    distance_km: Optional[float] = None   # Set by ranking

    @property
    def title(self) -> str:
        return f"{self.display('city')}, {self.display('address')}"

    @property
    def display_full_address(self) -> str:
        return self.full_address or self.address or NOT_SPECIFIED

    def display(self, name: str, default: str = NOT_SPECIFIED) -> str:
        """Field value, or the default label when the field is empty."""
        value = getattr(self, name)
        return value if value else default


@dataclass
class FormData:
    """Fields collected from the user during the flow."""
    phone: Optional[str] = None
    age: Optional[int] = None
    selected_vacancy: Optional[str] = None
    available_vacancies: list[str] = field(default_factory=list)
    user_location: Optional[Coordinates] = None
    user_address: Optional[str] = None
    location_type: Optional[str] = None   # "address" | "coordinates"
    available_shops: list[Shop] = field(default_factory=list)
    selected_shop: Optional[Shop] = None
    fio: Optional[str] = None


@dataclass
class UserSession:
    """User session state for the conversation flow."""
    user_id: int
    chat_id: Optional[int] = None
    state: BotState = BotState.START
    form: FormData = field(default_factory=FormData)
    last_activity: float = field(default_factory=time.time)

    def reset(self) -> None:
        """Drop collected data and go back to the initial state."""
        self.state = BotState.START
        self.form = FormData()


@dataclass
class IncomingEvent:
    """One inbound update from the chat transport."""
    kind: EventKind
    user_id: int
    chat_id: int
    text: Optional[str] = None
    command: Optional[str] = None          # "start" | "help" | "cancel"
    contact_user_id: Optional[int] = None  # Owner of a shared contact
    phone_number: Optional[str] = None
    location: Optional[Coordinates] = None
    username: Optional[str] = None


@dataclass
class ReplyButton:
    """Selectable reply option; may request the user's contact or location."""
    text: str
    request_contact: bool = False
    request_location: bool = False


@dataclass
class Reply:
    """Outbound message produced by the conversation engine."""
    text: str
    keyboard: Optional[list[list[ReplyButton]]] = None
    remove_keyboard: bool = False
    one_time: bool = False

    @property
    def options(self) -> list[str]:
        """Flat list of button labels, mostly for inspection."""
        if not self.keyboard:
            return []
        return [button.text for row in self.keyboard for button in row]
