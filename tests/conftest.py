import pytest
from unittest.mock import AsyncMock, MagicMock

from engine import ConversationEngine
from models import Coordinates, EventKind, IncomingEvent, Shop
from storage import SessionStore

USER_ID = 1001
CHAT_ID = 5001
MANAGER_CHAT = -100200300
MOSCOW = Coordinates(latitude=55.7558, longitude=37.6176)


class FakeMessenger:
    """Collects everything the engine sends."""

    def __init__(self):
        self.sent = []

    async def send(self, chat_id, reply):
        self.sent.append((chat_id, reply))

    @property
    def last(self):
        return self.sent[-1][1]

    @property
    def texts(self):
        return [reply.text for _, reply in self.sent]


def text_event(text, user_id=USER_ID, chat_id=CHAT_ID, username=None):
    return IncomingEvent(EventKind.TEXT, user_id, chat_id, text=text, username=username)


def command_event(command, user_id=USER_ID, chat_id=CHAT_ID):
    return IncomingEvent(EventKind.COMMAND, user_id, chat_id, command=command)


def contact_event(contact_user_id, phone="+79001234567", user_id=USER_ID, chat_id=CHAT_ID):
    return IncomingEvent(
        EventKind.CONTACT, user_id, chat_id,
        contact_user_id=contact_user_id, phone_number=phone
    )


def location_event(location, user_id=USER_ID, chat_id=CHAT_ID):
    return IncomingEvent(EventKind.LOCATION, user_id, chat_id, location=location)


def make_shop(city="Moscow", address="Test St 1", coordinates=MOSCOW, **fields):
    fields.setdefault("full_address", "Moscow, Test St, 1")
    fields.setdefault("vacancy", "Cashier")
    return Shop(city=city, address=address, coordinates=coordinates, **fields)


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def provider():
    """Data provider stub with one Cashier vacancy and one shop."""
    mock = MagicMock()
    mock.list_vacancies.return_value = ["Cashier"]
    mock.list_sites_for_vacancy.return_value = [
        make_shop(project="Retail", rate="50000", schedule="5/2", age_requirement="18+")
    ]
    return mock


@pytest.fixture
def geocoder():
    mock = MagicMock()
    mock.geocode.return_value = MOSCOW
    return mock


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.send = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def engine(provider, geocoder, notifier, messenger):
    return ConversationEngine(
        sessions=SessionStore(),
        data_provider=provider,
        geocoder=geocoder,
        notifier=notifier,
        messenger=messenger,
        manager_chat_id=MANAGER_CHAT
    )
