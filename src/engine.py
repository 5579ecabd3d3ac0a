"""
Conversation engine for the Vacancy Bot.

Turns inbound events (commands, text, shared contact, shared location)
into state transitions of a user's session and the messages to send
back. Transport-agnostic: replies go out through a messenger object
with an async send(chat_id, reply) method.
"""

import asyncio
import html
import logging
import re
from datetime import datetime
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from config import (
    DEMO_SHOP_LOCATION,
    MANAGER_CHAT_ID,
    MAX_AGE,
    MIN_AGE,
    MOSCOW_TZ,
    PLACEHOLDER_VACANCIES
)
from exceptions import AuthorizationMismatch, ValidationError
from geo import format_distance, rank_nearest
from models import (
    NOT_SPECIFIED,
    BotState,
    Coordinates,
    EventKind,
    FormData,
    IncomingEvent,
    Reply,
    ReplyButton,
    Shop,
    UserSession
)
from storage import SessionStore

logger = logging.getLogger(__name__)

# === Button labels ===
SEND_LOCATION = "📍 Отправить местоположение"
BACK_TO_VACANCIES = "⬅️ Назад к выбору вакансии"
BACK = "⬅️ Назад"
APPLY = "✅ Откликнуться"
BACK_TO_SHOPS = "⬅️ Назад к списку магазинов"
SHARE_PHONE = "📱 Поделиться номером телефона"
CONFIRM = "✅ Да, отправить отклик"
REVISE = "❌ Нет, изменить"

# === Fixed messages ===
PRESS_START = "Для нового поиска нажмите /start"
FINISH_CURRENT_STEP = (
    "Пожалуйста, завершите текущую операцию или начните заново с /start"
)
APOLOGY = "⚠️ Произошла ошибка. Попробуйте еще раз /start"
HELP_TEXT = (
    "📋 <b>Помощь</b>\n\n"
    "<b>/start</b> - Начать поиск вакансии\n"
    "<b>/help</b> - Эта справка\n"
    "<b>/cancel</b> - Отменить текущую операцию\n\n"
    "<b>Процесс работы:</b>\n"
    "1️⃣ Выберите вакансию\n"
    "2️⃣ Укажите местоположение\n"
    "3️⃣ Выберите магазин\n"
    "4️⃣ Введите ФИО\n"
    "5️⃣ Предоставьте номер телефона\n"
    "6️⃣ Откликнитесь на вакансию"
)

PHONE_PATTERN = re.compile(r"7\d{10}")
SHOP_CHOICE_PATTERN = re.compile(r"^(\d+)\.")
AGE_PATTERN = re.compile(r"\d+", re.ASCII)


class Messenger(Protocol):
    async def send(self, chat_id: int, reply: Reply) -> None:
        ...


class Notifier(Protocol):
    async def send(self, channel_ref, text: str) -> bool:
        ...


def validate_fio(text: str) -> str:
    """Full name must have at least two words."""
    fio = (text or "").strip()
    if len(fio.split()) < 2:
        raise ValidationError("Full name needs at least two words")
    return fio


def normalize_phone(text: str) -> str:
    """
    Reduce a typed phone number to digits and check the 7XXXXXXXXXX form.

    Example:
        "+7 (900) 123-45-67" -> "79001234567"
    """
    digits = re.sub(r"\D", "", text or "")
    if not PHONE_PATTERN.fullmatch(digits):
        raise ValidationError("Phone must be 7 followed by 10 digits",
                              {"digits": digits})
    return digits


def validate_age(text: str) -> int:
    """Age must be a whole number between MIN_AGE and MAX_AGE."""
    digits = (text or "").strip()
    if not AGE_PATTERN.fullmatch(digits):
        raise ValidationError("Age is not a number", {"text": text})
    age = int(digits)
    if not MIN_AGE <= age <= MAX_AGE:
        raise ValidationError("Age out of range", {"age": age})
    return age


def check_contact_owner(sender_id: int, contact_user_id: Optional[int]) -> None:
    """Only the sender's own contact card is accepted."""
    if contact_user_id != sender_id:
        raise AuthorizationMismatch(
            "Contact belongs to another user",
            {"sender_id": sender_id, "contact_user_id": contact_user_id}
        )


def parse_shop_choice(text: str, shop_count: int) -> int:
    """
    Zero-based index of the shop picked from a "<n>. ..." button.
    """
    match = SHOP_CHOICE_PATTERN.match(text or "")
    if not match:
        raise ValidationError("Not a shop button", {"text": text})
    index = int(match.group(1)) - 1
    if not 0 <= index < shop_count:
        raise ValidationError("Shop number out of range", {"index": index})
    return index


def demo_shop(vacancy: str) -> Shop:
    """Stand-in shop offered when the spreadsheet has nothing to show."""
    lat, lon = DEMO_SHOP_LOCATION
    return Shop(
        city="Москва",
        address="ул. Тестовая, 1",
        full_address="Москва, ул. Тестовая, д. 1",
        vacancy=vacancy,
        rate="от 50000 руб.",
        schedule="5/2",
        coordinates=Coordinates(latitude=lat, longitude=lon)
    )


def _e(value) -> str:
    return html.escape(str(value))


def _shop_button_text(index: int, shop: Shop) -> str:
    text = f"{index}. {shop.title}"
    if shop.distance_km is not None:
        text += f" ({format_distance(shop.distance_km)})"
    return text


class _UserLock:
    """Per-user lock with a count of the events holding or awaiting it."""

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class ConversationEngine:
    """
    State machine of the application flow.

    One instance serves all users; events of a single user are handled
    one at a time.
    """

    def __init__(
        self,
        sessions: SessionStore,
        data_provider,
        geocoder,
        notifier: Notifier,
        messenger: Messenger,
        manager_chat_id=MANAGER_CHAT_ID
    ):
        self.sessions = sessions
        self.data_provider = data_provider
        self.geocoder = geocoder
        self.notifier = notifier
        self.messenger = messenger
        self.manager_chat_id = manager_chat_id
        self._locks: dict[int, _UserLock] = {}

        self._text_handlers = {
            BotState.START: self._on_idle_text,
            BotState.CHOOSING_VACANCY: self._on_vacancy_choice,
            BotState.REQUESTING_LOCATION: self._on_address,
            BotState.SHOWING_SHOPS: self._on_shop_choice,
            BotState.SHOWING_VACANCY_DETAILS: self._on_vacancy_details,
            BotState.REQUESTING_FIO: self._on_fio,
            BotState.REQUESTING_PHONE: self._on_phone_text,
            BotState.REQUESTING_AGE: self._on_age,
            BotState.CONFIRMATION: self._on_confirmation,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def handle(self, event: IncomingEvent) -> None:
        """
        Process one inbound event.

        Never raises: unexpected failures are logged and answered with an
        apology so the bot keeps serving other users.
        """
        self.sessions.touch(event.user_id, event.chat_id)

        user_lock = self._locks.setdefault(event.user_id, _UserLock())
        user_lock.users += 1
        try:
            async with user_lock.lock:
                await self._handle_locked(event)
        finally:
            user_lock.users -= 1
            self._release_lock(event.user_id)

    async def _handle_locked(self, event: IncomingEvent) -> None:
        session = self.sessions.get(event.user_id)
        is_new = session is None
        if is_new:
            # Stored only once the user enters the flow, so /help or stray
            # text never leaves a session behind for the sweep.
            session = UserSession(user_id=event.user_id, chat_id=event.chat_id)
        elif session.chat_id is None:
            session.chat_id = event.chat_id

        try:
            await self._dispatch(session, event)
        except Exception:
            logger.exception(
                f"Error handling {event.kind.value} from user "
                f"{event.user_id} (state: {session.state.value})"
            )
            await self._reply_safely(
                event.chat_id, Reply(APOLOGY, remove_keyboard=True)
            )

        if is_new and session.state != BotState.START:
            self.sessions.set(event.user_id, session)

    def _release_lock(self, user_id: int) -> None:
        """Forget the user's lock once nobody holds it and the session is gone."""
        user_lock = self._locks.get(user_id)
        if user_lock is None or user_lock.users or user_id in self.sessions:
            return
        del self._locks[user_id]

    async def expire_inactive_sessions(self) -> int:
        """Sweep idle sessions, sending each one an expiry notice."""
        expired = await self.sessions.sweep(self._send_expiry_notice)
        for user_id in list(self._locks):
            self._release_lock(user_id)
        if expired:
            logger.info(f"[TIMEOUT] Reset {expired} inactive sessions")
        return expired

    async def _send_expiry_notice(self, chat_id: int) -> None:
        await self.messenger.send(chat_id, Reply(PRESS_START, remove_keyboard=True))

    async def _reply(self, session: UserSession, reply: Reply) -> None:
        await self.messenger.send(session.chat_id, reply)

    async def _reply_safely(self, chat_id: int, reply: Reply) -> None:
        try:
            await self.messenger.send(chat_id, reply)
        except Exception as e:
            logger.error(f"Could not send message to chat {chat_id}: {e}")

    async def _dispatch(self, session: UserSession, event: IncomingEvent) -> None:
        logger.info(
            f"{event.kind.value} from {event.user_id} "
            f"(state: {session.state.value})"
        )

        if event.kind == EventKind.COMMAND:
            await self._on_command(session, event)
        elif event.kind == EventKind.CONTACT:
            await self._on_contact(session, event)
        elif event.kind == EventKind.LOCATION:
            await self._on_location(session, event)
        elif event.kind == EventKind.TEXT:
            handler = self._text_handlers[session.state]
            await handler(session, (event.text or "").strip(), event)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def _on_command(self, session: UserSession, event: IncomingEvent) -> None:
        if event.command == "start":
            session.reset()
            await self._reply(session, Reply(
                "👋 Добро пожаловать в бот по подбору вакансий!",
                remove_keyboard=True
            ))
            await self._show_vacancies(session)
        elif event.command == "help":
            await self._reply(session, Reply(HELP_TEXT))
        elif event.command == "cancel":
            self.sessions.delete(session.user_id)
            await self._reply(session, Reply(
                "❌ Операция отменена. Нажмите /start для начала.",
                remove_keyboard=True
            ))
        else:
            await self._reply(session, Reply(FINISH_CURRENT_STEP))

    # ------------------------------------------------------------------
    # Vacancy choice
    # ------------------------------------------------------------------

    async def _load_vacancies(self) -> list[str]:
        try:
            vacancies = await asyncio.to_thread(self.data_provider.list_vacancies)
        except Exception as e:
            logger.error(f"Error loading vacancies: {e}")
            vacancies = []
        if not vacancies:
            logger.warning("Using placeholder vacancy list")
            vacancies = list(PLACEHOLDER_VACANCIES)
        return vacancies

    async def _show_vacancies(self, session: UserSession) -> None:
        """Refetch the vacancy list and ask the user to pick one."""
        if not session.form.available_vacancies:
            await self._reply(session, Reply(
                "⏳ Загружаем список вакансий...", remove_keyboard=True
            ))

        session.form.available_vacancies = await self._load_vacancies()
        session.state = BotState.CHOOSING_VACANCY
        await self._reply(session, self._vacancy_prompt(session.form))

    def _vacancy_prompt(self, form: FormData, text: str = "Выберите вакансию:") -> Reply:
        vacancies = form.available_vacancies
        keyboard = [
            [ReplyButton(name) for name in vacancies[i:i + 2]]
            for i in range(0, len(vacancies), 2)
        ]
        return Reply(text, keyboard=keyboard, one_time=True)

    async def _on_vacancy_choice(self, session, text, event) -> None:
        if text not in session.form.available_vacancies:
            await self._reply(session, self._vacancy_prompt(
                session.form, "❌ Пожалуйста, выберите вакансию из списка."
            ))
            return

        logger.info(f"[VACANCY] User {session.user_id} chose '{text}'")
        session.form.selected_vacancy = text
        session.state = BotState.REQUESTING_LOCATION
        await self._reply(session, self._location_prompt(
            f"✅ Выбрана вакансия: {_e(text)}\n\n"
            "Отправьте ваше местоположение или введите адрес:\n"
            "Город, Улица, Дом"
        ))

    # ------------------------------------------------------------------
    # Location
    # ------------------------------------------------------------------

    def _location_prompt(
        self, text: str = "Отправьте местоположение или введите адрес:"
    ) -> Reply:
        return Reply(text, keyboard=[
            [ReplyButton(SEND_LOCATION, request_location=True)],
            [ReplyButton(BACK_TO_VACANCIES)],
        ])

    async def _on_address(self, session, text, event) -> None:
        if text == BACK_TO_VACANCIES:
            await self._show_vacancies(session)
            return
        if not text:
            await self._reply(session, self._location_prompt())
            return

        logger.info(f"[LOCATION] User {session.user_id} typed address: {text}")
        await self._reply(session, Reply(
            "📍 Определяю координаты по адресу...", remove_keyboard=True
        ))

        coordinates = await asyncio.to_thread(self.geocoder.geocode, text)
        if coordinates is None:
            await self._reply(session, self._location_prompt(
                "❌ Не удалось определить координаты по адресу.\n\n"
                "Пожалуйста, проверьте формат адреса или используйте кнопку "
                "для отправки местоположения."
            ))
            return

        session.form.user_address = text
        session.form.user_location = coordinates
        session.form.location_type = "address"
        await self._show_shops(session)

    async def _on_location(self, session: UserSession, event: IncomingEvent) -> None:
        if session.state != BotState.REQUESTING_LOCATION or event.location is None:
            await self._reply(session, Reply(FINISH_CURRENT_STEP))
            return

        logger.info(
            f"[LOCATION] User {session.user_id} shared "
            f"{event.location.latitude}, {event.location.longitude}"
        )
        session.form.user_address = None
        session.form.user_location = event.location
        session.form.location_type = "coordinates"
        await self._show_shops(session)

    # ------------------------------------------------------------------
    # Shops
    # ------------------------------------------------------------------

    async def _load_shops(self, vacancy: str) -> list[Shop]:
        try:
            shops = await asyncio.to_thread(
                self.data_provider.list_sites_for_vacancy, vacancy
            )
        except Exception as e:
            logger.error(f"Error loading shops for '{vacancy}': {e}")
            shops = []
        if not shops:
            logger.warning(f"No shops for '{vacancy}', offering demo shop")
            shops = [demo_shop(vacancy)]
        return shops

    async def _show_shops(self, session: UserSession) -> None:
        """Rank shops around the user's location and list the nearest."""
        form = session.form
        await self._reply(session, Reply(
            f"🔍 Ищу магазины с вакансией \"{_e(form.selected_vacancy)}\"...",
            remove_keyboard=True
        ))

        shops = await self._load_shops(form.selected_vacancy)
        form.available_shops = rank_nearest(form.user_location, shops)

        if not form.available_shops:
            session.state = BotState.REQUESTING_LOCATION
            await self._reply(session, self._location_prompt(
                "❌ Не найдено магазинов с вакансией "
                f"\"{_e(form.selected_vacancy)}\" в вашем регионе.\n\n"
                "Попробуйте указать другое местоположение."
            ))
            return

        session.state = BotState.SHOWING_SHOPS
        await self._reply(session, self._shops_prompt(
            form,
            f"🏪 Найдено <b>{len(form.available_shops)}</b> ближайших магазинов "
            f"с вакансией \"{_e(form.selected_vacancy)}\":\n\n"
            "Выберите магазин для просмотра деталей:"
        ))

    def _shops_prompt(self, form: FormData, text: Optional[str] = None) -> Reply:
        if text is None:
            text = (
                f"🏪 Магазины с вакансией \"{_e(form.selected_vacancy)}\":\n\n"
                "Выберите магазин:"
            )
        keyboard = [
            [ReplyButton(_shop_button_text(i, shop))]
            for i, shop in enumerate(form.available_shops, start=1)
        ]
        keyboard.append([ReplyButton(BACK)])
        return Reply(text, keyboard=keyboard)

    async def _on_shop_choice(self, session, text, event) -> None:
        form = session.form
        if text == BACK:
            session.state = BotState.REQUESTING_LOCATION
            await self._reply(session, self._location_prompt())
            return

        try:
            index = parse_shop_choice(text, len(form.available_shops))
        except ValidationError:
            await self._reply(session, self._shops_prompt(form))
            return

        form.selected_shop = form.available_shops[index]
        session.state = BotState.SHOWING_VACANCY_DETAILS
        await self._reply(session, self._details_prompt(form.selected_shop))

    def _details_prompt(self, shop: Shop) -> Reply:
        text = (
            f"🏪 <b>{_e(shop.title)}</b>\n\n"
            f"📌 <b>Вакансия:</b> {_e(shop.display('vacancy'))}\n"
            f"💰 <b>Тариф:</b> {_e(shop.display('rate'))}\n"
            f"📅 <b>График:</b> {_e(shop.display('schedule'))}\n"
            f"🎂 <b>Возраст:</b> {_e(shop.display('age_requirement'))}\n"
            f"🎁 <b>Описание:</b> {_e(shop.display('description', 'нет'))}\n\n"
            f"📍 <b>Адрес:</b> {_e(shop.display_full_address)}"
        )
        return Reply(text, keyboard=[
            [ReplyButton(APPLY), ReplyButton(BACK_TO_SHOPS)]
        ])

    async def _on_vacancy_details(self, session, text, event) -> None:
        if text == BACK_TO_SHOPS:
            session.state = BotState.SHOWING_SHOPS
            await self._reply(session, self._shops_prompt(session.form))
        elif text == APPLY:
            session.state = BotState.REQUESTING_FIO
            await self._reply(session, self._fio_prompt())
        else:
            await self._reply(session, self._details_prompt(session.form.selected_shop))

    # ------------------------------------------------------------------
    # Personal details
    # ------------------------------------------------------------------

    def _fio_prompt(self, text: Optional[str] = None) -> Reply:
        if text is None:
            text = (
                "Для оформления отклика введите ваши ФИО "
                "(Фамилия Имя Отчество):\n"
                "<b>Пример:</b> Иванов Иван Иванович"
            )
        return Reply(text, remove_keyboard=True)

    async def _on_fio(self, session, text, event) -> None:
        try:
            session.form.fio = validate_fio(text)
        except ValidationError:
            await self._reply(session, self._fio_prompt(
                "❌ Пожалуйста, введите полные ФИО (Фамилия Имя Отчество)"
            ))
            return

        logger.info(f"[FIO] User {session.user_id} entered full name")
        session.state = BotState.REQUESTING_PHONE
        await self._reply(session, self._phone_prompt(
            "✅ ФИО сохранено.\n\n"
            "Теперь нажмите кнопку, чтобы поделиться номером телефона, "
            "или введите его вручную в формате 79XXXXXXXXX:"
        ))

    def _phone_prompt(self, text: str) -> Reply:
        return Reply(
            text,
            keyboard=[[ReplyButton(SHARE_PHONE, request_contact=True)]],
            one_time=True
        )

    async def _on_phone_text(self, session, text, event) -> None:
        try:
            phone = normalize_phone(text)
        except ValidationError:
            await self._reply(session, self._phone_prompt(
                "❌ Неверный формат номера.\n"
                "Пожалуйста, введите номер в формате 79XXXXXXXXX "
                "(например, 79001234567)\n"
                "Или нажмите кнопку \"Поделиться номером телефона\"."
            ))
            return

        logger.info(f"[PHONE] User {session.user_id} typed phone number")
        await self._accept_phone(session, phone)

    async def _on_contact(self, session: UserSession, event: IncomingEvent) -> None:
        if session.state != BotState.REQUESTING_PHONE:
            await self._reply(session, Reply(FINISH_CURRENT_STEP))
            return

        try:
            check_contact_owner(event.user_id, event.contact_user_id)
        except AuthorizationMismatch as e:
            logger.warning(f"[PHONE] User {session.user_id}: {e}")
            await self._reply(session, Reply(
                "❌ Пожалуйста, поделитесь своим номером телефона, а не чужим."
            ))
            return

        logger.info(f"[PHONE] User {session.user_id} shared contact")
        await self._accept_phone(session, event.phone_number)

    async def _accept_phone(self, session: UserSession, phone: str) -> None:
        session.form.phone = phone
        session.state = BotState.REQUESTING_AGE
        await self._reply(session, Reply("Сколько вам полных лет?", remove_keyboard=True))

    async def _on_age(self, session, text, event) -> None:
        try:
            session.form.age = validate_age(text)
        except ValidationError:
            await self._reply(session, Reply(
                "❌ Пожалуйста, введите корректный возраст цифрами "
                f"(от {MIN_AGE} до {MAX_AGE})."
            ))
            return

        session.state = BotState.CONFIRMATION
        await self._reply(session, self._confirmation_prompt(session.form))

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    def _confirmation_prompt(self, form: FormData) -> Reply:
        shop = form.selected_shop or Shop()
        text = (
            "✅ <b>Данные для отклика:</b>\n\n"
            f"📌 <b>Вакансия:</b> {_e(form.selected_vacancy)}\n"
            f"🏪 <b>Магазин:</b> {_e(shop.title)}\n"
            f"👤 <b>ФИО:</b> {_e(form.fio)}\n"
            f"📱 <b>Телефон:</b> {_e(form.phone)}\n"
            f"🎂 <b>Возраст:</b> {form.age}\n\n"
            "Всё верно?"
        )
        return Reply(text, keyboard=[
            [ReplyButton(CONFIRM)],
            [ReplyButton(REVISE)],
        ])

    async def _on_confirmation(self, session, text, event) -> None:
        if text == CONFIRM:
            message = format_application(
                session.form, session.user_id, event.username
            )
            await self.notifier.send(self.manager_chat_id, message)

            await self._reply(session, Reply(
                "🎉 Ваш отклик отправлен менеджеру!\n\n"
                "С вами свяжутся в ближайшее время.\n\n"
                f"{PRESS_START}",
                remove_keyboard=True
            ))
            self.sessions.delete(session.user_id)
            logger.info(f"User {session.user_id} submitted an application")
        elif text == REVISE:
            session.reset()
            await self._reply(session, Reply(
                "Начните заново с /start", remove_keyboard=True
            ))
        else:
            await self._reply(session, self._confirmation_prompt(session.form))

    async def _on_idle_text(self, session, text, event) -> None:
        await self._reply(session, Reply(
            "👋 Нажмите /start, чтобы начать поиск вакансий."
        ))


def format_application(
    form: FormData,
    user_id: int,
    username: Optional[str] = None,
    now: Optional[datetime] = None
) -> str:
    """
    Build the message sent to the managers' chat.

    Args:
        form: Completed form data
        user_id: Telegram ID of the candidate
        username: Telegram username, if the candidate has one
        now: Submission time (defaults to current Moscow time)
    """
    shop = form.selected_shop or Shop()
    now = now or datetime.now(ZoneInfo(MOSCOW_TZ))

    if username:
        user_link = f'<a href="https://t.me/{_e(username)}">@{_e(username)}</a>'
    else:
        user_link = f'<a href="tg://user?id={user_id}">Ссылка на профиль</a>'

    distance = (
        format_distance(shop.distance_km)
        if shop.distance_km is not None else NOT_SPECIFIED
    )

    if form.user_address:
        candidate_location = _e(form.user_address)
    elif form.user_location:
        candidate_location = (
            f"{form.user_location.latitude:.5f}, {form.user_location.longitude:.5f}"
        )
    else:
        candidate_location = NOT_SPECIFIED

    return (
        "🆕 <b>Новый отклик на вакансию</b>\n\n"
        f"🏢 <b>Проект:</b> {_e(shop.display('project'))}\n\n"
        f"📌 <b>Вакансия:</b> {_e(form.selected_vacancy or 'не указана')}\n"
        f"🏪 <b>Магазин:</b> {_e(shop.title)}\n"
        f"📍 <b>Полный адрес:</b> {_e(shop.display_full_address)}\n"
        f"📏 <b>Расстояние:</b> {distance}\n"
        f"🧭 <b>Местоположение кандидата:</b> {candidate_location}\n\n"
        f"👤 <b>ФИО:</b> {_e(form.fio or NOT_SPECIFIED)}\n"
        f"🎂 <b>Возраст кандидата:</b> {form.age if form.age else 'не указан'}\n"
        f"📱 <b>Телефон:</b> {_e(form.phone or 'не указан')}\n"
        f"🔗 <b>Telegram:</b> {user_link}\n\n"
        f"💰 <b>Тариф:</b> {_e(shop.display('rate'))}\n"
        f"📅 <b>График:</b> {_e(shop.display('schedule'))}\n"
        f"🎂 <b>Возраст:</b> {_e(shop.display('age_requirement'))}\n"
        f"🕐 <b>Время отклика:</b> {now.strftime('%d.%m.%Y %H:%M')}"
    )
