"""
Services for the Vacancy Bot.

Handles external calls:
- Google Sheets API for vacancies and shops
- Telegram manager chat for finished applications
"""

import logging
import os
from typing import Optional

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account
from telegram.error import TelegramError

from config import (
    GOOGLE_API_KEY,
    GOOGLE_CREDENTIALS_PATH,
    GOOGLE_SHEETS_ID,
    HTTP_TIMEOUT,
    SHEET_NAME,
    SHEETS_API_URL,
    SHEETS_SCOPES
)
from exceptions import NotificationDeliveryFailed, ProviderUnavailable
from models import Coordinates, Shop

logger = logging.getLogger(__name__)

# Spreadsheet header (lower-cased) -> Shop field
SHOP_COLUMNS = {
    "город": "city",
    "адрес": "address",
    "полный адрес": "full_address",
    "вакансия": "vacancy",
    "тариф": "rate",
    "график": "schedule",
    "возраст": "age_requirement",
    "описание": "description",
    "проект": "project",
}
COORDINATES_COLUMN = "координаты"
VACANCY_HEADER_MARKER = "ваканс"


def unique_vacancies(values: list) -> list[str]:
    """
    Clean a raw vacancy column: strip, drop blanks and duplicates,
    keep first-occurrence order.
    """
    seen = set()
    result = []
    for value in values:
        if not isinstance(value, str):
            continue
        name = value.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


def parse_coordinates(raw: str) -> Optional[Coordinates]:
    """Parse a "lat, lon" cell."""
    pieces = [piece.strip() for piece in (raw or "").split(",")]
    if len(pieces) < 2:
        return None
    return Coordinates.parse(pieces[0], pieces[1])


def shop_from_row(headers: list[str], row: list) -> Shop:
    """
    Map one spreadsheet row onto a Shop using the header row.

    Raises:
        ValueError: if the row is not a list of cells
    """
    if not isinstance(row, list):
        raise ValueError(f"Row is not a list: {row!r}")

    values = {}
    for index, header in enumerate(headers):
        cell = row[index] if index < len(row) else ""
        values[header] = str(cell).strip() if cell is not None else ""

    fields = {
        attr: values.get(header, "")
        for header, attr in SHOP_COLUMNS.items()
    }
    return Shop(
        **fields,
        coordinates=parse_coordinates(values.get(COORDINATES_COLUMN, ""))
    )


def build_sheets_session(
    credentials_path: Optional[str] = GOOGLE_CREDENTIALS_PATH
) -> requests.Session:
    """
    HTTP session for the Sheets API.

    Signs requests with the service account when its key file exists, so
    private sheets shared with that account can be read. Otherwise returns
    a plain session; only public sheets are readable then (with an API key).

    Raises:
        ProviderUnavailable: if the key file exists but cannot be loaded
    """
    if not credentials_path or not os.path.isfile(credentials_path):
        logger.warning(
            f"Service account file not found ({credentials_path}), "
            "reading the spreadsheet without it"
        )
        return requests.Session()

    try:
        credentials = service_account.Credentials.from_service_account_file(
            credentials_path, scopes=SHEETS_SCOPES
        )
    except (OSError, ValueError, GoogleAuthError) as e:
        raise ProviderUnavailable(
            "sheets", f"Invalid service account file: {e}",
            {"path": credentials_path}
        ) from e

    logger.info(f"Using service account {credentials.service_account_email}")
    return AuthorizedSession(credentials)


class SheetsService:
    """Read-only access to the vacancies spreadsheet."""

    def __init__(
        self,
        spreadsheet_id: Optional[str] = GOOGLE_SHEETS_ID,
        api_key: Optional[str] = GOOGLE_API_KEY,
        sheet_name: str = SHEET_NAME,
        session: Optional[requests.Session] = None,
        credentials_path: Optional[str] = GOOGLE_CREDENTIALS_PATH
    ):
        self.spreadsheet_id = spreadsheet_id
        self.api_key = api_key
        self.sheet_name = sheet_name
        self.credentials_path = credentials_path
        self._http = session

    @property
    def http(self) -> requests.Session:
        # Built on first use so a broken key file surfaces as a read failure
        if self._http is None:
            self._http = build_sheets_session(self.credentials_path)
        return self._http

    def _get(self, path: str, params: Optional[dict] = None) -> dict:
        if not self.spreadsheet_id:
            raise ProviderUnavailable("sheets", "GOOGLE_SHEETS_ID is not set")

        params = dict(params or {})
        if self.api_key:
            params["key"] = self.api_key

        url = f"{SHEETS_API_URL}/{self.spreadsheet_id}{path}"
        try:
            response = self.http.get(url, params=params, timeout=HTTP_TIMEOUT)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError, GoogleAuthError) as e:
            raise ProviderUnavailable("sheets", str(e), {"path": path}) from e

    def _get_values(self, cell_range: str) -> list[list]:
        data = self._get(f"/values/{self.sheet_name}!{cell_range}")
        values = data.get("values") or []
        return [row for row in values if isinstance(row, list)]

    def list_vacancies(self) -> list[str]:
        """
        Vacancy names from column B, header skipped.

        Raises:
            ProviderUnavailable: if the spreadsheet cannot be read
        """
        rows = self._get_values("B:B")
        vacancies = unique_vacancies([row[0] for row in rows[1:] if row])
        logger.info(f"Loaded {len(vacancies)} unique vacancies")
        return vacancies

    def list_sites_for_vacancy(self, vacancy_name: str) -> list[Shop]:
        """
        Shops whose vacancy column equals `vacancy_name` (case-insensitive).

        Malformed rows are skipped.

        Raises:
            ProviderUnavailable: if the spreadsheet cannot be read
        """
        rows = self._get_values("A:J")
        if len(rows) < 2:
            logger.info("Spreadsheet has no data rows")
            return []

        headers = [str(h).strip().lower() for h in rows[0]]
        vacancy_index = next(
            (i for i, h in enumerate(headers) if VACANCY_HEADER_MARKER in h),
            None
        )
        if vacancy_index is None:
            logger.error("Vacancy column not found in spreadsheet headers")
            return []

        wanted = vacancy_name.strip().lower()
        shops = []
        for row in rows[1:]:
            if vacancy_index >= len(row):
                continue
            cell = row[vacancy_index]
            if not isinstance(cell, str) or cell.strip().lower() != wanted:
                continue
            try:
                shops.append(shop_from_row(headers, row))
            except ValueError as e:
                logger.warning(f"Skipping malformed row: {e}")

        logger.info(f"Found {len(shops)} shops for vacancy '{vacancy_name}'")
        return shops

    def test_connection(self) -> bool:
        """Check that the spreadsheet is reachable."""
        try:
            data = self._get("", {"fields": "properties.title"})
        except ProviderUnavailable as e:
            logger.error(f"Google Sheets connection failed: {e}")
            return False
        title = (data.get("properties") or {}).get("title", "")
        logger.info(f"Connected to spreadsheet '{title}'")
        return True


class ManagerNotifier:
    """Deliver finished applications to the managers' Telegram chat."""

    def __init__(self, bot):
        self.bot = bot

    async def _deliver(self, channel_ref, text: str) -> None:
        try:
            await self.bot.send_message(
                chat_id=channel_ref,
                text=text,
                parse_mode="HTML",
                disable_web_page_preview=True
            )
        except TelegramError as e:
            raise NotificationDeliveryFailed(
                str(e), {"chat_id": channel_ref}
            ) from e

    async def send(self, channel_ref, text: str) -> bool:
        """
        Send an application to the manager chat.

        Returns:
            True if Telegram accepted the message
        """
        if not channel_ref:
            logger.warning(
                "MANAGER_CHAT_ID is not set; application not delivered"
            )
            return False
        try:
            await self._deliver(channel_ref, text)
        except NotificationDeliveryFailed as e:
            logger.error(f"Failed to deliver application to {channel_ref}: {e}")
            return False

        logger.info(f"Application delivered to manager chat {channel_ref}")
        return True
