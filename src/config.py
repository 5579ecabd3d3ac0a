"""
Configuration settings
"""

import os
from dotenv import load_dotenv

load_dotenv()

TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
MANAGER_CHAT_ID = os.getenv("MANAGER_CHAT_ID")

# === Google Sheets ===
GOOGLE_SHEETS_ID = os.getenv("GOOGLE_SHEETS_ID")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GOOGLE_CREDENTIALS_PATH = os.getenv(
    "GOOGLE_CREDENTIALS_PATH", "./credentials/service-account.json"
)
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
SHEET_NAME = os.getenv("SHEET_NAME", "Проекты")
SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"

# === Geocoding ===
YANDEX_GEOCODING_API_KEY = (
    os.getenv("YANDEX_GEOCODING_API_KEY") or os.getenv("YANDEX_API_KEY") or ""
)
YANDEX_GEOCODER_URL = "https://geocode-maps.yandex.ru/v1/"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "vacancy-bot/1.0")
HTTP_TIMEOUT = 10  # seconds, per request

COUNTRY = "Россия"
STREET_TYPE_TOKENS = [
    "улица", "ул.", "проспект", "пр-т", "шоссе", "ш.", "бульвар", "бул.",
    "проезд", "пер.", "переулок", "наб.", "площадь", "пл.",
]
DEFAULT_STREET_TYPE = "улица"

# === Sessions ===
INACTIVITY_TIMEOUT = 30 * 60  # seconds
SWEEP_INTERVAL = 60           # seconds

# === Ranking ===
EARTH_RADIUS_KM = 6371
MAX_NEAREST_SHOPS = 5

# === Form validation ===
MIN_AGE = 14
MAX_AGE = 100

# === Fallback data ===
PLACEHOLDER_VACANCIES = ["Кассир", "Уборщик", "Повар", "Менеджер"]
DEMO_SHOP_LOCATION = (55.7558, 37.6176)

MOSCOW_TZ = "Europe/Moscow"
