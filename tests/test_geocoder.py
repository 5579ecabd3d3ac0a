import pytest
import requests
from unittest.mock import MagicMock

from geocoder import (
    Geocoder,
    NominatimGeocoder,
    YandexGeocoder,
    build_address_variants,
    normalize_address,
    parse_yandex_coordinates,
)
from models import Coordinates


def _response(payload=None, status_error=None, json_error=None):
    response = MagicMock()
    if status_error:
        response.raise_for_status.side_effect = status_error
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


class FakeProvider:
    def __init__(self, name, try_all_variants, answers=None, error=None):
        self.name = name
        self.try_all_variants = try_all_variants
        self.answers = answers or {}
        self.error = error
        self.queries = []

    def lookup(self, query):
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.answers.get(query)


class TestNormalizeAddress:
    def test_inserts_country_and_street_type(self):
        """Test "City, Street, House" gets country and street type"""
        assert normalize_address("Москва, Тверская, 1") == "Россия, Москва, улица Тверская, 1"

    def test_keeps_existing_street_type(self):
        assert normalize_address("Москва, пр-т Мира, 10") == "Россия, Москва, пр-т Мира, 10"

    def test_joins_extra_house_parts(self):
        assert normalize_address("Казань, Баумана, 5, корп 2") == "Россия, Казань, улица Баумана, 5 корп 2"

    def test_short_address_only_gets_country(self):
        assert normalize_address("Москва, Тверская") == "Россия, Москва, Тверская"
        assert normalize_address("Москва") == "Россия, Москва"


class TestAddressVariants:
    def test_variant_order(self):
        variants = build_address_variants("Москва, Тверская, 1")

        assert variants == [
            "Москва, Тверская, 1",
            "Россия, Москва, улица Тверская, 1",
            "Россия, Москва, Тверская",
            "Россия, Москва",
            "Россия, Москва, Тверская, 1",
        ]

    def test_duplicates_removed_case_insensitively(self):
        variants = build_address_variants("  Москва ")

        assert variants == ["Москва", "Россия, Москва"]
        assert len({v.lower() for v in variants}) == len(variants)

    def test_already_qualified_address(self):
        variants = build_address_variants("россия, Москва")

        assert variants[0] == "россия, Москва"
        assert len({v.lower() for v in variants}) == len(variants)


class TestParseYandex:
    def test_geojson_features(self):
        payload = {"features": [{"geometry": {"coordinates": [37.6176, 55.7558]}}]}
        assert parse_yandex_coordinates(payload) == Coordinates(55.7558, 37.6176)

    def test_legacy_collection(self):
        payload = {"response": {"GeoObjectCollection": {"featureMember": [
            {"GeoObject": {"Point": {"pos": "37.6176 55.7558"}}}
        ]}}}
        assert parse_yandex_coordinates(payload) == Coordinates(55.7558, 37.6176)

    def test_features_preferred_over_legacy(self):
        payload = {
            "features": [{"geometry": {"coordinates": [30.0, 60.0]}}],
            "response": {"GeoObjectCollection": {"featureMember": [
                {"GeoObject": {"Point": {"pos": "37.6176 55.7558"}}}
            ]}},
        }
        assert parse_yandex_coordinates(payload) == Coordinates(60.0, 30.0)

    @pytest.mark.parametrize("payload", [
        None,
        [],
        {},
        {"features": []},
        {"features": [{"geometry": {"coordinates": [37.6]}}]},
        {"response": {"GeoObjectCollection": {"featureMember": []}}},
        {"features": [{"geometry": {"coordinates": ["x", "y"]}}]},
    ])
    def test_unusable_payloads(self, payload):
        assert parse_yandex_coordinates(payload) is None


class TestProviders:
    def test_yandex_lookup_sends_key_and_query(self):
        http = MagicMock()
        http.get.return_value = _response(
            {"features": [{"geometry": {"coordinates": [37.6176, 55.7558]}}]}
        )

        coords = YandexGeocoder(api_key="secret", session=http).lookup("Москва")

        assert coords == Coordinates(55.7558, 37.6176)
        params = http.get.call_args.kwargs["params"]
        assert params["apikey"] == "secret"
        assert params["geocode"] == "Москва"

    def test_yandex_network_error_returns_none(self):
        http = MagicMock()
        http.get.side_effect = requests.ConnectionError("down")

        assert YandexGeocoder(api_key="", session=http).lookup("Москва") is None

    def test_yandex_http_error_returns_none(self):
        http = MagicMock()
        http.get.return_value = _response(status_error=requests.HTTPError("403"))

        assert YandexGeocoder(api_key="", session=http).lookup("Москва") is None

    def test_nominatim_lookup(self):
        http = MagicMock()
        http.get.return_value = _response([{"lat": "55.7558", "lon": "37.6176"}])

        coords = NominatimGeocoder(user_agent="test-agent", session=http).lookup("Москва")

        assert coords == Coordinates(55.7558, 37.6176)
        assert http.get.call_args.kwargs["headers"]["User-Agent"] == "test-agent"

    def test_nominatim_bad_json_returns_none(self):
        http = MagicMock()
        http.get.return_value = _response(json_error=ValueError("not json"))

        assert NominatimGeocoder(session=http).lookup("Москва") is None

    def test_nominatim_empty_result(self):
        http = MagicMock()
        http.get.return_value = _response([])

        assert NominatimGeocoder(session=http).lookup("Москва") is None


class TestGeocoder:
    def test_first_primary_hit_wins(self):
        primary = FakeProvider("primary", True, {"Россия, Москва, улица Тверская, 1": Coordinates(55.76, 37.6)})
        secondary = FakeProvider("secondary", False, {"Москва, Тверская, 1": Coordinates(1, 1)})

        coords = Geocoder([primary, secondary]).geocode("Москва, Тверская, 1")

        assert coords == Coordinates(55.76, 37.6)
        assert primary.queries == ["Москва, Тверская, 1", "Россия, Москва, улица Тверская, 1"]
        assert secondary.queries == []

    def test_secondary_gets_only_first_variant(self):
        primary = FakeProvider("primary", True)
        secondary = FakeProvider("secondary", False, {"Москва, Тверская, 1": Coordinates(55.7, 37.6)})

        coords = Geocoder([primary, secondary]).geocode("Москва, Тверская, 1")

        assert coords == Coordinates(55.7, 37.6)
        assert len(primary.queries) == 5
        assert secondary.queries == ["Москва, Тверская, 1"]

    def test_not_found_returns_none(self):
        primary = FakeProvider("primary", True)
        secondary = FakeProvider("secondary", False)

        assert Geocoder([primary, secondary]).geocode("Nowhere") is None

    def test_crashing_provider_degrades_to_next(self):
        primary = FakeProvider("primary", True, error=RuntimeError("boom"))
        secondary = FakeProvider("secondary", False, {"Москва": Coordinates(55.7, 37.6)})

        assert Geocoder([primary, secondary]).geocode("Москва") == Coordinates(55.7, 37.6)

    def test_blank_address(self):
        primary = FakeProvider("primary", True)

        assert Geocoder([primary]).geocode("   ") is None
        assert primary.queries == []
