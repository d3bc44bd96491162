import copy
import threading
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
import requests

from tripalert.models import UserSearchRequest
from tripalert.skyscanner_fetcher import SkyscannerFetcher


def _dt(day, hour, minute=0):
    return {"year": 2025, "month": 3, "day": day, "hour": hour, "minute": minute, "second": 0}


def make_payload():
    return {
        "status": "RESULT_STATUS_COMPLETE",
        "content": {
            "results": {
                "itineraries": {
                    "it-direct": {
                        "legIds": ["leg-1"],
                        "pricingOptions": [
                            {"price": {"amount": "812500", "unit": "PRICE_UNIT_MILLI"}}
                        ],
                    },
                    "it-via-gru": {
                        "legIds": ["leg-2"],
                        "pricingOptions": [
                            {"price": {"amount": "700", "unit": "PRICE_UNIT_WHOLE"}}
                        ],
                    },
                },
                "legs": {
                    "leg-1": {"segmentIds": ["seg-1"]},
                    "leg-2": {"segmentIds": ["seg-2", "seg-3"]},
                },
                "segments": {
                    "seg-1": {
                        "originPlaceId": "p-eze",
                        "destinationPlaceId": "p-mad",
                        "departureDateTime": _dt(10, 22, 30),
                        "arrivalDateTime": _dt(11, 10, 45),
                        "durationInMinutes": 735,
                        "marketingCarrierId": "c-ib",
                    },
                    "seg-2": {
                        "originPlaceId": "p-eze",
                        "destinationPlaceId": "p-xyz",
                        "departureDateTime": _dt(10, 8),
                        "arrivalDateTime": _dt(10, 11),
                        "operatingCarrierId": "c-la",
                    },
                    "seg-3": {
                        "originPlaceId": "p-xyz",
                        "destinationPlaceId": "p-mad",
                        "departureDateTime": _dt(10, 14),
                        "arrivalDateTime": _dt(11, 6),
                        "operatingCarrierId": "c-la",
                    },
                },
                "places": {
                    "p-eze": {"iata": "EZE", "name": "Ezeiza", "type": "PLACE_TYPE_AIRPORT"},
                    "p-mad": {"iata": "MAD", "name": "Barajas", "type": "PLACE_TYPE_AIRPORT"},
                    "p-xyz": {
                        "iata": "xyz",
                        "name": "Somewhere Intl",
                        "type": "PLACE_TYPE_AIRPORT",
                        "parentId": "city-x",
                    },
                    "city-x": {"name": "Somewhere", "type": "PLACE_TYPE_CITY", "parentId": "country-x"},
                    "country-x": {"name": "Nowhere", "type": "PLACE_TYPE_COUNTRY"},
                },
                "carriers": {
                    "c-ib": {"name": "Iberia", "iata": "IB"},
                    "c-la": {"name": "LATAM", "iata": "LA"},
                },
            }
        },
    }


def one_day_request():
    return UserSearchRequest("Buenos Aires", "Madrid", date(2025, 3, 10), date(2025, 3, 10))


def test_parse_trips_maps_itineraries():
    trips = SkyscannerFetcher(api_key="k").parse_trips(make_payload(), "USD")

    assert len(trips) == 2
    direct, via = trips
    assert direct.total_price == Decimal("812.5")
    assert direct.flights[0].airline == "Iberia"
    assert direct.flights[0].duration == timedelta(minutes=735)
    assert direct.start_time == datetime(2025, 3, 10, 22, 30, tzinfo=timezone.utc)
    assert direct.departure_airport.city == "Buenos Aires"

    assert via.stops == 1
    assert via.layovers[0].airport.code == "XYZ"
    assert via.layovers[0].airport.city == "Somewhere"
    assert via.layovers[0].airport.country == "Nowhere"
    assert via.layovers[0].waiting_time == timedelta(hours=3)
    assert [f.price for f in via.flights] == [Decimal("350.00"), Decimal("350.00")]
    assert via.total_price == Decimal("700")


def test_malformed_itineraries_are_skipped():
    payload = make_payload()
    results = payload["content"]["results"]
    results["itineraries"]["no-price"] = {"legIds": ["leg-1"], "pricingOptions": []}
    results["itineraries"]["bad-leg"] = {
        "legIds": ["missing"],
        "pricingOptions": [{"price": {"amount": 1}}],
    }
    results["itineraries"]["bad-date"] = {
        "legIds": ["leg-bad"],
        "pricingOptions": [{"price": {"amount": 1}}],
    }
    results["itineraries"]["junk"] = "???"
    results["legs"]["leg-bad"] = {"segmentIds": ["seg-bad"]}
    bad_segment = copy.deepcopy(results["segments"]["seg-1"])
    bad_segment["departureDateTime"] = {"year": "soon"}
    results["segments"]["seg-bad"] = bad_segment

    trips = SkyscannerFetcher(api_key="k").parse_trips(payload, "USD")

    assert len(trips) == 2


def test_price_split_keeps_total():
    prices = SkyscannerFetcher._split_price(Decimal("100"), 3)
    assert prices == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(prices) == Decimal("100")


@patch("requests.post")
def test_search_posts_query_per_route_and_day(mock_post):
    mock_post.return_value = Mock(status_code=200, json=Mock(return_value=make_payload()))

    fetcher = SkyscannerFetcher(api_key="secret", base_url="https://api.test/v3/")
    trips = fetcher.search(one_day_request())

    # EZE and AEP to MAD, one day
    assert mock_post.call_count == 2
    args, kwargs = mock_post.call_args_list[0]
    assert args[0] == "https://api.test/v3/flights/live/search/create"
    assert kwargs["headers"]["x-api-key"] == "secret"
    leg = kwargs["json"]["query"]["queryLegs"][0]
    assert leg["originPlaceId"] == {"iata": "EZE"}
    assert leg["date"] == {"year": 2025, "month": 3, "day": 10}
    assert len(trips) == 4


@patch("requests.post")
def test_http_error_falls_back_to_simulated(mock_post, caplog):
    mock_post.return_value = Mock(status_code=500, text="upstream down")
    fallback = Mock()
    fallback.search.return_value = ["simulated"]

    trips = SkyscannerFetcher(api_key="k", fallback=fallback).search(one_day_request())

    assert trips == ["simulated"]
    assert any("HTTP 500" in r.getMessage() for r in caplog.records)


@patch("requests.post")
def test_network_error_is_absorbed(mock_post):
    mock_post.side_effect = requests.ConnectionError("no route")

    trips = SkyscannerFetcher(api_key="k").search(one_day_request())

    # simulated Skyscanner data instead
    assert trips
    assert trips[0].flights[0].airline == "SkyScanner Airways"


@patch("requests.post")
def test_empty_results_fall_back(mock_post):
    mock_post.return_value = Mock(status_code=200, json=Mock(return_value={"content": {}}))

    trips = SkyscannerFetcher(api_key="k").search(one_day_request())

    assert trips[0].flights[0].airline == "SkyScanner Airways"


@patch("requests.post")
def test_without_api_key_no_request_is_made(mock_post):
    trips = SkyscannerFetcher(api_key="").search(one_day_request())

    mock_post.assert_not_called()
    assert len(trips) == 2


@patch("requests.post")
def test_cancelled_search_makes_no_request(mock_post):
    stop = threading.Event()
    stop.set()

    trips = SkyscannerFetcher(api_key="k").search(one_day_request(), stop)

    mock_post.assert_not_called()
    assert trips == []


def _set_amount(value):
    def mutate(results):
        results["itineraries"]["it-direct"]["pricingOptions"][0]["price"]["amount"] = value
    return mutate


def _huge_duration(results):
    results["segments"]["seg-1"]["durationInMinutes"] = 10**20


@pytest.mark.parametrize(
    "mutate",
    [_set_amount("NaN"), _set_amount("Infinity"), _set_amount("-sNaN"), _huge_duration],
    ids=["nan-price", "infinite-price", "signaling-nan-price", "huge-duration"],
)
@patch("requests.post")
def test_unusable_numbers_skip_only_that_itinerary(mock_post, mutate):
    payload = make_payload()
    mutate(payload["content"]["results"])
    mock_post.return_value = Mock(status_code=200, json=Mock(return_value=payload))

    trips = SkyscannerFetcher(api_key="k").search(one_day_request())

    # it-via-gru survives for both airports
    assert len(trips) == 2
    assert all(t.flights[0].airline == "LATAM" for t in trips)


@pytest.mark.parametrize("content", [[{"results": {}}], "oops", 42])
@patch("requests.post")
def test_content_of_wrong_shape_falls_back(mock_post, content):
    mock_post.return_value = Mock(
        status_code=200, json=Mock(return_value={"content": content})
    )

    trips = SkyscannerFetcher(api_key="k").search(one_day_request())

    assert trips[0].flights[0].airline == "SkyScanner Airways"


def test_parse_trips_ignores_non_dict_payload():
    assert SkyscannerFetcher(api_key="k").parse_trips(["not", "a", "dict"], "USD") == []
