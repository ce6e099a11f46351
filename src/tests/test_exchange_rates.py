# tests/test_exchange_rates.py
import unittest
from unittest.mock import MagicMock, patch

import requests

from src.core import exchange_rates
from src.core.exchange_rates import RATE_PROVIDERS, RateResolver


def mock_response(payload=None, status_error=None, json_error=None):
    response = MagicMock()
    if status_error:
        response.raise_for_status.side_effect = status_error
    else:
        response.raise_for_status.return_value = None
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


class TestRateProviders(unittest.TestCase):
    def test_provider_order(self):
        self.assertEqual([p.name for p in RATE_PROVIDERS], ["exchangerate-api", "frankfurter", "floatrates"])

    def test_provider_urls(self):
        exchangerate_api, frankfurter, floatrates = RATE_PROVIDERS
        self.assertEqual(exchangerate_api.build_url("USD", "ILS"), "https://api.exchangerate-api.com/v4/latest/USD")
        self.assertEqual(
            frankfurter.build_url("USD", "ILS"), "https://api.frankfurter.app/latest?from=USD&symbols=ILS"
        )
        self.assertEqual(floatrates.build_url("USD", "ILS"), "https://www.floatrates.com/daily/usd.json")

    def test_provider_parsers(self):
        exchangerate_api, _, floatrates = RATE_PROVIDERS
        self.assertEqual(exchangerate_api.parse_rate({"rates": {"ILS": 3.7}}, "USD", "ILS"), 3.7)
        self.assertIsNone(exchangerate_api.parse_rate({"result": "error"}, "USD", "ILS"))
        self.assertEqual(floatrates.parse_rate({"ils": {"rate": 3.65}}, "USD", "ILS"), 3.65)
        self.assertIsNone(floatrates.parse_rate({"eur": {"rate": 0.9}}, "USD", "ILS"))
        self.assertIsNone(floatrates.parse_rate([], "USD", "ILS"))
        self.assertIsNone(exchangerate_api.parse_rate({"rates": ["ILS"]}, "USD", "ILS"))
        self.assertIsNone(exchangerate_api.parse_rate({"rates": None}, "USD", "ILS"))


class TestRateResolver(unittest.TestCase):
    def setUp(self):
        self.resolver = RateResolver(timeout=5)

    @patch("requests.get")
    def test_first_provider_success(self, mock_get):
        mock_get.return_value = mock_response({"rates": {"ILS": 3.712345}})

        rate = self.resolver.resolve("USD", "ILS")

        self.assertEqual(rate.rate, 3.7123)
        self.assertEqual(rate.source, "exchangerate-api")
        mock_get.assert_called_once_with("https://api.exchangerate-api.com/v4/latest/USD", timeout=5)

    @patch("requests.get")
    def test_falls_back_on_http_error(self, mock_get):
        mock_get.side_effect = [
            mock_response(status_error=requests.exceptions.HTTPError("503 Server Error")),
            mock_response({"amount": 1.0, "base": "USD", "rates": {"ILS": 3.6}}),
        ]

        rate = self.resolver.resolve("USD", "ILS")

        self.assertEqual(rate.rate, 3.6)
        self.assertEqual(rate.source, "frankfurter")
        self.assertEqual(mock_get.call_count, 2)

    @patch("requests.get")
    def test_falls_back_on_transport_error_and_bad_body(self, mock_get):
        mock_get.side_effect = [
            requests.exceptions.Timeout("timed out"),
            mock_response(json_error=ValueError("Expecting value")),
            mock_response({"ils": {"rate": 3.55557}}),
        ]

        rate = self.resolver.resolve("USD", "ILS")

        self.assertEqual(rate.rate, 3.5556)
        self.assertEqual(rate.source, "floatrates")

    @patch("requests.get")
    def test_missing_or_invalid_rate_is_failure(self, mock_get):
        mock_get.side_effect = [
            mock_response({"rates": {"EUR": 0.9}}),
            mock_response({"rates": {"ILS": 0}}),
            mock_response({"ils": {"rate": "3.7"}}),
        ]

        self.assertIsNone(self.resolver.resolve("USD", "ILS"))
        self.assertEqual(mock_get.call_count, 3)

    @patch("requests.get")
    def test_unexpected_body_shape_falls_back(self, mock_get):
        mock_get.side_effect = [
            mock_response({"rates": ["ILS"]}),
            mock_response({"rates": "n/a"}),
            mock_response({"ils": {"rate": 3.7}}),
        ]

        rate = self.resolver.resolve("USD", "ILS")

        self.assertEqual(rate.rate, 3.7)
        self.assertEqual(rate.source, "floatrates")
        self.assertEqual(mock_get.call_count, 3)

    @patch("requests.get")
    def test_parser_error_falls_back_to_next_provider(self, mock_get):
        def broken_parser(payload, from_, to):
            return payload["missing"]["rate"]

        providers = [
            exchange_rates.RateProvider("broken", lambda from_, to: "https://broken.example/rates", broken_parser),
            RATE_PROVIDERS[1],
        ]
        resolver = RateResolver(providers=providers, timeout=5)
        mock_get.side_effect = [
            mock_response({"rates": {"ILS": 3.6}}),
            mock_response({"rates": {"ILS": 3.7}}),
        ]

        rate = resolver.resolve("USD", "ILS")

        self.assertEqual(rate.rate, 3.7)
        self.assertEqual(rate.source, "frankfurter")

    @patch("requests.get")
    def test_all_providers_fail_returns_none(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("offline")

        self.assertIsNone(self.resolver.resolve("USD", "ILS"))
        self.assertEqual(mock_get.call_count, len(exchange_rates.RATE_PROVIDERS))

    @patch("requests.get")
    def test_rate_is_memoized_per_pair(self, mock_get):
        mock_get.return_value = mock_response({"rates": {"ILS": 3.7, "EUR": 0.92}})

        self.resolver.resolve("USD", "ILS")
        self.resolver.resolve("USD", "ILS")
        self.resolver.resolve("USD", "EUR")

        self.assertEqual(mock_get.call_count, 2)

    @patch("requests.get")
    def test_unavailable_pair_is_memoized_too(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("offline")

        self.resolver.resolve("USD", "ILS")
        self.resolver.resolve("USD", "ILS")

        self.assertEqual(mock_get.call_count, 3)

    @patch("requests.get")
    def test_same_currency_needs_no_request(self, mock_get):
        rate = self.resolver.resolve("ILS", "ILS")
        self.assertEqual(rate.rate, 1.0)
        mock_get.assert_not_called()


if __name__ == "__main__":
    unittest.main()
