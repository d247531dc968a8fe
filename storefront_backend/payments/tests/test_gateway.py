# payments/tests/test_gateway.py

"""
GATEWAY CLIENT TESTS

The network is never touched: urlopen is patched.
"""

from __future__ import annotations

import io
import json
from unittest.mock import MagicMock, patch
from urllib.error import URLError

from django.test import SimpleTestCase, override_settings

from payments.services.exceptions import GatewayConfigurationError, GatewayRequestError
from payments.services.gateway import create_intent, sign_payload, verify_signature

GATEWAY = {
    "GATEWAY": {
        "BASE_URL": "https://gateway.test/v1/",
        "API_KEY": "sk_test",
        "WEBHOOK_SECRET": "whsec",
        "RETURN_URL": "https://shop.test/return",
        "TIMEOUT_SECONDS": 3,
    }
}


def _response(payload):
    resp = MagicMock()
    resp.read.return_value = json.dumps(payload).encode("utf-8")
    resp.__enter__.return_value = resp
    return resp


@override_settings(PAYMENTS=GATEWAY)
class CreateIntentTests(SimpleTestCase):
    @patch("payments.services.gateway.urlopen")
    def test_posts_order_as_idempotency_key(self, urlopen):
        urlopen.return_value = _response({"id": "pi_1", "redirect_url": "https://gateway.test/pay/pi_1"})

        intent = create_intent(order_id="order-1", amount=1042500, currency="clp", payer_email="a@b.cl")

        self.assertEqual(intent.external_reference, "pi_1")
        self.assertEqual(intent.redirect_url, "https://gateway.test/pay/pi_1")

        request = urlopen.call_args.args[0]
        self.assertEqual(request.full_url, "https://gateway.test/v1/payment-intents")
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(request.headers["Idempotency-key"], "order-1")
        self.assertEqual(request.headers["Authorization"], "Bearer sk_test")

        body = json.loads(request.data.decode("utf-8"))
        self.assertEqual(body["external_reference"], "order-1")
        self.assertEqual(body["amount"], 1042500)
        self.assertEqual(body["currency"], "CLP")
        self.assertEqual(body["return_url"], "https://shop.test/return")
        self.assertEqual(urlopen.call_args.kwargs["timeout"], 3)

    @patch("payments.services.gateway.urlopen")
    def test_incomplete_response_is_an_error(self, urlopen):
        urlopen.return_value = _response({"id": "pi_1"})
        with self.assertRaises(GatewayRequestError):
            create_intent(order_id="o", amount=1, currency="CLP")

    @patch("payments.services.gateway.urlopen", side_effect=URLError("connection refused"))
    def test_network_error_is_wrapped(self, _urlopen):
        with self.assertRaises(GatewayRequestError):
            create_intent(order_id="o", amount=1, currency="CLP")

    @override_settings(PAYMENTS={"GATEWAY": {"BASE_URL": "https://gateway.test"}})
    def test_missing_api_key(self):
        with self.assertRaises(GatewayConfigurationError):
            create_intent(order_id="o", amount=1, currency="CLP")


@override_settings(PAYMENTS=GATEWAY)
class SignatureTests(SimpleTestCase):
    def test_round_trip_and_tamper(self):
        body = b'{"status": "approved"}'
        signature = sign_payload(body)

        self.assertTrue(verify_signature(raw_body=body, signature=signature))
        self.assertTrue(verify_signature(raw_body=body, signature=signature.upper()))
        self.assertFalse(verify_signature(raw_body=body + b" ", signature=signature))
        self.assertFalse(verify_signature(raw_body=body, signature=""))
