from __future__ import annotations

import hashlib
import hmac
import unittest
from unittest.mock import patch

from tuya_account.signing import calc_sign, md5_hex, string_to_sign, timestamp_ms


class CalcSignTestCase(unittest.TestCase):
    def test_matches_hmac_sha256_uppercase(self) -> None:
        expected = hmac.new(b"sec", b"c1AT11700000000000", hashlib.sha256).hexdigest().upper()
        self.assertEqual(calc_sign("c1", "AT1", "1700000000000", "sec"), expected)

    def test_deterministic(self) -> None:
        first = calc_sign("c1", "AT1", "1700000000000", "sec")
        second = calc_sign("c1", "AT1", "1700000000000", "sec")
        self.assertEqual(first, second)
        self.assertEqual(first, first.upper())
        self.assertEqual(len(first), 64)

    def test_each_input_changes_signature(self) -> None:
        base = calc_sign("c1", "AT1", "1700000000000", "sec")
        variants = [
            calc_sign("c2", "AT1", "1700000000000", "sec"),
            calc_sign("c1", "AT2", "1700000000000", "sec"),
            calc_sign("c1", "AT1", "1700000000001", "sec"),
            calc_sign("c1", "AT1", "1700000000000", "sed"),
        ]
        for variant in variants:
            self.assertNotEqual(base, variant)
        self.assertEqual(len(set(variants)), len(variants))

    def test_unauthenticated_signature_differs_from_authenticated(self) -> None:
        self.assertNotEqual(
            calc_sign("c1", "", "1700000000000", "sec"),
            calc_sign("c1", "AT1", "1700000000000", "sec"),
        )

    def test_empty_secret_still_signs(self) -> None:
        expected = hmac.new(b"", b"c11700000000000", hashlib.sha256).hexdigest().upper()
        self.assertEqual(calc_sign("c1", "", "1700000000000", ""), expected)

    def test_string_to_sign_has_no_delimiters(self) -> None:
        self.assertEqual(string_to_sign("c1", "AT1", "123"), "c1AT1123")


class TimestampTestCase(unittest.TestCase):
    def test_thirteen_digit_milliseconds(self) -> None:
        with patch("tuya_account.signing.time.time", return_value=1700000000.123456):
            self.assertEqual(timestamp_ms(), "1700000000123")

    def test_current_time_has_thirteen_digits(self) -> None:
        value = timestamp_ms()
        self.assertTrue(value.isdigit())
        self.assertEqual(len(value), 13)


class Md5TestCase(unittest.TestCase):
    def test_md5_hex_matches_hashlib(self) -> None:
        self.assertEqual(md5_hex("secret"), hashlib.md5(b"secret").hexdigest())


if __name__ == "__main__":
    unittest.main()
