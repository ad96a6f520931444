from __future__ import annotations

import json
import unittest
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from tuya_account import cli
from tuya_account.errors import TransportError
from tuya_account.models import TokenState
from tuya_account.signing import calc_sign

ENV = {
    "TUYA_SCHEMA": "s1",
    "TUYA_CLIENT_ID": "c1",
    "TUYA_CLIENT_SECRET": "sec",
    "TUYA_REGION": "eu",
}


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        patcher = patch.object(cli, "TuyaClient")
        self.client_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = MagicMock()
        self.client_cls.return_value.__enter__.return_value = self.client

    def test_token_masks_secrets(self) -> None:
        self.client.request_token.return_value = TokenState(
            access_token="0123456789abcdef", refresh_token="RT1", expire_time=7200, uid="U1"
        )
        result = self.runner.invoke(cli.app, ["token"], env=ENV)
        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertEqual(data["access_token"], "0123***")
        self.assertEqual(data["uid"], "U1")
        config = self.client_cls.call_args.args[0]
        self.assertEqual(config.client_id, "c1")

    def test_region_option_overrides_environment(self) -> None:
        self.client.get_countries.return_value = {"success": True, "result": []}
        result = self.runner.invoke(cli.app, ["--region", "us", "countries"], env=ENV)
        self.assertEqual(result.exit_code, 0, result.output)
        config = self.client_cls.call_args.args[0]
        self.assertEqual(config.base_url, "https://openapi.tuyaus.com")

    def test_user_requests_token_first(self) -> None:
        self.client.get_user.return_value = {"success": True, "result": {"uid": "U9"}}
        result = self.runner.invoke(cli.app, ["user", "user@example.com", "--password", "pw"], env=ENV)
        self.assertEqual(result.exit_code, 0, result.output)
        self.client.request_token.assert_called_once_with()
        self.client.get_user.assert_called_once_with("user@example.com", "pw")
        self.assertEqual(json.loads(result.output)["result"]["uid"], "U9")

    def test_api_error_exits_with_code_one(self) -> None:
        self.client.get_countries.side_effect = TransportError("boom")
        result = self.runner.invoke(cli.app, ["countries"], env=ENV)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("boom", result.output)

    def test_missing_credentials(self) -> None:
        env = {"TUYA_SCHEMA": "", "TUYA_CLIENT_ID": "", "TUYA_CLIENT_SECRET": ""}
        result = self.runner.invoke(cli.app, ["countries"], env=env)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("TUYA_CLIENT_ID", result.output)
        self.client_cls.assert_not_called()

    def test_unparseable_config_file(self) -> None:
        with self.runner.isolated_filesystem():
            with open("tuya.yaml", "w", encoding="utf-8") as handle:
                handle.write("schema: [unclosed\n")
            result = self.runner.invoke(cli.app, ["--config", "tuya.yaml", "countries"], env=ENV)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Configuration error", result.output)
        self.assertIn("Failed to parse Tuya config", result.output)
        self.client_cls.assert_not_called()

    def test_sign_is_offline(self) -> None:
        result = self.runner.invoke(
            cli.app,
            ["sign", "--client-id", "c1", "--secret", "sec", "--timestamp", "1700000000000"],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertEqual(data["sign"], calc_sign("c1", "", "1700000000000", "sec"))
        self.client_cls.assert_not_called()


if __name__ == "__main__":
    unittest.main()
