"""Unit tests for the command-line interface."""

import json

import pytest

from retail_bonus import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Record the requested log level instead of reconfiguring the root logger."""
    levels = []
    monkeypatch.setattr(cli, "configure_structured_logging", levels.append)
    for key in ("RETAIL_BONUS_CONFIG_FILE", "RETAIL_BONUS_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    return levels


@pytest.fixture
def files(tmp_path, monkeypatch, suit_basket, suit_lookup):
    """Basket and lookup written to disk."""
    monkeypatch.chdir(tmp_path)
    basket_path = tmp_path / "basket.json"
    lookup_path = tmp_path / "products.json"
    basket_path.write_text(json.dumps(suit_basket))
    lookup_path.write_text(json.dumps(suit_lookup))
    return basket_path, lookup_path


class TestSummarize:
    """Test the summarize command."""

    def test_prints_groups(self, files, capsys):
        """Test the grouped JSON output."""
        basket_path, lookup_path = files
        exit_code = cli.main(
            ["summarize", "--basket", str(basket_path), "--promotions", str(lookup_path)]
        )
        assert exit_code == 0

        groups = json.loads(capsys.readouterr().out)
        assert [g["item"]["itemId"] for g in groups] == ["i1", "i2"]
        assert groups[0]["bonus_products"][0]["productId"] == "tie-1"
        assert groups[0]["bonus_products"][0]["quantity"] == 2
        assert groups[0]["capacity"]["aggregated_max_bonus_items"] == 4

    def test_rule_map_file(self, tmp_path, monkeypatch, rule_basket, rule_lookup, capsys):
        """Test that the rule map qualifies rule-based products."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "basket.json").write_text(json.dumps(rule_basket))
        (tmp_path / "products.json").write_text(json.dumps(rule_lookup))
        (tmp_path / "rules.json").write_text(json.dumps({"promo-rule": ["shoe"]}))

        exit_code = cli.main(
            [
                "summarize",
                "--basket",
                "basket.json",
                "--promotions",
                "products.json",
                "--rule-map",
                "rules.json",
            ]
        )
        assert exit_code == 0
        groups = json.loads(capsys.readouterr().out)
        assert groups[0]["bonus_products"][0]["productId"] == "sock-1"

    def test_log_level_override(self, files, quiet_logging):
        """Test that --log-level beats the configured level."""
        basket_path, lookup_path = files
        cli.main(
            [
                "--log-level",
                "DEBUG",
                "summarize",
                "--basket",
                str(basket_path),
                "--promotions",
                str(lookup_path),
            ]
        )
        assert quiet_logging == ["DEBUG"]


class TestPlan:
    """Test the plan command."""

    def test_prints_requests(self, tmp_path, monkeypatch, build, capsys):
        """Test the planned add requests."""
        monkeypatch.chdir(tmp_path)
        basket = build.basket(
            [build.product_line("i1", "suit-a", promotions=["promo-suit"])],
            [
                build.discount_line("d1", "promo-suit", 1, ["tie-1"]),
                build.discount_line("d2", "promo-suit", 2, ["tie-1"]),
            ],
        )
        (tmp_path / "basket.json").write_text(json.dumps(basket))

        exit_code = cli.main(
            [
                "plan",
                "--basket",
                "basket.json",
                "--promotion-id",
                "promo-suit",
                "--product-id",
                "tie-1",
                "--quantity",
                "2",
            ]
        )
        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == [
            {"productId": "tie-1", "quantity": 1, "bonusDiscountLineItemId": "d1"},
            {"productId": "tie-1", "quantity": 1, "bonusDiscountLineItemId": "d2"},
        ]


class TestLoadErrors:
    """Test exit status 2 for inputs that cannot be loaded."""

    def test_missing_file(self, tmp_path, monkeypatch, capsys):
        """Test a missing basket file."""
        monkeypatch.chdir(tmp_path)
        exit_code = cli.main(
            ["summarize", "--basket", "absent.json", "--promotions", "absent.json"]
        )
        assert exit_code == 2
        assert "ERROR" in capsys.readouterr().err

    def test_invalid_json(self, files, capsys):
        """Test a malformed basket file."""
        basket_path, lookup_path = files
        basket_path.write_text("{")
        exit_code = cli.main(
            ["summarize", "--basket", str(basket_path), "--promotions", str(lookup_path)]
        )
        assert exit_code == 2

    def test_invalid_basket(self, files, capsys):
        """Test a basket that fails validation."""
        basket_path, lookup_path = files
        basket_path.write_text(json.dumps({"productItems": [{"quantity": -1}]}))
        exit_code = cli.main(
            ["summarize", "--basket", str(basket_path), "--promotions", str(lookup_path)]
        )
        assert exit_code == 2
        assert "Basket payload failed validation" in capsys.readouterr().err

    def test_invalid_config(self, files, tmp_path, capsys):
        """Test a configuration file that does not match the schema."""
        basket_path, lookup_path = files
        config_path = tmp_path / "bad_config.json"
        config_path.write_text(json.dumps({"logging": {"level": "loud"}}))
        exit_code = cli.main(
            [
                "--config",
                str(config_path),
                "summarize",
                "--basket",
                str(basket_path),
                "--promotions",
                str(lookup_path),
            ]
        )
        assert exit_code == 2

    def test_no_command(self, capsys):
        """Test that running without a command prints help."""
        assert cli.main([]) == 1
        assert "usage" in capsys.readouterr().out
