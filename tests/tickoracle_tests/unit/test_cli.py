"""
CLI command tests using Click's CliRunner.

The live-feed commands get an InMemoryPriceFeed through ``obj`` so no
network access happens.
"""

import json
import time

import pytest
from click.testing import CliRunner

from tickoracle.cli.main import cli
from tickoracle.core.tick_math import tick_to_sqrt_price
from tickoracle.feeds.memory import InMemoryPriceFeed

ETH_USD = "ff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"
BTC_USD = "e62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def price_feed():
    feed = InMemoryPriceFeed()
    # ETH/USD = 2.0 keeps the expected tick at 6932
    feed.update_price(ETH_USD, 200000000, -8)
    feed.update_price(BTC_USD, 100000000, -8)
    return feed


def invoke(runner, feed, args):
    return runner.invoke(cli, ["--json-output", *args], obj={"feed": feed})


class TestTickCommand:
    def test_one_basis_point(self, runner):
        result = runner.invoke(cli, ["--json-output", "tick", "--mantissa", "10001", "--exponent", "-4"], obj={})
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["tick"] == 1
        assert data["sqrt_price_x96"] == str(tick_to_sqrt_price(1))
        assert data["price"] == pytest.approx(1.0001)

    def test_invert(self, runner):
        result = runner.invoke(
            cli, ["--json-output", "tick", "--mantissa", "2", "--exponent", "0", "--invert"], obj={}
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["tick"] == -6932

    def test_decimal_difference(self, runner):
        result = runner.invoke(
            cli,
            ["--json-output", "tick", "--mantissa", "200000000000", "--exponent", "-8",
             "--decimal-difference", "-12"],
            obj={},
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["tick"] < 0

    def test_non_positive_price_fails(self, runner):
        result = runner.invoke(cli, ["tick", "--mantissa", "0", "--exponent", "0"], obj={})
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_table_output(self, runner):
        result = runner.invoke(cli, ["tick", "--mantissa", "1", "--exponent", "0"], obj={})
        assert result.exit_code == 0, result.output
        assert "sqrt_price_x96" in result.output


class TestSlot0Command:
    def test_single_feed(self, runner, price_feed):
        result = invoke(runner, price_feed, ["slot0", "--feed-id", ETH_USD])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["tick"] == 6932
        assert data["sqrt_price_x96"] == str(tick_to_sqrt_price(6932))
        assert data["observation_index"] == 65534
        assert data["observation_cardinality"] == 65535
        assert data["observation_cardinality_next"] == 65535
        assert data["unlocked"] is True

    def test_dual_feed(self, runner, price_feed):
        result = invoke(runner, price_feed, ["slot0", "--feed-id", ETH_USD, "--quote-feed-id", BTC_USD])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["tick"] == 6932

    def test_invert(self, runner, price_feed):
        result = invoke(runner, price_feed, ["slot0", "--feed-id", ETH_USD, "--invert"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["tick"] == -6932

    def test_config_file(self, runner, price_feed, tmp_path):
        path = tmp_path / "adapter.yaml"
        path.write_text(f"feed_id: \"{BTC_USD}\"\nquote_feed_id: \"{ETH_USD}\"\n")
        result = invoke(runner, price_feed, ["slot0", "--config", str(path)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["tick"] == -6931

    def test_stale_feed_fails(self, runner, price_feed):
        price_feed.update_price(ETH_USD, 200000000, -8, publish_time=int(time.time()) - 1000)
        result = invoke(runner, price_feed, ["slot0", "--feed-id", ETH_USD, "--max-age", "60"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_unknown_feed_fails(self, runner, price_feed):
        result = invoke(runner, price_feed, ["slot0", "--feed-id", "ab" * 32])
        assert result.exit_code == 1

    def test_invert_with_quote_rejected(self, runner, price_feed):
        result = invoke(
            runner, price_feed, ["slot0", "--feed-id", ETH_USD, "--quote-feed-id", BTC_USD, "--invert"]
        )
        assert result.exit_code == 1

    def test_feed_id_required(self, runner, price_feed):
        result = invoke(runner, price_feed, ["slot0"])
        assert result.exit_code == 2


class TestObserveCommand:
    def test_cumulative_ticks(self, runner, price_feed):
        result = invoke(runner, price_feed, ["observe", "--feed-id", ETH_USD, "--ages", "0,60,3600"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["seconds_agos"] == [0, 60, 3600]
        cumulatives = data["tick_cumulatives"]
        assert cumulatives[0] - cumulatives[1] == 6932 * 60
        assert cumulatives[0] - cumulatives[2] == 6932 * 3600
        assert data["seconds_per_liquidity_cumulative_x128s"] == [0, 0, 0]

    def test_bad_ages(self, runner, price_feed):
        result = invoke(runner, price_feed, ["observe", "--feed-id", ETH_USD, "--ages", "0,soon"])
        assert result.exit_code == 2

    def test_negative_ages(self, runner, price_feed):
        result = invoke(runner, price_feed, ["observe", "--feed-id", ETH_USD, "--ages", "0,-5"])
        assert result.exit_code == 2

    def test_table_output(self, runner, price_feed):
        result = runner.invoke(
            cli, ["observe", "--feed-id", ETH_USD, "--ages", "0,60"], obj={"feed": price_feed}
        )
        assert result.exit_code == 0, result.output
        assert "Observations" in result.output


class TestTwapCommand:
    def test_mean_tick(self, runner, price_feed):
        result = invoke(runner, price_feed, ["twap", "--feed-id", ETH_USD, "--seconds-ago", "1800"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["seconds_ago"] == 1800
        assert data["mean_tick"] == 6932
        assert data["price"] == pytest.approx(2.0, rel=1e-4)

    def test_zero_window_rejected(self, runner, price_feed):
        result = invoke(runner, price_feed, ["twap", "--feed-id", ETH_USD, "--seconds-ago", "0"])
        assert result.exit_code == 2
