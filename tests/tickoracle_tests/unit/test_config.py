"""
Adapter configuration: validation and loaders.
"""

import pytest

from tickoracle.config import (
    DEFAULT_MAX_AGE,
    AdapterConfig,
    MarketAdjustment,
    StalenessPolicy,
)
from tickoracle.exceptions import ConfigurationError

ETH_USD = "ff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"
BTC_USD = "e62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43"


class TestAdapterConfig:
    def test_defaults(self):
        config = AdapterConfig(feed_id=ETH_USD)
        assert config.quote_feed_id is None
        assert config.max_age == DEFAULT_MAX_AGE
        assert config.decimal_difference == 0
        assert config.invert is False
        assert config.dual is False

    def test_dual_mode(self):
        config = AdapterConfig(feed_id=ETH_USD, quote_feed_id=BTC_USD)
        assert config.dual is True

    def test_strips_ids(self):
        config = AdapterConfig(feed_id=f"  {ETH_USD}\n", quote_feed_id=f" {BTC_USD} ")
        assert config.feed_id == ETH_USD
        assert config.quote_feed_id == BTC_USD

    def test_derived_policies(self):
        config = AdapterConfig(feed_id=ETH_USD, max_age=30, decimal_difference=-12, invert=True)
        assert config.staleness == StalenessPolicy(30)
        assert config.adjustment == MarketAdjustment(-12, True)

    def test_frozen(self):
        config = AdapterConfig(feed_id=ETH_USD)
        with pytest.raises(AttributeError):
            config.max_age = 5

    @pytest.mark.parametrize("feed_id", ["", "   ", None])
    def test_feed_id_required(self, feed_id):
        with pytest.raises(ConfigurationError):
            AdapterConfig(feed_id=feed_id)

    def test_quote_must_differ(self):
        with pytest.raises(ConfigurationError):
            AdapterConfig(feed_id=ETH_USD, quote_feed_id=ETH_USD.upper())

    def test_empty_quote_rejected(self):
        with pytest.raises(ConfigurationError):
            AdapterConfig(feed_id=ETH_USD, quote_feed_id=" ")

    def test_invert_rejected_in_dual_mode(self):
        with pytest.raises(ConfigurationError):
            AdapterConfig(feed_id=ETH_USD, quote_feed_id=BTC_USD, invert=True)

    @pytest.mark.parametrize("max_age", [-1, 1.5, True])
    def test_bad_max_age(self, max_age):
        with pytest.raises(ConfigurationError):
            AdapterConfig(feed_id=ETH_USD, max_age=max_age)

    def test_zero_max_age_allowed(self):
        assert AdapterConfig(feed_id=ETH_USD, max_age=0).max_age == 0

    @pytest.mark.parametrize("decimal_difference", [-128, 0, 127])
    def test_decimal_difference_bounds(self, decimal_difference):
        assert AdapterConfig(feed_id=ETH_USD, decimal_difference=decimal_difference).decimal_difference == decimal_difference

    @pytest.mark.parametrize("decimal_difference", [-129, 128, 2.0])
    def test_decimal_difference_out_of_range(self, decimal_difference):
        with pytest.raises(ConfigurationError):
            AdapterConfig(feed_id=ETH_USD, decimal_difference=decimal_difference)


class TestMarketAdjustment:
    def test_from_token_decimals(self):
        # WETH (18) / USDC (6)
        assert MarketAdjustment.from_token_decimals(18, 6).decimal_difference == -12
        assert MarketAdjustment.from_token_decimals(6, 18, invert=True) == MarketAdjustment(12, True)

    def test_negative_decimals_rejected(self):
        with pytest.raises(ConfigurationError):
            MarketAdjustment.from_token_decimals(-1, 6)


class TestFromMapping:
    def test_string_values(self):
        config = AdapterConfig.from_mapping({
            "feed_id": ETH_USD,
            "max_age": "120",
            "decimal_difference": "-12",
            "invert": "yes",
        })
        assert config == AdapterConfig(feed_id=ETH_USD, max_age=120, decimal_difference=-12, invert=True)

    def test_unknown_keys(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AdapterConfig.from_mapping({"feed_id": ETH_USD, "maxage": 5})
        assert "maxage" in str(exc_info.value)

    def test_missing_feed_id(self):
        with pytest.raises(ConfigurationError):
            AdapterConfig.from_mapping({"max_age": 5})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            AdapterConfig.from_mapping([ETH_USD])

    @pytest.mark.parametrize("key,value", [("max_age", "soon"), ("invert", "maybe"), ("decimal_difference", True)])
    def test_bad_values(self, key, value):
        with pytest.raises(ConfigurationError):
            AdapterConfig.from_mapping({"feed_id": ETH_USD, key: value})


class TestFromEnv:
    def test_reads_prefixed_variables(self):
        environ = {
            "TICKORACLE_FEED_ID": ETH_USD,
            "TICKORACLE_QUOTE_FEED_ID": BTC_USD,
            "TICKORACLE_MAX_AGE": "15",
            "TICKORACLE_DECIMAL_DIFFERENCE": "2",
            "UNRELATED": "x",
        }
        config = AdapterConfig.from_env(environ=environ)
        assert config == AdapterConfig(feed_id=ETH_USD, quote_feed_id=BTC_USD, max_age=15, decimal_difference=2)

    def test_custom_prefix(self):
        config = AdapterConfig.from_env(prefix="POOL_", environ={"POOL_FEED_ID": ETH_USD, "POOL_INVERT": "1"})
        assert config.invert is True

    def test_blank_values_ignored(self):
        config = AdapterConfig.from_env(environ={"TICKORACLE_FEED_ID": ETH_USD, "TICKORACLE_QUOTE_FEED_ID": ""})
        assert config.dual is False

    def test_missing_feed_id(self):
        with pytest.raises(ConfigurationError):
            AdapterConfig.from_env(environ={})

    def test_process_environment(self, monkeypatch):
        monkeypatch.setenv("TICKORACLE_FEED_ID", ETH_USD)
        monkeypatch.setenv("TICKORACLE_MAX_AGE", "7")
        assert AdapterConfig.from_env().max_age == 7


class TestFromYaml:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "adapter.yaml"
        path.write_text(
            f"feed_id: \"{ETH_USD}\"\n"
            f"quote_feed_id: \"{BTC_USD}\"\n"
            "max_age: 90\n"
            "decimal_difference: -10\n"
        )
        config = AdapterConfig.from_yaml(path)
        assert config.dual is True
        assert config.max_age == 90
        assert config.decimal_difference == -10

    def test_accepts_string_path(self, tmp_path):
        path = tmp_path / "adapter.yaml"
        path.write_text(f"feed_id: \"{ETH_USD}\"\ninvert: true\n")
        assert AdapterConfig.from_yaml(str(path)).invert is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            AdapterConfig.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "adapter.yaml"
        path.write_text("feed_id: [unclosed\n")
        with pytest.raises(ConfigurationError):
            AdapterConfig.from_yaml(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "adapter.yaml"
        path.write_text("")
        with pytest.raises(ConfigurationError):
            AdapterConfig.from_yaml(path)

    def test_list_document(self, tmp_path):
        path = tmp_path / "adapter.yaml"
        path.write_text("- feed_id\n")
        with pytest.raises(ConfigurationError):
            AdapterConfig.from_yaml(path)
