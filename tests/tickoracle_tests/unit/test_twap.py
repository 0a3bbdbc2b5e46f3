"""
Consumer-side TWAP over the synthetic history.
"""

import pytest

from tickoracle.exceptions import StaleFeedError
from tickoracle.oracle.twap import consult, consult_price

ETH_USD = "ff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"


@pytest.fixture
def oracle(feed, make_adapter):
    feed.update_price(ETH_USD, 361296500000, -8)
    return make_adapter()


class TestConsult:
    @pytest.mark.parametrize("window", [1, 60, 1800, 65535, 86400 * 30])
    def test_mean_tick_equals_current_tick(self, oracle, window):
        assert consult(oracle, window) == oracle.current_tick()

    def test_negative_tick_window(self, feed, make_adapter):
        feed.update_price(ETH_USD, 200000000000, -8)
        oracle = make_adapter(decimal_difference=-12)
        assert consult(oracle, 1800) == oracle.current_tick() < 0

    def test_inverted_market(self, feed, make_adapter):
        feed.update_price(ETH_USD, 361296500000, -8)
        plain = make_adapter()
        inverted = make_adapter(invert=True)
        assert consult(inverted, 600) == -consult(plain, 600)

    @pytest.mark.parametrize("window", [0, -60, True, 1.5, "60"])
    def test_rejects_bad_window(self, oracle, window):
        with pytest.raises(ValueError):
            consult(oracle, window)

    def test_stale_feed_propagates(self, feed, clock, make_adapter):
        feed.update_price(ETH_USD, 361296500000, -8, publish_time=clock.now - 3600)
        with pytest.raises(StaleFeedError):
            consult(make_adapter(), 1800)


def test_consult_price(oracle):
    price = consult_price(oracle, 1800)
    assert price == pytest.approx(3612.965, rel=2e-4)
