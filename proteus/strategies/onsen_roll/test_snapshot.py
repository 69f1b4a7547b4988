import pytest

from proteus.core.models import PairState, TokenInfo
from proteus.strategies.onsen_roll.snapshot import (
    PositionSnapshotBuilder,
    compute_liquidity_share,
    render_snapshot,
)
from proteus.testing.fake_chain import (
    GOHM,
    GOHM_WETH_PAIR,
    OWNER,
    REWARDER,
    WETH,
    FakeOnsen,
)

_GOHM = TokenInfo(address=GOHM, symbol="gOHM", decimals=18)
_WETH = TokenInfo(address=WETH, symbol="WETH", decimals=18)


def _pair(total_supply: int, reserve0: int, reserve1: int) -> PairState:
    return PairState(
        address=GOHM_WETH_PAIR,
        total_supply=total_supply,
        token0=_GOHM.with_amount(reserve0),
        token1=_WETH.with_amount(reserve1),
    )


class TestComputeLiquidityShare:
    def test_half_the_supply(self):
        share0, share1 = compute_liquidity_share(50, _pair(100, 1000, 2000))
        assert (share0.amount, share1.amount) == (500, 1000)
        assert (share0.symbol, share1.symbol) == ("gOHM", "WETH")

    def test_whole_supply_is_whole_reserves(self):
        reserves = (123_456_789 * 10**18 + 7, 987_654_321 * 10**18 + 3)
        supply = 31_415_926_535 * 10**12
        share0, share1 = compute_liquidity_share(supply, _pair(supply, *reserves))
        assert (share0.amount, share1.amount) == reserves

    def test_nothing_staked(self):
        share0, share1 = compute_liquidity_share(0, _pair(100, 1000, 2000))
        assert share0.amount == share1.amount == 0

    def test_empty_pool(self):
        share0, share1 = compute_liquidity_share(0, _pair(0, 0, 0))
        assert share0.amount == share1.amount == 0


@pytest.mark.asyncio
class TestPositionSnapshotBuilder:
    @pytest.fixture
    def onsen(self):
        onsen = FakeOnsen()
        onsen.set_native(OWNER, 10**18)
        onsen.credit(GOHM, OWNER, 2 * 10**18)
        onsen.staked[OWNER] = 700 * 10**18
        onsen.pending_sushi[OWNER] = 3 * 10**18
        onsen.pending_reward[OWNER] = 25 * 10**16
        onsen.credit(GOHM, REWARDER, 40 * 10**18)
        return onsen

    async def test_build(self, onsen):
        snapshot = await PositionSnapshotBuilder(onsen.client, onsen.config).build()

        assert snapshot.owner == OWNER
        assert snapshot.native_balance.amount == 10**18
        assert [(b.symbol, b.amount) for b in snapshot.erc20_balances] == [
            ("SUSHI", 0),
            ("gOHM", 2 * 10**18),
        ]
        assert [(b.symbol, b.amount) for b in snapshot.liquidity_share] == [
            ("gOHM", 500 * 10**18),
            ("WETH", 1_000 * 10**18),
        ]
        assert [(b.symbol, b.amount) for b in snapshot.pending_rewards] == [
            ("gOHM", 25 * 10**16),
            ("SUSHI", 3 * 10**18),
        ]
        assert snapshot.rewarder_balance.symbol == "gOHM"
        assert snapshot.rewarder_balance.amount == 40 * 10**18

    async def test_build_submits_nothing(self, onsen):
        await PositionSnapshotBuilder(onsen.client, onsen.config).build()
        assert onsen.client.submits == []

    async def test_build_for_other_owner(self, onsen):
        other = "0x00000000000000000000000000000000000000bb"
        snapshot = await PositionSnapshotBuilder(onsen.client, onsen.config).build(
            other
        )
        assert snapshot.owner.lower() == other
        assert snapshot.native_balance.amount == 0
        assert all(b.amount == 0 for b in snapshot.liquidity_share)

    async def test_render(self, onsen):
        snapshot = await PositionSnapshotBuilder(onsen.client, onsen.config).build()
        assert render_snapshot(snapshot) == [
            "ETH 1.0",
            "SUSHI 0.0",
            "gOHM 2.0",
            "",
            "LIQUIDITY",
            "gOHM 500.0",
            "WETH 1000.0",
            "",
            "PENDING",
            "gOHM 0.25",
            "SUSHI 3.0",
            "",
            "REWARDER",
            "gOHM 40.0",
        ]
