"""Per-argument bonding-curve market.

Initialization splits a fixed liquidity between the two reserves so the
con side reflects the requested approval:

    con   = round_half_up(approval * LIQUIDITY / 100)
    pro   = LIQUIDITY - con
    const = pro * con
    vote  = LIQUIDITY

Trading is a fixed-product market maker over complete sets. A buyer pays
``amount`` tokens; a fee of FEE_PERCENT (floored) accrues to the market,
the net amount is added to both reserves, and the bought side is then
reduced until the product is back at ``const`` (rounded up, so the pool
never pays out more than the curve allows). The removed amount is the
buyer's shares. ``vote`` tracks the total net liquidity.

Buying pro shares removes pro from the pool, so the price of pro, and with
it the argument's approval, is ``con / (pro + con)``.

All arithmetic is integer; every replica computes identical reserves.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.exceptions import ValidationException
from .constants import DebateConstants
from .models import Market
from .validators import validate_initial_approval


def round_half_up_div(numerator: int, denominator: int) -> int:
    """Integer division rounding halves away from zero, for non-negative inputs."""
    return (2 * numerator + denominator) // (2 * denominator)


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def init_market(approval: int, liquidity: int = DebateConstants.MARKET_LIQUIDITY) -> Market:
    """Create the reserves of a new argument.

    Args:
        approval: Requested approval percentage in [50, 100]
        liquidity: Total initial reserve

    Returns:
        A fresh Market with zero fees

    Raises:
        InitialApprovalOutOfBounds: If approval is outside [50, 100]
    """
    validate_initial_approval(approval)

    con = round_half_up_div(approval * liquidity, 100)
    pro = liquidity - con
    return Market(pro=pro, con=con, const=pro * con, vote=liquidity, fees=0)


def approval(market: Market) -> int:
    """Current approval of the argument as a fixed-point fraction of PRECISION."""
    depth = market.pro + market.con
    if depth == 0:
        return 0
    return market.con * DebateConstants.PRECISION // depth


@dataclass
class TradeQuote:
    """Outcome of buying one side of a market."""

    amount: int
    fee: int
    net: int
    shares: int
    pro_after: int
    con_after: int
    const_after: int


def quote_buy(market: Market, amount: int, pro: bool) -> TradeQuote:
    """Price a purchase without touching the market.

    When ``const`` is zero the curve has collapsed to one reserve (approval
    of 100 at creation). The buyer then receives ``net`` shares, the bought
    side is left untouched, and the curve is re-established from the new
    reserves once both sides are positive.

    Args:
        market: Market to price against
        amount: Tokens offered, fee included
        pro: Buy pro shares if True, con shares otherwise

    Raises:
        ValidationException: If amount is not positive
    """
    if amount <= 0:
        raise ValidationException("Trade amount must be positive", "amount", amount)

    fee = amount * DebateConstants.FEE_PERCENT // 100
    net = amount - fee

    bought, other = (market.pro, market.con) if pro else (market.con, market.pro)

    if market.const == 0:
        shares = net
        bought_after = bought
        other_after = other + net
        const_after = bought_after * other_after
    else:
        other_after = other + net
        bought_after = ceil_div(market.const, other_after)
        shares = bought + net - bought_after
        const_after = market.const

    pro_after, con_after = (bought_after, other_after) if pro else (other_after, bought_after)

    return TradeQuote(
        amount=amount,
        fee=fee,
        net=net,
        shares=shares,
        pro_after=pro_after,
        con_after=con_after,
        const_after=const_after,
    )


def buy(market: Market, amount: int, pro: bool) -> TradeQuote:
    """Buy shares of one side, updating the reserves in place."""
    quote = quote_buy(market, amount, pro)

    market.pro = quote.pro_after
    market.con = quote.con_after
    market.const = quote.const_after
    market.vote += quote.net
    market.fees += quote.fee

    return quote


def collect_fees(market: Market) -> int:
    """Drain accumulated fees from the market and return them."""
    fees = market.fees
    market.fees = 0
    return fees
