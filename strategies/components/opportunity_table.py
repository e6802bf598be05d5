"""
Rich rendering of ranked opportunities, tracked positions and account status.
"""

from typing import Iterable, List, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from exchange_clients.base_models import Position

from .models import MarketSnapshot, Opportunity, TrackedPosition


_console = Console()


def _direction(direction: str) -> Text:
    if direction == "long":
        return Text("LONG", style="bold green")
    return Text("SHORT", style="bold red")


def _fmt(value: Optional[float], suffix: str = "", digits: int = 2) -> str:
    if value is None:
        return "n/a"
    return f"{value:.{digits}f}{suffix}"


def build_opportunity_table(title: str, opportunities: Sequence[Opportunity], limit: int = 10) -> Table:
    table = Table(title=f"[bold cyan]{title}[/bold cyan]", show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Asset", style="cyan", no_wrap=True)
    table.add_column("Side")
    table.add_column("Score", justify="right", style="yellow")
    table.add_column("Funding", justify="right")
    table.add_column("Leverage", justify="right")

    if not opportunities:
        table.add_row("", "[dim]No opportunities[/dim]", "", "", "", "")
        return table

    for rank, opportunity in enumerate(opportunities[:limit], start=1):
        table.add_row(
            str(rank),
            opportunity.display or opportunity.denom,
            _direction(opportunity.direction),
            _fmt(opportunity.score, digits=4),
            _fmt(opportunity.funding_rate, "%"),
            f"{opportunity.leverage}x" if opportunity.leverage is not None else "-",
        )
    return table


def build_positions_table(title: str, positions: Iterable[TrackedPosition], pnl: Optional[dict] = None) -> Table:
    table = Table(title=f"[bold cyan]{title}[/bold cyan]", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Legs")
    table.add_column("Leverage", justify="right")
    table.add_column("PnL", justify="right")
    table.add_column("Age", justify="right")

    rows: List[TrackedPosition] = list(positions)
    if not rows:
        table.add_row("", "[dim]No tracked positions[/dim]", "", "", "")
        return table

    pnl = pnl or {}
    for position in rows:
        legs = ", ".join(
            f"{'L' if asset.long else 'S'} {asset.denom} {asset.percent}" for asset in position.assets
        )
        value = pnl.get(position.id)
        pnl_text = Text("n/a", style="dim") if value is None else Text(
            f"{value * 100:+.2f}%", style="bold green" if value >= 0 else "bold red"
        )
        table.add_row(position.id, legs, f"{position.leverage or '-'}x", pnl_text, f"{position.hold_hours():.1f}h")
    return table


def print_table(table: Table) -> None:
    _console.print(table)


def build_markets_table(snapshot: MarketSnapshot) -> Table:
    """Price, max leverage and funding per enabled market."""
    table = Table(title="[bold cyan]Markets[/bold cyan]", show_header=True, header_style="bold magenta")
    table.add_column("Asset", style="cyan", no_wrap=True)
    table.add_column("Denom", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Max Lev", justify="right")
    table.add_column("Funding", justify="right")
    table.add_column("Long OI", justify="right")
    table.add_column("Short OI", justify="right")

    for market in snapshot.markets:
        funding = snapshot.funding(market.denom)
        max_leverage = snapshot.max_leverage(market.denom)
        table.add_row(
            market.display,
            market.denom,
            _fmt(snapshot.price(market.denom), digits=6),
            f"{max_leverage}x" if max_leverage is not None else "-",
            _fmt(funding.funding_rate if funding else None, "%"),
            _fmt(funding.long_oi if funding else None),
            _fmt(funding.short_oi if funding else None),
        )
    return table


def build_account_table(address: str, balance, positions: Sequence[Position]) -> Table:
    """Wallet address, USDC balance and open on-chain positions."""
    table = Table(title="[bold cyan]Account[/bold cyan]", show_header=True, header_style="bold magenta")
    table.add_column("Position", style="cyan", no_wrap=True)
    table.add_column("Legs")
    table.add_column("Leverage", justify="right")
    table.add_column("PnL", justify="right")
    table.caption = f"{address} | {balance} USDC"

    if not positions:
        table.add_row("", "[dim]No open positions[/dim]", "", "")
        return table

    for position in positions:
        legs = ", ".join(
            f"{'L' if asset.long else 'S'} {asset.denom} {asset.percent}" for asset in position.assets
        )
        table.add_row(
            position.id,
            legs,
            f"{position.leverage}x" if position.leverage is not None else "-",
            _fmt(position.pnl_percent, "%"),
        )
    return table
