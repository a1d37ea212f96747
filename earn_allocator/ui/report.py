"""Terminal rendering of run reports."""

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from earn_allocator.engine import RunOutcome, RunReport

OUTCOME_STYLES = {
    RunOutcome.EXECUTED: "bold green",
    RunOutcome.NOOP: "yellow",
    RunOutcome.REJECTED: "yellow",
}


def _amount(value: int, decimals: int) -> str:
    return f"{value / 10**decimals:,.4f}"


def build_allocation_table(report: RunReport) -> Table:
    """Per-vault old/new amounts with the expected yield after the run."""
    decimals = report.vault.asset_decimals
    table = Table(title="Allocation", expand=True)
    table.add_column("Vault")
    table.add_column("Current", justify="right")
    table.add_column("Final", justify="right")
    table.add_column("Diff", justify="right")
    table.add_column("APY", justify="right")
    table.add_column("Util", justify="right")

    for address, entry in report.allocation.items():
        strategy = report.vault.strategies.get(address)
        name = strategy.details.symbol if strategy else address[:10]
        if address == report.vault.idle_vault_address:
            name = f"{name} (idle)"
        detail = report.final_returns_details.get(address)

        diff_style = "green" if entry.diff > 0 else "red" if entry.diff < 0 else "dim"
        table.add_row(
            name,
            _amount(entry.old_amount, decimals),
            _amount(entry.new_amount, decimals),
            Text(_amount(entry.diff, decimals), style=diff_style),
            f"{detail.total_apy:.2f}%" if detail else "-",
            f"{detail.utilization * 100:.1f}%" if detail else "-",
        )
    return table


def build_report_panel(report: RunReport) -> Panel:
    """Summary panel: outcome, returns and the allocation table."""
    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="dim")
    summary.add_column()
    summary.add_row("Mode", report.mode.value)
    summary.add_row("Outcome", Text(report.outcome.value, style=OUTCOME_STYLES[report.outcome]))
    if report.reason:
        summary.add_row("Reason", report.reason)
    summary.add_row("Returns", f"{report.current_returns:.4f}% -> {report.final_returns:.4f}%")
    if report.transferred is not None:
        summary.add_row("Transferred", _amount(report.transferred, report.vault.asset_decimals))
    if report.tx_hash:
        summary.add_row("Tx", report.tx_hash)

    grid = Table.grid()
    grid.add_row(summary)
    grid.add_row(build_allocation_table(report))
    return Panel(grid, title="Euler Earn Allocator", border_style="#ff8c00")
