"""Terminal presentation for DailyStat rows, rendered with rich."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from stockstat.models.stat import FIELD_LABELS, DailyStat

# |change| at or above this many percent gets highlighted
CHANGE_ALERT = 3.0


def format_float(value: float) -> str:
    return f"{value:.2f}"


def change_glyph(chg: float) -> str:
    if chg > CHANGE_ALERT:
        return "✨"
    if chg > 0:
        return "↑"
    if chg == 0:
        return "⁃"
    if chg < -CHANGE_ALERT:
        return "⚡"
    return "↓"


def format_change(chg: float) -> Text:
    """Percent change with a direction glyph; big moves are colored."""
    style = ""
    if chg >= CHANGE_ALERT:
        style = "red"
    elif chg <= -CHANGE_ALERT:
        style = "green"
    return Text(f"{format_float(chg)} {change_glyph(chg)}", style=style)


def name_style(stat: DailyStat) -> str:
    """Color the name by the longest moving average trading above price."""
    if stat.avg200 > stat.now:
        return "bright_green"
    if stat.avg60 > stat.now:
        return "green"
    if stat.avg20 > stat.now:
        return "blue"
    return ""


def header() -> list[str]:
    return list(FIELD_LABELS.values())


def stat_row(stat: DailyStat) -> list[Text]:
    return [
        Text(stat.name, style=name_style(stat)),
        Text(format_float(stat.now)),
        format_change(stat.chg_today),
        Text(format_float(stat.last)),
        format_change(stat.chg_last),
        Text(format_float(stat.chg_month)),
        Text(format_float(stat.chg_last_month)),
        Text(format_float(stat.chg_year)),
        Text(format_float(stat.avg20)),
        Text(format_float(stat.avg60)),
        Text(format_float(stat.avg200)),
        Text(format_float(stat.chg20)),
        Text(format_float(stat.chg60)),
        Text(format_float(stat.chg90)),
        Text(stat.code),
    ]


def build_table(stats: list[DailyStat]) -> Table:
    table = Table(show_header=True, header_style="bold")
    for label in header():
        table.add_column(label, justify="left" if label in ("name", "code") else "right")
    for stat in stats:
        table.add_row(*stat_row(stat))
    return table


def render_table(stats: list[DailyStat], console: Console | None = None) -> None:
    (console or Console()).print(build_table(stats))
