"""
Rich console output for CableLens
"""

from typing import Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box

from .. import __version__
from ..geodesy import format_distance, format_time
from ..models import Hop, TraceResult, ROUTE_SEA


class ConsoleOutput:
    """
    Rich console output for trace results.

    Features:
    - Hop table with location, ownership and route type
    - Summary panel with distances, latency and CDN verdict
    - Table of submarine cables on the path
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_header(self, target: str, method: Optional[str] = None):
        """Print trace header"""
        content = Text()
        content.append("CableLens", style="bold cyan")
        content.append(f" v{__version__}\n", style="dim")
        content.append("Target: ", style="dim")
        content.append(target, style="bold")
        if method:
            content.append(f"\nMethod: {method}", style="dim")

        self.console.print(Panel(content, border_style="cyan", padding=(0, 1)))
        self.console.print()

    def print_results(self, result: TraceResult):
        """Print the hop table"""
        cable_names = {cable.id: cable.name for cable in result.cables}

        table = Table(
            show_header=True,
            header_style="bold magenta",
            box=box.ROUNDED,
            border_style="dim",
            padding=(0, 1)
        )

        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("IP", width=16)
        table.add_column("RTT", width=10, justify="right")
        table.add_column("Loss", width=6, justify="right")
        table.add_column("Location", width=22)
        table.add_column("ASN", width=9)
        table.add_column("Organization", width=28, overflow="ellipsis")
        table.add_column("Route", width=6)
        table.add_column("Next", width=9, justify="right")
        table.add_column("Cable", overflow="ellipsis")

        for hop in result.hops:
            route = Text(hop.route_type, style="blue" if hop.route_type == ROUTE_SEA else "green")
            table.add_row(
                str(hop.hop),
                hop.ip or "*",
                self._format_rtt(hop),
                f"{hop.loss:.0f}%",
                self._format_location(hop),
                hop.asn or "-",
                hop.org or "-",
                route,
                f"{hop.distance_to_next} km" if hop.distance_to_next is not None else "-",
                cable_names.get(hop.cable_used, hop.cable_used or "")
            )

        header = Text()
        header.append("Route to ", style="dim")
        header.append(result.target, style="bold")
        header.append(f" ({result.target_ip})", style="dim")

        self.console.print(Panel(table, title=header, border_style="blue", padding=(0, 0)))

    def print_summary(self, result: TraceResult):
        """Print summary panel"""
        distances = result.distances
        content = Text()

        content.append("Hops: ", style="bold")
        content.append(f"{result.total_hops}\n", style="dim")

        content.append("Distance: ", style="bold")
        content.append(format_distance(distances.total), style="dim")
        content.append(
            f"  (land {distances.land} km, sea {distances.sea} km)\n", style="dim"
        )

        content.append("Round trip: ", style="bold")
        if result.total_time:
            content.append(format_time(result.total_time), style="dim")
        else:
            content.append("no RTT data", style="yellow")

        content.append("\nCDN: ", style="bold")
        if result.cdn.detected:
            content.append(f"{result.cdn.provider}", style="green")
            content.append(f" at hop {result.cdn.hop}", style="dim")
        else:
            content.append("not detected", style="dim")

        content.append("\nSubmarine cables: ", style="bold")
        content.append(str(len(result.cables)), style="dim")

        panel = Panel(
            content,
            title=Text("Summary", style="bold"),
            border_style="green",
            padding=(0, 1)
        )
        self.console.print()
        self.console.print(panel)

    def print_cables(self, result: TraceResult):
        """Print submarine cables found on the path"""
        if not result.cables:
            return

        table = Table(show_header=True, header_style="bold magenta", box=box.SIMPLE)
        table.add_column("Cable", style="bold")
        table.add_column("From")
        table.add_column("To")
        table.add_column("Hops", justify="center")
        table.add_column("Span", justify="right")
        table.add_column("Length", justify="right")
        table.add_column("RFS", justify="right")
        table.add_column("Owners", overflow="ellipsis", max_width=40)

        for cable in result.cables:
            table.add_row(
                cable.name,
                _endpoint(cable.from_city, cable.from_country, cable.from_landing),
                _endpoint(cable.to_city, cable.to_country, cable.to_landing),
                cable.hop_range,
                f"{cable.distance} km",
                cable.length,
                cable.rfs,
                cable.owners
            )

        self.console.print(table)

    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[bold red]Error:[/] {message}")

    def print_warning(self, message: str):
        """Print warning message"""
        self.console.print(f"[yellow]Warning:[/] {message}")

    def _format_rtt(self, hop: Hop) -> str:
        if hop.timeout or hop.rtt is None:
            return "*"
        return f"{hop.rtt:.1f} ms"

    def _format_location(self, hop: Hop) -> str:
        if not hop.city and not hop.country:
            return "-"
        if hop.country_code and hop.city and hop.city != 'Unknown':
            return f"{hop.city}, {hop.country_code}"
        return hop.city or hop.country


def _endpoint(city: Optional[str], country: Optional[str], landing: Optional[str]) -> Text:
    text = Text(f"{city}, {country}")
    if landing:
        text.append(f"\n{landing}", style="dim")
    return text
