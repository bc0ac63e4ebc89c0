"""
Rich console output for NetCheck - with real-time step printing
"""

from typing import Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box

from .. import __version__
from ..models import (
    DiagnosticReport,
    IssueSeverity,
    OverallStatus,
    PathTraceOutcome,
    ResolutionOutcome,
    StabilityOutcome,
    StepStatus,
    TransportOutcome,
)


# Step status styling
STATUS_STYLES = {
    StepStatus.PENDING: ('·', 'dim'),
    StepStatus.RUNNING: ('…', 'cyan'),
    StepStatus.SUCCESS: ('✓', 'green'),
    StepStatus.WARNING: ('!', 'yellow'),
    StepStatus.ERROR: ('✗', 'red'),
}

SEVERITY_STYLES = {
    IssueSeverity.INFO: 'blue',
    IssueSeverity.WARNING: 'yellow',
    IssueSeverity.ERROR: 'red',
}

OVERALL_STYLES = {
    OverallStatus.EXCELLENT: ('EXCELLENT', 'bold green', "No issues detected. Network connection is optimal."),
    OverallStatus.GOOD: ('GOOD', 'green', "Minor observations only. Connection is stable."),
    OverallStatus.ACCEPTABLE: ('ACCEPTABLE', 'yellow', "Some areas need attention but connection works."),
    OverallStatus.POOR: ('POOR', 'red', "Significant issues detected. Performance is degraded."),
    OverallStatus.FAILED: ('FAILED', 'bold red', "Critical problems require immediate action."),
}


class ConsoleOutput:
    """
    Rich console output for diagnostic runs.
    
    Features:
    - Real-time step transitions (usable as a progress sink)
    - Per-probe measurement tables
    - Issues and recommendations summary
    """
    
    def __init__(self, console: Optional[Console] = None, show_pending: bool = False):
        self.console = console or Console()
        self.show_pending = show_pending
    
    def print_header(self, target: str):
        """Print run header"""
        content = Text()
        content.append("NetCheck", style="bold cyan")
        content.append(f" v{__version__}\n", style="dim")
        content.append("Target: ", style="dim")
        content.append(target, style="bold")
        
        self.console.print(Panel(content, border_style="cyan", padding=(0, 1)))
        self.console.print()
    
    def notify(self, step: str, status: StepStatus, message: str) -> None:
        """Print a step transition as it happens"""
        if status == StepStatus.PENDING and not self.show_pending:
            return
        
        icon, style = STATUS_STYLES[status]
        line = Text()
        line.append(f" {icon} ", style=style)
        line.append(f"{step:<15}", style="bold")
        line.append(message, style=style if status != StepStatus.RUNNING else "dim")
        self.console.print(line)
    
    def print_report(self, report: DiagnosticReport):
        """Print the complete report"""
        self.console.print()
        self.print_status(report)
        
        if report.resolution:
            self.print_resolution(report.resolution)
        if report.transport:
            self.print_transport(report.transport)
        if report.path:
            self.print_path(report.path)
        if report.stability:
            self.print_stability(report.stability)
        
        self.print_issues(report)
        self.print_recommendations(report)
    
    def print_status(self, report: DiagnosticReport):
        label, style, description = OVERALL_STYLES[report.status]
        
        content = Text()
        content.append("Overall Status: ", style="bold")
        content.append(label, style=style)
        content.append(f" - {description}\n", style="dim")
        content.append("Score: ", style="bold")
        content.append(f"{report.score}", style=style)
        content.append("  |  Issues: ", style="bold")
        content.append(str(len(report.issues)))
        content.append("  |  Generated: ", style="bold")
        content.append(report.timestamp, style="dim")
        
        self.console.print(Panel(
            content,
            title=Text(report.target, style="bold"),
            border_style=style.replace('bold ', ''),
            padding=(0, 1)
        ))
    
    def _table(self, title: str) -> Table:
        table = Table(
            title=title,
            title_justify="left",
            title_style="bold",
            show_header=False,
            box=box.SIMPLE,
            padding=(0, 1)
        )
        table.add_column("Field", style="dim", width=20)
        table.add_column("Value")
        return table
    
    def print_resolution(self, resolution: ResolutionOutcome):
        table = self._table("DNS Resolution")
        table.add_row("Domain", resolution.target)
        table.add_row("Addresses", ", ".join(resolution.addresses) or "-")
        table.add_row("Lookup time", f"{resolution.lookup_ms:.0f} ms")
        table.add_row("TTL", f"{resolution.ttl} s" if resolution.ttl is not None else "-")
        table.add_row("Name servers", ", ".join(resolution.nameservers or ()) or "-")
        table.add_row("CDN", resolution.cdn or "-")
        self.console.print(table)
    
    def print_transport(self, transport: TransportOutcome):
        table = self._table("Connection Timing")
        table.add_row("Name lookup", f"{transport.lookup_ms:.0f} ms")
        table.add_row("TCP connect", f"{transport.connect_only_ms:.0f} ms")
        table.add_row("TLS handshake", f"{max(transport.secure_channel_only_ms, 0):.0f} ms")
        table.add_row("First byte", f"{transport.first_byte_ms:.0f} ms")
        table.add_row("Total", f"{transport.total_ms:.0f} ms")
        table.add_row("HTTP status", str(transport.response_code or "no response"))
        table.add_row("Throughput", f"{transport.throughput_kbps:.0f} kbps")
        self.console.print(table)
    
    def print_path(self, path: PathTraceOutcome):
        table = Table(
            title=f"Route to {path.target_address or '-'} ({path.total_hops} hops)",
            title_justify="left",
            title_style="bold",
            header_style="bold magenta",
            box=box.SIMPLE,
            padding=(0, 1)
        )
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("Address", width=16)
        table.add_column("Name", overflow="ellipsis")
        table.add_column("RTT", justify="right")
        
        for hop in path.hops:
            if hop.responded:
                table.add_row(str(hop.index), hop.address, hop.hostname or "-", f"{hop.rtt_ms:.1f} ms")
            else:
                table.add_row(str(hop.index), Text("*", style="yellow"), "-", "-")
        
        self.console.print(table)
    
    def print_stability(self, stability: StabilityOutcome):
        table = self._table("Stability")
        table.add_row("Requests", f"{stability.successful}/{stability.sample_count}")
        table.add_row("Success rate", f"{stability.success_rate:.0f}%")
        table.add_row("Min / avg / max", (
            f"{stability.min_ms:.0f} / {stability.avg_ms:.0f} / {stability.max_ms:.0f} ms"
        ))
        table.add_row("Jitter", f"{stability.jitter_ms:.0f} ms")
        self.console.print(table)
    
    def print_issues(self, report: DiagnosticReport):
        if not report.issues:
            return
        
        self.console.print(Text("Issues", style="bold"))
        for issue in report.issues:
            style = SEVERITY_STYLES[issue.severity]
            line = Text()
            line.append(f" [{issue.severity.value.upper()}] ", style=style)
            line.append(issue.title, style="bold")
            line.append(f" - {issue.description}", style="dim")
            self.console.print(line)
            
            for cause in issue.causes:
                self.console.print(f"     [dim]cause:[/] {cause}")
            for solution in issue.solutions:
                self.console.print(f"     [dim]try:[/]   {solution}")
        self.console.print()
    
    def print_recommendations(self, report: DiagnosticReport):
        if not report.recommendations:
            return
        
        self.console.print(Text("Recommendations", style="bold"))
        for recommendation in report.recommendations:
            self.console.print(f" -> {recommendation}")
    
    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[bold red]Error:[/] {message}")
