"""Real-time CLI dashboard for relay monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log, write_request_log

console = Console()


class RequestInfo:
    """Info about a single relayed request."""

    def __init__(self, method: str, target: str, timestamp: datetime):
        self.method = method
        self.target = target
        self.status: int | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent relayed requests."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[RequestInfo] = []
        self._max_recent = 10
        self._counts = {"relayed": 0, "preflight": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_request(
        self,
        method: str,
        target: str,
        headers: dict[str, str],
        *,
        mode: str,
    ) -> None:
        """Log an outbound request before it is sent."""
        with self._lock:
            self._counts["relayed"] += 1
            self._recent.insert(0, RequestInfo(method, target, datetime.now()))
            self._recent = self._recent[: self._max_recent]
            self._refresh()

            if self.config.proxy.debug:
                write_request_log(method, target, headers, mode=mode)
            write_cli_log("REQUEST", target, method=method, mode=mode)

    def log_response(self, method: str, target: str, status: int) -> None:
        """Record the upstream status for the matching recent request."""
        with self._lock:
            for info in self._recent:
                if info.status is None and info.method == method and info.target == target:
                    info.status = status
                    break
            self._refresh()
            write_cli_log("RESPONSE", target, method=method, status=status)

    def log_preflight(self, full: bool) -> None:
        with self._lock:
            self._counts["preflight"] += 1
            self._refresh()
        write_cli_log("OPTIONS", "preflight" if full else "bare")

    def log_error(self, kind: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._counts["errors"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{kind} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], kind=kind, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("CORS Relay", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Relayed: {self._counts['relayed']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Preflight: {self._counts['preflight']}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Errors: {self._counts['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Headers: {self.config.headers.mode}", style="dim")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Status", width=6)
            table.add_column("Target", ratio=1)

            for info in self._recent:
                if info.status is None:
                    status = Text("...", style="dim")
                else:
                    status = Text(str(info.status), style="green" if info.status < 400 else "yellow")
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.method,
                    status,
                    info.target[:70] + "..." if len(info.target) > 70 else info.target,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent Requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"fetch('http://{self.config.proxy.host}:{self.config.proxy.port}/?target=' + encodeURIComponent(url))",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
