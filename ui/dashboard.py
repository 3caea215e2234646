"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log

console = Console()

KIND_STYLES = {"html": "cyan", "text": "green", "binary": "magenta"}


class FetchInfo:
    """Info about a single proxied fetch."""

    def __init__(
        self,
        method: str,
        url: str,
        status: int,
        kind: str,
        upstream_status: int | None,
        timestamp: datetime,
    ):
        self.method = method
        self.url = url[:80] + "..." if len(url) > 80 else url
        self.status = status
        self.kind = kind
        self.upstream_status = upstream_status
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent fetches and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._fetches: list[FetchInfo] = []
        self._max_fetches = 10
        self._request_count = {"html": 0, "text": 0, "binary": 0, "error": 0}
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

    def log_fetch(
        self,
        method: str,
        url: str,
        status: int,
        *,
        kind: str,
        upstream_status: int | None = None,
    ) -> None:
        """Log a target that was fetched and served."""
        with self._lock:
            self._request_count[kind] = self._request_count.get(kind, 0) + 1
            info = FetchInfo(
                method=method,
                url=url,
                status=status,
                kind=kind,
                upstream_status=upstream_status,
                timestamp=datetime.now(),
            )
            self._fetches.insert(0, info)
            self._fetches = self._fetches[: self._max_fetches]

            write_cli_log(
                "FETCH", url[:200], method=method, kind=kind, upstream=upstream_status
            )
            self._refresh()

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._request_count["error"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

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
        layout["body"].update(self._build_fetches_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Proxy Browser", style="bold cyan")
        for kind, style in KIND_STYLES.items():
            stats.append("  |  ")
            stats.append(f"{kind}: {self._request_count[kind]}", style=style)
        stats.append("  |  ")
        stats.append(f"errors: {self._request_count['error']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_fetches_panel(self) -> Panel:
        """Build recent fetches panel."""
        if self._fetches:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=6)
            table.add_column("Kind", width=6)
            table.add_column("Upstream", width=8)
            table.add_column("URL", ratio=1)

            for fetch in self._fetches:
                upstream = str(fetch.upstream_status) if fetch.upstream_status else "-"
                table.add_row(
                    fetch.timestamp.strftime("%H:%M:%S"),
                    fetch.method,
                    Text(fetch.kind, style=KIND_STYLES.get(fetch.kind, "")),
                    upstream,
                    fetch.url,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[cyan]Recent fetches[/cyan]", border_style="cyan")

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
                f"Open http://{self.config.proxy.host}:{self.config.proxy.port}"
                "/api/proxy/browse?url=<encoded url> to browse",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
