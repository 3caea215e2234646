"""CLI entry point for proxy-browser."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()

    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        console.print(f"[red][ERROR][/red] Unknown argument: {arg}")
        _print_help()
        sys.exit(2)

    if config.fetch.timeout <= 0:
        console.print("[red][ERROR][/red] fetch.timeout must be positive")
        console.print(f"[dim]Edit {CONFIG_FILE}[/dim]")
        sys.exit(1)

    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", host=config.proxy.host, port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Proxy Browser[/bold cyan]

Fetches remote pages and rewrites their links so browsing stays on the proxy.

[bold]Usage:[/bold]
    proxy-browser              Start with live dashboard
    proxy-browser --config     Show config and log locations
    proxy-browser --help       Show this help

[bold]Endpoint:[/bold]
    GET|POST /api/proxy/browse?url=<url-encoded target>
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
