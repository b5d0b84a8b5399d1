"""CLI entry point for cors-relay."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from ui.dashboard import Dashboard
from ui.log_utils import FileLogger, clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()
    headless = False

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--headless":
            headless = True
        else:
            console.print(f"[red][ERROR][/red] Unknown option: {arg}")
            _print_help()
            sys.exit(2)

    # Clear previous logs
    clear_logs()

    import uvicorn

    dashboard = None if headless else Dashboard(config)
    app = create_app(config, dashboard or FileLogger(write_requests=config.proxy.debug))

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="info" if headless else "warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Relay started", port=config.proxy.port, headers=config.headers.mode)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Relay stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]CORS Relay[/bold cyan]

Forwards requests to any URL and returns the response with CORS headers.

[bold]Usage:[/bold]
    cors-relay                 Start with live dashboard
    cors-relay --headless      Start without the dashboard (plain uvicorn logs)
    cors-relay --config        Show config location
    cors-relay --help          Show this help

[bold]Requests:[/bold]
    GET /?target=api.example.com/data
    Targets without a scheme are fetched over https.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
