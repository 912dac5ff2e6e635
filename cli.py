"""CLI entry point for iip-auth-proxy."""

import sys
from datetime import datetime

import httpx
from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--check":
            ok = check_upstream(config)
            sys.exit(0 if ok else 1)

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(config.model_dump_json(indent=2))
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    if not config.auth.enforce_auth:
        console.print("[yellow]Warning:[/yellow] authorization header check disabled (CHECK_HEADER=no)")

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log(
        "STARTUP",
        f"listening on {config.proxy.port}",
        upstream=config.upstream.base_url,
        enforce_auth=config.auth.enforce_auth,
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def check_upstream(config: Config) -> bool:
    """Probe the upstream base URL and report whether it answers."""
    base_url = config.upstream.base_url
    try:
        response = httpx.get(base_url, timeout=config.upstream.connect_timeout)
    except httpx.RequestError as e:
        console.print(f"[red]Upstream unreachable[/red] {base_url}: {e}")
        return False
    console.print(f"[green]Upstream reachable[/green] {base_url} (HTTP {response.status_code})")
    return True


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]IIP Auth Proxy[/bold cyan]

Rejects requests without an Authorization header, strips the first path
segment and forwards everything else to the upstream.

[bold]Usage:[/bold]
    iip-auth-proxy              Start with live dashboard
    iip-auth-proxy --check      Check the upstream answers
    iip-auth-proxy --config     Show config location and settings
    iip-auth-proxy --help       Show this help

[bold]Environment:[/bold]
    CHECK_HEADER=no             Skip the authorization header check
    UPSTREAM_BASE_URL=<url>     Upstream base address
    PROXY_PORT=<port>           Listening port (default 4010)
    IIP_AUTH_PROXY_CONFIG=<p>   Config file location
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
