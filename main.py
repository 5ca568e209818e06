#!/usr/bin/env python3
import uvicorn
from rich.panel import Panel

from common.containers import container
from common.errors import DirectoryAccessError
from common.utils import console, logger


def display_banner() -> None:
    """Display the startup banner"""
    host = container.config.host()
    port = container.config.port()
    watch_dir = f"{container.config.base_dir()}/{container.config.watch_folder()}"

    welcome_panel = Panel(
        "\n[bold cyan]FOLDER WATCH SERVER[/bold cyan]\n\n"
        + f"[green]Local file server running at http://{host}:{port}[/green]\n"
        + f"[green]Monitoring folder: {watch_dir}[/green]\n",
        border_style="bright_blue",
        title="Welcome",
        title_align="center",
        width=80,
    )

    console.print(welcome_panel, justify="center")
    console.print("\nPlace image files in this folder to see them in your app\n")


def main() -> None:
    """Main function"""
    try:
        app = container.watch_server_app()
    except DirectoryAccessError as e:
        logger.error(f"Refusing to start: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from e

    display_banner()
    uvicorn.run(
        app,
        host=container.config.host(),
        port=container.config.port(),
        log_level="warning",
    )


if __name__ == "__main__":
    main()
