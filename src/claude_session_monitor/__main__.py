"""Entry point for `python -m claude_session_monitor`."""

import logging
import sys
from pathlib import Path

import click


@click.command()
@click.option("--path", "-p", type=click.Path(path_type=Path), default=None,
              help="Path to the Claude projects directory.")
@click.option("--once", is_flag=True, help="Print the session list and exit.")
@click.option("--active-only", is_flag=True, help="Only show recently written sessions.")
@click.option("--filter", "filter_text", default=None, help="Initial filter text.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
def main(path: Path | None, once: bool, active_only: bool, filter_text: str | None, debug: bool):
    """Monitor Claude Code session logs as they are written."""
    from claude_session_monitor.app import configure_application_identity, run
    from claude_session_monitor.services.config_manager import ConfigManager

    configure_application_identity()
    config = ConfigManager()
    debug = debug or config.get_bool("advanced/debugLogging")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    root = path or config.session_dir()
    if not root.exists():
        click.echo(f"Claude projects directory not found: {root}", err=True)
        click.echo("Make sure Claude Code is installed and has been used at least once.", err=True)
        sys.exit(1)

    try:
        ret = run(
            root,
            config.monitor_config(),
            active_only=active_only,
            filter_text=filter_text,
            once=once,
        )
    except OSError as e:
        click.echo(f"Failed to read {root}: {e}", err=True)
        sys.exit(1)
    sys.exit(ret)


if __name__ == "__main__":
    main()
