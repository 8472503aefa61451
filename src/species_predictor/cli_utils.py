"""CLI utility functions and helpers."""

import click

# Global flag for quiet mode
_quiet_mode = False

RULE = "-" * 43


def set_quiet_mode(quiet: bool) -> None:
    """Set the global quiet mode flag."""
    global _quiet_mode
    _quiet_mode = quiet


def echo(message: str = "", err: bool = False, **kwargs) -> None:
    """Echo wrapper that respects quiet mode."""
    if _quiet_mode and not err:
        return
    click.echo(message, err=err, **kwargs)


def print_prediction(name: str) -> None:
    """Print the predicted species; in quiet mode only the name itself."""
    if _quiet_mode:
        click.echo(name)
        return
    click.echo(RULE)
    click.echo("Final Predicted Species (Top Hit):")
    click.echo(name)
    click.echo(RULE)
