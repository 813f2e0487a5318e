"""Configuration commands.

Show, locate, and initialize the ignorectl configuration file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer
from rich.markup import escape

from ignorectl.core.config import IgnorectlConfig, config_to_dict, get_effective_config, save_config
from ignorectl.core.errors import ConfigError
from ignorectl.core.paths import get_config_path
from ignorectl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and initialize configuration.",
    no_args_is_help=True,
)

ConfigPathOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Configuration file to use instead of the default.",
    ),
]


@app.command()
def show(config_path: ConfigPathOption = None) -> None:
    """Show the effective configuration as TOML."""
    try:
        config = get_effective_config(config_path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    console.print(escape(tomli_w.dumps(config_to_dict(config))), end="")


@app.command()
def path(config_path: ConfigPathOption = None) -> None:
    """Print the configuration file path."""
    console.print(str(config_path or get_config_path()), highlight=False, soft_wrap=True)


@app.command()
def init(
    config_path: ConfigPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing configuration file."),
    ] = False,
) -> None:
    """Write a configuration file with default values."""
    target = config_path or get_config_path()
    if target.exists() and not force:
        print_info(f"Config already exists: {target} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        saved = save_config(IgnorectlConfig(), target)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
