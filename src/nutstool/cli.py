import functools
import logging
import os

import click

from . import __version__
from .constants import CIPHERS, DEFAULT_CIPHER, DEFAULT_KDF_ITERATIONS, MIN_KDF_ITERATIONS
from .core import NutsTool
from .errors import NutsError, error_chain
from .logging_setup import LoggingConfig, configure_logging
from .services.config_loader import ConfigLoader, default_config_path
from .services.tool_home import ToolHomeService

VERBOSITY_KEY = "nutstool.verbosity"


def _count_verbose(ctx, _param, value):
    root = ctx.find_root()
    root.meta[VERBOSITY_KEY] = root.meta.get(VERBOSITY_KEY, 0) + (value or 0)
    return value


verbose_option = click.option(
    "-v",
    "--verbose",
    count=True,
    expose_value=False,
    callback=_count_verbose,
    help="Enable verbose output. Can be given multiple times.",
)


def _bootstrap(ctx) -> NutsTool:
    root = ctx.find_root()
    settings = root.obj or {}
    logger = logging.getLogger("nutstool")

    config_path = settings.get("config") or default_config_path(ToolHomeService(logger))
    config_values = ConfigLoader().load(config_path)

    # -v on the command line wins over the configured verbosity
    verbosity = root.meta.get(VERBOSITY_KEY) or config_values.get("verbose", 0)
    configure_logging(LoggingConfig(verbosity=verbosity, log_file=config_values.get("log_file")))
    if config_path:
        logger.debug("config: %s", config_path)

    return NutsTool(
        cipher=config_values.get("cipher", DEFAULT_CIPHER),
        kdf_iterations=config_values.get("kdf_iterations", DEFAULT_KDF_ITERATIONS),
    )


def pass_tool(func):
    """Configures logging once, then runs *func* with a ready :class:`NutsTool`."""

    @click.pass_context
    def wrapper(ctx, *args, **kwargs):
        try:
            tool = _bootstrap(ctx)
            return ctx.invoke(func, tool, *args, **kwargs)
        except NutsError as exc:
            raise click.ClickException(error_chain(exc)) from exc

    return functools.update_wrapper(wrapper, func)


@click.group()
@click.version_option(__version__, prog_name="nuts")
@click.option(
    "--config",
    required=False,
    type=click.Path(dir_okay=False),
    help="Path to a YAML configuration file. Defaults to ~/.nuts/config.yml if present.",
)
@verbose_option
@click.pass_context
def main(ctx, config):
    """Manage encrypted nuts containers and the archives stored in them."""
    ctx.obj = {"config": config}


@main.group()
@verbose_option
def container():
    """General container tasks"""


@container.command("create")
@click.argument("name")
@click.option("--cipher", type=click.Choice(CIPHERS), default=None, help="Cipher of the new container.")
@click.option(
    "--kdf-iterations",
    type=click.IntRange(min=MIN_KDF_ITERATIONS),
    default=None,
    help="PBKDF2 iterations used to derive the key from the password.",
)
@verbose_option
@pass_tool
def container_create(tool, name, cipher, kdf_iterations):
    """Create a new container."""
    tool.create_container(name, cipher=cipher, kdf_iterations=kdf_iterations)
    click.echo(f"Container '{name}' created.")


@container.command("list")
@verbose_option
@pass_tool
def container_list(tool):
    """List all containers."""
    for name in tool.list_containers():
        click.echo(name)


@container.command("info")
@click.argument("name")
@verbose_option
@pass_tool
def container_info(tool, name):
    """Print information about a container."""
    info = tool.container_info(name)
    click.echo(f"name:           {info.name}")
    click.echo(f"path:           {info.path}")
    click.echo(f"revision:       {info.revision}")
    click.echo(f"cipher:         {info.cipher}")
    click.echo(f"kdf:            {info.kdf}")
    if info.kdf_iterations:
        click.echo(f"kdf iterations: {info.kdf_iterations}")
    click.echo(f"created:        {info.created_at}")
    click.echo(f"blocks:         {info.blocks}")


@container.command("delete")
@click.argument("name")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@verbose_option
@pass_tool
def container_delete(tool, name, yes):
    """Delete a container and everything stored in it."""
    if not yes:
        click.confirm(f"Delete container '{name}' and all of its data?", abort=True)
    tool.delete_container(name)
    click.echo(f"Container '{name}' deleted.")


@main.group()
@verbose_option
def archive():
    """An archive on top of the container"""


@archive.command("create")
@click.argument("container_name", metavar="NAME")
@verbose_option
@pass_tool
def archive_create(tool, container_name):
    """Create an empty archive in a container."""
    tool.create_archive(container_name)
    click.echo(f"Archive created in container '{container_name}'.")


@archive.command("add")
@click.argument("container_name", metavar="NAME")
@click.argument("source", type=click.File("rb"))
@click.option("--name", "entry_name", default=None, help="Entry name. Defaults to the file name.")
@verbose_option
@pass_tool
def archive_add(tool, container_name, source, entry_name):
    """Add a file to the archive."""
    if entry_name is None:
        if source.name == "<stdin>":
            raise click.UsageError("--name is required when reading from stdin.")
        entry_name = os.path.basename(source.name)

    entry = tool.add_archive_entry(container_name, entry_name, source.read())
    click.echo(f"Added {entry.name} ({entry.size} bytes).")


@archive.command("list")
@click.argument("container_name", metavar="NAME")
@verbose_option
@pass_tool
def archive_list(tool, container_name):
    """List the entries of the archive."""
    for entry in tool.list_archive(container_name):
        click.echo(f"{entry.size:>10}  {entry.created_at}  {entry.name}")


@archive.command("get")
@click.argument("container_name", metavar="NAME")
@click.argument("entry_name", metavar="ENTRY")
@click.option("--output", type=click.File("wb"), default="-", help="Output file. Defaults to stdout.")
@verbose_option
@pass_tool
def archive_get(tool, container_name, entry_name, output):
    """Write the content of an archive entry."""
    output.write(tool.get_archive_entry(container_name, entry_name))


@archive.command("info")
@click.argument("container_name", metavar="NAME")
@verbose_option
@pass_tool
def archive_info(tool, container_name):
    """Print information about the archive."""
    info = tool.archive_info(container_name)
    click.echo(f"entries:    {info['entries']}")
    click.echo(f"total size: {info['total_size']}")


if __name__ == "__main__":
    main()
