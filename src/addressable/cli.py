__all__ = (
    "main",
)

import logging

import click
from amaranth.back import verilog

from . import config, export
from .exceptions import ConfigurationError
from .modules.peripheral import RegisterBank

logger = logging.getLogger(__name__)

def load_register_map(yaml_file):
    try:
        return config.build_register_map(config.load_config(yaml_file))
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

@click.group()
@click.option("-v", "--verbose",
              is_flag=True,
              help="Enable verbose logging")
def click_main(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

@click_main.command()
@click.argument("yaml-file",
                type=click.File("r"))
def show(yaml_file):
    """Print the allocated register map."""
    register_map, _ = load_register_map(yaml_file)
    click.echo(export.describe(register_map), nl=False)

@click_main.command()
@click.option("-o", "--output",
              help="Path where the header will be written",
              default="-",
              show_default=True,
              type=click.File("w"))
@click.option("-g", "--guard",
              help="Name of the include guard",
              default="REGISTER_MAP_H",
              show_default=True)
@click.option("-p", "--prefix",
              default="",
              help="Prefix added to every register name")
@click.argument("yaml-file",
                type=click.File("r"))
def header(output, guard, prefix, yaml_file):
    """Generate a C header of register offsets."""
    register_map, _ = load_register_map(yaml_file)
    output.write(export.render_header(register_map, guard=guard, prefix=prefix))
    logger.info(f"Wrote offsets of {len(register_map)} registers to {output.name}")

@click_main.command(name="verilog")
@click.option("-o", "--output",
              help="Path where the Verilog will be written",
              default="-",
              show_default=True,
              type=click.File("w"))
@click.option("-n", "--name",
              help="Name of the generated module",
              default="register_bank",
              show_default=True)
@click.argument("yaml-file",
                type=click.File("r"))
def verilog_command(output, name, yaml_file):
    """Generate Verilog for a register bank."""
    register_map, _ = load_register_map(yaml_file)
    bank = RegisterBank(register_map)
    try:
        text = verilog.convert(bank, name=name, ports=bank.ports())
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    output.write(text)
    logger.info(f"Wrote register bank '{name}' to {output.name}")

def main():
    click_main(auto_envvar_prefix="ADDRESSABLE")

if __name__ == "__main__":
    main()
