import json
import logging

import click

from . import __version__
from .loader import InputFormat, load_document
from .pipeline import GeneratorConfig, OpenApiTsGenError, OutputMode, PipelineGenerator


@click.command()
@click.version_option(__version__, prog_name="openapi-tsgen")
@click.option("--schema", "-s", "schema_option", default=None, type=click.Path(dir_okay=False), help="Path to OpenAPI schema (YAML)")
@click.option("--output", "-o", default="type.ts", show_default=True, type=click.Path(dir_okay=False), help="Output file path")
@click.option("--input-json", is_flag=True, default=False, help="Treat schema input as JSON")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--force", is_flag=True, default=False, help="Rewrite the output even if the declarations are unchanged")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.argument("schema", default=None, required=False, type=click.Path(dir_okay=False))
@click.pass_context
def openapi_tsgen(ctx, schema_option, output, input_json, config, force, verbose, schema):
    """Generate TypeScript types from an OpenAPI schema."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    path = schema_option or schema
    if not path:
        click.echo(ctx.get_help())
        return

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    if not config.generator_version:
        config.generator_version = __version__
    # Flags override the config file
    if force:
        config.output.mode = OutputMode.FORCE

    input_format = InputFormat.JSON if input_json else InputFormat.YAML
    try:
        tree = load_document(path, input_format)
        PipelineGenerator(tree, config).write(output)
    except (OpenApiTsGenError, OSError) as e:
        raise click.ClickException(str(e)) from e
