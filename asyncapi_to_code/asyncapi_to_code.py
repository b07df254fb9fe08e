import json
import logging
import sys

import click

from . import __version__
from .cli_utils import reconstruct_command_line
from .loader import DocumentLoadError, load_document
from .pipeline import CodeGeneratorConfig, PipelineGenerator
from .pipeline.errors import SchemaError


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option(
    "--format",
    "-f",
    "output_format",
    default="python",
    type=click.Choice(["python", "model"]),
    help="Generate Python code, or dump the type model as JSON",
)
@click.option(
    "--strict-discriminator",
    is_flag=True,
    default=False,
    help="Fail instead of falling back to untagged unions when discriminator tags are ambiguous",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log pipeline progress")
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", required=False, default=None, type=click.Path(resolve_path=True))
def asyncapi_to_code(config, output_format, strict_discriminator, verbose, path, output):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        document = load_document(path)
    except DocumentLoadError as exc:
        raise click.ClickException(str(exc)) from exc

    if config is not None:
        with open(config) as f:
            try:
                config_values = json.load(f)
            except json.JSONDecodeError as exc:
                raise click.ClickException(f"Invalid config file {config}: {exc}") from exc
        if not isinstance(config_values, dict):
            raise click.ClickException(f"Invalid config file {config}: expected a JSON object")
        config = CodeGeneratorConfig.from_dict(config_values)
    else:
        config = CodeGeneratorConfig()

    # CLI flag overrides the config file
    if strict_discriminator:
        config.strict_discriminator = True

    generator = PipelineGenerator(document, config)
    try:
        if output_format == "model":
            out = json.dumps(generator.build_model().to_dict(), indent=2) + "\n"
        else:
            command_line = reconstruct_command_line(asyncapi_to_code)
            out = generator.generate(f"Generated by asyncapi_to_code v{__version__} : {command_line}")
    except SchemaError as exc:
        click.echo(f"{exc.kind} at {exc.pointer}: {exc.message}", err=True)
        sys.exit(1)

    if output is None:
        click.echo(out, nl=False)
    else:
        with open(output, "w") as f:
            f.write(out)
