"""Command-line interface for gql-typegen."""

import logging
from pathlib import Path

import click

from .core.documents import load_documents
from .core.errors import GeneratorError
from .core.generator import Generator
from .core.schema import load_schema


@click.group()
@click.version_option()
def main():
    """GraphQL type generator for TypeScript.

    Generate precise types for GraphQL fragments and operations.
    """
    pass


@main.command()
@click.option(
    "--schema",
    "-s",
    required=True,
    type=click.Path(exists=True),
    help="Path to GraphQL schema file or directory.",
)
@click.option(
    "--documents",
    "-d",
    required=True,
    multiple=True,
    type=click.Path(exists=True),
    help="Path to a GraphQL document or directory of documents. Can be repeated.",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(),
    help="Output file for the generated types (e.g., types.ts).",
)
@click.option(
    "--operations-file",
    type=click.Path(),
    help="Also write a module with the source of every operation.",
)
@click.option(
    "--minify",
    is_flag=True,
    help="Use short variable names in the operations file.",
)
@click.option(
    "--no-cache",
    is_flag=True,
    help="Disable memoization of compiled selection sets.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate(
    schema: str,
    documents: tuple[str, ...],
    output: str,
    operations_file: str | None,
    minify: bool,
    no_cache: bool,
    verbose: bool,
):
    """Generate TypeScript types from GraphQL documents.

    Examples:

        gql-typegen generate --schema ./schema.graphql --documents ./queries --output ./types.ts

        gql-typegen generate -s ./schema -d ./fragments -d ./queries -o ./generated/types.ts
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    schema_path = Path(schema).resolve()
    output_path = Path(output).resolve()

    click.echo("Parsing schema...")
    graphql_schema = load_schema(str(schema_path))

    inputs = []
    for path in documents:
        inputs.extend(load_documents(path))
    if verbose:
        click.echo(f"  Documents: {len(inputs)}")

    click.echo("Generating types...")
    # A single build never needs incremental updates
    generator = Generator(
        graphql_schema,
        {"use_cache": not no_cache, "debug_mode": verbose, "dependency_tracking": False},
    )
    try:
        generator.add(inputs)
        result = generator.build()
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e

    if verbose:
        click.echo(f"  Artifacts: {len(result.get_artifacts())}")
        click.echo(f"  Operations: {len(result.get_collected_operations())}")

    # Create output directory if needed
    output_path.parent.mkdir(parents=True, exist_ok=True)
    click.echo(f"Writing to {output_path}...")
    with open(output_path, "w") as f:
        f.write(result.get_everything())

    if operations_file:
        operations_path = Path(operations_file).resolve()
        operations_path.parent.mkdir(parents=True, exist_ok=True)
        with open(operations_path, "w") as f:
            f.write(result.get_operations_file(minify=minify))
        click.echo(f"Operations: {operations_path}")

    click.echo(f"Done! Generated {len(result.get_artifacts())} types.")


if __name__ == "__main__":
    main()
