# qsgen/cli.py
import logging
from pathlib import Path
from typing import Optional

import typer

from qsgen.classifier import classify
from qsgen.errors import GenerationError
from qsgen.extractor import extract
from qsgen.loader import load_schema
from qsgen.module_gen import generate_querysets
from qsgen.settings import get_settings

app = typer.Typer(help="Query set code generator CLI")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides QSGEN_LOG_LEVEL"),
):
    level = (log_level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------
# Core utilities
# ---------------------------
def _fail(e: GenerationError) -> None:
    typer.echo(f"❌ {e}")
    raise typer.Exit(code=1)


# ---------------------------
# Commands
# ---------------------------
@app.command(help="Validate a model schema document and its model definitions.")
def validate(schema: Path = typer.Argument(..., help="Model schema JSON file")):
    try:
        extract(load_schema(schema))
    except GenerationError as e:
        _fail(e)
    typer.echo(f"✅ {schema} is valid.")


@app.command(help="Generate the query set module for SCHEMA into OUT.")
def generate(
    schema: Path = typer.Argument(..., help="Model schema JSON file"),
    out: Path = typer.Argument(..., help="Output .py file path"),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", min=1, help="Render models in parallel"),
):
    try:
        generate_querysets(schema, out, jobs=jobs)
    except GenerationError as e:
        _fail(e)
    typer.echo(f"✅ Query sets written to {out}")


@app.command(help="Print every model with its fields and predicate operators.")
def describe(schema: Path = typer.Argument(..., help="Model schema JSON file")):
    try:
        model_schema = extract(load_schema(schema))
    except GenerationError as e:
        _fail(e)

    for model in model_schema.models:
        typer.echo(f"{model.name} (table {model.table})")
        for fc in classify(model).fields:
            f = fc.field
            if f.is_association:
                typer.echo(f"  {f.name}: -> {f.type} via {f.foreign_key} [preload]")
                continue
            roles = [r for r, on in (("pk", f.primary_key), ("soft-delete", f.soft_delete), ("nullable", f.nullable)) if on]
            ops = ", ".join(op.value for op in fc.operators) or "-"
            suffix = f" ({', '.join(roles)})" if roles else ""
            typer.echo(f"  {f.name}: {f.type}{suffix} ops: {ops}")


if __name__ == "__main__":
    app()
