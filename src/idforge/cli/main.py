"""CLI commands for idforge."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError

from idforge import engine
from idforge.codecs.registry import REGISTRY
from idforge.config import DEFAULT_CONFIG, Config
from idforge.exceptions import IdForgeError
from idforge.generators.factory import (
    Cuid2Options,
    NameBasedOptions,
    NanoIdOptions,
    SnowflakeOptions,
    TsidOptions,
    TypeIdOptions,
)
from idforge.models import TypeTag

ENCODING_CHOICES = [
    "canonical",
    "hex",
    "base32",
    "base58",
    "base64",
    "base64url",
    "bits",
    "int",
    "bytes",
]


def _load_config(path: Optional[Path]) -> Config:
    if path is not None:
        return Config.from_toml(path)
    try:
        return Config.find_and_load()
    except FileNotFoundError:
        return DEFAULT_CONFIG


def _fail(message: object) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


@click.group()
@click.version_option(package_name="idforge")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to idforge.toml (default: search upwards from the current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[Path]) -> None:
    """idforge - detect, generate, convert and compare unique identifiers."""
    try:
        config = _load_config(config_path)
    except (ValidationError, ValueError) as e:
        _fail(f"Invalid configuration: {e}")
    logging.basicConfig(level=logging.DEBUG if verbose else config.log_level)
    ctx.obj = config


def _generator_options(
    tag: TypeTag,
    config: Config,
    epoch: Optional[str],
    datacenter_id: Optional[int],
    worker_id: Optional[int],
    alphabet: Optional[str],
    length: Optional[int],
    namespace: Optional[str],
    name: Optional[str],
    prefix: Optional[str],
    node: Optional[int],
) -> Any:
    if tag is TypeTag.SNOWFLAKE:
        return SnowflakeOptions(
            epoch_ms=epoch if epoch is not None else config.snowflake.epoch,
            datacenter_id=(
                datacenter_id if datacenter_id is not None else config.snowflake.datacenter_id
            ),
            worker_id=worker_id if worker_id is not None else config.snowflake.worker_id,
        )
    if tag is TypeTag.NANOID:
        return NanoIdOptions(
            alphabet=alphabet or config.nanoid.alphabet,
            length=length if length is not None else config.nanoid.length,
        )
    if tag in (TypeTag.UUID_V3, TypeTag.UUID_V5):
        if namespace is None or name is None:
            _fail(f"{tag} requires --namespace and --name")
        return NameBasedOptions(namespace=namespace, name=name)
    if tag is TypeTag.TYPEID:
        return TypeIdOptions(prefix=prefix or "")
    if tag is TypeTag.CUID2:
        return Cuid2Options(length=length if length is not None else 24)
    if tag is TypeTag.TSID:
        return TsidOptions(node=node)
    return None


@cli.command()
@click.argument("id_type", default="uuidv4")
@click.option("--count", "-n", type=int, default=1, help="Number of IDs to generate")
@click.option("--format", "-f", "encoding", type=click.Choice(ENCODING_CHOICES),
              default="canonical", help="Output encoding")
@click.option("--case", type=click.Choice(["upper", "lower"]), help="Output case")
@click.option("--epoch", help="Snowflake epoch (ms, 'twitter' or 'discord')")
@click.option("--datacenter-id", type=int, help="Snowflake datacenter ID (0-31)")
@click.option("--worker-id", type=int, help="Snowflake worker ID (0-31)")
@click.option("--alphabet", help="NanoID alphabet")
@click.option("--length", type=int, help="NanoID / CUID2 length")
@click.option("--namespace", help="UUID v3/v5 namespace (UUID or dns/url/oid/x500)")
@click.option("--name", help="UUID v3/v5 name")
@click.option("--prefix", help="TypeID prefix")
@click.option("--node", type=int, help="TSID node ID (0-1023)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def gen(
    config: Config,
    id_type: str,
    count: int,
    encoding: str,
    case: Optional[str],
    epoch: Optional[str],
    datacenter_id: Optional[int],
    worker_id: Optional[int],
    alphabet: Optional[str],
    length: Optional[int],
    namespace: Optional[str],
    name: Optional[str],
    prefix: Optional[str],
    node: Optional[int],
    output_json: bool,
) -> None:
    """Generate ID(s) of ID_TYPE (default: uuidv4)."""
    if count < 1:
        _fail("--count must be at least 1")
    try:
        tag = TypeTag.parse(id_type)
        options = _generator_options(
            tag, config, epoch, datacenter_id, worker_id,
            alphabet, length, namespace, name, prefix, node,
        )
        ids = [
            engine.encode(engine.generate(tag, options), encoding, case)
            for _ in range(count)
        ]
    except IdForgeError as e:
        _fail(e)

    if output_json:
        _echo_json({"id_type": str(tag), "encoding": encoding, "ids": ids})
        return
    for value in ids:
        click.echo(value)


@cli.command()
@click.argument("id_text", metavar="ID")
@click.option("--type", "-t", "id_type", help="Type hint (skips auto-detection)")
@click.option("--strict", is_flag=True, default=None, help="Require canonical form")
@click.option("--epoch", help="Snowflake epoch (ms, 'twitter' or 'discord')")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def inspect(
    config: Config,
    id_text: str,
    id_type: Optional[str],
    strict: Optional[bool],
    epoch: Optional[str],
    output_json: bool,
) -> None:
    """Detect an ID and show its fields and encodings."""
    if strict is None:
        strict = config.detection.strict_mode
    if epoch is None and config.snowflake.epoch:
        epoch = str(config.snowflake.epoch)
    try:
        result = engine.inspect(id_text, hint=id_type, strict=strict, epoch=epoch)
    except IdForgeError as e:
        _fail(e)

    data = result.to_dict()
    if output_json:
        _echo_json(data)
        return

    click.echo(f"ID Type:     {data['id_type']}")
    click.echo(f"Canonical:   {data['canonical']}")
    click.echo(f"Description: {data['description']}")
    for key in ("timestamp_iso", "timestamp_ms", "version", "variant", "random_bits"):
        if key in data:
            click.echo(f"  {key}: {data[key]}")
    for key, value in data.get("components", {}).items():
        click.echo(f"  {key}: {value}")
    click.echo("Encodings:")
    for key, value in data["encodings"].items():
        click.echo(f"  {key}: {value}")


@cli.command()
@click.argument("id_text", metavar="ID")
@click.option("--to", "target", type=click.Choice(ENCODING_CHOICES), required=True,
              help="Target encoding")
@click.option("--from", "source", type=click.Choice(ENCODING_CHOICES), default="canonical",
              help="Source encoding (non-canonical sources need --type)")
@click.option("--type", "-t", "id_type", help="Type hint")
@click.option("--case", type=click.Choice(["upper", "lower"]), help="Output case")
def convert(
    id_text: str,
    target: str,
    source: str,
    id_type: Optional[str],
    case: Optional[str],
) -> None:
    """Convert an ID between encodings."""
    if source != "canonical" and id_type is None:
        _fail("--type is required when converting from a non-canonical encoding")
    try:
        if source == "canonical":
            raw = engine.parse(id_text, hint=id_type)
        else:
            raw = engine.decode(id_text, source, id_type)
        click.echo(engine.encode(raw, target, case))
    except IdForgeError as e:
        _fail(e)


@cli.command()
@click.argument("ids", nargs=-1, required=True)
@click.option("--type", "-t", "id_type", help="Type hint")
@click.option("--strict", is_flag=True, default=None, help="Require canonical form")
@click.option("--quiet", "-q", is_flag=True, help="Only set the exit code (0=all valid)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def validate(
    config: Config,
    ids: tuple[str, ...],
    id_type: Optional[str],
    strict: Optional[bool],
    quiet: bool,
    output_json: bool,
) -> None:
    """Validate one or more IDs."""
    if strict is None:
        strict = config.detection.strict_mode
    results = [(text, engine.validate(text, hint=id_type, strict=strict)) for text in ids]
    all_valid = all(result.valid for _, result in results)

    if quiet:
        sys.exit(0 if all_valid else 1)

    if output_json:
        _echo_json([{"input": text, **result.to_dict()} for text, result in results])
    else:
        for text, result in results:
            if result.valid:
                kind = result.tag or "ambiguous"
                click.echo(f"✓ Valid {kind}: {text}")
            else:
                click.echo(f"✗ Invalid: {text}: {result.error}", err=True)
            if result.hint:
                click.echo(f"  Hint: {result.hint}")
            for warning in result.warnings:
                click.echo(f"  Warning: {warning}")

    sys.exit(0 if all_valid else 1)


@cli.command()
@click.argument("first")
@click.argument("second")
@click.option("--type", "-t", "id_type", help="Type hint applied to both IDs")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def compare(first: str, second: str, id_type: Optional[str], output_json: bool) -> None:
    """Compare two IDs."""
    try:
        a = engine.detect(first, hint=id_type)
        b = engine.detect(second, hint=id_type)
    except IdForgeError as e:
        _fail(e)

    result = engine.compare(a.raw, b.raw)
    data = {"first": str(a.tag), "second": str(b.tag), **result.to_dict()}
    if output_json:
        _echo_json(data)
        return

    click.echo(f"First:   {first.strip()} ({a.tag})")
    click.echo(f"Second:  {second.strip()} ({b.tag})")
    click.echo(f"Binary:        {result.binary_order}")
    click.echo(f"Lexicographic: {result.lexicographic_order}")
    if result.chronological_order is not None:
        click.echo(f"Chronological: {result.chronological_order}")
        click.echo(f"Time diff:     {result.time_diff_ns / 1_000_000:g} ms")
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)


@cli.command()
@click.argument("id_type", required=False)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(id_type: Optional[str], output_json: bool) -> None:
    """Describe the supported ID types (or one of them)."""
    try:
        codecs = [REGISTRY.get(TypeTag.parse(id_type))] if id_type else list(REGISTRY)
    except IdForgeError as e:
        _fail(e)

    rows = []
    for codec in codecs:
        d = codec.descriptor
        row: dict[str, Any] = {
            "id_type": str(d.tag),
            "description": d.description,
            "bits": d.bit_length,
            "length": d.canonical_length,
            "alphabet": d.alphabet,
            "has_timestamp": d.has_timestamp,
            "sortable": d.sortable,
            "case_insensitive": d.case_insensitive,
        }
        if d.layout is not None:
            row["fields"] = [
                {"name": f.name, "offset": f.offset, "width": f.width, "semantic": f.semantic}
                for f in d.layout
            ]
        rows.append(row)

    if output_json:
        _echo_json(rows if id_type is None else rows[0])
        return

    for row in rows:
        bits = row["bits"] if row["bits"] is not None else "variable"
        flags = [name for name in ("has_timestamp", "sortable") if row[name]]
        click.echo(f"{row['id_type']:<10} {bits!s:>8} bits  {row['description']}")
        if id_type is not None:
            click.echo(f"  alphabet: {row['alphabet']}")
            click.echo(f"  flags:    {', '.join(flags) or '-'}")
            for f in row.get("fields", []):
                click.echo(f"  {f['name']:<12} {f['width']:>3} bits  {f['semantic']}")


if __name__ == "__main__":
    cli()
