from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import click

from . import __version__
from .access import GlideAccess, GlideConfig
from .env_loader import load_env_files
from .exceptions import GlideError
from .logging_config import configure_logging
from .record import GlideRecord

_logger = logging.getLogger(__name__)

# Load .env very early, so click's envvar defaults see it
load_env_files()


def _parse_assignments(pairs: Tuple[str, ...]) -> Dict[str, str]:
    """Turn ("a=1", "b=x=y") into {"a": "1", "b": "x=y"}."""
    out: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected FIELD=VALUE, got {pair!r}", param_hint="--set")
        out[key] = value
    return out


def _echo_json(data: Any, pretty: bool) -> None:
    click.echo(json.dumps(data, indent=2 if pretty else None, default=str))


def _open(ctx: click.Context, table: str) -> GlideRecord:
    """Build the accessor on first use and return a record for TABLE."""
    obj = ctx.ensure_object(dict)
    try:
        if obj.get("access") is None:
            obj["access"] = GlideAccess.from_config(obj["config"])
        return GlideRecord(table, obj["access"])
    except GlideError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.version_option(__version__, "--version", prog_name="gliderecord")
@click.option(
    "-v",
    "--verbose",
    "loglevel",
    flag_value=logging.INFO,
    default=None,
    help="Enable INFO logs.",
)
@click.option(
    "-vv",
    "--very-verbose",
    "loglevel",
    flag_value=logging.DEBUG,
    help="Enable DEBUG logs (request paths and bodies).",
)
@click.option(
    "--instance",
    envvar="GLIDE_INSTANCE",
    help="Instance name (dev12345) or host. [env: GLIDE_INSTANCE]",
)
@click.option("--username", envvar="GLIDE_USERNAME", help="[env: GLIDE_USERNAME]")
@click.option("--password", envvar="GLIDE_PASSWORD", help="[env: GLIDE_PASSWORD]")
@click.option(
    "--insecure",
    is_flag=True,
    default=False,
    help="Skip TLS certificate verification.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    loglevel: Optional[int],
    instance: Optional[str],
    username: Optional[str],
    password: Optional[str],
    insecure: bool,
) -> None:
    """GlideRecord CLI. Query and edit ServiceNow tables over the REST Table API."""
    configure_logging(loglevel)
    _logger.debug("CLI start, version=%s", __version__)

    cfg = GlideConfig.from_env()
    cfg.instance = instance or cfg.instance
    cfg.username = username or cfg.username
    cfg.password = password or cfg.password
    if insecure:
        cfg.verify_ssl = False

    obj = ctx.ensure_object(dict)
    obj["config"] = cfg
    obj.setdefault("access", None)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command("query")
@click.argument("table")
@click.option("-q", "--query", "clauses", multiple=True, help="Encoded query clause (repeatable).")
@click.option("--order-by", "order_by", help="Sort ascending by this column.")
@click.option("--order-by-desc", "order_by_desc", help="Sort descending by this column.")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Maximum rows.")
@click.option("--pretty", is_flag=True, help="Pretty-print JSON.")
@click.pass_context
def cmd_query(
    ctx: click.Context,
    table: str,
    clauses: Tuple[str, ...],
    order_by: Optional[str],
    order_by_desc: Optional[str],
    limit: Optional[int],
    pretty: bool,
) -> None:
    """Run an encoded query against TABLE and print the rows as JSON."""
    gr = _open(ctx, table)
    try:
        for clause in clauses:
            gr.add_encoded_query(clause)
        if order_by:
            gr.order_by(order_by)
        if order_by_desc:
            gr.order_by_desc(order_by_desc)
        if limit is not None:
            gr.set_limit(limit)
        found = gr.query()
    except GlideError as exc:
        raise click.ClickException(str(exc)) from exc

    rows: List[Dict[str, Any]] = gr.get_data() if found else []
    _echo_json(rows, pretty)


@cli.command("get")
@click.argument("table")
@click.argument("value")
@click.option("--field", help="Match FIELD=VALUE instead of sys_id=VALUE.")
@click.option("--pretty", is_flag=True, help="Pretty-print JSON.")
@click.pass_context
def cmd_get(
    ctx: click.Context, table: str, value: str, field: Optional[str], pretty: bool
) -> None:
    """Fetch one record from TABLE by sys_id (or by --field)."""
    gr = _open(ctx, table)
    try:
        found = gr.get_by_field(field, value) if field else gr.get_by_sys_id(value)
    except GlideError as exc:
        raise click.ClickException(str(exc)) from exc

    if not found:
        click.echo("No record found.", err=True)
        ctx.exit(1)
    _echo_json(gr[0].as_dict(), pretty)


@cli.command("insert")
@click.argument("table")
@click.option("-s", "--set", "assignments", multiple=True, required=True, help="FIELD=VALUE")
@click.pass_context
def cmd_insert(ctx: click.Context, table: str, assignments: Tuple[str, ...]) -> None:
    """Create a record in TABLE and print its sys_id."""
    values = _parse_assignments(assignments)
    gr = _open(ctx, table)
    try:
        for field, value in values.items():
            gr.set_value(field, value)
        sys_id = gr.insert()
    except GlideError as exc:
        raise click.ClickException(str(exc)) from exc

    if not sys_id:
        raise click.ClickException(f"Insert into {table} did not return a sys_id")
    click.echo(sys_id)


@cli.command("update")
@click.argument("table")
@click.argument("sys_id")
@click.option("-s", "--set", "assignments", multiple=True, required=True, help="FIELD=VALUE")
@click.pass_context
def cmd_update(
    ctx: click.Context, table: str, sys_id: str, assignments: Tuple[str, ...]
) -> None:
    """Change fields of the TABLE record SYS_ID."""
    values = _parse_assignments(assignments)
    gr = _open(ctx, table)
    try:
        if not gr.get_by_sys_id(sys_id):
            raise click.ClickException(f"No {table} record with sys_id {sys_id}")
        for field, value in values.items():
            gr.set_value(field, value)
        ok = gr.update()
    except GlideError as exc:
        raise click.ClickException(str(exc)) from exc

    if not ok:
        raise click.ClickException(f"Update of {table}/{sys_id} failed: record not found")
    click.echo(f"Updated {table}/{sys_id}: {', '.join(values)}")


@cli.command("delete")
@click.argument("table")
@click.argument("sys_id")
@click.pass_context
def cmd_delete(ctx: click.Context, table: str, sys_id: str) -> None:
    """Delete the TABLE record SYS_ID."""
    gr = _open(ctx, table)
    try:
        if not gr.get_by_sys_id(sys_id):
            raise click.ClickException(f"No {table} record with sys_id {sys_id}")
        deleted = gr.delete_record()
    except GlideError as exc:
        raise click.ClickException(str(exc)) from exc

    if not deleted:
        raise click.ClickException(f"Delete of {table}/{sys_id} failed: record not found")
    click.echo(f"Deleted {table}/{sys_id}")
