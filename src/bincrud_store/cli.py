"""bincrud - command line front end for the per-kind record stores."""
from __future__ import annotations

import asyncio
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

from bincrud_core.entities import UserRole
from bincrud_core.protocol import DATA_DIRECTORY

from .export import export_parquet
from .kinds import STORE_KINDS, ItemStore, OrderStore, UserStore, open_store

KIND_CHOICE = click.Choice(sorted(STORE_KINDS))


def _run(coro):
    try:
        return asyncio.run(coro)
    except Exception as e:
        # Fail closed with a single-line reason.
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)


def _decimal(ctx, param, value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"{value!r} is not a decimal number")


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DATA_DIRECTORY,
    show_default=True,
    envvar="BINCRUD_DATA_DIR",
    help="Directory holding the store files",
)
@click.option("-v", "--verbose", is_flag=True, help="Narrate store operations on stderr")
@click.pass_context
def main(ctx: click.Context, data_dir: Path, verbose: bool) -> None:
    """Append to and inspect bincrud record files."""
    ctx.obj = {
        "data_dir": data_dir,
        "sink": (lambda msg: click.echo(msg, err=True)) if verbose else None,
    }


@main.command("add-item")
@click.argument("content")
@click.option("--price", default="0", callback=_decimal, help="Exact decimal price")
@click.pass_obj
def add_item_cmd(obj: dict, content: str, price: Decimal) -> None:
    async def go():
        async with ItemStore(obj["data_dir"], obj["sink"]) as store:
            return await store.add_item(content, price)

    item = _run(go())
    click.echo(json.dumps(item.to_dict(), ensure_ascii=False))


@main.command("add-order")
@click.argument("item_id", type=click.IntRange(0, 0xFFFF))
@click.argument("total_price", type=float)
@click.pass_obj
def add_order_cmd(obj: dict, item_id: int, total_price: float) -> None:
    async def go():
        async with OrderStore(obj["data_dir"], obj["sink"]) as store:
            return await store.add_order(item_id, total_price)

    order = _run(go())
    click.echo(json.dumps(order.to_dict()))


@main.command("add-user")
@click.argument("username")
@click.option("--password", default="", help="Stored as-is")
@click.option("--admin", is_flag=True, help="Create the account with the admin role")
@click.pass_obj
def add_user_cmd(obj: dict, username: str, password: str, admin: bool) -> None:
    role = UserRole.ADMIN if admin else UserRole.USER

    async def go():
        async with UserStore(obj["data_dir"], obj["sink"]) as store:
            return await store.add_user(username, password, role)

    user = _run(go())
    click.echo(json.dumps(user.to_dict(), ensure_ascii=False))


@main.command("list")
@click.argument("kind", type=KIND_CHOICE)
@click.pass_obj
def list_cmd(obj: dict, kind: str) -> None:
    """Print every record of KIND, one JSON object per line, in append order."""
    async def go():
        async with open_store(kind, obj["data_dir"], obj["sink"]) as store:
            return await store.read_all()

    for rec in _run(go()):
        click.echo(json.dumps(rec.to_dict(), ensure_ascii=False))


@main.command("header")
@click.argument("kind", type=KIND_CHOICE)
@click.pass_obj
def header_cmd(obj: dict, kind: str) -> None:
    async def go():
        async with open_store(kind, obj["data_dir"], obj["sink"]) as store:
            return await store.read_header()

    header = _run(go())
    if header is None:
        click.echo("absent")
    else:
        click.echo(json.dumps({"count": header.count}))


@main.command("export")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def export_cmd(obj: dict, kind: str, out: Path) -> None:
    """Write every record of KIND to the Parquet file OUT."""
    async def go():
        async with open_store(kind, obj["data_dir"], obj["sink"]) as store:
            return await export_parquet(store, out)

    rows = _run(go())
    click.echo(f"PASS: {rows} {kind} records exported to {out}")


if __name__ == "__main__":
    main()
