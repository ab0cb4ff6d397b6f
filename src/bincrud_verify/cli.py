import json
from pathlib import Path
import click
from bincrud_core.entities import ENTITY_KINDS
from .logic import verify_store_file

@click.group()
def main():
    pass

@main.command("file")
@click.argument("kind", type=click.Choice(sorted(ENTITY_KINDS)))
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def file_cmd(kind: str, path: Path):
    result = verify_store_file(path, kind)
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)

if __name__ == "__main__":
    main()
