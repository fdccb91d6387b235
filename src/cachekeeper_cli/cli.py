from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

import typer

from cachekeeper import (
    BackingStoreError,
    CacheItem,
    ConfigurationError,
    FileBackingStore,
    SlidingTime,
    StoreConfig,
    load_config,
)
from cachekeeper.storage import format_duration
from cachekeeper.storage.records import format_timestamp

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = typer.Typer(help="cachekeeper backing store CLI")
debug_app = typer.Typer(help="Debug commands")
app.add_typer(debug_app, name="debug")

_PATH_OPTION_HELP = "Cache store directory."
_CONFIG_OPTION_HELP = "Config file with a 'store' section (JSON or YAML)."


@app.command("count")
def count_entries(
    path: Path | None = typer.Option(None, "--path", help=_PATH_OPTION_HELP),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help=_CONFIG_OPTION_HELP,
        exists=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the number of entries on disk (expired ones included)."""
    store = _open_store(path, config_path)
    try:
        count = store.count()
    except OSError as exc:
        typer.echo(f"cannot read store: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"count={count}")


@app.command("list")
def list_entries(
    path: Path | None = typer.Option(None, "--path", help=_PATH_OPTION_HELP),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help=_CONFIG_OPTION_HELP,
        exists=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Load every entry and print a summary table."""
    store = _open_store(path, config_path)
    try:
        items = store.load_all()
    except BackingStoreError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(_render_item_table(list(items.values())))


@app.command("flush")
def flush_entries(
    path: Path | None = typer.Option(None, "--path", help=_PATH_OPTION_HELP),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help=_CONFIG_OPTION_HELP,
        exists=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Delete every entry from the store."""
    store = _open_store(path, config_path)
    try:
        before = store.count()
        store.flush()
        remaining = store.count()
    except OSError as exc:
        typer.echo(f"cannot flush store: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"flushed={before - remaining} remaining={remaining}")


@debug_app.command("store")
def debug_store(
    path: Path = typer.Option(
        Path("data/cache/store"),
        "--path",
        help=_PATH_OPTION_HELP,
    ),
) -> None:
    """Run backing store smoke test."""
    path.mkdir(parents=True, exist_ok=True)
    store = FileBackingStore.at(path)

    sample = CacheItem(
        key="debug:store",
        value={"name": "smoke_ok"},
        expirations=(SlidingTime(duration=timedelta(minutes=1)),),
    )
    try:
        storage_key = max(_existing_storage_keys(store), default=0) + 1
        store.add(storage_key, sample)
        loaded = store.load_all().get(sample.key)
        store.remove(storage_key)
    except BackingStoreError as exc:
        typer.echo(f"store smoke test failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if loaded is None or loaded.value != sample.value:
        typer.echo("store smoke test failed", err=True)
        raise typer.Exit(code=1)

    typer.echo("store ok")


def _open_store(path: Path | None, config_path: Path | None) -> FileBackingStore:
    try:
        if config_path is not None:
            config = load_config(config_path)
        else:
            config = StoreConfig.from_attributes({"path": str(path) if path else ""})
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    return FileBackingStore.from_config(config)


def _existing_storage_keys(store: FileBackingStore) -> list[int]:
    return [item.storage_key for item in store.load_all().values() if item.storage_key is not None]


def _render_item_table(items: list[CacheItem]) -> str:
    if not items:
        return "no entries found"

    headers = ("storage_key", "key", "last_accessed", "sliding")
    rows = [
        (
            str(item.storage_key),
            _truncate(item.key, limit=60),
            format_timestamp(item.last_accessed_time),
            format_duration(item.sliding_expiration) if item.sliding_expiration else "-",
        )
        for item in sorted(items, key=lambda item: item.storage_key or 0)
    ]

    widths = [
        max(len(headers[column]), *(len(row[column]) for row in rows))
        for column in range(len(headers))
    ]

    def _line(values: tuple[str, str, str, str]) -> str:
        return " | ".join(
            value.ljust(widths[index]) for index, value in enumerate(values)
        )

    divider = "-+-".join("-" * width for width in widths)
    body = [_line(headers), divider]
    body.extend(_line(row) for row in rows)
    return "\n".join(body)


def _truncate(text: str, *, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}..."


def main() -> None:
    """CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
