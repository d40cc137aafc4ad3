"""CLI entry point for the local ledger host."""

from __future__ import annotations

import json
import sys

import click

from .core.config import Settings, StoreBackend, load_settings


def _open_store(settings: Settings):
    from .storage import FileStateStore, MemoryStateStore, RedisStateStore

    cfg = settings.store
    if cfg.backend == StoreBackend.FILE:
        return FileStateStore(cfg.state_file)
    if cfg.backend == StoreBackend.REDIS:
        store = RedisStateStore(cfg.redis_url, prefix=cfg.redis_prefix)
        store.connect()
        return store
    return MemoryStateStore()


def _run(settings: Settings, function: str, args: tuple[str, ...], *, commit: bool) -> None:
    from .core.errors import LedgerError
    from .host import LocalLedger
    from .observability.logger import setup_logging

    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
    try:
        store = _open_store(settings)
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        ledger = LocalLedger(store)
        if commit:
            result = ledger.submit(function, *args)
        else:
            result = ledger.evaluate(function, *args)
        if result.committed and hasattr(store, "flush"):
            store.flush()
    finally:
        if hasattr(store, "close"):
            store.close()

    response = result.response
    if not response.ok:
        click.echo(f"Error [{response.error_kind}]: {response.message}", err=True)
        sys.exit(1)
    if response.payload:
        click.echo(json.dumps(response.payload_json(), indent=2))


@click.group()
@click.option("--config", default="configs/ledger.toml", help="Config file path")
@click.option("--state-file", default=None, help="World state file (file backend)")
@click.option("--log-level", default=None, help="Log level override")
@click.pass_context
def main(ctx: click.Context, config: str, state_file: str | None, log_level: str | None) -> None:
    """Supply chain ledger host."""
    overrides: dict = {}
    if state_file:
        overrides["store"] = {"backend": StoreBackend.FILE.value, "state_file": state_file}
    if log_level:
        overrides["observability"] = {"log_level": log_level}
    ctx.obj = load_settings(config_path=config, overrides=overrides)


@main.command(context_settings={"ignore_unknown_options": True})
@click.argument("function")
@click.argument("args", nargs=-1)
@click.pass_obj
def invoke(settings: Settings, function: str, args: tuple[str, ...]) -> None:
    """Submit FUNCTION with ARGS and commit on success."""
    _run(settings, function, args, commit=True)


@main.command(context_settings={"ignore_unknown_options": True})
@click.argument("function")
@click.argument("args", nargs=-1)
@click.pass_obj
def query(settings: Settings, function: str, args: tuple[str, ...]) -> None:
    """Evaluate FUNCTION with ARGS without committing."""
    _run(settings, function, args, commit=False)


@main.command()
def functions() -> None:
    """List the contract's entry points."""
    from .contract import ContractRouter

    for ep in ContractRouter.default().describe():
        params = ", ".join(ep["params"])
        kind = "submit" if ep["submits"] else "query"
        click.echo(f"{ep['name']}({params})  [{kind}]  {ep['doc']}")


if __name__ == "__main__":
    main()
