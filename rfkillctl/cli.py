"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import logging

import typer

from rfkillctl.core.errors import RfkillctlError
from rfkillctl.core.model import Event, Kind
from rfkillctl.core.service import RfkillService
from rfkillctl.core.status import BlockStatus
from rfkillctl.transports.chardev import EventSource

app = typer.Typer(help="Inspect and toggle Linux rfkill radio switches")

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    ctx.obj = {"verbose": verbose}


def _build_service(ctx: typer.Context) -> RfkillService:
    service = RfkillService()
    verbose = bool((ctx.obj or {}).get("verbose"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else service.settings.log_level,
        format=LOG_FORMAT,
        force=True,
    )
    for warning in service.load_warnings:
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def _format_event(event: Event) -> str:
    status = BlockStatus.from_block(event.block)
    return f"idx={event.index} type={event.kind} op={event.operation} {status}"


@app.command("list")
def list_devices(ctx: typer.Context) -> None:
    """List rfkill devices and their block state."""
    try:
        service = _build_service(ctx)
        devices = service.list_devices()
        if not devices:
            typer.echo("No rfkill devices found")
            return

        failed = False
        for device in devices:
            try:
                loaded = device.load()
            except RfkillctlError as exc:
                failed = True
                typer.echo(f"Error: {exc}: {exc.__cause__}", err=True)
                continue
            status = loaded.block_status
            typer.echo(
                f"{device.index} {loaded.kind} {loaded.name} "
                f"soft={_yes_no(status.soft_blocked)} hard={_yes_no(status.hard_blocked)}"
            )
        if failed:
            raise typer.Exit(code=1)
    except (RfkillctlError, OSError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("show")
def show_device(ctx: typer.Context, index: int) -> None:
    """Show every attribute of one rfkill device."""
    try:
        service = _build_service(ctx)
        device = service.device(index)
        typer.echo(f"rfkill{index}: {device.name}")
        typer.echo(f"  type: {device.kind}")
        typer.echo(f"  persistent: {_yes_no(device.persistent)}")
        typer.echo(f"  soft blocked: {_yes_no(device.soft_blocked)}")
        typer.echo(f"  hard blocked: {_yes_no(device.hard_blocked)}")
        reasons = device.hard_block_reasons
        if reasons is not None:
            typer.echo(f"  hard block reasons: {', '.join(reasons.labels()) or 'none'}")
    except (RfkillctlError, OSError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _set_block(ctx: typer.Context, index: int | None, kind: str | None, blocked: bool) -> None:
    verb = "block" if blocked else "unblock"
    try:
        service = _build_service(ctx)
        if kind is not None:
            service.set_block_kind(Kind.from_label(kind), blocked)
            typer.echo(f"Requested {verb} of all {kind} devices")
            return
        if index is None:
            typer.echo(f"Error: {verb} needs an INDEX or --kind", err=True)
            raise typer.Exit(code=1)
        service.set_block(index, blocked)
        typer.echo(f"Requested {verb} of rfkill{index}")
    except (RfkillctlError, OSError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("block")
def block(
    ctx: typer.Context,
    index: int | None = typer.Argument(None),
    kind: str | None = typer.Option(None, "--kind", help="Block every device of this type"),
) -> None:
    """Soft-block one device, or every device of a type."""
    _set_block(ctx, index, kind, True)


@app.command("unblock")
def unblock(
    ctx: typer.Context,
    index: int | None = typer.Argument(None),
    kind: str | None = typer.Option(None, "--kind", help="Unblock every device of this type"),
) -> None:
    """Remove the soft block from one device, or every device of a type."""
    _set_block(ctx, index, kind, False)


async def _print_events(source: EventSource, count: int | None) -> None:
    seen = 0
    try:
        async for item in source:
            if isinstance(item, Event):
                typer.echo(_format_event(item))
            else:
                typer.echo(f"Error: {item}", err=True)
            seen += 1
            if count is not None and seen >= count:
                break
    finally:
        source.close()


@app.command("events")
def events(
    ctx: typer.Context,
    count: int | None = typer.Option(None, "--count", "-n", help="Stop after this many events"),
) -> None:
    """Print rfkill events as the kernel reports them."""
    try:
        service = _build_service(ctx)
        source = EventSource.open(service.settings.char_device)
        asyncio.run(_print_events(source, count))
    except (RfkillctlError, OSError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


async def _print_state(service: RfkillService, settle: float) -> None:
    registry, errors = await service.open_registry()
    async with registry:
        await asyncio.sleep(settle)
        snapshot = await registry.read()
        async for device in snapshot:
            typer.echo(f"{device.index} {device.kind} {device.block_status}")
        while not errors.empty():
            typer.echo(f"Error: {errors.get_nowait()}", err=True)


@app.command("state")
def state(
    ctx: typer.Context,
    settle: float = typer.Option(0.2, "--settle", help="Seconds to collect events before printing"),
) -> None:
    """Track devices from the event stream and print the resulting state."""
    try:
        service = _build_service(ctx)
        asyncio.run(_print_state(service, settle))
    except (RfkillctlError, OSError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
