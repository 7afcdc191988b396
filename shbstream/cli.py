"""Typer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

from shbstream.core.errors import ShbStreamError
from shbstream.core.profile_loader import load_profiles, normalize_uuid
from shbstream.core.service import StreamService

app = typer.Typer(help="Stream raw payloads from a Simionic G1000 bezel over Bluetooth LE")

_PROFILE_OPTION = typer.Option(None, "--profile", help="Profile ID (default: simionic_g1000)")
_IDENTIFIER_OPTION = typer.Option(None, "--identifier", help="Advertised device identifier to match")
_SCAN_OPTION = typer.Option(None, "--scan-seconds", min=0.1, help="BLE scan duration in seconds")
_ADAPTER_OPTION = typer.Option(None, "--adapter", help="Local adapter name, e.g. hci0")


def _fail(exc: ShbStreamError) -> typer.Exit:
    typer.echo(f"Error: {exc.phase}: {exc}", err=True)
    return typer.Exit(code=1)


def _build_service(profile: str | None, **overrides) -> StreamService:
    service = StreamService(profile_id=profile, overrides=overrides)
    for warning in service.load_warnings:
        typer.echo(f"Warning: {warning}", err=True)
    return service


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("profiles")
def list_profiles() -> None:
    """List available device profiles."""
    try:
        loaded = load_profiles()
        for warning in loaded.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        if not loaded.profiles:
            typer.echo("No profiles loaded")
            raise typer.Exit(code=1)

        for profile in sorted(loaded.profiles.values(), key=lambda p: p.id):
            typer.echo(f"{profile.id}: {profile.name}")
            typer.echo(f"  identifier: {profile.identifier}")
            typer.echo(f"  characteristic: {profile.characteristic_uuid}")
            typer.echo(f"  scan: {profile.scan_timeout_s:g}s")
    except ShbStreamError as exc:
        raise _fail(exc) from None


@app.command("scan")
def scan_devices(
    profile: str | None = _PROFILE_OPTION,
    identifier: str | None = _IDENTIFIER_OPTION,
    scan_seconds: float | None = _SCAN_OPTION,
    adapter: str | None = _ADAPTER_OPTION,
) -> None:
    """Scan and list connectable devices, marking those the profile targets."""
    try:
        service = _build_service(
            profile,
            identifier=identifier,
            scan_timeout_s=scan_seconds,
            adapter=adapter,
        )
        records = service.scan()
        if not records:
            typer.echo("No connectable peripherals discovered")
            return

        matched = 0
        for record in records:
            marker = ""
            if record.identifier == service.profile.identifier:
                marker = " <- target"
                matched += 1
            typer.echo(f"{record.address} {record.identifier or '<unnamed>'}{marker}")
        typer.echo(f"{len(records)} device(s), {matched} matching '{service.profile.identifier}'")
    except ShbStreamError as exc:
        raise _fail(exc) from None


@app.command("stream")
def stream(
    profile: str | None = _PROFILE_OPTION,
    identifier: str | None = _IDENTIFIER_OPTION,
    characteristic: str | None = typer.Option(
        None, "--characteristic", help="Characteristic UUID to subscribe to"
    ),
    scan_seconds: float | None = _SCAN_OPTION,
    adapter: str | None = _ADAPTER_OPTION,
) -> None:
    """Connect, subscribe, and print payloads until Enter is pressed."""
    try:
        if characteristic is not None:
            characteristic = normalize_uuid(characteristic, context="--characteristic")
        service = _build_service(
            profile,
            identifier=identifier,
            characteristic_uuid=characteristic,
            scan_timeout_s=scan_seconds,
            adapter=adapter,
        )
        result = service.run()
        if result.error is not None:
            raise _fail(result.error)
        if not result.ok:
            typer.echo(f"Error: session ended in state '{result.state.value}'", err=True)
            raise typer.Exit(code=1)
    except ShbStreamError as exc:
        raise _fail(exc) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
