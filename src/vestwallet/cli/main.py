#!/usr/bin/env python3
"""
Vesting wallet CLI - operator tooling for revokable vesting wallets

Commands:
- schedule: preview how much of an allocation is vested at given times
- status: evaluate a wallet described in a YAML/JSON account file
- verify-signature: ERC-1271 check of a signature against an owner
- sign: produce a 65-byte r||s||v signature over a digest or message
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import click
    import yaml
    from rich import box
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table
except ImportError:
    print("ERROR: Required packages not installed. Install with:")
    print("  pip install click rich pyyaml")
    sys.exit(1)

from eth_utils import ValidationError

from vestwallet.blockchain.vesting_schedule import VestingMode, VestingSchedule
from vestwallet.core import config
from vestwallet.core.address_checksum import normalize_address
from vestwallet.core.contracts.asset_ledger import AssetLedger
from vestwallet.core.contracts.erc20 import ERC20Token
from vestwallet.core.contracts.signature_policy import (
    ERC1271_MAGIC_VALUE,
    SignatureAuthorizationPolicy,
)
from vestwallet.core.contracts.vesting_wallet import RevokableVestingWallet
from vestwallet.core.crypto_utils import (
    address_from_private_key,
    hash_personal_message,
    sign_digest,
)
from vestwallet.core.logging_config import setup_logging
from vestwallet.core.vesting_exceptions import VestingError, get_error_context

logger = logging.getLogger(__name__)
console = Console()


def _cli_fail(exc: Exception, exit_code: int = 1) -> None:
    """Centralized CLI error handler for consistent messaging."""
    logger.error("CLI error: %s", exc, exc_info=True, extra=get_error_context(exc))
    console.print(f"[bold red]Error:[/] {exc}")
    sys.exit(exit_code)


def _parse_hex(value: str, name: str) -> bytes:
    text = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise click.BadParameter(f"{name} must be hex-encoded", param_hint=f"--{name}") from exc


def _check_cliff(cliff: int) -> None:
    if config.MAX_CLIFF_SECONDS and cliff > config.MAX_CLIFF_SECONDS:
        raise click.ClickException(
            f"Cliff {cliff}s exceeds VESTWALLET_MAX_CLIFF_SECONDS ({config.MAX_CLIFF_SECONDS}s)"
        )


def _read_account_file(path: Path) -> Dict[str, Any]:
    """Load a YAML (or JSON) account description into a dict."""
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise click.ClickException(f"Account file {path} must contain a mapping.")
    return data


def _load_wallet(data: Dict[str, Any], at: Optional[int]) -> tuple[RevokableVestingWallet, list[Optional[str]]]:
    """
    Rebuild a wallet and its ledger from an account description.

    Expected layout::

        beneficiary: "0x..."
        revoker: "0x..."          # null once renounced
        schedule: {start: 0, duration: 400, cliff: 100}
        accelerated: false
        native: {balance: 750, released: 250}
        tokens:
          - {symbol: USDC, address: "0x...", balance: 1000, released: 0}
    """
    for key in ("beneficiary", "schedule"):
        if key not in data:
            raise click.ClickException(f"Account file is missing '{key}'")

    _check_cliff(int(data["schedule"].get("cliff", 0)))

    ledger = AssetLedger()
    native = data.get("native") or {}
    released: Dict[str, int] = {"native": int(native.get("released", 0))}
    balances: list[tuple[Optional[str], int]] = [(None, int(native.get("balance", 0)))]

    for entry in data.get("tokens") or []:
        token = ledger.register_token(
            ERC20Token(
                name=entry.get("name", entry["symbol"]),
                symbol=entry["symbol"],
                decimals=int(entry.get("decimals", 18)),
                address=entry.get("address", ""),
                owner=data["beneficiary"],
            )
        )
        released[token.address] = int(entry.get("released", 0))
        balances.append((token.address, int(entry.get("balance", 0))))

    time_provider = (lambda: at) if at is not None else None
    wallet = RevokableVestingWallet.from_dict(
        {
            "address": data.get("address", ""),
            "beneficiary": data["beneficiary"],
            "revoker": data.get("revoker"),
            "schedule": data["schedule"],
            "accelerated": bool(data.get("accelerated", False)),
            "released": released,
        },
        ledger,
        time_provider=time_provider,
    )
    for asset, amount in balances:
        ledger.deposit(wallet.address, amount, asset)
    return wallet, [asset for asset, _ in balances]


# ============================================================================
# CLI Group
# ============================================================================

@click.group()
@click.option('--json-output', is_flag=True, help='Output raw JSON')
@click.option(
    '--log-level',
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="ERROR",
    show_default=True,
    help='Log level for console and VESTWALLET_LOG_FILE output',
)
@click.pass_context
def cli(ctx: click.Context, json_output: bool, log_level: str):
    """
    Vesting wallet operator CLI.

    Inspect vesting schedules and wallet state, and produce or verify
    owner signatures.
    """
    ctx.ensure_object(dict)
    setup_logging(
        name="vestwallet",
        log_file=config.LOG_FILE or None,
        level=log_level,
        environment=config.Config.ENVIRONMENT,
    )
    ctx.obj['json_output'] = json_output


@cli.command('schedule')
@click.option('--start', required=True, type=int, help='Vesting start (Unix timestamp)')
@click.option('--duration', required=True, type=click.IntRange(min=0), help='Vesting duration in seconds')
@click.option('--cliff', default=0, type=int, show_default=True, help='Cliff offset from start in seconds')
@click.option('--total', required=True, type=click.IntRange(min=0), help='Total allocation')
@click.option('--accelerated', is_flag=True, help='Evaluate as an accelerated wallet')
@click.option('--at', 'timestamps', multiple=True, required=True, type=int, help='Timestamp to evaluate (repeatable)')
@click.pass_context
def schedule_preview(
    ctx: click.Context,
    start: int,
    duration: int,
    cliff: int,
    total: int,
    accelerated: bool,
    timestamps: tuple[int, ...],
):
    """
    Show vested amounts of TOTAL at each --at timestamp.

    Example:
        vestwallet schedule --start 0 --duration 400 --cliff 100 --total 1000 --at 50 --at 300
    """
    _check_cliff(cliff)
    try:
        schedule = VestingSchedule(start=start, duration=duration, cliff=cliff)
    except VestingError as exc:
        _cli_fail(exc)
        return

    mode = VestingMode.ACCELERATED if accelerated else VestingMode.SCHEDULED
    rows = [
        {"timestamp": ts, "vested": schedule.vested_amount(total, ts, mode), "past_cliff": schedule.is_past_cliff(ts)}
        for ts in timestamps
    ]

    if ctx.obj.get("json_output"):
        click.echo(json.dumps({"schedule": schedule.to_dict(), "total": total, "mode": mode.value, "points": rows}, indent=2))
        return

    table = Table(title="Vesting Schedule", box=box.ROUNDED)
    table.add_column("Timestamp", style="cyan", justify="right")
    table.add_column("Vested", style="green", justify="right")
    table.add_column("Past Cliff", style="yellow")
    for row in rows:
        table.add_row(str(row["timestamp"]), str(row["vested"]), "yes" if row["past_cliff"] else "no")
    console.print(table)
    console.print(
        f"[dim]start={schedule.start} cliff_end={schedule.cliff_end} end={schedule.end} mode={mode.value}[/]"
    )


@cli.command('status')
@click.argument('account_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--at', type=int, default=None, help='Evaluate at this timestamp instead of now')
@click.pass_context
def wallet_status(ctx: click.Context, account_file: Path, at: Optional[int]):
    """
    Show vested, releasable and revokable amounts per asset.

    Example:
        vestwallet status wallet.yaml --at 1700000000
    """
    try:
        data = _read_account_file(account_file)
        wallet, assets = _load_wallet(data, at)
        snapshots = [wallet.snapshot(asset) for asset in assets]
    except (VestingError, ValueError, KeyError, TypeError, yaml.YAMLError) as exc:
        _cli_fail(exc)
        return

    payload = {
        "address": wallet.address,
        "beneficiary": wallet.beneficiary(),
        "revoker": wallet.revoker(),
        "revokable": wallet.is_revokable(),
        "accelerated": wallet.is_accelerated(),
        "schedule": wallet.schedule.to_dict(),
        "assets": snapshots,
    }

    if ctx.obj.get("json_output"):
        click.echo(json.dumps(payload, indent=2))
        return

    summary = Table(show_header=False, box=box.SIMPLE)
    summary.add_row("[bold cyan]Beneficiary", str(payload["beneficiary"]))
    summary.add_row("[bold cyan]Revoker", str(payload["revoker"] or "renounced"))
    summary.add_row("[bold cyan]Accelerated", "yes" if payload["accelerated"] else "no")
    summary.add_row("[bold cyan]Cliff End", str(wallet.cliff_end()))
    summary.add_row("[bold cyan]End", str(wallet.end()))
    console.print(Panel(summary, title="[bold green]Vesting Wallet", border_style="green"))

    table = Table(box=box.ROUNDED)
    for column in ("Asset", "Balance", "Released", "Vested", "Releasable", "Revokable"):
        table.add_column(column, justify="right" if column != "Asset" else "left")
    for snap in snapshots:
        table.add_row(
            snap["asset"],
            str(snap["balance"]),
            str(snap["released"]),
            str(snap["vested"]),
            f"[green]{snap['releasable']}",
            f"[red]{snap['revokable']}",
        )
    console.print(table)


@cli.command('verify-signature')
@click.option('--owner', required=True, help='Expected signer address')
@click.option('--digest', required=True, help='32-byte digest (hex)')
@click.option('--signature', required=True, help='65-byte r||s||v signature (hex)')
@click.pass_context
def verify_signature(ctx: click.Context, owner: str, digest: str, signature: str):
    """Print the ERC-1271 result of SIGNATURE over DIGEST for OWNER."""
    try:
        owner_norm = normalize_address(owner)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--owner") from exc

    digest_bytes = _parse_hex(digest, "digest")
    signature_bytes = _parse_hex(signature, "signature")

    policy = SignatureAuthorizationPolicy(lambda: owner_norm)
    result = policy.is_valid_signature(digest_bytes, signature_bytes)
    valid = result == ERC1271_MAGIC_VALUE

    if ctx.obj.get("json_output"):
        click.echo(json.dumps({"owner": owner_norm, "result": "0x" + result.hex(), "valid": valid}, indent=2))
        return

    style = "green" if valid else "red"
    console.print(f"[bold {style}]0x{result.hex()}[/] ({'valid' if valid else 'invalid'})")


@cli.command('sign')
@click.option('--private-key', envvar='VESTWALLET_PRIVATE_KEY', required=True, help='Signer private key (hex)')
@click.option('--digest', default=None, help='32-byte digest to sign (hex)')
@click.option('--message', default=None, help='Text message, hashed with the personal_sign prefix')
@click.pass_context
def sign(ctx: click.Context, private_key: str, digest: Optional[str], message: Optional[str]):
    """Sign a digest or personal message with PRIVATE_KEY."""
    if (digest is None) == (message is None):
        raise click.UsageError("Provide exactly one of --digest or --message")

    digest_bytes = hash_personal_message(message.encode("utf-8")) if message is not None else _parse_hex(digest, "digest")
    try:
        signature = sign_digest(private_key, digest_bytes)
        signer = address_from_private_key(private_key)
    except (ValueError, ValidationError) as exc:
        _cli_fail(exc)
        return

    payload = {"signer": signer, "digest": "0x" + digest_bytes.hex(), "signature": "0x" + signature.hex()}
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(show_header=False, box=box.SIMPLE)
    table.add_row("[bold cyan]Signer", payload["signer"])
    table.add_row("[bold cyan]Digest", payload["digest"])
    table.add_row("[bold green]Signature", payload["signature"])
    console.print(table)


# ============================================================================
# Main Entry Point
# ============================================================================

def main():
    """Main CLI entry point"""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/]")
        sys.exit(130)
    except (VestingError, ValueError, KeyError, TypeError) as exc:
        _cli_fail(exc)


if __name__ == '__main__':
    main()
