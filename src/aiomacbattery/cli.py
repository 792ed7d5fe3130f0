"""The CLI for aiomacbattery."""

import argparse
import asyncio
import logging
import sys
import time
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

import orjson
import tzlocal
from aiohttp import ClientSession

from . import utils
from .auth import AbstractAuth, StaticTokenAuth
from .config import ReportConfig
from .const import DEVICE_CONFIGURATION_SCOPE
from .exceptions import BatteryFleetError, NotificationError
from .export import report_filename, rows_to_csv, rows_to_html
from .fleet import FleetFilter, FleetView, SortKey, low_health_rows
from .logging_config import setup_logging
from .model import DeviceBatteryRow
from .notify import AbstractNotifier, Attachment, LogNotifier
from .reader import collect_record
from .session import BatteryFleetSession
from .telemetry import decode_record

_LOGGER = logging.getLogger(__name__)

TOKEN_EXPIRY_MARGIN = 60


class ClientCredentialsAuth(AbstractAuth):
    """Provide Graph authentication with an app registration secret."""

    def __init__(
        self,
        websession: ClientSession,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        host: str | None = None,
    ) -> None:
        """Initialize the auth."""
        super().__init__(websession, host)
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.token: dict[str, str] | None = None

    async def async_get_access_token(self) -> str:
        """Return a valid access token, requesting a new one when expired."""
        if (
            self.token is None
            or float(self.token["expires_at"]) - TOKEN_EXPIRY_MARGIN < time.time()
        ):
            self.token = await utils.async_get_access_token(
                self.tenant_id, self.client_id, self.client_secret
            )
            _LOGGER.debug("New access token expires at %s", self.token["expires_at"])
        return self.token["access_token"]


def auth_from_config(websession: ClientSession, config: ReportConfig) -> AbstractAuth:
    """Return the auth matching the configured credentials."""
    if config.access_token:
        if not utils.token_has_scope(config.access_token, DEVICE_CONFIGURATION_SCOPE):
            _LOGGER.warning(
                "Access token lacks %s, run states will likely be denied",
                DEVICE_CONFIGURATION_SCOPE,
            )
        return StaticTokenAuth(websession, config.access_token)
    return ClientCredentialsAuth(
        websession,
        str(config.tenant_id),
        str(config.client_id),
        str(config.client_secret),
    )


async def async_fetch_rows(config: ReportConfig) -> list[DeviceBatteryRow]:
    """Fetch the rows of the fleet, enriched if configured."""
    async with ClientSession() as websession:
        session = BatteryFleetSession(
            auth_from_config(websession, config), enrich_users=config.enrich_users
        )
        try:
            rows = await session.get_rows(config.attribute)
            await session.wait_for_enrichment()
        finally:
            await session.close()
    return rows


def format_table(rows: Sequence[DeviceBatteryRow]) -> str:
    """Return the rows as a plain text table."""
    lines = [f"{'Device':<28} {'User':<32} {'Health':>6} {'Cycles':>6} Condition"]
    for row in rows:
        health = "-" if row.health_percent is None else f"{row.health_percent}%"
        cycles = "-" if row.cycle_count is None else str(row.cycle_count)
        lines.append(
            f"{row.device_name[:28]:<28} {(row.user_principal_name or '-')[:32]:<32} "
            f"{health:>6} {cycles:>6} {row.condition or '-'}"
        )
    return "\n".join(lines)


async def _async_notify_failure(
    notifier: AbstractNotifier, config: ReportConfig, message: str
) -> None:
    """Send a failure notice, logging if that fails too."""
    try:
        await notifier.async_send_failure(config.recipients, message)
    except NotificationError as err:
        _LOGGER.warning("Failure notice could not be sent: %s", err)


async def async_run_report(
    config: ReportConfig,
    notifier: AbstractNotifier,
    now: datetime | None = None,
) -> int:
    """Build the report, store it and hand it to the notifier.

    Returns the process exit code.
    """
    now = now or datetime.now(tz=tzlocal.get_localzone())
    try:
        rows = await async_fetch_rows(config)
    except BatteryFleetError as err:
        _LOGGER.error("Fetching battery rows failed: %s", err)
        await _async_notify_failure(notifier, config, f"Fetching failed: {err}")
        return 1

    csv_text = rows_to_csv(rows)
    html = rows_to_html(rows, generated_at=now)
    attachments = [
        Attachment(report_filename("csv", now), csv_text.encode(), "text/csv"),
        Attachment(report_filename("html", now), html.encode(), "text/html"),
    ]
    try:
        output_dir = Path(config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        for attachment in attachments:
            (output_dir / attachment.filename).write_bytes(attachment.content)
    except OSError as err:
        _LOGGER.error("Writing the report failed: %s", err)
        await _async_notify_failure(notifier, config, f"Writing failed: {err}")
        return 1

    for row in rows:
        if row.script_failed:
            _LOGGER.warning(
                "Battery script failed on %s: %s",
                row.device_name,
                row.error_description or row.run_state,
            )
    alerts = low_health_rows(rows, config.min_health)
    for row in alerts:
        _LOGGER.warning(
            "%s (%s) is at %s%% health",
            row.device_name,
            row.user_principal_name or "no user",
            row.health_percent,
        )
    subject = (
        f"macOS Battery Health Report: {len(rows)} devices, "
        f"{len(alerts)} below {config.min_health}%"
    )
    try:
        await notifier.async_send_report(config.recipients, subject, html, attachments)
    except NotificationError as err:
        _LOGGER.error("Sending the report failed: %s", err)
        return 1
    return 0


async def async_fetch(config: ReportConfig, args: argparse.Namespace) -> int:
    """Fetch the rows and print or export them."""
    try:
        rows = await async_fetch_rows(config)
    except BatteryFleetError as err:
        _LOGGER.error("Fetching battery rows failed: %s", err)
        return 1
    view = FleetView(
        rows=rows,
        fleet_filter=FleetFilter(
            search_text=args.search or "",
            min_health=args.min_health or 0,
            only_over_threshold=args.over_threshold,
            only_charging=args.charging,
        ),
        sort_key=SortKey(args.sort),
        ascending=not args.descending,
    )
    visible = view.visible_rows
    if args.csv:
        Path(args.csv).write_text(rows_to_csv(visible), encoding="utf-8")
    if args.html:
        Path(args.html).write_text(rows_to_html(visible), encoding="utf-8")
    summary = view.summary
    if args.json:
        print(
            orjson.dumps(
                {
                    "summary": summary.to_dict(),
                    "rows": [row.to_dict() for row in visible],
                },
                option=orjson.OPT_INDENT_2,
            ).decode()
        )
    elif not args.csv and not args.html:
        print(format_table(visible))
    _LOGGER.info(
        "%s devices, average health %s, %s at or above the cycle threshold",
        summary.device_count,
        "-" if summary.average_health is None else f"{summary.average_health:.1f}%",
        summary.over_cycle_threshold,
    )
    return 0


def _add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-a", "--attribute", help="Custom attribute id or name")
    parser.add_argument("--access-token", help="Graph access token")
    parser.add_argument("--tenant-id", help="Entra tenant id")
    parser.add_argument("--client-id", help="App registration client id")
    parser.add_argument("--client-secret", help="App registration secret")
    parser.add_argument(
        "--no-enrich", action="store_true", help="Skip the directory user lookups"
    )


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="macbattery",
        description=main.__doc__,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Log debug output")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("telemetry", help="Print the battery record of this Mac")

    decode = commands.add_parser("decode", help="Decode a battery record")
    decode.add_argument("record", help="The attribute value of one device")

    fetch = commands.add_parser("fetch", help="Fetch the battery rows of the fleet")
    _add_connection_arguments(fetch)
    fetch.add_argument("--search", help="Filter by device name or user")
    fetch.add_argument("--min-health", type=int, help="Hide devices below")
    fetch.add_argument("--over-threshold", action="store_true")
    fetch.add_argument("--charging", action="store_true")
    fetch.add_argument(
        "--sort", choices=[key.value for key in SortKey], default=SortKey.DEVICE
    )
    fetch.add_argument("--descending", action="store_true")
    fetch.add_argument("--csv", help="Write the rows as CSV to this file")
    fetch.add_argument("--html", help="Write the rows as HTML to this file")
    fetch.add_argument(
        "--json", action="store_true", help="Print the summary and rows as JSON"
    )

    report = commands.add_parser("report", help="Build and send the fleet report")
    _add_connection_arguments(report)
    report.add_argument(
        "-r", "--recipient", dest="recipients", action="append", help="Report address"
    )
    report.add_argument("--min-health", type=int, help="Alert below this health")
    report.add_argument("-o", "--output-dir", help="Directory for the report files")
    return parser


def _options(args: argparse.Namespace) -> dict[str, object]:
    return {
        "attribute": args.attribute,
        "access_token": args.access_token,
        "tenant_id": args.tenant_id,
        "client_id": args.client_id,
        "client_secret": args.client_secret,
        "no_enrich": args.no_enrich,
        "min_health": args.min_health,
        "recipients": getattr(args, "recipients", None),
        "output_dir": getattr(args, "output_dir", None),
    }


def main(argv: Sequence[str] | None = None) -> int:
    """Battery health of a fleet of Macs.

    telemetry  print the battery record of this Mac, for a custom attribute
    decode     decode a battery record into JSON
    fetch      read the records of all devices from Microsoft Graph
    report     build the CSV and HTML report and send it, for scheduled runs

    Credentials are read from GRAPH_ACCESS_TOKEN or AZURE_TENANT_ID,
    AZURE_CLIENT_ID and AZURE_CLIENT_SECRET when not given as options.
    """
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    if args.command == "telemetry":
        print(collect_record())
        return 0
    if args.command == "decode":
        battery = decode_record(args.record)
        print(orjson.dumps(battery.to_dict(), option=orjson.OPT_INDENT_2).decode())
        return 0

    options = _options(args)
    if args.command == "fetch":
        # the alert threshold does not apply to the table filter
        options["min_health"] = None
    try:
        config = ReportConfig.from_options(options)
    except BatteryFleetError as err:
        _LOGGER.error("%s", err)
        return 2
    if args.command == "fetch":
        return asyncio.run(async_fetch(config, args))
    return asyncio.run(async_run_report(config, LogNotifier()))


if __name__ == "__main__":
    sys.exit(main())
