"""CLI entry point: ``telemetry-ingest <command>``."""

from __future__ import annotations

import argparse
import json
import logging
import time
from typing import List, Optional

from telemetry_common.config import get_settings

from .core.domain.packet import make_test_packet
from .errors import ExportError, StoreError
from .exports.exporter import ExportFormat, PacketExporter
from .ingest.loop import IngestionLoop
from .ingest.persist_dispatcher import PersistDispatcher
from .live.buffer_config import LiveBufferConfig
from .live.live_view import LiveView, format_log_line
from .live.ring_buffer import RingBuffer
from .main import create_app, open_store
from .transports.base import LineTransport
from .transports.replay.transport import StreamLineTransport
from .transports.serial.transport import (
    SUPPORTED_BAUD_RATES,
    SerialConfig,
    SerialLineTransport,
    list_serial_ports,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="telemetry-ingest",
        description="Serial telemetry ingestion and packet database tools",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create the packets table if missing")

    run = sub.add_parser("run", help="read packets from the device (or a capture) and persist them")
    run.add_argument("--port", default=None, help="serial port or pyserial URL (default: SERIAL_PORT)")
    run.add_argument("--baud", type=int, choices=SUPPORTED_BAUD_RATES, default=None)
    run.add_argument("--replay", metavar="FILE", default=None, help="replay lines from a capture file")
    run.add_argument("--interval", type=float, default=0.0, help="pause between replayed lines (seconds)")
    run.add_argument("--no-db", action="store_true", help="run without persistence")
    run.add_argument("--refresh-seconds", type=float, default=1.0)
    run.add_argument("--serve", action="store_true", help="also serve the HTTP API")
    run.add_argument("--host", default="127.0.0.1")
    run.add_argument("--http-port", type=int, default=8000)

    export = sub.add_parser("export", help="export stored packets to a file")
    export.add_argument("format", choices=[f.value for f in ExportFormat])
    export.add_argument("--limit", type=int, default=0, help="0 = all packets")
    export.add_argument("--output-dir", default=None)

    sub.add_parser("count", help="print the number of stored packets")

    latest = sub.add_parser("latest", help="print the most recent packets")
    latest.add_argument("--limit", type=int, default=1)

    clear = sub.add_parser("clear", help="delete ALL stored packets")
    clear.add_argument("--yes", action="store_true", help="confirm the irreversible delete")

    sub.add_parser("test-write", help="insert a generated test packet")
    sub.add_parser("ports", help="list available serial ports")
    return p


def _build_transport(args) -> LineTransport:
    if args.replay:
        return StreamLineTransport.from_path(args.replay, interval_seconds=args.interval)
    cfg = SerialConfig.from_env()
    return SerialLineTransport(
        SerialConfig(
            port=args.port or cfg.port,
            baud_rate=args.baud or cfg.baud_rate,
            timeout_seconds=cfg.timeout_seconds,
            encoding=cfg.encoding,
        )
    )


def _cmd_run(args) -> int:
    settings = get_settings()
    buffer_config = LiveBufferConfig.from_env()
    live_buffer = RingBuffer(buffer_config.live_buffer_capacity, name="live_buffer")
    view = LiveView(live_buffer, buffer_config)

    store = None if args.no_db else open_store(settings)
    dispatcher = None
    if store is not None:
        dispatcher = PersistDispatcher(store, num_workers=settings.persist_workers)

    loop = IngestionLoop(_build_transport(args), live_buffer, persister=dispatcher)
    loop.start()
    logger.info("Ingestion started (db=%s, serve=%s)", store is not None, args.serve)

    try:
        if args.serve:
            import uvicorn

            app = create_app(
                store=store,
                live_view=view,
                live_buffer=live_buffer,
                ingest_loop=loop,
                dispatcher=dispatcher,
            )
            uvicorn.run(app, host=args.host, port=args.http_port, log_level=settings.log_level.lower())
        else:
            while True:
                # checked before the drain so the last packets are still shown
                alive = loop.is_alive
                n = view.refresh()
                if n:
                    logger.info("[LIVE] %d new packets, last: %s", n, format_log_line(view.last_packet))
                if not alive:
                    break
                time.sleep(args.refresh_seconds)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping...")
    finally:
        loop.stop()
        if dispatcher is not None:
            dispatcher.shutdown(wait=True)
        logger.info("Final stats: %s", loop.stats)
    return 0


def _require_store():
    store = open_store()
    if store is None:
        raise StoreError("database not connected")
    return store


def _cmd_export(args) -> int:
    settings = get_settings()
    exporter = PacketExporter(
        _require_store(),
        args.output_dir or settings.export_dir,
        settings.export_prefix,
    )
    result = exporter.export(args.format, args.limit)
    print(f"[EXPORT] Data saved to: {result.path} ({result.rows} rows)")
    return 0


def _cmd_latest(args) -> int:
    packets = _require_store().list(max(args.limit, 0))
    print(json.dumps([p.to_dict() for p in packets], indent=2))
    return 0


def _cmd_clear(args) -> int:
    if not args.yes:
        print("Refusing to delete all packets without --yes")
        return 2
    _require_store().delete_all()
    print("[DB] All packets cleared from database")
    return 0


def _cmd_test_write(args) -> int:
    store = _require_store()
    packet_id = store.insert(make_test_packet())
    print(f"[DB] Test packet written with ID: {packet_id}")
    print(f"[DB] Total packets in database: {store.count()}")
    return 0


def _cmd_ports(args) -> int:
    ports = list_serial_ports()
    if not ports:
        print("No serial ports found")
    for label in ports:
        print(label)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    args = _build_parser().parse_args(argv)
    logging.getLogger().setLevel(get_settings().log_level.upper())

    try:
        if args.command == "init-db":
            _require_store()
            print("[DB] Schema ready")
            return 0
        if args.command == "run":
            return _cmd_run(args)
        if args.command == "export":
            return _cmd_export(args)
        if args.command == "count":
            print(_require_store().count())
            return 0
        if args.command == "latest":
            return _cmd_latest(args)
        if args.command == "clear":
            return _cmd_clear(args)
        if args.command == "test-write":
            return _cmd_test_write(args)
        if args.command == "ports":
            return _cmd_ports(args)
    except (StoreError, ExportError) as e:
        logger.error("[ERROR] %s", e)
        return 1
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
