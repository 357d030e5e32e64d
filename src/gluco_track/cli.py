"""CLI para consultar, importar y exportar lecturas de glucosa/FC/SpO2."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from gluco_track.aggregate import paginate
from gluco_track.context import ClientContext
from gluco_track.dashboard import build_dashboard
from gluco_track.device import DeviceLink, connect_with_token, disconnect
from gluco_track.display import history_table, summary_lines
from gluco_track.errors import AuthRequiredError, StoreWriteError, ValidationError
from gluco_track.excel_writer import ReportLayout, write_report_xlsx
from gluco_track.ingest import readings_from_snapshot
from gluco_track.model import TimeWindow
from gluco_track.simulator import DemoSimulator
from gluco_track.storage import AppConfig, SQLiteReadingStore

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="GlucoTrack: lecturas de glucosa, frecuencia cardíaca y SpO2."
    )
    parser.add_argument(
        "--db",
        default=str(Path.cwd() / "gluco_track.sqlite3"),
        help="Base SQLite (default: ./gluco_track.sqlite3).",
    )
    parser.add_argument("--user", help="Usuario (default: el guardado en config).")
    parser.add_argument(
        "--window",
        help="Ventana de tiempo: 7, 30, 90 o all (default: config).",
    )
    parser.add_argument("--verbose", action="store_true", help="Logs en DEBUG.")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("summary", help="Ultima lectura, estados y estadisticas.")

    history = sub.add_parser("history", help="Historial paginado (mas reciente primero).")
    history.add_argument("--page", type=int, default=1)
    history.add_argument("--per-page", type=int, default=5)

    imp = sub.add_parser("import", help="Importa un export JSON del store.")
    imp.add_argument("file")

    ingest = sub.add_parser("ingest", help="Procesa payloads JSON del dispositivo.")
    ingest.add_argument("file", nargs="?", default="-", help="Archivo o - (stdin).")

    demo = sub.add_parser("demo", help="Genera lecturas de demostracion.")
    demo.add_argument("--days", type=int, default=7)
    demo.add_argument("--per-day", type=int, default=4)
    demo.add_argument("--seed", type=int, default=None)

    connect = sub.add_parser("connect", help="Conecta el dispositivo con un token.")
    connect.add_argument("token")
    sub.add_parser("disconnect", help="Marca el dispositivo como desconectado.")

    export = sub.add_parser("export", help="Exporta el reporte a Excel.")
    export.add_argument("--out-dir", default=None)

    config = sub.add_parser("config", help="Guarda usuario/ventana/export por defecto.")
    config.add_argument("--export-dir", default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 on success).
    """
    ns = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = SQLiteReadingStore(Path(ns.db).expanduser())
    config = store.load_config()
    context = ClientContext(store=store, user_id=ns.user or config.user_id or None)
    try:
        window = TimeWindow.parse(ns.window or config.window_days)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 2
    try:
        return _dispatch(ns, context, config, window)
    except (AuthRequiredError, StoreWriteError, ValidationError) as exc:
        print(f"Error ({type(exc).__name__}): {exc}")
        return 1


def _dispatch(
    ns: argparse.Namespace,
    context: ClientContext,
    config: AppConfig,
    window: TimeWindow,
) -> int:
    command = ns.command
    if command == "config":
        return _cmd_config(ns, context, config, window)
    if command == "import":
        return _cmd_import(context, Path(ns.file))
    if command == "ingest":
        return _cmd_ingest(context, ns.file)
    if command == "demo":
        import numpy as np

        sim = DemoSimulator(context, np.random.default_rng(ns.seed))
        stored = sim.backfill(ns.days, ns.per_day)
        print(f"OK: {len(stored)} lecturas de demostracion guardadas")
        return 0
    if command == "connect":
        connect_with_token(context, ns.token)
        print("OK: dispositivo conectado")
        return 0
    if command == "disconnect":
        disconnect(context)
        print("OK: dispositivo desconectado")
        return 0

    user_id = context.require_user()
    readings = readings_from_snapshot(context.store.snapshot(user_id))
    state = build_dashboard(
        readings, window, context.now(), context.store.load_profile(user_id)
    )

    if command == "summary":
        for line in summary_lines(state):
            print(line)
        return 0
    if command == "history":
        page = paginate(state.history, ns.page, ns.per_page)
        if not page.items:
            print("No health data recorded yet")
            return 0
        print(history_table(page.items).to_string(index=False))
        print(
            f"Showing {page.start} to {page.end} of {page.total} results "
            f"(page {page.page}/{page.total_pages})"
        )
        return 0
    if command == "export":
        out_dir = (
            Path(ns.out_dir or config.export_dir).expanduser()
            if (ns.out_dir or config.export_dir)
            else Path.cwd() / "salidas"
        )
        ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        out_path = out_dir / f"gluco_track_reporte_{ts}.xlsx"
        write_report_xlsx(state.history, out_path, ReportLayout())
        print(f"OK: {len(state.history)} lecturas exportadas")
        print(f"OK: Output: {out_path}")
        return 0
    raise ValueError(f"Unknown command: {command}")


def _cmd_config(
    ns: argparse.Namespace,
    context: ClientContext,
    config: AppConfig,
    window: TimeWindow,
) -> int:
    updated = AppConfig(
        user_id=context.user_id or "",
        export_dir=ns.export_dir if ns.export_dir is not None else config.export_dir,
        window_days=window.days,
        demo_interval_s=config.demo_interval_s,
    )
    store = context.store
    if not isinstance(store, SQLiteReadingStore):
        raise TypeError("Config requires the SQLite store")
    store.save_config(updated)
    print("OK: configuracion guardada")
    return 0


def _cmd_import(context: ClientContext, path: Path) -> int:
    """Load a JSON export (key -> record mapping or list) verbatim."""
    user_id = context.require_user()
    data: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        items = [(str(k), v) for k, v in data.items()]
    elif isinstance(data, list):
        items = [(None, v) for v in data]
    else:
        raise ValidationError("Export JSON must be an object or a list")

    stored = 0
    skipped = 0
    for key, record in items:
        if not isinstance(record, dict):
            logger.debug("Skipping non-object record %r", key)
            skipped += 1
            continue
        if context.store.append_record(user_id, record, key=key) is None:
            skipped += 1
        else:
            stored += 1
    valid = len(readings_from_snapshot(context.store.snapshot(user_id)))
    print(f"OK: {stored} registros importados, {skipped} omitidos")
    print(f"OK: {valid} lecturas validas en total")
    return 0


def _cmd_ingest(context: ClientContext, source: str) -> int:
    link = DeviceLink(context)
    link.connect()
    lines = sys.stdin if source == "-" else Path(source).open(encoding="utf-8")
    stored = 0
    try:
        for line in lines:
            if not line.strip():
                continue
            if link.handle_notification(line) is not None:
                stored += 1
    finally:
        if lines is not sys.stdin:
            lines.close()
    print(f"OK: {stored} lecturas recibidas del dispositivo")
    return 0
