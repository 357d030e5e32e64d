"""Generación de Excel formateado con historial y resumen de lecturas."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from gluco_track.aggregate import readings_to_frame, summarize
from gluco_track.model import Reading
from gluco_track.status import METRIC_INFO

_DIA_SEMANA: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "datetime": "Fecha / Hora",
    "glucose": "Glucosa (mg/dL)",
    "heart_rate": "Frecuencia\ncardíaca (BPM)",
    "spo2": "SpO2 (%)",
    "glucose_status": "Estado",
}

_SUMMARY_HEADERS = [
    "Métrica",
    "Promedio",
    "Mínimo",
    "Máximo",
    "Actual",
    "Rango normal",
]


@dataclass(frozen=True)
class ReportLayout:
    """Layout/formatting configuration for the report workbook."""

    history_sheet: str = "Historial"
    summary_sheet: str = "Resumen"


def _weekday_label(i: object) -> str:
    """Convierte índice 0-6 (lunes-domingo) a etiqueta de 3 letras."""
    if i is None or (isinstance(i, float) and pd.isna(i)):
        return ""
    if isinstance(i, int | float):
        idx = int(i)
        return _DIA_SEMANA[idx] if 0 <= idx < 7 else ""
    return ""


def history_frame(
    readings: Sequence[Reading], tzinfo_: tzinfo | None = None
) -> pd.DataFrame:
    """Newest-first table with weekday, naive datetime and glucose status."""
    frame = readings_to_frame(readings, tzinfo_)
    cols = list(_HEADER_MAP)
    if frame.empty:
        return pd.DataFrame(columns=cols)
    frame = frame.iloc[::-1].reset_index(drop=True)
    # Excel no admite timezone: se exporta la hora local sin tz.
    local = [pd.Timestamp(dt) for dt in frame["datetime"]]
    frame["weekday"] = [_weekday_label(ts.weekday()) for ts in local]
    frame["datetime"] = [ts.tz_localize(None) for ts in local]
    return frame[cols]


def summary_frame(readings: Sequence[Reading]) -> pd.DataFrame:
    """One row per metric: average, min, max, current and normal range."""
    rows = []
    for metric, stats in summarize(readings).items():
        info = METRIC_INFO[metric]
        rows.append(
            [
                f"{info.title} ({info.unit})",
                stats.average,
                stats.minimum,
                stats.maximum,
                stats.current,
                info.normal_range,
            ]
        )
    return pd.DataFrame(rows, columns=_SUMMARY_HEADERS)


def write_report_xlsx(
    readings: Sequence[Reading],
    out_path: Path,
    layout: ReportLayout,
    tzinfo_: tzinfo | None = None,
) -> None:
    """Write a formatted report workbook.

    Args:
        readings: Readings to export (typically a time-window view).
        out_path: Output path for the XLSX file.
        layout: Sheet names.
        tzinfo_: Zone used to display timestamps (local by default).
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    history = history_frame(readings, tzinfo_).rename(columns=_HEADER_MAP)
    summary = summary_frame(readings)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        history.to_excel(writer, index=False, sheet_name=layout.history_sheet)
        summary.to_excel(writer, index=False, sheet_name=layout.summary_sheet)
        _format_sheet(writer.book[layout.history_sheet])
        _format_sheet(writer.book[layout.summary_sheet])


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación, borde y altura fija a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border
        ws.row_dimensions[row[0].row].height = 15


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    """Establece anchos de columna para evitar ###."""
    widths = [
        ("Día", 6),
        ("Fecha / Hora", 18),
        ("Glucosa (mg/dL)", 14),
        ("Frecuencia\ncardíaca (BPM)", 14),
        ("SpO2 (%)", 10),
        ("Estado", 12),
        ("Métrica", 20),
        ("Rango normal", 16),
    ]
    for header, width in widths:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    """Aplica formatos numéricos por cabecera."""
    fmt_map: dict[str, str] = {
        "Fecha / Hora": "dd/mm/yyyy hh:mm",
        "Glucosa (mg/dL)": "0",
        "Frecuencia\ncardíaca (BPM)": "0",
        "SpO2 (%)": "0.0",
        "Promedio": "0.##",
    }
    for row in ws.iter_rows(min_row=2):
        for header, fmt in fmt_map.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
