"""Formato de texto compartido por la CLI y la app Kivy."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import tzinfo

import pandas as pd

from gluco_track.dashboard import DashboardState
from gluco_track.model import GLUCOSE, METRICS, Reading
from gluco_track.status import METRIC_INFO, classify
from gluco_track.timestamps import format_timestamp

HISTORY_COLUMNS = ["Date & Time", "Glucose", "Heart Rate", "SpO2", "Status"]


def format_number(value: object) -> str:
    """Format numbers without trailing zeros or scientific notation."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        text = format(value, ".2f").rstrip("0").rstrip(".")
        return text if text else "0"
    return str(value)


def history_table(
    readings: Sequence[Reading], tzinfo_: tzinfo | None = None
) -> pd.DataFrame:
    """History rows as strings, in the given order."""
    rows = [
        [
            format_timestamp(r.timestamp, tzinfo_),
            format_number(r.glucose),
            format_number(r.heart_rate),
            format_number(r.spo2),
            classify(GLUCOSE, r.glucose).label,
        ]
        for r in readings
    ]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def summary_lines(state: DashboardState, tzinfo_: tzinfo | None = None) -> list[str]:
    """Plain-text rendering of the dashboard state."""
    lines = [f"Ventana: {state.window.label} ({state.date_range})"]
    if state.latest is None:
        lines.append("Sin lecturas.")
    else:
        when = format_timestamp(state.latest.timestamp, tzinfo_)
        lines.append(f"Ultima lectura: {when}")
    for metric in METRICS:
        info = METRIC_INFO[metric]
        stats = state.stats.get(metric)
        status = state.statuses.get(metric)
        current = state.latest.value(metric) if state.latest is not None else 0
        line = f"{info.title}: {format_number(current)} {info.unit}"
        if status is not None:
            line += f" [{status.label}]"
        if stats is not None:
            line += (
                f"  avg {format_number(stats.average)}"
                f"  min {format_number(stats.minimum)}"
                f"  max {format_number(stats.maximum)}"
            )
        lines.append(line)
    if state.recommendations is not None:
        foods = ", ".join(item.name for item in state.recommendations.foods)
        workouts = ", ".join(item.name for item in state.recommendations.workouts)
        lines.append(f"Comidas sugeridas: {foods}")
        lines.append(f"Ejercicios sugeridos: {workouts}")
    connected = "conectado" if state.connection.connected else "desconectado"
    lines.append(f"Dispositivo: {connected}")
    return lines
