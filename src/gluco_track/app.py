"""App Kivy: tablero en vivo de glucosa, frecuencia cardíaca y SpO2."""

from __future__ import annotations

import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

from gluco_track.aggregate import paginate
from gluco_track.context import ClientContext
from gluco_track.dashboard import DashboardFeed, DashboardState
from gluco_track.device import connect_with_token, disconnect, realtime_status_message
from gluco_track.display import format_number, history_table
from gluco_track.excel_writer import ReportLayout, write_report_xlsx
from gluco_track.model import METRICS, TimeWindow
from gluco_track.simulator import DemoSimulator
from gluco_track.status import METRIC_INFO
from gluco_track.storage import AppConfig, SQLiteReadingStore

WINDOW_CHOICES: tuple[TimeWindow, ...] = (
    TimeWindow.LAST_7_DAYS,
    TimeWindow.LAST_30_DAYS,
    TimeWindow.LAST_90_DAYS,
    TimeWindow.ALL_TIME,
)


def run_app() -> int:
    """Lanza la app Kivy."""
    from kivy.app import App
    from kivy.clock import Clock
    from kivy.core.window import Window
    from kivy.resources import resource_find
    from kivy.uix.boxlayout import BoxLayout
    from kivy.uix.button import Button
    from kivy.uix.label import Label
    from kivy.uix.popup import Popup
    from kivy.uix.spinner import Spinner
    from kivy.uix.textinput import TextInput

    class GlucoTrackApp(App):
        """Main Kivy app."""

        def __init__(self, **kwargs: object) -> None:
            super().__init__(**kwargs)
            self.store = SQLiteReadingStore(Path.cwd() / "gluco_track.sqlite3")
            self.app_config = self.store.load_config()
            self.feed: DashboardFeed | None = None
            self.context: ClientContext | None = None
            self.demo_event: Any | None = None
            self.page = 1
            self.metric_labels: dict[str, Label] = {}
            self.preview: TextInput | None = None
            self.status: Label | None = None
            self.device_label: Label | None = None
            self.token_input: TextInput | None = None
            self._preview_font = resource_find("data/fonts/RobotoMono-Regular.ttf")

        def build(self) -> BoxLayout:
            Window.bind(on_key_down=self._on_key_down)

            root = BoxLayout(orientation="vertical", spacing=8, padding=10)
            root.add_widget(
                Label(
                    text="GlucoTrack: lecturas en vivo del dispositivo.",
                    size_hint_y=None,
                    height=36,
                )
            )

            actions = BoxLayout(
                orientation="horizontal",
                spacing=8,
                size_hint_y=None,
                height=40,
            )
            settings_btn = Button(text="Configuracion")
            window_spinner = Spinner(
                text=TimeWindow.parse(self.app_config.window_days).label,
                values=[w.label for w in WINDOW_CHOICES],
            )
            demo_btn = Button(text="Demo on/off")
            export_btn = Button(text="Exportar Excel")
            exit_btn = Button(text="Salir")
            settings_btn.bind(on_press=self._open_config_popup)
            window_spinner.bind(text=self._on_window_selected)
            demo_btn.bind(on_press=self._toggle_demo)
            export_btn.bind(on_press=self._on_export)
            exit_btn.bind(on_press=lambda *_args: self.stop())
            for widget in (settings_btn, window_spinner, demo_btn, export_btn, exit_btn):
                actions.add_widget(widget)
            root.add_widget(actions)

            device_row = BoxLayout(
                orientation="horizontal", spacing=8, size_hint_y=None, height=40
            )
            self.token_input = TextInput(
                hint_text="Token del dispositivo", multiline=False
            )
            connect_btn = Button(text="Conectar", size_hint_x=0.2)
            disconnect_btn = Button(text="Desconectar", size_hint_x=0.2)
            connect_btn.bind(on_press=self._on_connect)
            disconnect_btn.bind(on_press=self._on_disconnect)
            device_row.add_widget(self.token_input)
            device_row.add_widget(connect_btn)
            device_row.add_widget(disconnect_btn)
            root.add_widget(device_row)

            self.device_label = Label(text="", size_hint_y=None, height=26)
            root.add_widget(self.device_label)

            metrics_row = BoxLayout(
                orientation="horizontal", spacing=8, size_hint_y=None, height=60
            )
            for metric in METRICS:
                label = Label(text=METRIC_INFO[metric].title, halign="center")
                self.metric_labels[metric] = label
                metrics_row.add_widget(label)
            root.add_widget(metrics_row)

            self.status = Label(text="Sin datos", size_hint_y=None, height=30)
            root.add_widget(self.status)

            self.preview = TextInput(
                readonly=True,
                text="",
                multiline=True,
                do_wrap=False,
            )
            if self._preview_font:
                self.preview.font_name = self._preview_font
            root.add_widget(self.preview)

            pager = BoxLayout(orientation="horizontal", size_hint_y=None, height=36)
            prev_btn = Button(text="< Anterior")
            next_btn = Button(text="Siguiente >")
            prev_btn.bind(on_press=lambda *_args: self._move_page(-1))
            next_btn.bind(on_press=lambda *_args: self._move_page(1))
            pager.add_widget(prev_btn)
            pager.add_widget(next_btn)
            root.add_widget(pager)

            self._start_feed()
            return root

        def on_stop(self) -> None:
            self._stop_demo()
            if self.feed is not None:
                self.feed.stop()

        def _on_key_down(
            self,
            _window: object,
            keycode: int,
            _scancode: int,
            _text: str,
            _modifiers: list[str],
        ) -> bool:
            # Esc: salir de fullscreen o cerrar app.
            if keycode != 27:
                return False
            if Window.fullscreen:
                Window.fullscreen = False
            else:
                self.stop()
            return True

        def _start_feed(self) -> None:
            if self.feed is not None:
                self.feed.stop()
                self.feed = None
            self.context = ClientContext(
                store=self.store, user_id=self.app_config.user_id or None
            )
            if not self.app_config.user_id:
                if self.status is not None:
                    self.status.text = "Configura un usuario para ver lecturas."
                return
            self.feed = DashboardFeed(
                self.context, TimeWindow.parse(self.app_config.window_days)
            )
            self.feed.add_listener(self._render)
            try:
                self.feed.start()
            except Exception as exc:
                self._show_error("cargar lecturas", exc)

        def _render(self, state: DashboardState) -> None:
            for metric in METRICS:
                info = METRIC_INFO[metric]
                label = self.metric_labels.get(metric)
                if label is None:
                    continue
                current = state.latest.value(metric) if state.latest is not None else 0
                status = state.statuses.get(metric)
                label.text = (
                    f"{info.title}\n{format_number(current)} {info.unit}"
                    f" ({status.label if status is not None else ''})"
                )
            if self.device_label is not None:
                self.device_label.text = realtime_status_message(
                    state.connection.connected,
                    False,
                    state.latest is not None,
                )
            if self.status is not None:
                self.status.text = (
                    f"{state.window.label}: {state.date_range} "
                    f"({len(state.history)} de {state.total_readings} lecturas)"
                )
            self._refresh_preview(state)

        def _refresh_preview(self, state: DashboardState) -> None:
            if self.preview is None:
                return
            page = paginate(state.history, self.page)
            self.page = page.page
            if not page.items:
                self.preview.text = "No health data recorded yet"
                return
            lines = [
                history_table(page.items).to_string(index=False, max_colwidth=28),
                f"Showing {page.start} to {page.end} of {page.total} results",
                "",
            ]
            if state.recommendations is not None:
                recs = state.recommendations
                lines.append("Comidas: " + ", ".join(r.name for r in recs.foods))
                lines.append("Ejercicios: " + ", ".join(r.name for r in recs.workouts))
                lines.append("")
            for tip in state.tips[:4]:
                lines.append(f"[{tip.priority}] {tip.title}: {tip.description}")
            self.preview.text = "\n".join(lines)

        def _move_page(self, delta: int) -> None:
            self.page = max(1, self.page + delta)
            if self.feed is not None:
                self._refresh_preview(self.feed.state)

        def _on_window_selected(self, _spinner: object, text: str) -> None:
            window = next((w for w in WINDOW_CHOICES if w.label == text), None)
            if window is None or self.feed is None:
                return
            self.page = 1
            self.feed.set_window(window)

        def _on_connect(self, _: object) -> None:
            if self.context is None or self.token_input is None:
                return
            try:
                connect_with_token(self.context, self.token_input.text)
            except Exception as exc:
                self._show_error("conectar", exc)
                return
            self.token_input.text = ""

        def _on_disconnect(self, _: object) -> None:
            if self.context is None:
                return
            try:
                disconnect(self.context)
            except Exception as exc:
                self._show_error("desconectar", exc)

        def _toggle_demo(self, _: object) -> None:
            if self.demo_event is not None:
                self._stop_demo()
                if self.status is not None:
                    self.status.text = "Demo detenida."
                return
            if self.context is None or not self.context.user_id:
                if self.status is not None:
                    self.status.text = "Configura un usuario para la demo."
                return
            simulator = DemoSimulator(self.context)

            def tick(_dt: float) -> None:
                try:
                    simulator.tick()
                except Exception as exc:
                    self._stop_demo()
                    self._show_error("generar demo", exc)

            self.demo_event = Clock.schedule_interval(
                tick, self.app_config.demo_interval_s
            )

        def _stop_demo(self) -> None:
            if self.demo_event is not None:
                self.demo_event.cancel()
                self.demo_event = None

        def _open_config_popup(self, _: object) -> None:
            content = BoxLayout(orientation="vertical", spacing=8, padding=8)
            inputs: dict[str, TextInput] = {}
            fields = [
                ("Usuario", "user_id", self.app_config.user_id),
                ("Path salida", "export_dir", self.app_config.export_dir),
                ("Demo (seg)", "demo_interval_s", str(self.app_config.demo_interval_s)),
            ]
            for label, key, initial in fields:
                row = BoxLayout(orientation="horizontal", size_hint_y=None, height=36)
                row.add_widget(Label(text=label, size_hint_x=0.3))
                inp = TextInput(text=initial, multiline=False)
                row.add_widget(inp)
                inputs[key] = inp
                content.add_widget(row)

            footer = BoxLayout(orientation="horizontal", size_hint_y=None, height=42)
            cancel_btn = Button(text="Cancelar")
            save_btn = Button(text="Guardar")
            footer.add_widget(cancel_btn)
            footer.add_widget(save_btn)
            content.add_widget(footer)

            popup = Popup(title="Configuracion", content=content, size_hint=(0.8, 0.6))
            cancel_btn.bind(on_press=lambda *_args: popup.dismiss())
            save_btn.bind(
                on_press=lambda *_args: self._save_popup_config(popup, inputs)
            )
            popup.open()

        def _save_popup_config(self, popup: Popup, inputs: dict[str, TextInput]) -> None:
            try:
                interval = float(inputs["demo_interval_s"].text.strip())
            except ValueError:
                interval = self.app_config.demo_interval_s
            window = self.feed.window if self.feed is not None else None
            self.app_config = AppConfig(
                user_id=inputs["user_id"].text.strip(),
                export_dir=inputs["export_dir"].text.strip(),
                window_days=(
                    window.days if window is not None else self.app_config.window_days
                ),
                demo_interval_s=interval if interval > 0 else 5.0,
            )
            self.store.save_config(self.app_config)
            popup.dismiss()
            self._stop_demo()
            self.page = 1
            self._start_feed()
            if self.status is not None and self.app_config.user_id:
                self.status.text = "Configuracion guardada."

        def _on_export(self, _: object) -> None:
            if self.feed is None or not self.feed.state.history:
                if self.status is not None:
                    self.status.text = "No hay datos para exportar."
                return
            config = self.app_config
            out_dir = (
                Path(config.export_dir).expanduser()
                if config.export_dir
                else Path.cwd() / "salidas"
            )
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            out_path = out_dir / f"gluco_track_reporte_{timestamp}.xlsx"
            try:
                write_report_xlsx(self.feed.state.history, out_path, ReportLayout())
            except Exception as exc:
                self._show_error("exportar", exc)
                return
            if self.status is not None:
                self.status.text = f"Excel generado: {out_path}"

        def _show_error(self, action: str, exc: Exception) -> None:
            error_type = type(exc).__name__
            if self.status is not None:
                self.status.text = f"Error al {action} ({error_type}): {exc}"
            if self.preview is not None:
                self.preview.text = traceback.format_exc()

    GlucoTrackApp().run()
    return 0
