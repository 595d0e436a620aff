"""Multi-month calendar window (tkinter) with button and swipe navigation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from tkinter import font as tkfont
import tkinter as tk
from typing import Callable, Protocol

from calendar_logic import CalendarError, CalendarSystem, GregorianCalendar
from month_grid import weekday_labels, weeks_for
from navigator import CalendarNavigator, DragDelta, MultiMonthNavigator
from settings import interval_from, load_settings

logger = logging.getLogger(__name__)

# Colours
ACCENT = "#0078D4"
HEADER_BG = "#F3F3F3"
GRID_BG = "white"
WN_FG = "#888888"
WEEKEND_FG = "#CC0000"

MAX_WEEKS = 6


@dataclass(frozen=True)
class CellContent:
    """What a renderer wants drawn in one day cell."""

    text: str
    fg: str = "black"
    bg: tuple[str, ...] = (GRID_BG,)
    bold: bool = False
    cursor: str = ""


class CellRenderer(Protocol):
    def render(self, day: datetime) -> CellContent: ...


class DayNumberRenderer:
    """Day number; today on the accent colour, weekends in red."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def render(self, day: datetime) -> CellContent:
        is_today = day.date() == self._clock().date()
        bg, fg = self._day_colors(is_today, day.weekday() >= 5)
        return CellContent(str(day.day), fg, (bg,), bold=is_today, cursor="hand2")

    @staticmethod
    def _day_colors(is_today: bool, is_weekend: bool) -> tuple[str, str]:
        if is_today:
            return ACCENT, "white"
        if is_weekend:
            return GRID_BG, WEEKEND_FG
        return GRID_BG, "black"


class _CallableRenderer:
    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[datetime], CellContent]) -> None:
        self._fn = fn

    def render(self, day: datetime) -> CellContent:
        return self._fn(day)


def as_renderer(renderer) -> CellRenderer:
    """Accept a renderer object, a plain callable, or None for the default."""
    if renderer is None:
        return DayNumberRenderer()
    if hasattr(renderer, "render"):
        return renderer
    if callable(renderer):
        return _CallableRenderer(renderer)
    raise TypeError(f"not a cell renderer: {renderer!r}")


class _MonthPanel:
    """Header, weekday labels and a fixed 6x7 cell pool for one month."""

    def __init__(self, parent: tk.Frame, fonts: dict, navigator: CalendarNavigator,
                 renderer: CellRenderer, show_header: bool = True) -> None:
        self.navigator = navigator
        self.renderer = renderer
        self._fonts = fonts
        self._press_at: tuple[int, int] | None = None
        self._cell_dates: dict[int, datetime] = {}

        self.frame = tk.Frame(parent, bg=GRID_BG)

        self.header: tk.Label | None = None
        if show_header:
            self._build_header(fonts)

        self.wk_header = tk.Label(
            self.frame, text="Wk", font=fonts["bold"], bg=GRID_BG, fg=WN_FG, width=3,
        )
        self.wk_header.grid(row=1, column=0)

        first = navigator.calendar.first_weekday
        self.day_headers: list[tk.Label] = []
        for col, abbr in enumerate(weekday_labels(navigator.calendar)):
            fg = WEEKEND_FG if (first + col) % 7 >= 5 else "#333333"
            lbl = tk.Label(
                self.frame, text=abbr, font=fonts["bold"], bg=GRID_BG, fg=fg, width=3,
            )
            lbl.grid(row=1, column=col + 1)
            self.day_headers.append(lbl)

        self.week_nums: list[tk.Label] = []
        self.day_cells: list[list[tk.Canvas]] = []
        for r in range(MAX_WEEKS):
            grid_row = r + 2
            wn = tk.Label(
                self.frame, font=fonts["wn"], bg=GRID_BG, fg=WN_FG, width=3,
            )
            wn.grid(row=grid_row, column=0)
            self.week_nums.append(wn)

            row_cells: list[tk.Canvas] = []
            for c in range(7):
                cell = tk.Canvas(
                    self.frame, width=fonts["cell_w"], height=fonts["cell_h"],
                    bg=GRID_BG, highlightthickness=0, borderwidth=0,
                )
                cell.grid(row=grid_row, column=c + 1)
                cell.bind("<ButtonPress-1>", self._on_press)
                cell.bind("<B1-Motion>", self._on_motion)
                cell.bind("<ButtonRelease-1>", self._on_release)
                row_cells.append(cell)
            self.day_cells.append(row_cells)

        self.refresh()

    def _build_header(self, fonts: dict) -> None:
        # ◀◀  ◀  2024/3  Today  ▶  ▶▶
        nav = tk.Frame(self.frame, bg=HEADER_BG)
        nav.grid(row=0, column=0, columnspan=8, sticky="we", pady=(0, 2))

        buttons = (
            ("\u25C0\u25C0", "left", self.navigator.previous_year),
            ("\u25C0", "left", self.navigator.previous),
            ("\u25B6\u25B6", "right", self.navigator.next_year),
            ("\u25B6", "right", self.navigator.next),
        )
        for text, side, action in buttons[:2]:
            self._nav_button(nav, text, side, action, fonts["nav"])

        self.header = tk.Label(nav, font=fonts["header"], bg=HEADER_BG, fg="#333333")
        self.header.pack(side="left", padx=6)

        for text, side, action in buttons[2:]:
            self._nav_button(nav, text, side, action, fonts["nav"])

        btn_today = tk.Label(
            nav, text="Today", font=fonts["bold"], bg=HEADER_BG, fg=ACCENT, cursor="hand2",
        )
        btn_today.pack(side="right", padx=6)
        btn_today.bind("<Button-1>", lambda _e: self.navigate(self.navigator.today))

    def _nav_button(self, parent: tk.Frame, text: str, side: str,
                    action: Callable[[], object], font) -> None:
        btn = tk.Label(parent, text=text, font=font, bg=HEADER_BG, cursor="hand2")
        btn.pack(side=side, padx=6)
        btn.bind("<Button-1>", lambda _e: self.navigate(action))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def navigate(self, action: Callable[[], object]) -> None:
        """Run a navigator transition, then redraw; failures keep the panel."""
        try:
            action()
        except CalendarError as e:
            logger.warning("Navigation from %s failed: %s",
                           f"{self.navigator.month:%Y-%m}", e)
            return
        self.refresh()

    # ------------------------------------------------------------------
    # Redraw from the navigator's current month
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        month = self.navigator.month
        if self.header is not None:
            self.header.configure(text=f"{month.year}/{month.month}")

        try:
            weeks = weeks_for(month, self.navigator.calendar)
        except CalendarError as e:
            logger.warning("Cannot lay out %s: %s", f"{month:%Y-%m}", e)
            weeks = []

        self._cell_dates.clear()
        for r in range(MAX_WEEKS):
            if r < len(weeks):
                week = weeks[r]
                self.week_nums[r].configure(text=str(week.iso_week))
                for c, day in enumerate(week):
                    cell = self.day_cells[r][c]
                    content = self.renderer.render(day.date)
                    self._cell_dates[id(cell)] = day.date
                    if day.in_month:
                        self._draw_cell(cell, content)
                    else:
                        self._clear_cell(cell)
            else:
                self.week_nums[r].configure(text="")
                for cell in self.day_cells[r]:
                    self._clear_cell(cell)

    def date_at(self, cell: tk.Canvas) -> datetime | None:
        return self._cell_dates.get(id(cell))

    # ------------------------------------------------------------------
    # Canvas cell drawing (supports multi-colour stripes)
    # ------------------------------------------------------------------
    def _draw_cell(self, cell: tk.Canvas, content: CellContent) -> None:
        cell.delete("all")
        w = cell.winfo_width()
        h = cell.winfo_height()
        if w <= 1:
            w = int(cell["width"]) + 2
        if h <= 1:
            h = int(cell["height"]) + 2

        bg_colors = content.bg
        if len(bg_colors) <= 1:
            cell.configure(bg=bg_colors[0] if bg_colors else GRID_BG)
        else:
            cell.configure(bg=bg_colors[0])
            stripe_h = h / len(bg_colors)
            for i, c in enumerate(bg_colors):
                y1 = round(i * stripe_h)
                y2 = round((i + 1) * stripe_h)
                cell.create_rectangle(0, y1, w, y2, fill=c, outline="")

        if content.text:
            font = self._fonts["bold"] if content.bold else self._fonts["normal"]
            cell.create_text(w // 2, h // 2, text=content.text, fill=content.fg, font=font)
        cell.configure(cursor=content.cursor)

    @staticmethod
    def _clear_cell(cell: tk.Canvas) -> None:
        cell.delete("all")
        cell.configure(bg=GRID_BG, cursor="")

    # ------------------------------------------------------------------
    # Swipe events
    # ------------------------------------------------------------------
    def _delta(self, event: tk.Event) -> DragDelta:
        px, py = self._press_at
        return DragDelta(event.x_root - px, event.y_root - py)

    def _on_press(self, event: tk.Event) -> None:
        self._press_at = (event.x_root, event.y_root)

    def _on_motion(self, event: tk.Event) -> None:
        if self._press_at is None:
            return
        self.navigator.on_drag_changed(self._delta(event))

    def _on_release(self, event: tk.Event) -> None:
        if self._press_at is None:
            return
        delta = self._delta(event)
        self._press_at = None
        self.navigate(lambda: self.navigator.on_drag_ended(delta))


class CalendarWindow:
    """Calendar window showing one swipeable panel per month."""

    def __init__(
        self,
        calendar: CalendarSystem | None = None,
        renderer=None,
        on_month_change: Callable[[datetime], None] | None = None,
        settings: dict | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        settings = settings if settings is not None else load_settings()

        self.root = tk.Tk()
        self.root.title(self._title(clock()))
        self.root.resizable(True, True)
        self.root.configure(bg=GRID_BG)

        self._setup_fonts()

        self.calendar = calendar or GregorianCalendar(settings["first_weekday"])
        self.renderer = as_renderer(renderer)
        self.show_header: bool = settings["show_header"]
        self._clock = clock
        self._on_month_change = on_month_change

        self.navigators = MultiMonthNavigator(
            interval_from(settings, self.calendar, clock), self.calendar,
            threshold=settings["drag_threshold"],
            on_month_change=self._month_changed, clock=clock,
        )
        self.grid_cols: int = settings["grid_cols"] or max(1, len(self.navigators))

        # Font dict for _MonthPanel — includes cell pixel dims
        _tmp = tk.Label(self.root, text="00", font=self.font_normal, width=3)
        _tmp.update_idletasks()
        _cw = _tmp.winfo_reqwidth()
        _ch = _tmp.winfo_reqheight()
        _tmp.destroy()
        self._panel_fonts = {
            "header": self.font_header, "bold": self.font_bold,
            "normal": self.font_normal, "wn": self.font_wn, "nav": self.font_nav,
            "cell_w": _cw, "cell_h": _ch,
        }

        self._panels: list[_MonthPanel] = []
        self._footer_label: tk.Label | None = None
        self._build_shell()

        self.root.bind("<Escape>", lambda _e: self.hide())
        self.root.protocol("WM_DELETE_WINDOW", self.hide)
        self.root.withdraw()

    # ------------------------------------------------------------------
    # Fonts
    # ------------------------------------------------------------------
    def _setup_fonts(self) -> None:
        families = tkfont.families(self.root)
        base = "Segoe UI" if "Segoe UI" in families else "TkDefaultFont"
        self.font_normal = tkfont.Font(family=base, size=9)
        self.font_bold = tkfont.Font(family=base, size=9, weight="bold")
        self.font_header = tkfont.Font(family=base, size=10, weight="bold")
        self.font_nav = tkfont.Font(family=base, size=12, weight="bold")
        self.font_wn = tkfont.Font(family=base, size=8)
        self.font_footer = tkfont.Font(family=base, size=9)

    @staticmethod
    def _title(now: datetime) -> str:
        return f"Swipe Calendar  {now:%B %Y}"

    # ------------------------------------------------------------------
    # Build shell (once) — month panels + footer
    # ------------------------------------------------------------------
    def _build_shell(self) -> None:
        self._outer = tk.Frame(self.root, bg=GRID_BG)
        self._outer.pack(padx=6, pady=4)

        months_frame = tk.Frame(self._outer, bg=GRID_BG)
        months_frame.pack()
        for i, nav in enumerate(self.navigators):
            panel = _MonthPanel(
                months_frame, self._panel_fonts, nav, self.renderer, self.show_header,
            )
            panel.frame.grid(row=i // self.grid_cols, column=i % self.grid_cols,
                             padx=6, pady=2, sticky="n")
            self._panels.append(panel)

        self._footer_label = tk.Label(
            self._outer, text=self._footer_text(), font=self.font_footer,
            bg=GRID_BG, fg="#555555",
        )
        self._footer_label.pack(pady=(4, 0))

    @property
    def panels(self) -> list[_MonthPanel]:
        return list(self._panels)

    def _footer_text(self) -> str:
        return f"Today: {self._clock():%d.%m.%Y}"

    # ------------------------------------------------------------------
    # Month change fan-in
    # ------------------------------------------------------------------
    def _month_changed(self, month: datetime) -> None:
        logger.debug("Month changed to %s", f"{month:%Y-%m}")
        if self._footer_label is not None:
            self._footer_label.configure(text=self._footer_text())
        if self._on_month_change is not None:
            self._on_month_change(month)

    def refresh_today(self) -> None:
        """Redraw everything that shows today's date."""
        self.root.title(self._title(self._clock()))
        if self._footer_label is not None:
            self._footer_label.configure(text=self._footer_text())
        for panel in self._panels:
            panel.refresh()

    def go_today(self) -> None:
        self.navigators.today()
        for panel in self._panels:
            panel.refresh()

    # ------------------------------------------------------------------
    # Show / Hide / Toggle
    # ------------------------------------------------------------------
    def toggle(self) -> None:
        if self.root.state() == "withdrawn" or not self.root.winfo_viewable():
            self.show()
        else:
            self.hide()

    def show(self) -> None:
        self.root.title(self._title(self._clock()))
        self.root.deiconify()
        self._position_window()
        self.root.lift()
        self.root.focus_force()

    def hide(self) -> None:
        self.root.withdraw()

    # ------------------------------------------------------------------
    # Position bottom-right of the screen
    # ------------------------------------------------------------------
    def _position_window(self) -> None:
        self.root.update_idletasks()
        win_w = self.root.winfo_reqwidth()
        win_h = self.root.winfo_reqheight()
        x = self.root.winfo_screenwidth() - win_w - 12
        y = self.root.winfo_screenheight() - win_h - 60
        self.root.geometry(f"{win_w}x{win_h}+{max(0, x)}+{max(0, y)}")
