"""Entry point — glues pystray (daemon thread) with tkinter (main thread)."""

import logging
import os
import threading
from datetime import date

from PIL import ImageTk

from calendar_window import CalendarWindow
from icon_gen import create_icon_image
from tray_icon import create_tray, refresh_tray

logger = logging.getLogger(__name__)

_REFRESH_MS = 60_000


def _setup_logging() -> None:
    level_name = os.environ.get("SWIPE_CALENDAR_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    _setup_logging()

    cal_win = CalendarWindow(
        on_month_change=lambda month: logger.info("Showing %s", f"{month:%Y-%m}"),
    )

    icon_image = create_icon_image()
    # Keep a reference so tkinter does not garbage-collect the photo
    cal_win.icon_photo = ImageTk.PhotoImage(icon_image)
    cal_win.root.iconphoto(True, cal_win.icon_photo)

    # Callbacks marshalled onto the tkinter main thread
    def on_show() -> None:
        cal_win.root.after(0, cal_win.toggle)

    def on_today() -> None:
        cal_win.root.after(0, cal_win.go_today)

    def on_exit() -> None:
        def _quit() -> None:
            tray.stop()
            cal_win.root.destroy()
        cal_win.root.after(0, _quit)

    tray = create_tray(icon_image, on_show, on_exit, on_today=on_today)

    # Re-check the date every minute so the icon rolls over at midnight
    def refresh_daily() -> None:
        today = date.today()
        if refresh_tray(tray, today):
            logger.info("Tray icon updated for %s", today.isoformat())
            cal_win.refresh_today()
        cal_win.root.after(_REFRESH_MS, refresh_daily)

    cal_win.root.after(_REFRESH_MS, refresh_daily)

    # Run pystray in a daemon thread so it doesn't block tkinter
    tray_thread = threading.Thread(target=tray.run, daemon=True)
    tray_thread.start()

    logger.info("Swipe calendar started with %d month panel(s)", len(cal_win.panels))
    cal_win.show()
    cal_win.root.mainloop()


if __name__ == "__main__":
    main()
