from __future__ import annotations

from typing import Any

import customtkinter as ctk

from trmm_manager import config
from trmm_manager.dates import FALLBACK_LAST_SEEN_FORMAT
from trmm_manager.launcher.shared import ABOUT_TEXT, LAUNCHER_VERSION, labeled_entry, section, switch


def setup_preferences_ui(app: Any, ui: dict) -> None:
    """Build the launcher preferences page."""
    TrmmBtn = ui["TrmmBtn"]
    prefs = app.services.preferences

    app._page_header(app.tr("nav_preferences"), app.tr("preferences_subtitle"))
    box = section(app.page_frame, app.tr("preferences_display"))
    sw_hide = switch(box, app.tr("preferences_hide_sensitive"), bool(prefs.get("hide_sensitive", True)))
    fmt_entry = labeled_entry(
        box,
        app.tr("preferences_last_seen_format", example=FALLBACK_LAST_SEEN_FORMAT),
        str(prefs.get("last_seen_format") or ""),
    )

    def save() -> None:
        prefs.set("hide_sensitive", bool(sw_hide.get()))
        prefs.set("last_seen_format", fmt_entry.get().strip())
        app.show_toast(app.tr("preferences_saved"), level="success")

    TrmmBtn(box, text=app.tr("save"), fg_color=ui["COLOR_ACCENT"], text_color=ui["COLOR_BG"], command=save).pack(
        anchor="w", padx=18, pady=(6, 14)
    )

    paths = section(app.page_frame, app.tr("preferences_storage"))
    for label, value in (
        (app.tr("preferences_data_dir"), config.DATA_DIR),
        (app.tr("preferences_log_file"), config.LOG_FILE),
    ):
        ctk.CTkLabel(paths, text=f"{label}: {value}", text_color=ui["COLOR_TEXT_DIM"], font=ui["FONT_SMALL"]).pack(
            anchor="w", padx=18, pady=2
        )
    ctk.CTkLabel(paths, text="").pack(pady=2)

    about = section(app.page_frame, app.tr("preferences_about"))
    ctk.CTkLabel(about, text=ABOUT_TEXT, text_color=ui["COLOR_TEXT"], font=ui["FONT_UI"], justify="left").pack(
        anchor="w", padx=18, pady=(0, 4)
    )
    ctk.CTkLabel(
        about,
        text=app.tr("launcher_version", version=LAUNCHER_VERSION),
        text_color=ui["COLOR_TEXT_DIM"],
        font=ui["FONT_SMALL"],
    ).pack(anchor="w", padx=18, pady=(0, 12))
