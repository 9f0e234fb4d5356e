from __future__ import annotations

from typing import Any, Optional

import customtkinter as ctk

from trmm_manager.launcher.shared import clear_children, labeled_entry, section, status_label, switch
from trmm_manager.models import KeyStoreEntry
from trmm_manager.screens.keystore import KeyStoreController, KeyStoreDraft


def setup_keystore_ui(app: Any, ui: dict, controller: KeyStoreController) -> None:
    TrmmBtn = ui["TrmmBtn"]
    COLOR_ACCENT = ui["COLOR_ACCENT"]
    COLOR_BG = ui["COLOR_BG"]
    COLOR_FAIL = ui["COLOR_FAIL"]
    COLOR_PANEL_ALT = ui["COLOR_PANEL_ALT"]
    COLOR_BORDER = ui["COLOR_BORDER"]
    COLOR_TEXT = ui["COLOR_TEXT"]
    COLOR_TEXT_DIM = ui["COLOR_TEXT_DIM"]
    FONT_MONO = ui["FONT_MONO"]
    FONT_UI_BOLD = ui["FONT_UI_BOLD"]

    frame = app.page_frame
    controller.show_values = not bool(app.services.preferences.get("hide_sensitive", True))
    status = status_label(frame)

    list_box = section(frame, app.tr("keystore_entries"))

    def toggle_values() -> None:
        controller.show_values = bool(sw_show.get())
        render()

    sw_show = switch(list_box, app.tr("keystore_show_values"), controller.show_values, command=toggle_values)
    rows = ctk.CTkFrame(list_box, fg_color="transparent")
    rows.pack(fill="x", padx=12, pady=(0, 12))

    form_box = section(frame, app.tr("keystore_form"))
    name_entry = labeled_entry(form_box, app.tr("keystore_name"))
    value_entry = labeled_entry(form_box, app.tr("keystore_value"))
    editing: dict[str, Optional[KeyStoreEntry]] = {"entry": None}
    pending = {"save": False}

    def fill_form(entry: Optional[KeyStoreEntry]) -> None:
        editing["entry"] = entry
        name_entry.delete(0, "end")
        value_entry.delete(0, "end")
        if entry is not None:
            name_entry.insert(0, entry.name)
            value_entry.insert(0, entry.value)

    def save() -> None:
        draft = KeyStoreDraft(editing["entry"])
        draft.name = name_entry.get()
        draft.value = value_entry.get()
        pending["save"] = controller.save(draft)

    buttons = ctk.CTkFrame(form_box, fg_color="transparent")
    buttons.pack(fill="x", padx=18, pady=(4, 14))
    save_btn = TrmmBtn(buttons, text=app.tr("save"), fg_color=COLOR_ACCENT, text_color=COLOR_BG, command=save)
    save_btn.pack(side="left")
    TrmmBtn(buttons, text=app.tr("cancel"), command=lambda: fill_form(None)).pack(side="left", padx=8)
    TrmmBtn(buttons, text=app.tr("refresh"), command=lambda: controller.load(force=True)).pack(side="right")

    def render() -> None:
        if controller.is_loading:
            status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.error_message:
            status.configure(text=controller.error_message, text_color=COLOR_FAIL)
        else:
            status.configure(text=app.tr("keystore_count", count=len(controller.entries)), text_color=COLOR_TEXT_DIM)
        save_btn.configure(state="disabled" if controller.is_mutating else "normal")
        if pending["save"] and not controller.is_mutating:
            pending["save"] = False
            if controller.succeeded("mutate"):
                fill_form(None)

        clear_children(rows)
        if not controller.entries and not controller.is_loading:
            ctk.CTkLabel(rows, text=app.tr("keystore_empty"), text_color=COLOR_TEXT_DIM).pack(anchor="w", padx=6, pady=6)
        for entry in controller.entries:
            row = ctk.CTkFrame(rows, fg_color=COLOR_PANEL_ALT, corner_radius=6, border_width=1, border_color=COLOR_BORDER)
            row.pack(fill="x", pady=3)
            ctk.CTkLabel(row, text=entry.name, text_color=COLOR_TEXT, font=FONT_UI_BOLD, width=220, anchor="w").pack(
                side="left", padx=10, pady=6
            )
            ctk.CTkLabel(row, text=controller.display_value(entry), text_color=COLOR_TEXT_DIM, font=FONT_MONO).pack(
                side="left", padx=6
            )
            TrmmBtn(
                row, text=app.tr("delete"), width=70, text_color=COLOR_FAIL, command=lambda e=entry: controller.delete(e)
            ).pack(side="right", padx=(4, 10), pady=6)
            TrmmBtn(row, text=app.tr("edit"), width=70, command=lambda e=entry: fill_form(e)).pack(side="right", padx=4)

    controller.subscribe(render)
    render()
