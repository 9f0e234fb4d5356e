from __future__ import annotations

from typing import Any, Optional

import customtkinter as ctk

from trmm_manager.launcher.shared import clear_children, labeled_entry, section
from trmm_manager.logging_config import get_logger
from trmm_manager.profiles import ProfileError, ServerProfile

log = get_logger("launcher.instances")


def setup_instances_ui(app: Any, ui: dict) -> None:
    """Build the Instances page: profile list plus an add/edit form."""
    TrmmBtn = ui["TrmmBtn"]
    COLOR_ACCENT = ui["COLOR_ACCENT"]
    COLOR_BG = ui["COLOR_BG"]
    COLOR_FAIL = ui["COLOR_FAIL"]
    COLOR_PANEL_ALT = ui["COLOR_PANEL_ALT"]
    COLOR_BORDER = ui["COLOR_BORDER"]
    COLOR_TEXT = ui["COLOR_TEXT"]
    COLOR_TEXT_DIM = ui["COLOR_TEXT_DIM"]
    FONT_UI_BOLD = ui["FONT_UI_BOLD"]
    FONT_SMALL = ui["FONT_SMALL"]

    manager = app.services.profiles
    hide_keys = bool(app.services.preferences.get("hide_sensitive", True))
    frame = app.page_frame
    app._page_header(app.tr("nav_instances"), app.tr("instances_subtitle"))

    list_box = section(frame, app.tr("instances_saved"))
    rows = ctk.CTkFrame(list_box, fg_color="transparent")
    rows.pack(fill="x", padx=12, pady=(0, 12))

    form_box = section(frame, app.tr("instances_form_add"))
    form_title = form_box.winfo_children()[0]
    name_entry = labeled_entry(form_box, app.tr("instances_name"))
    url_entry = labeled_entry(form_box, app.tr("instances_url"))
    key_entry = labeled_entry(form_box, app.tr("instances_key"), show="•" if hide_keys else "")
    ctk.CTkLabel(form_box, text=app.tr("instances_demo_hint"), text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(
        anchor="w", padx=18, pady=(0, 6)
    )
    editing: dict[str, Optional[ServerProfile]] = {"profile": None}

    def fill_form(profile: Optional[ServerProfile]) -> None:
        editing["profile"] = profile
        for entry in (name_entry, url_entry, key_entry):
            entry.delete(0, "end")
        if profile is not None:
            name_entry.insert(0, profile.display_name)
            url_entry.insert(0, profile.base_url)
            key_entry.insert(0, manager.api_key_for(profile))
        form_title.configure(text=app.tr("instances_form_edit" if profile else "instances_form_add"))

    def save() -> None:
        target = editing["profile"]
        try:
            if target is None:
                saved = manager.add(name_entry.get(), url_entry.get(), key_entry.get())
            else:
                saved = manager.edit(target, name_entry.get(), url_entry.get(), key_entry.get())
        except ProfileError as e:
            app.show_toast(f"{e.title}: {e.message}" if e.title else e.message, level="error", duration_ms=4200)
            return
        app.show_toast(app.tr("instances_saved_toast", name=saved.display_name), level="success")
        fill_form(None)
        render()

    def activate(profile: ServerProfile) -> None:
        manager.set_active(profile)
        app.show_toast(app.tr("instances_activated", name=profile.display_name), level="success")
        render()

    def delete(profile: ServerProfile) -> None:
        manager.delete(profile)
        if editing["profile"] is not None and editing["profile"].uuid == profile.uuid:
            fill_form(None)
        app.show_toast(app.tr("instances_deleted", name=profile.display_name))
        render()

    def render() -> None:
        clear_children(rows)
        profiles = manager.profiles()
        active = manager.active()
        if not profiles:
            ctk.CTkLabel(rows, text=app.tr("instances_empty"), text_color=COLOR_TEXT_DIM).pack(anchor="w", padx=6, pady=6)
            return
        for profile in profiles:
            is_active = active is not None and active.uuid == profile.uuid
            row = ctk.CTkFrame(
                rows,
                fg_color=COLOR_PANEL_ALT,
                corner_radius=6,
                border_width=1,
                border_color=COLOR_ACCENT if is_active else COLOR_BORDER,
            )
            row.pack(fill="x", pady=4)
            info = ctk.CTkFrame(row, fg_color="transparent")
            info.pack(side="left", fill="x", expand=True, padx=10, pady=8)
            ctk.CTkLabel(info, text=profile.display_name, text_color=COLOR_TEXT, font=FONT_UI_BOLD).pack(anchor="w")
            subtitle = app.tr("instances_demo") if profile.is_demo else profile.base_url
            ctk.CTkLabel(info, text=subtitle, text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(anchor="w")
            TrmmBtn(
                row, text=app.tr("delete"), width=80, text_color=COLOR_FAIL, command=lambda p=profile: delete(p)
            ).pack(side="right", padx=(4, 10), pady=8)
            TrmmBtn(row, text=app.tr("edit"), width=80, command=lambda p=profile: fill_form(p)).pack(
                side="right", padx=4, pady=8
            )
            if not is_active:
                TrmmBtn(row, text=app.tr("instances_activate"), width=90, command=lambda p=profile: activate(p)).pack(
                    side="right", padx=4, pady=8
                )

    buttons = ctk.CTkFrame(form_box, fg_color="transparent")
    buttons.pack(fill="x", padx=18, pady=(4, 14))
    TrmmBtn(buttons, text=app.tr("save"), fg_color=COLOR_ACCENT, text_color=COLOR_BG, command=save).pack(side="left")
    TrmmBtn(buttons, text=app.tr("cancel"), command=lambda: fill_form(None)).pack(side="left", padx=8)

    render()
