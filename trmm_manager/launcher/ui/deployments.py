from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import customtkinter as ctk

from trmm_manager.dates import format_last_seen_timestamp
from trmm_manager.launcher.shared import clear_children, labeled_entry, section, status_label, switch
from trmm_manager.screens.deployments import (
    AGENT_TYPES,
    ARCHITECTURES,
    DEFAULT_EXPIRY_DAYS,
    DeploymentDraft,
    DeploymentsController,
)


def setup_deployments_ui(app: Any, ui: dict, controller: DeploymentsController) -> None:
    TrmmBtn = ui["TrmmBtn"]
    COLOR_ACCENT = ui["COLOR_ACCENT"]
    COLOR_BG = ui["COLOR_BG"]
    COLOR_FAIL = ui["COLOR_FAIL"]
    COLOR_WARN = ui["COLOR_WARN"]
    COLOR_PANEL_ALT = ui["COLOR_PANEL_ALT"]
    COLOR_BORDER = ui["COLOR_BORDER"]
    COLOR_TEXT = ui["COLOR_TEXT"]
    COLOR_TEXT_DIM = ui["COLOR_TEXT_DIM"]
    FONT_MONO = ui["FONT_MONO"]
    FONT_SMALL = ui["FONT_SMALL"]
    FONT_UI_BOLD = ui["FONT_UI_BOLD"]

    frame = app.page_frame
    status = status_label(frame)

    create_box = section(frame, app.tr("deployments_create"))
    client_note = ctk.CTkLabel(create_box, text="", text_color=COLOR_WARN, font=FONT_SMALL)
    client_note.pack(anchor="w", padx=18)
    pickers = ctk.CTkFrame(create_box, fg_color="transparent")
    pickers.pack(fill="x", padx=18, pady=4)
    client_menu = ctk.CTkOptionMenu(pickers, values=[""], width=220)
    client_menu.pack(side="left")
    site_menu = ctk.CTkOptionMenu(pickers, values=[""], width=220)
    site_menu.pack(side="left", padx=8)
    type_menu = ctk.CTkOptionMenu(pickers, values=list(AGENT_TYPES), width=130)
    type_menu.set(AGENT_TYPES[0])
    type_menu.pack(side="left", padx=8)
    arch_menu = ctk.CTkOptionMenu(pickers, values=list(ARCHITECTURES), width=100)
    arch_menu.set(ARCHITECTURES[0])
    arch_menu.pack(side="left")
    expiry_days = labeled_entry(create_box, app.tr("deployments_expiry_days"), str(DEFAULT_EXPIRY_DAYS))
    sw_rdp = switch(create_box, app.tr("deployments_rdp"), False)
    sw_ping = switch(create_box, app.tr("deployments_ping"), False)
    sw_power = switch(create_box, app.tr("deployments_power"), False)
    create_error = ctk.CTkLabel(create_box, text="", text_color=COLOR_FAIL, font=FONT_SMALL)
    create_error.pack(anchor="w", padx=18)

    list_box = section(frame, app.tr("deployments_list"))
    delete_error = ctk.CTkLabel(list_box, text="", text_color=COLOR_FAIL, font=FONT_SMALL)
    delete_error.pack(anchor="w", padx=18)
    rows = ctk.CTkFrame(list_box, fg_color="transparent")
    rows.pack(fill="x", padx=12, pady=(0, 12))
    names = {"clients": {}, "sites": {}}

    def on_client(label: str) -> None:
        controller.select_client(names["clients"].get(label))
        render_pickers()

    def on_site(label: str) -> None:
        controller.selected_site_id = names["sites"].get(label)

    client_menu.configure(command=on_client)
    site_menu.configure(command=on_site)

    def create() -> None:
        try:
            days = max(1, int(expiry_days.get().strip()))
        except ValueError:
            days = DEFAULT_EXPIRY_DAYS
        draft = DeploymentDraft(
            site_id=controller.selected_site_id,
            expires_at=datetime.now(timezone.utc) + timedelta(days=days),
            agent_type=type_menu.get(),
            goarch=arch_menu.get(),
            rdp=bool(sw_rdp.get()),
            ping=bool(sw_ping.get()),
            power=bool(sw_power.get()),
        )
        controller.create(draft)

    create_btn = TrmmBtn(create_box, text=app.tr("deployments_create_button"), fg_color=COLOR_ACCENT, text_color=COLOR_BG, command=create)
    create_btn.pack(anchor="w", padx=18, pady=(6, 14))

    def copy_link(link: str) -> None:
        app.clipboard_clear()
        app.clipboard_append(link)
        app.show_toast(app.tr("deployments_link_copied"), level="success")

    def render_pickers() -> None:
        names["clients"] = {c.name: c.id for c in controller.clients}
        client_labels = list(names["clients"]) or [""]
        client_menu.configure(values=client_labels)
        current = next((c.name for c in controller.clients if c.id == controller.selected_client_id), "")
        client_menu.set(current)

        sites = controller.sites_for(controller.selected_client_id)
        names["sites"] = {s.name: s.id for s in sites}
        site_menu.configure(values=list(names["sites"]) or [""])
        site_menu.set(next((s.name for s in sites if s.id == controller.selected_site_id), ""))

    def render() -> None:
        if controller.is_loading:
            status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.error_message:
            status.configure(text=controller.error_message, text_color=COLOR_FAIL)
        else:
            status.configure(text=app.tr("deployments_count", count=len(controller.deployments)), text_color=COLOR_TEXT_DIM)
        client_note.configure(text=controller.client_error or "")
        create_error.configure(text=controller.create_error or "")
        delete_error.configure(text=controller.delete_error or "")
        create_btn.configure(state="disabled" if controller.is_mutating else "normal")
        render_pickers()

        clear_children(rows)
        if not controller.deployments and not controller.is_loading:
            ctk.CTkLabel(rows, text=app.tr("deployments_empty"), text_color=COLOR_TEXT_DIM).pack(anchor="w", padx=6, pady=6)
        for deployment in controller.deployments:
            row = ctk.CTkFrame(rows, fg_color=COLOR_PANEL_ALT, corner_radius=6, border_width=1, border_color=COLOR_BORDER)
            row.pack(fill="x", pady=3)
            info = ctk.CTkFrame(row, fg_color="transparent")
            info.pack(side="left", fill="x", expand=True, padx=10, pady=6)
            ctk.CTkLabel(info, text=deployment.display_title, text_color=COLOR_TEXT, font=FONT_UI_BOLD).pack(anchor="w")
            meta = app.tr(
                "deployments_meta",
                type=deployment.mon_type,
                arch=deployment.goarch,
                expires=format_last_seen_timestamp(deployment.expiry, controller.date_format or None),
            )
            ctk.CTkLabel(info, text=meta, text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(anchor="w")
            link = controller.install_link(deployment)
            ctk.CTkLabel(info, text=link, text_color=COLOR_TEXT_DIM, font=FONT_MONO).pack(anchor="w")
            deleting = controller.is_deleting(deployment)
            TrmmBtn(
                row,
                text=app.tr("deleting") if deleting else app.tr("delete"),
                width=80,
                text_color=COLOR_FAIL,
                state="disabled" if controller.is_mutating else "normal",
                command=lambda d=deployment: controller.delete(d),
            ).pack(side="right", padx=(4, 10))
            TrmmBtn(row, text=app.tr("deployments_copy_link"), width=90, command=lambda l=link: copy_link(l)).pack(
                side="right", padx=4
            )

    controller.subscribe(render)
    render()
