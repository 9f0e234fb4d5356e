from __future__ import annotations

from typing import Any

import customtkinter as ctk

from trmm_manager.launcher.shared import labeled_entry, section, status_label
from trmm_manager.screens.codesign import CodeSigningController


def setup_codesign_ui(app: Any, ui: dict, controller: CodeSigningController) -> None:
    TrmmBtn = ui["TrmmBtn"]
    COLOR_ACCENT = ui["COLOR_ACCENT"]
    COLOR_BG = ui["COLOR_BG"]
    COLOR_FAIL = ui["COLOR_FAIL"]
    COLOR_TEXT = ui["COLOR_TEXT"]
    COLOR_TEXT_DIM = ui["COLOR_TEXT_DIM"]

    hide = bool(app.services.preferences.get("hide_sensitive", True))
    frame = app.page_frame
    status = status_label(frame)

    box = section(frame, app.tr("codesign_token"))
    token_entry = labeled_entry(box, app.tr("codesign_token_label"), show="•" if hide else "")
    buttons = ctk.CTkFrame(box, fg_color="transparent")
    buttons.pack(fill="x", padx=18, pady=(4, 14))
    save_btn = TrmmBtn(
        buttons,
        text=app.tr("save"),
        fg_color=COLOR_ACCENT,
        text_color=COLOR_BG,
        command=lambda: controller.update_token(token_entry.get()),
    )
    save_btn.pack(side="left")
    delete_btn = TrmmBtn(buttons, text=app.tr("delete"), text_color=COLOR_FAIL, command=controller.delete_token)
    delete_btn.pack(side="left", padx=8)

    sign_box = section(frame, app.tr("codesign_sign_button"))
    ctk.CTkLabel(sign_box, text=app.tr("codesign_sign_hint"), text_color=COLOR_TEXT_DIM, justify="left").pack(
        anchor="w", padx=18
    )
    sign_btn = TrmmBtn(sign_box, text=app.tr("codesign_sign_button"), command=controller.sign_all_agents)
    sign_btn.pack(anchor="w", padx=18, pady=8)
    sign_message = ctk.CTkLabel(sign_box, text="", text_color=COLOR_TEXT, justify="left", wraplength=600)
    sign_message.pack(anchor="w", padx=18, pady=(0, 14))
    shown = {"token": None}

    def render() -> None:
        if controller.is_loading:
            status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.error_message:
            status.configure(text=controller.error_message, text_color=COLOR_FAIL)
        else:
            key = "codesign_has_token" if controller.has_token else "codesign_no_token"
            status.configure(text=app.tr(key), text_color=COLOR_TEXT_DIM)
        if controller.token != shown["token"]:
            shown["token"] = controller.token
            token_entry.delete(0, "end")
            if controller.token:
                token_entry.insert(0, controller.token)
        busy = controller.is_mutating
        save_btn.configure(state="disabled" if busy else "normal")
        delete_btn.configure(state="disabled" if busy or not controller.has_token else "normal")
        sign_btn.configure(state="disabled" if busy else "normal")
        sign_btn.configure(text=app.tr("codesign_signing") if controller.is_signing else app.tr("codesign_sign_button"))
        sign_message.configure(text=controller.sign_all_message or "")

    controller.subscribe(render)
    render()
