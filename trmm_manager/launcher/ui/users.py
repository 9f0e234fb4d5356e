from __future__ import annotations

from typing import Any, Optional

import customtkinter as ctk

from trmm_manager.dates import format_last_seen_timestamp
from trmm_manager.launcher.shared import clear_children, labeled_entry, section, status_label, switch
from trmm_manager.models import User
from trmm_manager.screens.users import UserEditDraft, UsersController


def setup_users_ui(app: Any, ui: dict, controller: UsersController) -> None:
    """Build the Users page: user list, edit form and session management."""
    TrmmBtn = ui["TrmmBtn"]
    COLOR_ACCENT = ui["COLOR_ACCENT"]
    COLOR_BG = ui["COLOR_BG"]
    COLOR_FAIL = ui["COLOR_FAIL"]
    COLOR_WARN = ui["COLOR_WARN"]
    COLOR_PANEL_ALT = ui["COLOR_PANEL_ALT"]
    COLOR_BORDER = ui["COLOR_BORDER"]
    COLOR_TEXT = ui["COLOR_TEXT"]
    COLOR_TEXT_DIM = ui["COLOR_TEXT_DIM"]
    FONT_SMALL = ui["FONT_SMALL"]
    FONT_UI_BOLD = ui["FONT_UI_BOLD"]

    frame = app.page_frame
    status = status_label(frame)
    role_note = ctk.CTkLabel(frame, text="", text_color=COLOR_WARN, font=FONT_SMALL)
    role_note.pack(anchor="w", padx=20)

    list_box = section(frame, app.tr("users_list"))
    rows = ctk.CTkFrame(list_box, fg_color="transparent")
    rows.pack(fill="x", padx=12, pady=(0, 12))

    edit_box = section(frame, app.tr("users_edit"))
    edit_status = ctk.CTkLabel(edit_box, text="", text_color=COLOR_TEXT_DIM, font=FONT_SMALL)
    edit_status.pack(anchor="w", padx=18)
    edit_body = ctk.CTkFrame(edit_box, fg_color="transparent")
    edit_body.pack(fill="x", pady=(0, 12))

    sessions_box = section(frame, app.tr("users_sessions"))
    sessions_status = ctk.CTkLabel(sessions_box, text="", text_color=COLOR_TEXT_DIM, font=FONT_SMALL)
    sessions_status.pack(anchor="w", padx=18)
    sessions_rows = ctk.CTkFrame(sessions_box, fg_color="transparent")
    sessions_rows.pack(fill="x", padx=12, pady=(0, 12))

    def open_editor(user: User) -> None:
        clear_children(edit_body)
        draft = UserEditDraft(user)
        username = labeled_entry(edit_body, app.tr("users_username"), draft.username)
        first = labeled_entry(edit_body, app.tr("users_first_name"), draft.first_name)
        last = labeled_entry(edit_body, app.tr("users_last_name"), draft.last_name)
        email = labeled_entry(edit_body, app.tr("users_email"), draft.email)
        sw_active = switch(edit_body, app.tr("users_active"), draft.is_active)
        sw_block = switch(edit_body, app.tr("users_block_dashboard"), draft.block_dashboard_login)

        ctk.CTkLabel(edit_body, text=app.tr("users_role"), text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(
            anchor="w", padx=18
        )
        role_menu: Optional[Any] = None
        role_entry: Optional[Any] = None
        role_ids = {}
        if controller.roles:
            ordered = sorted(controller.roles.values(), key=lambda r: r.display_name.lower())
            role_ids = {r.display_name: r.id for r in ordered}
            role_menu = ctk.CTkOptionMenu(edit_body, values=list(role_ids))
            current = controller.roles.get(draft.resolve_role(controller.roles) or -1)
            role_menu.set(current.display_name if current else ordered[0].display_name)
            role_menu.pack(anchor="w", padx=18, pady=(2, 6))
        else:
            # Roles could not be listed; the role is entered by ID.
            role_entry = labeled_entry(edit_body, app.tr("users_role_id"), draft.role_text)

        def save() -> None:
            draft.username = username.get()
            draft.first_name = first.get()
            draft.last_name = last.get()
            draft.email = email.get()
            draft.is_active = bool(sw_active.get())
            draft.block_dashboard_login = bool(sw_block.get())
            if role_menu is not None:
                draft.role_id = role_ids.get(role_menu.get())
            if role_entry is not None:
                draft.role_text = role_entry.get()
            controller.save_user(draft)

        buttons = ctk.CTkFrame(edit_body, fg_color="transparent")
        buttons.pack(fill="x", padx=18, pady=(6, 0))
        TrmmBtn(buttons, text=app.tr("save"), fg_color=COLOR_ACCENT, text_color=COLOR_BG, command=save).pack(side="left")
        TrmmBtn(buttons, text=app.tr("cancel"), command=lambda: clear_children(edit_body)).pack(side="left", padx=8)

    def reset_password(user: User) -> None:
        dialog = ctk.CTkInputDialog(
            text=app.tr("users_new_password", username=user.username), title=app.tr("users_reset_password")
        )
        value = dialog.get_input()
        if value is None:
            return
        controller.reset_password(user, value)

    def render_sessions() -> None:
        clear_children(sessions_rows)
        user = controller.sessions_user
        if controller.is_busy("sessions"):
            sessions_status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.sessions_error:
            sessions_status.configure(text=controller.sessions_error, text_color=COLOR_FAIL)
        elif user is None:
            sessions_status.configure(text=app.tr("users_sessions_pick"), text_color=COLOR_TEXT_DIM)
        else:
            sessions_status.configure(
                text=app.tr("users_sessions_for", username=user.username, count=len(controller.sessions)),
                text_color=COLOR_TEXT_DIM,
            )
        if user is None:
            return
        for session in controller.sessions:
            row = ctk.CTkFrame(sessions_rows, fg_color=COLOR_PANEL_ALT, corner_radius=6, border_width=1, border_color=COLOR_BORDER)
            row.pack(fill="x", pady=3)
            created = format_last_seen_timestamp(session.created, controller.date_format)
            expiry = format_last_seen_timestamp(session.expiry, controller.date_format)
            ctk.CTkLabel(
                row,
                text=app.tr("users_session_row", created=created, expiry=expiry),
                text_color=COLOR_TEXT,
                font=FONT_SMALL,
            ).pack(side="left", padx=10, pady=6)
            TrmmBtn(
                row,
                text=app.tr("users_logout"),
                width=80,
                text_color=COLOR_FAIL,
                command=lambda s=session: controller.logout_session(s),
            ).pack(side="right", padx=(4, 10), pady=4)
        if controller.sessions:
            TrmmBtn(
                sessions_rows,
                text=app.tr("users_logout_all"),
                text_color=COLOR_FAIL,
                command=lambda u=user: controller.logout_all_sessions(u),
            ).pack(anchor="w", pady=(6, 0))

    def render() -> None:
        if controller.is_loading:
            status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.error_message:
            status.configure(text=controller.error_message, text_color=COLOR_FAIL)
        else:
            status.configure(text=app.tr("users_count", count=len(controller.users)), text_color=COLOR_TEXT_DIM)
        role_note.configure(text=controller.role_error or "")
        edit_status.configure(
            text=controller.edit_error or controller.reset_error or "",
            text_color=COLOR_FAIL,
        )

        clear_children(rows)
        for user in controller.users:
            row = ctk.CTkFrame(rows, fg_color=COLOR_PANEL_ALT, corner_radius=6, border_width=1, border_color=COLOR_BORDER)
            row.pack(fill="x", pady=3)
            info = ctk.CTkFrame(row, fg_color="transparent")
            info.pack(side="left", fill="x", expand=True, padx=10, pady=6)
            ctk.CTkLabel(info, text=f"{user.display_name} ({user.username})", text_color=COLOR_TEXT, font=FONT_UI_BOLD).pack(
                anchor="w"
            )
            meta = app.tr(
                "users_meta",
                role=controller.role_label(user.role),
                status=user.status_label,
                last_login=user.last_login_display(controller.date_format or None),
            )
            ctk.CTkLabel(info, text=meta, text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(anchor="w")
            for key, command in (
                ("users_sessions_button", lambda u=user: controller.load_sessions(u, force=True)),
                ("users_reset_2fa", lambda u=user: controller.reset_two_factor(u)),
                ("users_reset_password", lambda u=user: reset_password(u)),
                ("edit", lambda u=user: open_editor(u)),
            ):
                TrmmBtn(row, text=app.tr(key), width=80, command=command).pack(side="right", padx=4, pady=4)
        render_sessions()

    controller.subscribe(render)
    render()
