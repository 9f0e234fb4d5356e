from __future__ import annotations

from dataclasses import replace
from typing import Any

import customtkinter as ctk

from trmm_manager.launcher.shared import (
    clear_children,
    labeled_entry,
    labeled_textbox,
    section,
    status_label,
    switch,
    textbox_value,
)
from trmm_manager.screens.general_settings import (
    AGENT_DEBUG_LEVELS,
    GeneralSettingsController,
    GeneralSettingsForm,
)
from trmm_manager.screens.scripts import parse_lines


def setup_general_ui(app: Any, ui: dict, controller: GeneralSettingsController) -> None:
    """Build the General Settings page.

    The form is rebuilt only when a new settings object arrives, so edits
    survive unrelated re-renders such as a failed save.
    """
    TrmmBtn = ui["TrmmBtn"]
    COLOR_ACCENT = ui["COLOR_ACCENT"]
    COLOR_BG = ui["COLOR_BG"]
    COLOR_FAIL = ui["COLOR_FAIL"]
    COLOR_TEXT_DIM = ui["COLOR_TEXT_DIM"]

    hide = bool(app.services.preferences.get("hide_sensitive", True))
    frame = app.page_frame
    status = status_label(frame)
    body = ctk.CTkFrame(frame, fg_color="transparent")
    body.pack(fill="x")
    shown: dict[str, Any] = {"settings": None, "collect": None}

    actions = ctk.CTkFrame(frame, fg_color="transparent")
    actions.pack(fill="x", padx=20, pady=(0, 20))

    def save() -> None:
        collect = shown["collect"]
        if collect is None:
            controller.save()
            return
        form = collect()
        controller.form = form
        controller.save(form)

    save_btn = TrmmBtn(actions, text=app.tr("save"), fg_color=COLOR_ACCENT, text_color=COLOR_BG, command=save)
    save_btn.pack(side="left")
    reset_btn = TrmmBtn(actions, text=app.tr("general_reset_patch"), command=controller.reset_patch_policies)
    reset_btn.pack(side="left", padx=8)
    TrmmBtn(actions, text=app.tr("refresh"), command=lambda: controller.load(force=True)).pack(side="right")

    def build_form(form: GeneralSettingsForm) -> None:
        clear_children(body)

        agent = section(body, app.tr("general_agents"))
        sw_auto_update = switch(agent, app.tr("general_auto_update"), form.agent_auto_update)
        sw_scripts = switch(agent, app.tr("general_server_scripts"), form.enable_server_scripts)
        sw_webterm = switch(agent, app.tr("general_webterminal"), form.enable_server_webterminal)
        ctk.CTkLabel(agent, text=app.tr("general_debug_level"), text_color=COLOR_TEXT_DIM).pack(anchor="w", padx=18)
        debug_menu = ctk.CTkOptionMenu(agent, values=list(AGENT_DEBUG_LEVELS))
        debug_menu.set(form.agent_debug_level if form.agent_debug_level in AGENT_DEBUG_LEVELS else "warning")
        debug_menu.pack(anchor="w", padx=18, pady=(2, 6))
        clear_faults = labeled_entry(agent, app.tr("general_clear_faults"), form.clear_faults_days)

        locale = section(body, app.tr("general_locale"))
        ctk.CTkLabel(locale, text=app.tr("general_timezone"), text_color=COLOR_TEXT_DIM).pack(anchor="w", padx=18)
        tz_values = controller.all_timezones or ([form.default_time_zone] if form.default_time_zone else [""])
        tz_menu = ctk.CTkComboBox(locale, values=tz_values, width=320)
        tz_menu.set(form.default_time_zone)
        tz_menu.pack(anchor="w", padx=18, pady=(2, 6))
        date_format = labeled_entry(locale, app.tr("general_date_format"), form.date_format)

        alerts = section(body, app.tr("general_alerts"))
        sw_info = switch(alerts, app.tr("general_notify_info"), form.notify_on_info_alerts)
        sw_warn = switch(alerts, app.tr("general_notify_warning"), form.notify_on_warning_alerts)
        emails = labeled_textbox(alerts, app.tr("general_email_recipients"), "\n".join(form.email_recipients), 70)
        sms = labeled_textbox(alerts, app.tr("general_sms_recipients"), "\n".join(form.sms_recipients), 70)

        smtp = section(body, app.tr("general_smtp"))
        from_email = labeled_entry(smtp, app.tr("general_smtp_from_email"), form.smtp_from_email)
        from_name = labeled_entry(smtp, app.tr("general_smtp_from_name"), form.smtp_from_name)
        host = labeled_entry(smtp, app.tr("general_smtp_host"), form.smtp_host)
        port = labeled_entry(smtp, app.tr("general_smtp_port"), form.smtp_port)
        sw_auth = switch(smtp, app.tr("general_smtp_auth"), form.smtp_requires_auth)
        username = labeled_entry(smtp, app.tr("general_smtp_user"), form.smtp_username)
        # Left blank, the server keeps its stored password.
        password = labeled_entry(smtp, app.tr("general_smtp_password"), "", show="•")

        sms_box = section(body, app.tr("general_twilio"))
        twilio_number = labeled_entry(sms_box, app.tr("general_twilio_number"), form.twilio_number)
        twilio_sid = labeled_entry(sms_box, app.tr("general_twilio_sid"), form.twilio_account_sid)
        twilio_token = labeled_entry(
            sms_box, app.tr("general_twilio_token"), form.twilio_auth_token, show="•" if hide else ""
        )

        def collect() -> GeneralSettingsForm:
            return replace(
                form,
                agent_auto_update=bool(sw_auto_update.get()),
                enable_server_scripts=bool(sw_scripts.get()),
                enable_server_webterminal=bool(sw_webterm.get()),
                agent_debug_level=debug_menu.get(),
                clear_faults_days=clear_faults.get(),
                default_time_zone=tz_menu.get(),
                date_format=date_format.get(),
                notify_on_info_alerts=bool(sw_info.get()),
                notify_on_warning_alerts=bool(sw_warn.get()),
                email_recipients=parse_lines(textbox_value(emails)),
                sms_recipients=parse_lines(textbox_value(sms)),
                smtp_from_email=from_email.get(),
                smtp_from_name=from_name.get(),
                smtp_host=host.get(),
                smtp_port=port.get(),
                smtp_requires_auth=bool(sw_auth.get()),
                smtp_username=username.get(),
                smtp_password=password.get(),
                twilio_number=twilio_number.get(),
                twilio_account_sid=twilio_sid.get(),
                twilio_auth_token=twilio_token.get(),
            )

        shown["collect"] = collect

    def render() -> None:
        if controller.is_loading and controller.settings is None:
            status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.error_message:
            status.configure(text=controller.error_message, text_color=COLOR_FAIL)
        elif controller.is_demo:
            status.configure(text=app.tr("demo_notice"), text_color=COLOR_TEXT_DIM)
        else:
            status.configure(text="")
        if controller.settings is not None and controller.settings is not shown["settings"]:
            shown["settings"] = controller.settings
            build_form(controller.form)
        save_btn.configure(state="disabled" if controller.is_mutating else "normal")
        reset_btn.configure(text=app.tr("resetting") if controller.is_resetting else app.tr("general_reset_patch"))
        reset_btn.configure(state="disabled" if controller.is_mutating else "normal")

    controller.subscribe(render)
    render()
