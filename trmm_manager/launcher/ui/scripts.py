from __future__ import annotations

from typing import Any

import customtkinter as ctk

from trmm_manager.launcher.shared import (
    clear_children,
    labeled_entry,
    labeled_textbox,
    section,
    status_label,
    styled_entry,
    switch,
    textbox_value,
)
from trmm_manager.models import ScriptDetail
from trmm_manager.screens.scripts import (
    CUSTOM_SHELL,
    SHELL_OPTIONS,
    ScriptEditDraft,
    ScriptsController,
    ScriptTestDraft,
    shell_label,
    shell_selection,
)

MAX_LISTED = 200


def setup_scripts_ui(app: Any, ui: dict, controller: ScriptsController) -> None:
    TrmmBtn = ui["TrmmBtn"]
    COLOR_ACCENT = ui["COLOR_ACCENT"]
    COLOR_BG = ui["COLOR_BG"]
    COLOR_FAIL = ui["COLOR_FAIL"]
    COLOR_PANEL_ALT = ui["COLOR_PANEL_ALT"]
    COLOR_BORDER = ui["COLOR_BORDER"]
    COLOR_TEXT = ui["COLOR_TEXT"]
    COLOR_TEXT_DIM = ui["COLOR_TEXT_DIM"]
    FONT_MONO = ui["FONT_MONO"]
    FONT_SMALL = ui["FONT_SMALL"]
    FONT_UI_BOLD = ui["FONT_UI_BOLD"]

    frame = app.page_frame
    status = status_label(frame)

    list_box = section(frame, app.tr("scripts_library"))
    search = styled_entry(list_box)
    search.configure(placeholder_text=app.tr("scripts_search"))
    search.pack(fill="x", padx=18, pady=(0, 8))
    rows = ctk.CTkFrame(list_box, fg_color="transparent")
    rows.pack(fill="x", padx=12, pady=(0, 12))

    def on_search(_event: Any = None) -> None:
        controller.search_text = search.get()
        render_list()

    search.bind("<KeyRelease>", on_search)

    detail_box = section(frame, app.tr("scripts_detail"))
    detail_status = ctk.CTkLabel(detail_box, text="", text_color=COLOR_TEXT_DIM, font=FONT_SMALL)
    detail_status.pack(anchor="w", padx=18)
    detail_body = ctk.CTkFrame(detail_box, fg_color="transparent")
    detail_body.pack(fill="x", pady=(0, 12))

    test_box = section(frame, app.tr("scripts_test"))
    test_status = ctk.CTkLabel(test_box, text="", text_color=COLOR_TEXT_DIM, font=FONT_SMALL)
    test_status.pack(anchor="w", padx=18)
    test_body = ctk.CTkFrame(test_box, fg_color="transparent")
    test_body.pack(fill="x", pady=(0, 12))
    test_output = ctk.CTkTextbox(test_box, height=140, fg_color=COLOR_PANEL_ALT, text_color=COLOR_TEXT, font=FONT_MONO)
    test_output.pack(fill="x", padx=18, pady=(0, 14))
    shown: dict[str, Any] = {"detail": None, "result": None}

    def build_editor(detail: ScriptDetail) -> None:
        clear_children(detail_body)
        draft = ScriptEditDraft(detail)
        read_only = detail.is_builtin
        name = labeled_entry(detail_body, app.tr("scripts_name"), draft.name)
        description = labeled_entry(detail_body, app.tr("scripts_description"), draft.description)
        category = labeled_entry(detail_body, app.tr("scripts_category"), draft.category)
        script_type = labeled_entry(detail_body, app.tr("scripts_type"), draft.script_type)

        option, custom = shell_selection(draft.shell)
        ctk.CTkLabel(detail_body, text=app.tr("scripts_shell"), text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(
            anchor="w", padx=18
        )
        labels = {shell_label(o): o for o in SHELL_OPTIONS}
        labels[app.tr("scripts_custom_shell")] = CUSTOM_SHELL
        shell_menu = ctk.CTkOptionMenu(detail_body, values=list(labels))
        shell_menu.set(app.tr("scripts_custom_shell") if option == CUSTOM_SHELL else shell_label(option))
        shell_menu.pack(anchor="w", padx=18, pady=(2, 4))
        custom_shell = labeled_entry(detail_body, app.tr("scripts_custom_shell_value"), custom)

        timeout = labeled_entry(detail_body, app.tr("scripts_timeout"), draft.default_timeout)
        args = labeled_textbox(detail_body, app.tr("scripts_args"), draft.args_text, 60)
        platforms = labeled_textbox(detail_body, app.tr("scripts_platforms"), draft.supported_platforms_text, 50)
        env_vars = labeled_textbox(detail_body, app.tr("scripts_env_vars"), draft.env_vars_text, 60)
        sw_favorite = switch(detail_body, app.tr("scripts_favorite"), draft.favorite)
        sw_hidden = switch(detail_body, app.tr("scripts_hidden"), draft.hidden)
        sw_run_as_user = switch(detail_body, app.tr("scripts_run_as_user"), draft.run_as_user)
        body = labeled_textbox(detail_body, app.tr("scripts_body"), draft.script_body, 220)

        def save() -> None:
            edit = controller.begin_edit(detail)
            if edit is None:
                return
            picked = labels.get(shell_menu.get(), SHELL_OPTIONS[0])
            edit.name = name.get()
            edit.description = description.get()
            edit.category = category.get()
            edit.script_type = script_type.get()
            edit.shell = custom_shell.get() if picked == CUSTOM_SHELL else picked
            edit.default_timeout = timeout.get()
            edit.args_text = textbox_value(args)
            edit.supported_platforms_text = textbox_value(platforms)
            edit.env_vars_text = textbox_value(env_vars)
            edit.favorite = bool(sw_favorite.get())
            edit.hidden = bool(sw_hidden.get())
            edit.run_as_user = bool(sw_run_as_user.get())
            edit.script_body = textbox_value(body)
            controller.save(edit, detail)

        buttons = ctk.CTkFrame(detail_body, fg_color="transparent")
        buttons.pack(fill="x", padx=18, pady=(6, 0))
        TrmmBtn(
            buttons,
            text=app.tr("save"),
            fg_color=COLOR_ACCENT,
            text_color=COLOR_BG,
            state="disabled" if read_only else "normal",
            command=save,
        ).pack(side="left")
        if read_only:
            ctk.CTkLabel(buttons, text=app.tr("scripts_builtin"), text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(
                side="left", padx=10
            )
        build_test_form(detail)

    def build_test_form(detail: ScriptDetail) -> None:
        clear_children(test_body)
        draft = ScriptTestDraft(detail)
        choices = controller.agent_choices()
        ctk.CTkLabel(test_body, text=app.tr("scripts_agent"), text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(
            anchor="w", padx=18, pady=(6, 0)
        )
        if choices:
            agent_menu = ctk.CTkOptionMenu(test_body, values=list(choices), width=280)
            agent_menu.set(next(iter(choices)))
            agent_menu.pack(anchor="w", padx=18, pady=(2, 4))
            agent_value = agent_menu.get
        else:
            agent_entry = styled_entry(test_body)
            agent_entry.pack(fill="x", padx=18, pady=(2, 4))
            agent_value = agent_entry.get
            if controller.agents_error:
                ctk.CTkLabel(test_body, text=controller.agents_error, text_color=COLOR_FAIL, font=FONT_SMALL).pack(
                    anchor="w", padx=18
                )
        timeout = labeled_entry(test_body, app.tr("scripts_timeout"), draft.timeout)
        args = labeled_textbox(test_body, app.tr("scripts_args"), draft.args_text, 50)

        def run() -> None:
            picked = agent_value()
            draft.agent_id = choices.get(picked, picked)
            draft.timeout = timeout.get()
            draft.args_text = textbox_value(args)
            controller.run_test(draft)

        TrmmBtn(test_body, text=app.tr("scripts_run_test"), command=run).pack(anchor="w", padx=18, pady=6)

    def render_list() -> None:
        clear_children(rows)
        scripts = controller.filtered_scripts
        if not scripts and not controller.is_loading:
            ctk.CTkLabel(rows, text=app.tr("scripts_empty"), text_color=COLOR_TEXT_DIM).pack(anchor="w", padx=6, pady=6)
        for summary in scripts[:MAX_LISTED]:
            selected = controller.selected is not None and controller.selected.id == summary.id
            row = ctk.CTkFrame(
                rows,
                fg_color=COLOR_PANEL_ALT,
                corner_radius=6,
                border_width=1,
                border_color=COLOR_ACCENT if selected else COLOR_BORDER,
            )
            row.pack(fill="x", pady=3)
            info = ctk.CTkFrame(row, fg_color="transparent")
            info.pack(side="left", fill="x", expand=True, padx=10, pady=6)
            ctk.CTkLabel(info, text=summary.name, text_color=COLOR_TEXT, font=FONT_UI_BOLD).pack(anchor="w")
            meta = " · ".join(p for p in (shell_label(summary.shell), summary.category or "", summary.script_type or "") if p)
            ctk.CTkLabel(info, text=meta, text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(anchor="w")
            if not summary.is_builtin:
                TrmmBtn(
                    row,
                    text=app.tr("delete"),
                    width=70,
                    text_color=COLOR_FAIL,
                    command=lambda s=summary: controller.delete(s),
                ).pack(side="right", padx=(4, 10))
            TrmmBtn(row, text=app.tr("open"), width=70, command=lambda s=summary: controller.load_detail(s)).pack(
                side="right", padx=4
            )
        if len(scripts) > MAX_LISTED:
            ctk.CTkLabel(
                rows, text=app.tr("scripts_truncated", count=MAX_LISTED), text_color=COLOR_TEXT_DIM, font=FONT_SMALL
            ).pack(anchor="w", padx=6)

    def render() -> None:
        if controller.is_loading:
            status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.error_message:
            status.configure(text=controller.error_message, text_color=COLOR_FAIL)
        else:
            status.configure(text=app.tr("scripts_count", count=len(controller.scripts)), text_color=COLOR_TEXT_DIM)
        render_list()

        if controller.is_loading_detail:
            detail_status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.detail_error or controller.edit_error:
            detail_status.configure(text=controller.edit_error or controller.detail_error, text_color=COLOR_FAIL)
        elif controller.detail is None:
            detail_status.configure(text=app.tr("scripts_pick"), text_color=COLOR_TEXT_DIM)
        else:
            detail_status.configure(text="")
        if controller.detail is not shown["detail"]:
            shown["detail"] = controller.detail
            if controller.detail is None:
                clear_children(detail_body)
                clear_children(test_body)
            else:
                build_editor(controller.detail)

        if controller.is_testing:
            test_status.configure(text=app.tr("scripts_running"), text_color=COLOR_TEXT_DIM)
        elif controller.test_error:
            test_status.configure(text=controller.test_error, text_color=COLOR_FAIL)
        else:
            test_status.configure(text="")
        result = controller.test_result
        if result is not shown["result"]:
            shown["result"] = result
            test_output.delete("1.0", "end")
            if result is not None:
                lines = [app.tr("scripts_retcode", code=result.retcode)]
                if result.execution_time is not None:
                    lines.append(app.tr("scripts_exec_time", seconds=f"{result.execution_time:.2f}"))
                if result.stdout:
                    lines += ["", "stdout:", result.stdout]
                if result.stderr:
                    lines += ["", "stderr:", result.stderr]
                test_output.insert("1.0", "\n".join(lines))

    controller.subscribe(render)
    render()
