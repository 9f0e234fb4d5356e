from __future__ import annotations

from typing import Any

import customtkinter as ctk

from trmm_manager.launcher.shared import clear_children, labeled_entry, section, status_label, styled_entry, switch
from trmm_manager.models import Agent
from trmm_manager.screens.agents import COMMAND_SHELLS, AgentsController, CommandDraft

MAX_LISTED = 200


def setup_agents_ui(app: Any, ui: dict, controller: AgentsController) -> None:
    """Build the Agents page: searchable list, detail with actions, processes and a command runner."""
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

    list_box = section(frame, app.tr("agents_list"))
    search = styled_entry(list_box)
    search.configure(placeholder_text=app.tr("agents_search"))
    search.pack(fill="x", padx=18, pady=(0, 8))
    rows = ctk.CTkFrame(list_box, fg_color="transparent")
    rows.pack(fill="x", padx=12, pady=(0, 12))

    def on_search(_event: Any = None) -> None:
        controller.search_text = search.get()
        render_list()

    search.bind("<KeyRelease>", on_search)

    detail_box = section(frame, app.tr("agents_detail"))
    detail_status = ctk.CTkLabel(detail_box, text="", text_color=COLOR_TEXT_DIM, font=FONT_SMALL)
    detail_status.pack(anchor="w", padx=18)
    detail_body = ctk.CTkFrame(detail_box, fg_color="transparent")
    detail_body.pack(fill="x", pady=(0, 12))

    processes_box = section(frame, app.tr("agents_processes"))
    processes_status = ctk.CTkLabel(processes_box, text="", text_color=COLOR_TEXT_DIM, font=FONT_SMALL)
    processes_status.pack(anchor="w", padx=18)
    processes_rows = ctk.CTkFrame(processes_box, fg_color="transparent")
    processes_rows.pack(fill="x", padx=12, pady=(0, 12))

    command_box = section(frame, app.tr("agents_command"))
    command_status = ctk.CTkLabel(command_box, text="", text_color=COLOR_TEXT_DIM, font=FONT_SMALL)
    command_status.pack(anchor="w", padx=18)
    command_body = ctk.CTkFrame(command_box, fg_color="transparent")
    command_body.pack(fill="x")
    command_output = ctk.CTkTextbox(command_box, height=140, fg_color=COLOR_PANEL_ALT, text_color=COLOR_TEXT, font=FONT_MONO)
    command_output.pack(fill="x", padx=18, pady=(0, 14))
    shown: dict[str, Any] = {"agent": None, "output": None}

    def status_color(agent: Agent) -> str:
        if agent.is_online:
            return COLOR_ACCENT
        if agent.is_offline:
            return COLOR_FAIL
        return COLOR_WARN

    def build_detail(agent: Agent) -> None:
        clear_children(detail_body)
        facts = (
            ("agents_os", agent.operating_system),
            ("agents_location", agent.location),
            ("agents_last_seen", agent.last_seen_display(controller.date_format or None)),
            ("agents_public_ip", agent.public_ip or ""),
            ("agents_local_ips", agent.local_ips or ""),
            ("agents_cpu", ", ".join(agent.cpu_model)),
            ("agents_make_model", agent.make_model or ""),
            ("agents_serial", agent.serial_number or ""),
            ("agents_disks", ", ".join(agent.physical_disks or [])),
        )
        ctk.CTkLabel(detail_body, text=agent.hostname, text_color=COLOR_TEXT, font=FONT_UI_BOLD).pack(anchor="w", padx=18)
        if agent.description:
            ctk.CTkLabel(detail_body, text=agent.description, text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(
                anchor="w", padx=18
            )
        for key, value in facts:
            if not value:
                continue
            ctk.CTkLabel(
                detail_body,
                text=f"{app.tr(key)}: {value}",
                text_color=COLOR_TEXT,
                font=FONT_SMALL,
                justify="left",
                wraplength=640,
            ).pack(anchor="w", padx=18)

        actions = ctk.CTkFrame(detail_body, fg_color="transparent")
        actions.pack(fill="x", padx=18, pady=(8, 4))
        for key, command in (
            ("agents_reboot", lambda: controller.reboot(agent)),
            ("agents_shutdown", lambda: controller.shutdown(agent)),
            ("agents_wake", lambda: controller.wake_on_lan(agent)),
            ("agents_load_processes", lambda: controller.load_processes(agent, force=True)),
        ):
            TrmmBtn(actions, text=app.tr(key), command=command).pack(side="left", padx=(0, 8))

        ctk.CTkLabel(detail_body, text=app.tr("agents_notes"), text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(
            anchor="w", padx=18, pady=(8, 0)
        )
        if controller.notes_error:
            ctk.CTkLabel(detail_body, text=controller.notes_error, text_color=COLOR_FAIL, font=FONT_SMALL).pack(
                anchor="w", padx=18
            )
        elif not controller.notes:
            ctk.CTkLabel(detail_body, text=app.tr("agents_no_notes"), text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(
                anchor="w", padx=18
            )
        for note in controller.notes:
            ctk.CTkLabel(
                detail_body,
                text=app.tr("agents_note_row", note=note.note, username=note.username, time=note.entry_time or ""),
                text_color=COLOR_TEXT,
                font=FONT_SMALL,
                justify="left",
                wraplength=640,
            ).pack(anchor="w", padx=18)
        build_command_form(agent)

    def build_command_form(agent: Agent) -> None:
        clear_children(command_body)
        draft = CommandDraft(agent)
        shell_menu = ctk.CTkOptionMenu(command_body, values=list(COMMAND_SHELLS), width=150)
        shell_menu.set(draft.shell)
        shell_menu.pack(anchor="w", padx=18, pady=(4, 2))
        command = labeled_entry(command_body, app.tr("agents_command_text"))
        timeout = labeled_entry(command_body, app.tr("agents_command_timeout"), draft.timeout)
        sw_user = switch(command_body, app.tr("agents_run_as_user"), draft.run_as_user)

        def run() -> None:
            draft.shell = shell_menu.get()
            draft.command = command.get()
            draft.timeout = timeout.get()
            draft.run_as_user = bool(sw_user.get())
            controller.send_command(draft)

        TrmmBtn(
            command_body, text=app.tr("agents_send_command"), fg_color=COLOR_ACCENT, text_color=COLOR_BG, command=run
        ).pack(anchor="w", padx=18, pady=6)

    def render_processes() -> None:
        clear_children(processes_rows)
        agent = controller.selected
        if controller.is_loading_processes:
            processes_status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.processes_error:
            processes_status.configure(text=controller.processes_error, text_color=COLOR_FAIL)
        else:
            processes_status.configure(
                text=app.tr("agents_process_count", count=len(controller.processes)), text_color=COLOR_TEXT_DIM
            )
        if agent is None:
            return
        busy = controller.is_mutating
        for process in controller.processes[:MAX_LISTED]:
            row = ctk.CTkFrame(processes_rows, fg_color=COLOR_PANEL_ALT, corner_radius=6, border_width=1, border_color=COLOR_BORDER)
            row.pack(fill="x", pady=2)
            ctk.CTkLabel(
                row,
                text=app.tr(
                    "agents_process_row",
                    name=process.name,
                    pid=process.pid,
                    user=process.username,
                    cpu=process.cpu_percent,
                    mem=process.membytes // (1024 * 1024),
                ),
                text_color=COLOR_TEXT,
                font=FONT_SMALL,
            ).pack(side="left", padx=10, pady=4)
            TrmmBtn(
                row,
                text=app.tr("agents_kill"),
                width=70,
                text_color=COLOR_FAIL,
                state="disabled" if busy else "normal",
                command=lambda p=process: controller.kill_process(agent, p),
            ).pack(side="right", padx=(4, 10), pady=2)

    def render_list() -> None:
        clear_children(rows)
        agents = controller.filtered_agents
        if not agents and not controller.is_loading:
            ctk.CTkLabel(rows, text=app.tr("agents_empty"), text_color=COLOR_TEXT_DIM).pack(anchor="w", padx=6, pady=6)
        for agent in agents[:MAX_LISTED]:
            selected = controller.selected is not None and controller.selected.agent_id == agent.agent_id
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
            ctk.CTkLabel(info, text=agent.hostname, text_color=COLOR_TEXT, font=FONT_UI_BOLD).pack(anchor="w")
            meta = " · ".join(p for p in (agent.operating_system, agent.location) if p)
            ctk.CTkLabel(info, text=meta, text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(anchor="w")
            ctk.CTkLabel(row, text=agent.status_label, text_color=status_color(agent), font=FONT_SMALL).pack(
                side="right", padx=10
            )
            TrmmBtn(row, text=app.tr("open"), width=70, command=lambda a=agent: controller.load_detail(a)).pack(
                side="right", padx=4
            )

    def render() -> None:
        if controller.is_loading:
            status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.error_message:
            status.configure(text=controller.error_message, text_color=COLOR_FAIL)
        else:
            status.configure(text=app.tr("agents_count", **controller.counts()), text_color=COLOR_TEXT_DIM)

        if controller.is_loading_detail:
            detail_status.configure(text=app.tr("loading"), text_color=COLOR_TEXT_DIM)
        elif controller.detail_error:
            detail_status.configure(text=controller.detail_error, text_color=COLOR_FAIL)
        elif controller.selected is None:
            detail_status.configure(text=app.tr("agents_pick"), text_color=COLOR_TEXT_DIM)
        else:
            detail_status.configure(text="")
        if controller.selected is not shown["agent"]:
            shown["agent"] = controller.selected
            if controller.selected is None:
                clear_children(detail_body)
                clear_children(command_body)
            else:
                build_detail(controller.selected)

        if controller.is_sending_command:
            command_status.configure(text=app.tr("agents_sending"), text_color=COLOR_TEXT_DIM)
        elif controller.command_error:
            command_status.configure(text=controller.command_error, text_color=COLOR_FAIL)
        else:
            command_status.configure(text="")
        if controller.command_output is not shown["output"]:
            shown["output"] = controller.command_output
            command_output.delete("1.0", "end")
            command_output.insert("1.0", controller.command_output or "")

        render_list()
        render_processes()

    controller.subscribe(render)
    render()
