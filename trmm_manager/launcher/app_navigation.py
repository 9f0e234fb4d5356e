from __future__ import annotations

from typing import Any, Callable, Dict

import customtkinter as ctk

from trmm_manager.launcher.shared import (
    COLOR_ACCENT,
    COLOR_BG,
    COLOR_BORDER,
    COLOR_PANEL_ALT,
    COLOR_TEXT,
    COLOR_TEXT_DIM,
    FONT_HEADER,
    FONT_UI,
    FONT_UI_BOLD,
    TrmmBtn,
    clear_children,
    ui_theme,
)
from trmm_manager.launcher.ui.agents import setup_agents_ui
from trmm_manager.launcher.ui.codesign import setup_codesign_ui
from trmm_manager.launcher.ui.deployments import setup_deployments_ui
from trmm_manager.launcher.ui.general import setup_general_ui
from trmm_manager.launcher.ui.instances import setup_instances_ui
from trmm_manager.launcher.ui.keystore import setup_keystore_ui
from trmm_manager.launcher.ui.preferences import setup_preferences_ui
from trmm_manager.launcher.ui.scripts import setup_scripts_ui
from trmm_manager.launcher.ui.users import setup_users_ui
from trmm_manager.logging_config import get_logger

log = get_logger("launcher")

# Pages backed by a screen controller, in sidebar order.
SCREEN_PAGES: Dict[str, Callable[..., Any]] = {
    "agents": setup_agents_ui,
    "general": setup_general_ui,
    "keystore": setup_keystore_ui,
    "codesign": setup_codesign_ui,
    "scripts": setup_scripts_ui,
    "users": setup_users_ui,
    "deployments": setup_deployments_ui,
}

LOCAL_PAGES: Dict[str, Callable[..., Any]] = {
    "instances": setup_instances_ui,
    "preferences": setup_preferences_ui,
}

NAV_ORDER = ("instances",) + tuple(SCREEN_PAGES) + ("preferences",)


class AppNavigationMixin:
    """Sidebar navigation and page switching."""

    def create_nav_btn(self, text: str, name: str, row: int) -> Any:
        def cmd() -> None:
            self.select_frame(name)

        btn = TrmmBtn(
            self.sidebar,
            text=str(text or ""),
            fg_color="transparent",
            text_color=COLOR_TEXT_DIM,
            border_width=0,
            hover_color=COLOR_PANEL_ALT,
            anchor="w",
            font=FONT_UI_BOLD,
            corner_radius=8,
            height=40,
            command=cmd,
        )
        btn.grid(row=row, column=0, sticky="ew", padx=14, pady=5)
        return btn

    def _ui_theme(self) -> Dict[str, Any]:
        return ui_theme()

    def _highlight_nav(self, name: str) -> None:
        for key, btn in self.nav_buttons.items():
            if key == name:
                btn.configure(fg_color=COLOR_PANEL_ALT, text_color=COLOR_ACCENT, border_width=1, border_color=COLOR_BORDER)
            else:
                btn.configure(fg_color="transparent", text_color=COLOR_TEXT_DIM, border_width=0)

    def _page_header(self, title: str, subtitle: str = "") -> None:
        ctk.CTkLabel(self.page_frame, text=title, font=FONT_HEADER, text_color=COLOR_TEXT).pack(
            anchor="w", padx=20, pady=(18, 2)
        )
        if subtitle:
            ctk.CTkLabel(self.page_frame, text=subtitle, font=FONT_UI, text_color=COLOR_TEXT_DIM).pack(
                anchor="w", padx=20, pady=(0, 12)
            )

    def _no_instance_page(self) -> None:
        self._page_header(self.tr("no_instance_title"), self.tr("no_instance_hint"))
        TrmmBtn(
            self.page_frame,
            text=self.tr("nav_instances"),
            fg_color=COLOR_ACCENT,
            text_color=COLOR_BG,
            command=lambda: self.select_frame("instances"),
        ).pack(anchor="w", padx=20, pady=8)

    def select_frame(self, name: str) -> None:
        """Switch pages; leaving a page cancels its outstanding requests."""
        self.close_controller()
        clear_children(self.page_frame)
        self.current_page = name
        self._highlight_nav(name)
        ui = self._ui_theme()

        local = LOCAL_PAGES.get(name)
        if local is not None:
            local(self, ui)
            return

        setup = SCREEN_PAGES.get(name)
        if setup is None:
            log.error("Unknown page: %s", name)
            return
        controller = self.open_controller(name)
        if controller is None:
            self._no_instance_page()
            return
        profile = controller.profile
        self._page_header(self.tr(f"nav_{name}"), self.tr("page_subtitle", name=profile.display_name))
        setup(self, ui, controller)
        controller.load()

    def refresh_page(self) -> None:
        self.select_frame(getattr(self, "current_page", "instances"))
