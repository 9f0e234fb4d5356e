from __future__ import annotations

import queue
from typing import Optional

import customtkinter as ctk

from trmm_manager.launcher.app_navigation import NAV_ORDER, AppNavigationMixin
from trmm_manager.launcher.app_runtime import AppRuntimeMixin
from trmm_manager.launcher.shared import (
    COLOR_BG,
    COLOR_BORDER,
    COLOR_PANEL,
    COLOR_PANEL_ALT,
    COLOR_TEXT,
    COLOR_TEXT_DIM,
    FONT_SMALL,
    LAUNCHER_VERSION,
    UI_QUEUE_POLL_MS,
)
from trmm_manager.launcher.toasts import ToastManager
from trmm_manager.logging_config import get_logger
from trmm_manager.services import Services, build_services

log = get_logger("launcher")


class App(AppRuntimeMixin, AppNavigationMixin, ctk.CTk):
    """Main launcher window assembled from focused mixins."""

    def __init__(self, services: Optional[Services] = None) -> None:
        super().__init__()
        self.services = services or build_services()
        self.controller = None
        self.current_page = ""
        self._ui_queue = queue.Queue()

        self.title(self.tr("app_title"))
        self.geometry("1180x760")
        self.minsize(960, 620)
        self.configure(fg_color=COLOR_BG)
        self.protocol("WM_DELETE_WINDOW", self.on_close)

        self.setup_ui()
        self.toast_manager = ToastManager(self)
        self.after(UI_QUEUE_POLL_MS, self._process_ui_queue)
        start = "general" if self.services.profiles.active() else "instances"
        self.select_frame(start)
        log.info("Launcher started (version %s)", LAUNCHER_VERSION)

    def setup_ui(self) -> None:
        """Construct the sidebar and the page container."""
        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self.sidebar = ctk.CTkFrame(
            self,
            width=236,
            corner_radius=0,
            fg_color=COLOR_PANEL,
            border_width=1,
            border_color=COLOR_BORDER,
        )
        self.sidebar.grid(row=0, column=0, sticky="nsew")
        self.sidebar.grid_columnconfigure(0, weight=1)
        self.sidebar.grid_rowconfigure(len(NAV_ORDER) + 1, weight=1)

        brand = ctk.CTkFrame(
            self.sidebar,
            fg_color=COLOR_PANEL_ALT,
            corner_radius=6,
            border_width=1,
            border_color=COLOR_BORDER,
        )
        brand.grid(row=0, column=0, sticky="ew", padx=14, pady=(16, 10))
        ctk.CTkLabel(brand, text="TRMM MANAGER", font=("Segoe UI", 20, "bold"), text_color=COLOR_TEXT).pack(
            anchor="w", padx=14, pady=(12, 0)
        )
        ctk.CTkLabel(brand, text=self.tr("app_subtitle"), font=FONT_SMALL, text_color=COLOR_TEXT_DIM).pack(
            anchor="w", padx=14, pady=(2, 12)
        )

        self.nav_buttons = {}
        for row, name in enumerate(NAV_ORDER, start=1):
            self.nav_buttons[name] = self.create_nav_btn(self.tr(f"nav_{name}"), name, row)

        ctk.CTkLabel(
            self.sidebar,
            text=self.tr("launcher_version", version=LAUNCHER_VERSION),
            font=FONT_SMALL,
            text_color=COLOR_TEXT_DIM,
        ).grid(row=len(NAV_ORDER) + 2, column=0, padx=18, pady=(0, 14), sticky="w")

        self.page_frame = ctk.CTkScrollableFrame(self, corner_radius=0, fg_color=COLOR_BG)
        self.page_frame.grid(row=0, column=1, sticky="nsew")
