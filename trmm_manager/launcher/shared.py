import customtkinter as ctk
from typing import Any, Callable, Optional

from trmm_manager import config as app_config

ctk.set_appearance_mode("Dark")
ctk.set_default_color_theme("dark-blue")

COLOR_BG = "#0B0F14"
COLOR_PANEL = "#121922"
COLOR_PANEL_ALT = "#18222E"
COLOR_BORDER = "#26384A"
COLOR_ACCENT = "#78B0F5"
COLOR_ACCENT_HOVER = "#9AC5FA"
COLOR_WARN = "#FFC24B"
COLOR_FAIL = "#FF6B6B"
COLOR_TEXT = "#E3EEF9"
COLOR_TEXT_DIM = "#8499AE"

FONT_UI = ("Segoe UI", 12)
FONT_UI_BOLD = ("Segoe UI", 12, "bold")
FONT_HEADER = ("Segoe UI", 22, "bold")
FONT_SMALL = ("Segoe UI", 10)
FONT_MONO = ("Consolas", 12)

UI_QUEUE_POLL_MS = 50
LAUNCHER_VERSION = str(getattr(app_config, "VERSION", "unknown") or "unknown")

ABOUT_TEXT = (
    "TRMM Manager\n\n"
    "Desktop client for Tactical RMM servers: agents, general settings,\n"
    "key store, code signing, scripts, users and deployments."
)


class TrmmBtn(ctk.CTkButton):
    def __init__(self, master: Any, **kwargs: Any) -> None:
        """Create a themed launcher button."""
        defaults = dict(
            corner_radius=8,
            border_width=1,
            border_color=COLOR_BORDER,
            fg_color=COLOR_PANEL_ALT,
            text_color=COLOR_TEXT,
            hover_color="#20303F",
            font=FONT_UI_BOLD,
            height=34,
        )
        defaults.update(kwargs)
        super().__init__(master, **defaults)


def ui_theme() -> dict[str, Any]:
    """Palette and widgets handed to page setup functions."""
    return {
        "TrmmBtn": TrmmBtn,
        "COLOR_BG": COLOR_BG,
        "COLOR_PANEL": COLOR_PANEL,
        "COLOR_PANEL_ALT": COLOR_PANEL_ALT,
        "COLOR_BORDER": COLOR_BORDER,
        "COLOR_ACCENT": COLOR_ACCENT,
        "COLOR_ACCENT_HOVER": COLOR_ACCENT_HOVER,
        "COLOR_WARN": COLOR_WARN,
        "COLOR_FAIL": COLOR_FAIL,
        "COLOR_TEXT": COLOR_TEXT,
        "COLOR_TEXT_DIM": COLOR_TEXT_DIM,
        "FONT_UI": FONT_UI,
        "FONT_UI_BOLD": FONT_UI_BOLD,
        "FONT_HEADER": FONT_HEADER,
        "FONT_SMALL": FONT_SMALL,
        "FONT_MONO": FONT_MONO,
    }


def section(parent: Any, title: str) -> Any:
    """Create a titled card."""
    box = ctk.CTkFrame(parent, fg_color=COLOR_PANEL, corner_radius=6, border_width=1, border_color=COLOR_BORDER)
    box.pack(fill="x", padx=20, pady=(0, 12))
    ctk.CTkLabel(box, text=title, text_color=COLOR_TEXT, font=FONT_UI_BOLD).pack(anchor="w", padx=16, pady=(12, 8))
    return box


def styled_entry(parent: Any, width: Optional[int] = None, show: str = "") -> Any:
    kwargs = {
        "height": 32,
        "corner_radius": 4,
        "fg_color": COLOR_PANEL_ALT,
        "border_color": COLOR_BORDER,
        "text_color": COLOR_TEXT,
    }
    if width is not None:
        kwargs["width"] = int(width)
    if show:
        kwargs["show"] = show
    return ctk.CTkEntry(parent, **kwargs)


def labeled_entry(parent: Any, label: str, value: str = "", show: str = "") -> Any:
    ctk.CTkLabel(parent, text=label, text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(anchor="w", padx=18, pady=(4, 2))
    entry = styled_entry(parent, show=show)
    entry.pack(fill="x", padx=18, pady=(0, 6))
    if value:
        entry.insert(0, str(value))
    return entry


def labeled_textbox(parent: Any, label: str, value: str = "", height: int = 80) -> Any:
    ctk.CTkLabel(parent, text=label, text_color=COLOR_TEXT_DIM, font=FONT_SMALL).pack(anchor="w", padx=18, pady=(4, 2))
    box = ctk.CTkTextbox(parent, height=height, fg_color=COLOR_PANEL_ALT, text_color=COLOR_TEXT, font=FONT_MONO)
    box.pack(fill="x", padx=18, pady=(0, 6))
    if value:
        box.insert("1.0", str(value))
    return box


def textbox_value(box: Any) -> str:
    return str(box.get("1.0", "end") or "").rstrip("\n")


def switch(parent: Any, label: str, value: bool, command: Optional[Callable] = None) -> Any:
    sw = ctk.CTkSwitch(parent, text=label, text_color=COLOR_TEXT, command=command)
    sw.pack(anchor="w", padx=18, pady=4)
    sw.select() if value else sw.deselect()
    return sw


def status_label(parent: Any) -> Any:
    label = ctk.CTkLabel(parent, text="", text_color=COLOR_TEXT_DIM, font=FONT_SMALL, justify="left", wraplength=640)
    label.pack(anchor="w", padx=20, pady=(0, 8))
    return label


def clear_children(frame: Any) -> None:
    for child in list(frame.winfo_children()):
        try:
            child.destroy()
        except Exception:
            pass
