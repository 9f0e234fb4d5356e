"""Toasts for the one-shot messages screen controllers leave behind.

Controllers set `alert_message` after a failed write and `status_message`
after a successful one. `take_messages` clears both and maps each to a
toast level and duration; a demo screen's status is shown as `info`
because nothing reached a server.
"""

from typing import Any, Dict, List, Tuple

import customtkinter as ctk

from trmm_manager.launcher.shared import COLOR_ACCENT, COLOR_BORDER, COLOR_FAIL, COLOR_PANEL, COLOR_TEXT, FONT_SMALL

MAX_VISIBLE_TOASTS = 4
DEFAULT_DURATION_MS = 2600

# Controller attribute -> message kind, in display order.
MESSAGE_KINDS = (("alert_message", "alert"), ("status_message", "status"))

KIND_STYLES: Dict[str, Tuple[str, int]] = {
    "alert": ("error", 4200),
    "status": ("success", DEFAULT_DURATION_MS),
    "demo": ("info", DEFAULT_DURATION_MS),
}

LEVEL_COLORS = {
    "info": {"fg": COLOR_PANEL, "border": COLOR_BORDER},
    "success": {"fg": "#13283A", "border": COLOR_ACCENT},
    "error": {"fg": "#3A1C1C", "border": COLOR_FAIL},
}


def toast_style(kind: str) -> Tuple[str, int]:
    """Level and duration for a message kind."""
    return KIND_STYLES.get(kind, ("info", DEFAULT_DURATION_MS))


def take_messages(controller: Any) -> List[Tuple[str, str, int]]:
    """Clear the controller's pending messages; return (text, level, duration_ms)."""
    out = []
    for attr, kind in MESSAGE_KINDS:
        text = getattr(controller, attr, None)
        if not text:
            continue
        setattr(controller, attr, None)
        if kind == "status" and getattr(controller, "is_demo", False):
            kind = "demo"
        level, duration_ms = toast_style(kind)
        out.append((text, level, duration_ms))
    return out


class ToastManager:
    def __init__(self, app):
        self.app = app
        self.items: List[dict] = []

    def palette(self, level: str) -> dict:
        return LEVEL_COLORS.get(level, LEVEL_COLORS["info"])

    def show(self, message: str, level: str = "info", duration_ms: int = DEFAULT_DURATION_MS):
        """Show a toast in the top-right corner; a repeat of a visible one restarts its timer."""
        if not message:
            return
        text = str(message)
        for item in self.items:
            if item["message"] == text and item["level"] == level:
                item["token"] += 1
                self._schedule(item, duration_ms)
                return

        item = {"frame": self._build(text, self.palette(level)), "message": text, "level": level, "token": 0}
        self.items.append(item)
        while len(self.items) > MAX_VISIBLE_TOASTS:
            self.items.pop(0)["frame"].destroy()

        self.reposition()
        self._schedule(item, duration_ms)

    def _build(self, text: str, style: dict):
        toast = ctk.CTkFrame(
            self.app,
            fg_color=style["fg"],
            corner_radius=10,
            border_width=1,
            border_color=style["border"],
        )
        ctk.CTkLabel(
            toast,
            text=text,
            text_color=COLOR_TEXT,
            font=FONT_SMALL,
            justify="left",
            wraplength=360,
        ).pack(padx=10, pady=8)
        return toast

    def _schedule(self, item: dict, duration_ms: int) -> None:
        token = item["token"]
        self.app._safe_after(duration_ms, lambda: self.dismiss(item, token))

    def reposition(self):
        y = 14
        for item in self.items:
            toast = item["frame"]
            toast.update_idletasks()
            h = max(1, int(toast.winfo_reqheight()))
            toast.place(relx=1.0, x=-20, y=y, anchor="ne")
            y += h + 8

    def dismiss(self, item: dict, token: int = None):
        """Remove a toast unless it is gone or was shown again since `token`."""
        if item not in self.items:
            return
        if token is not None and item["token"] != token:
            return
        self.items.remove(item)
        item["frame"].place_forget()
        item["frame"].destroy()
        self.reposition()
