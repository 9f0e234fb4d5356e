from typing import Optional

from ..core.classifier import extract_message
from ..models import CodeSigningToken
from . import demo
from .base import Applier, DraftError, ScreenController

CODESIGN_PATH = "/core/codesign/"
SIGN_ALL_QUEUED = "Agents will be code signed shortly."


class CodeSigningController(ScreenController):
    title = "Code Signing"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.token: Optional[str] = None
        self.sign_all_message: Optional[str] = None

    @property
    def has_token(self) -> bool:
        return bool(str(self.token or "").strip())

    @property
    def is_signing(self) -> bool:
        return self.mutation == "sign"

    def _fetch(self) -> Applier:
        outcome = self._send(
            "GET",
            CODESIGN_PATH,
            action="loading code signing token",
            forbidden="You do not have permission to view the code signing token.",
        )
        record = self._decode(outcome, CodeSigningToken)
        return lambda: setattr(self, "token", record.token)

    def _demo_load(self) -> Applier:
        return lambda: setattr(self, "token", demo.DEMO_CODESIGN_TOKEN)

    def update_token(self, draft_token: str) -> bool:
        cleaned = str(draft_token or "").strip()

        def work() -> Applier:
            if not cleaned:
                raise DraftError("Token is required.")
            if self.is_demo:
                return lambda: setattr(self, "token", cleaned)
            self._send(
                "PATCH",
                CODESIGN_PATH,
                {"token": cleaned},
                action="updating code signing token",
                forbidden="You do not have permission to update the code signing token.",
                fallback="Server rejected the token.",
            )
            return lambda: setattr(self, "status_message", "Code signing token updated.")

        return self._mutate(work, tag="save", reload=not self.is_demo)

    def delete_token(self) -> bool:
        def work() -> Applier:
            if not self.is_demo:
                self._send(
                    "DELETE",
                    CODESIGN_PATH,
                    action="deleting code signing token",
                    forbidden="You do not have permission to delete the code signing token.",
                )

            def apply() -> None:
                self.token = None
                self.sign_all_message = None
                self.error_message = None

            return apply

        return self._mutate(work, tag="delete", reload=False)

    def sign_all_agents(self) -> bool:
        """Ask the server to re-sign every agent with the stored token."""
        if not self.has_token:
            self.alert_message = "Add a code signing token before signing agents."
            self._notify()
            return False
        if self.is_demo:
            self.sign_all_message = "Bulk code signing is not available for demo instances."
            self._notify()
            return False

        def work() -> Applier:
            outcome = self._send(
                "POST",
                CODESIGN_PATH,
                action="signing agents",
                forbidden="You do not have permission to code sign agents.",
            )
            message = extract_message(outcome.body, SIGN_ALL_QUEUED)
            return lambda: setattr(self, "sign_all_message", message)

        return self._mutate(work, tag="sign", reload=False)
