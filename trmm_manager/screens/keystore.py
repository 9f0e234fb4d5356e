from typing import List, Optional

from ..models import KeyStoreEntry
from . import demo
from .base import Applier, DraftError, ScreenController

KEYSTORE_PATH = "/core/keystore/"


class KeyStoreDraft:
    """Editor state for adding or editing one key store entry."""

    def __init__(self, entry: Optional[KeyStoreEntry] = None) -> None:
        self.entry = entry
        self.name = entry.name if entry else ""
        self.value = entry.value if entry else ""

    @property
    def is_new(self) -> bool:
        return self.entry is None

    def validate(self) -> None:
        if not self.name.strip():
            raise DraftError("Name is required.")
        if not self.value.strip():
            raise DraftError("Value is required.")

    def payload(self) -> dict:
        return {"name": self.name.strip(), "value": self.value.strip()}

    def full_payload(self) -> dict:
        if self.entry is None:
            return self.payload()
        body = self.payload()
        body.update(
            {
                "id": self.entry.id,
                "created_by": self.entry.created_by,
                "created_time": self.entry.created_time,
                "modified_by": self.entry.modified_by,
                "modified_time": self.entry.modified_time,
            }
        )
        return body


class KeyStoreController(ScreenController):
    title = "Key Store"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.entries: List[KeyStoreEntry] = []
        self.show_values = False

    def _fetch(self) -> Applier:
        outcome = self._send(
            "GET",
            KEYSTORE_PATH,
            action="loading key store",
            forbidden="You do not have permission to view the key store.",
        )
        entries = self._decode(outcome, KeyStoreEntry, many=True)

        def apply() -> None:
            self.entries = sorted(entries, key=lambda e: e.name.lower())

        return apply

    def _demo_load(self) -> Applier:
        entries = demo.keystore_entries()

        def apply() -> None:
            self.entries = entries

        return apply

    def save(self, draft: KeyStoreDraft) -> bool:
        """Create (POST) or update (PUT) an entry."""

        def work() -> Applier:
            draft.validate()
            if self.is_demo:
                return lambda: self._apply_demo_save(draft)
            if draft.is_new:
                self._send(
                    "POST",
                    KEYSTORE_PATH,
                    draft.payload(),
                    action="creating key",
                    forbidden="You do not have permission to modify the key store.",
                    fallback="Server rejected the request.",
                )
            else:
                self._send(
                    "PUT",
                    f"{KEYSTORE_PATH}{draft.entry.id}/",
                    draft.full_payload(),
                    action="updating keystore",
                    forbidden="You do not have permission to modify the key store.",
                    fallback="Server rejected the request.",
                )
            name = draft.name.strip()
            return lambda: setattr(self, "status_message", f"Saved key '{name}'.")

        return self._mutate(work, tag="save", reload=not self.is_demo)

    def delete(self, entry: KeyStoreEntry) -> bool:
        def work() -> Applier:
            if not self.is_demo:
                self._send(
                    "DELETE",
                    f"{KEYSTORE_PATH}{entry.id}/",
                    action="deleting key",
                    forbidden="You do not have permission to modify the key store.",
                )

            def apply() -> None:
                self.entries = [e for e in self.entries if e.id != entry.id]
                self.status_message = f"Deleted key '{entry.name}'."

            return apply

        return self._mutate(work, tag="delete", reload=not self.is_demo)

    def _apply_demo_save(self, draft: KeyStoreDraft) -> None:
        if draft.is_new:
            next_id = max((e.id for e in self.entries), default=0) + 1
            self.entries = self.entries + [KeyStoreEntry(id=next_id, **draft.payload())]
        else:
            self.entries = [
                e.model_copy(update=draft.payload()) if e.id == draft.entry.id else e for e in self.entries
            ]
        self.status_message = f"Saved key '{draft.name.strip()}'."

    def display_value(self, entry: KeyStoreEntry) -> str:
        return entry.value if self.show_values else "•" * min(len(entry.value), 12)
