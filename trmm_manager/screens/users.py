from typing import Any, Dict, List, Optional

from ..core.classifier import extract_message
from ..models import Role, User, UserSession
from . import demo
from .base import Applier, DraftError, ScreenController, ScreenError

USERS_PATH = "/accounts/users/"
ROLES_PATH = "/accounts/roles/"
PASSWORD_RESET_PATH = "/accounts/users/reset/"
TOTP_RESET_PATH = "/accounts/users/reset_totp/"
ROLES_RESTRICTED = "Role information restricted; showing role IDs."


class UserEditDraft:
    def __init__(self, user: User) -> None:
        self.user = user
        self.username = user.username
        self.first_name = user.first_name or ""
        self.last_name = user.last_name or ""
        self.email = user.email or ""
        self.is_active = user.is_active
        self.block_dashboard_login = bool(user.block_dashboard_login)
        self.role_id: Optional[int] = user.role
        self.role_text = "" if user.role is None else str(user.role)

    def resolve_role(self, roles: Dict[int, Role]) -> Optional[int]:
        """Picked role, else the user's current role, else the first role by name."""
        if not roles:
            try:
                return int(self.role_text.strip())
            except ValueError:
                return None
        if self.role_id is not None:
            return self.role_id
        if self.user.role is not None:
            return self.user.role
        ordered = sorted(roles.values(), key=lambda r: r.display_name.lower())
        return ordered[0].id if ordered else None

    def payload(self, roles: Dict[int, Role]) -> Dict[str, Any]:
        username = self.username.strip()
        if not username:
            raise DraftError("Username is required.")
        role = self.resolve_role(roles)
        if role is None:
            raise DraftError("Select a role.")
        return {
            "is_active": bool(self.is_active),
            "block_dashboard_login": bool(self.block_dashboard_login),
            "id": self.user.id,
            "username": username,
            "first_name": self.first_name.strip() or None,
            "last_name": self.last_name.strip() or None,
            "email": self.email.strip() or None,
            "last_login_ip": self.user.last_login_ip,
            "role": role,
            "date_format": self.user.date_format,
            "social_accounts": list(self.user.social_accounts or []),
        }


class UsersController(ScreenController):
    title = "Users"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.users: List[User] = []
        self.roles: Dict[int, Role] = {}
        self.role_error: Optional[str] = None
        self.edit_error: Optional[str] = None
        self.reset_error: Optional[str] = None
        self.sessions: List[UserSession] = []
        self.sessions_user: Optional[User] = None
        self.sessions_error: Optional[str] = None

    def role_label(self, role_id: Optional[int]) -> str:
        if role_id is None:
            return "Role unknown"
        role = self.roles.get(role_id)
        return role.display_name if role else f"Role {role_id}"

    def _fetch(self) -> Applier:
        outcome = self._send(
            "GET",
            USERS_PATH,
            action="loading users",
            forbidden="You do not have permission to access User Administration.",
        )
        users = self._decode(outcome, User, many=True)
        roles: Dict[int, Role] = {}
        role_error: Optional[str] = None
        try:
            roles_outcome = self._send(
                "GET",
                ROLES_PATH,
                action="loading roles",
                forbidden=ROLES_RESTRICTED,
            )
            roles = {r.id: r for r in self._decode(roles_outcome, Role, many=True)}
        except ScreenError as e:
            role_error = e.message

        def apply() -> None:
            self.users = sorted(users, key=lambda u: u.username.lower())
            self.roles = roles
            self.role_error = role_error

        return apply

    def _demo_load(self) -> Applier:
        users = demo.users()
        roles = {r.id: r for r in demo.roles()}

        def apply() -> None:
            self.users = users
            self.roles = roles
            self.role_error = None

        return apply

    def save_user(self, draft: UserEditDraft) -> bool:
        def work() -> Applier:
            payload = draft.payload(self.roles)
            if self.is_demo:
                updated = draft.user.model_copy(update=payload)

                def apply_demo() -> None:
                    self.users = [updated if u.id == updated.id else u for u in self.users]
                    self.status_message = "User updated (demo)."

                return apply_demo
            self._send(
                "PUT",
                f"/accounts/{draft.user.id}/users/",
                payload,
                action="saving user",
                forbidden="You do not have permission to edit this user.",
                fallback="Validation failed. Check the entered details.",
            )
            return lambda: setattr(self, "status_message", f"Updated {payload['username']}.")

        return self._mutate(work, tag="edit", error_attr="edit_error", reload=not self.is_demo)

    def reset_password(self, user: User, password: str) -> bool:
        cleaned = str(password or "").strip()

        def work() -> Applier:
            if not cleaned:
                raise DraftError("Password is required.")
            if not self.is_demo:
                self._send(
                    "POST",
                    PASSWORD_RESET_PATH,
                    {"id": user.id, "password": cleaned},
                    action="resetting password",
                    forbidden="You do not have permission to reset passwords.",
                    fallback="Password rejected by server.",
                )
            return lambda: setattr(self, "status_message", f"Password reset for {user.username}.")

        return self._mutate(work, tag="reset", error_attr="reset_error", reload=False)

    def reset_two_factor(self, user: User) -> bool:
        def work() -> Applier:
            message = "2FA has been reset."
            if not self.is_demo:
                outcome = self._send(
                    "PUT",
                    TOTP_RESET_PATH,
                    {"id": user.id},
                    action="resetting 2FA",
                    forbidden="You do not have permission to reset 2FA.",
                    fallback="2FA reset rejected.",
                )
                message = extract_message(outcome.body, message)
            return lambda: setattr(self, "status_message", message)

        return self._mutate(work, tag="reset", error_attr="reset_error", reload=False)

    def load_sessions(self, user: User, force: bool = False) -> bool:
        def work() -> Applier:
            if self.is_demo:
                sessions = demo.user_sessions()
            else:
                outcome = self._send(
                    "GET",
                    f"{USERS_PATH}{user.id}/sessions/",
                    action="loading sessions",
                    forbidden="You do not have permission to view sessions.",
                )
                sessions = self._decode(outcome, UserSession, many=True)

            def apply() -> None:
                self.sessions_user = user
                self.sessions = sessions

            return apply

        return self._run("sessions", work, error_attr="sessions_error", force=force)

    def logout_session(self, session: UserSession) -> bool:
        def remove() -> None:
            self.sessions = [s for s in self.sessions if s.digest != session.digest]

        def work() -> Applier:
            if not self.is_demo:
                try:
                    self._send(
                        "DELETE",
                        f"/accounts/sessions/{session.digest}/",
                        action="logging out session",
                        forbidden="You do not have permission to manage sessions.",
                    )
                except ScreenError as e:
                    if e.status_code == 404:
                        raise ScreenError("Session already expired.", status_code=404, apply=remove)
                    raise
            return remove

        return self._mutate(work, tag="logout", error_attr="sessions_error", reload=False)

    def logout_all_sessions(self, user: User) -> bool:
        def work() -> Applier:
            if not self.is_demo:
                self._send(
                    "DELETE",
                    f"{USERS_PATH}{user.id}/sessions/",
                    action="logging out sessions",
                    forbidden="You do not have permission to manage sessions.",
                )

            def apply() -> None:
                self.sessions = []
                self.status_message = f"Logged out all sessions for {user.username}."

            return apply

        return self._mutate(work, tag="logout", error_attr="sessions_error", reload=False)
