"""Script library screen: list, inspect, edit, delete and test-run scripts."""

from typing import Any, Dict, List, Optional, Tuple

from ..core.classifier import extract_message
from ..models import Agent, ScriptDetail, ScriptEnvVar, ScriptSummary, ScriptTestResult
from . import demo
from .agents import AGENTS_PATH, decode_agents
from .base import Applier, DraftError, ScreenController, ScreenError

SCRIPTS_PATH = "/scripts/"
SHELL_OPTIONS = ("python", "powershell", "bash", "nushell", "deno")
CUSTOM_SHELL = "__custom__"
DEFAULT_TIMEOUT_S = 60

_SHELL_LABELS = {
    "powershell": "PowerShell",
    "nushell": "NuShell",
    "bash": "Bash",
    "python": "Python",
    "deno": "Deno",
}


def shell_selection(value: str) -> Tuple[str, str]:
    """Split a shell into (option, custom text) for a picker with a custom entry."""
    text = str(value or "").strip()
    if not text:
        return SHELL_OPTIONS[0], ""
    for option in SHELL_OPTIONS:
        if option.lower() == text.lower():
            return option, ""
    return CUSTOM_SHELL, text


def shell_label(value: str) -> str:
    return _SHELL_LABELS.get(str(value or "").lower(), str(value or ""))


def parse_lines(text: str) -> List[str]:
    return [line.strip() for line in str(text or "").splitlines() if line.strip()]


def parse_platforms(text: str) -> List[str]:
    out: List[str] = []
    for line in str(text or "").splitlines():
        out.extend(part.strip() for part in line.split(",") if part.strip())
    return out


def parse_env_vars(text: str) -> List[Dict[str, Optional[str]]]:
    """`NAME=value` per line; a bare `NAME` or empty value sends null."""
    out: List[Dict[str, Optional[str]]] = []
    for line in str(text or "").splitlines():
        line = line.strip()
        if not line:
            continue
        name, _, value = line.partition("=")
        name = name.strip()
        if not name:
            continue
        out.append({"name": name, "value": value.strip() or None})
    return out


def format_env_vars(env_vars: Optional[List[ScriptEnvVar]]) -> str:
    lines = []
    for var in env_vars or []:
        if not var.name:
            continue
        lines.append(f"{var.name}={var.value}" if var.value else var.name)
    return "\n".join(lines)


def _parse_timeout(text: str, default: Optional[int] = None) -> int:
    raw = str(text or "").strip()
    if not raw and default is not None:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        raise DraftError("Timeout must be a positive whole number of seconds.")
    return value


class ScriptEditDraft:
    def __init__(self, detail: ScriptDetail) -> None:
        self.id = detail.id
        self.name = detail.name
        self.description = detail.description or ""
        self.script_type = detail.script_type or "userdefined"
        self.shell = detail.shell
        self.args_text = "\n".join(detail.args or [])
        self.category = detail.category or ""
        self.favorite = bool(detail.favorite)
        self.default_timeout = "" if detail.default_timeout is None else str(detail.default_timeout)
        self.syntax = detail.syntax or ""
        self.filename = detail.filename or ""
        self.hidden = bool(detail.hidden)
        self.supported_platforms_text = "\n".join(detail.supported_platforms or [])
        self.run_as_user = bool(detail.run_as_user)
        self.env_vars_text = format_env_vars(detail.env_vars)
        self.script_body = detail.script_body or ""

    def payload(self, existing: ScriptDetail) -> Dict[str, Any]:
        name = self.name.strip()
        if not name:
            raise DraftError("Script name cannot be empty.")
        shell = self.shell.strip()
        if not shell:
            raise DraftError("Shell cannot be empty.")
        script_type = self.script_type.strip()
        if not script_type:
            raise DraftError("Script type cannot be empty.")
        body = self.script_body.strip()
        if not body:
            raise DraftError("Script body cannot be empty.")
        timeout = _parse_timeout(self.default_timeout, existing.default_timeout or DEFAULT_TIMEOUT_S)

        return {
            "id": self.id,
            "name": name,
            "description": self.description.strip() or None,
            "script_type": script_type,
            "shell": shell,
            "args": parse_lines(self.args_text),
            "category": self.category.strip() or None,
            "favorite": self.favorite,
            "default_timeout": timeout,
            "syntax": self.syntax.strip() or None,
            "filename": self.filename.strip() or None,
            "hidden": self.hidden,
            "supported_platforms": parse_platforms(self.supported_platforms_text),
            "run_as_user": self.run_as_user,
            "env_vars": parse_env_vars(self.env_vars_text),
            "script_body": body,
        }


class ScriptTestDraft:
    def __init__(self, detail: ScriptDetail, agent_id: str = "") -> None:
        self.agent_id = agent_id
        self.code = detail.script_body or ""
        self.timeout = str(detail.default_timeout) if detail.default_timeout is not None else str(DEFAULT_TIMEOUT_S)
        self.args_text = "\n".join(detail.args or [])
        self.shell = detail.shell
        self.run_as_user = bool(detail.run_as_user)
        self.env_vars_text = format_env_vars(detail.env_vars)

    def select_agent(self, agent: Optional[Agent]) -> None:
        self.agent_id = agent.agent_id if agent is not None else ""

    def payload(self) -> Tuple[str, Dict[str, Any]]:
        agent = self.agent_id.strip()
        if not agent:
            raise DraftError("Select an agent to run the test on.")
        code = self.code.strip()
        if not code:
            raise DraftError("Script code cannot be empty.")
        shell = self.shell.strip()
        if not shell:
            raise DraftError("Shell cannot be empty.")
        timeout = _parse_timeout(self.timeout)
        return agent, {
            "code": code,
            "timeout": timeout,
            "args": parse_lines(self.args_text),
            "shell": shell,
            "run_as_user": self.run_as_user,
            "env_vars": parse_env_vars(self.env_vars_text),
        }


class ScriptsController(ScreenController):
    title = "Scripts"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.scripts: List[ScriptSummary] = []
        self.search_text = ""
        self.selected: Optional[ScriptSummary] = None
        self.detail: Optional[ScriptDetail] = None
        self.detail_error: Optional[str] = None
        self.edit_error: Optional[str] = None
        self.test_result: Optional[ScriptTestResult] = None
        self.test_error: Optional[str] = None
        self.agents: List[Agent] = []
        self.agents_error: Optional[str] = None

    @property
    def filtered_scripts(self) -> List[ScriptSummary]:
        return [s for s in self.scripts if s.matches(self.search_text)]

    @property
    def is_loading_detail(self) -> bool:
        return self.is_busy("detail")

    @property
    def is_testing(self) -> bool:
        return self.mutation == "test"

    def _fetch(self) -> Applier:
        outcome = self._send(
            "GET",
            SCRIPTS_PATH,
            action="loading scripts",
            forbidden="You do not have permission to view scripts.",
        )
        scripts = self._decode(outcome, ScriptSummary, many=True)
        agents: List[Agent] = []
        agents_error: Optional[str] = None
        try:
            agents_outcome = self._send(
                "GET",
                AGENTS_PATH,
                action="loading agents",
                forbidden="You do not have permission to view agents.",
            )
            agents = decode_agents(agents_outcome)
        except ScreenError as e:
            agents_error = e.message
        return self._apply_lists(sorted(scripts, key=lambda s: s.name.lower()), agents, agents_error)

    def _demo_load(self) -> Applier:
        return self._apply_lists(demo.scripts(), demo.agents(), None)

    def _apply_lists(self, scripts: List[ScriptSummary], agents: List[Agent], agents_error: Optional[str]) -> Applier:
        def apply() -> None:
            self.scripts = scripts
            self.agents = agents
            self.agents_error = agents_error

        return apply

    def agent_by_id(self, agent_id: str) -> Optional[Agent]:
        return next((a for a in self.agents if a.agent_id == agent_id), None)

    def agent_choices(self) -> Dict[str, str]:
        """Picker label -> agent id, in hostname order."""
        return {f"{a.hostname} ({a.status_label})": a.agent_id for a in self.agents}

    def load_detail(self, summary: ScriptSummary, force: bool = False) -> bool:
        def work() -> Applier:
            if self.is_demo:
                detail = demo.script_detail(summary)
            else:
                outcome = self._send(
                    "GET",
                    f"{SCRIPTS_PATH}{summary.id}/",
                    action="loading script",
                    forbidden="You do not have permission to view this script.",
                )
                detail = self._decode(outcome, ScriptDetail)

            def apply() -> None:
                self.selected = summary
                self.detail = detail

            return apply

        return self._run("detail", work, error_attr="detail_error", force=force)

    def begin_edit(self, detail: ScriptDetail) -> Optional[ScriptEditDraft]:
        """Return an edit draft, or None for built-in scripts which are read-only."""
        if detail.is_builtin:
            self.alert_message = "Built-in scripts cannot be edited."
            self._notify()
            return None
        self.edit_error = None
        return ScriptEditDraft(detail)

    def save(self, draft: ScriptEditDraft, existing: ScriptDetail) -> bool:
        def work() -> Applier:
            payload = draft.payload(existing)
            if self.is_demo:
                updated = existing.model_copy(update={**payload, "env_vars": [ScriptEnvVar(**v) for v in payload["env_vars"]]})

                def apply_demo() -> None:
                    self.detail = updated
                    self.scripts = [
                        ScriptSummary(**updated.model_dump(exclude={"script_body", "script_hash"}))
                        if s.id == updated.id
                        else s
                        for s in self.scripts
                    ]
                    self.status_message = "Script updated (demo)."

                return apply_demo
            outcome = self._send(
                "PUT",
                f"{SCRIPTS_PATH}{existing.id}/",
                payload,
                action="updating script",
                forbidden="You do not have permission to edit scripts.",
                fallback="Server rejected the script update.",
            )
            message = extract_message(outcome.body, "Script updated.")

            def apply() -> None:
                self.status_message = message
                if self.selected is not None and self.selected.id == existing.id:
                    self.load_detail(self.selected, force=True)

            return apply

        return self._mutate(work, tag="edit", error_attr="edit_error", reload=not self.is_demo)

    def delete(self, summary: ScriptSummary) -> bool:
        def work() -> Applier:
            message = "Script deleted (demo)."
            if not self.is_demo:
                outcome = self._send(
                    "DELETE",
                    f"{SCRIPTS_PATH}{summary.id}/",
                    action="deleting script",
                    forbidden="You do not have permission to delete scripts.",
                )
                message = extract_message(outcome.body, "Script deleted.")

            def apply() -> None:
                self.scripts = [s for s in self.scripts if s.id != summary.id]
                if self.selected is not None and self.selected.id == summary.id:
                    self.selected = None
                    self.detail = None
                self.status_message = message

            return apply

        return self._mutate(work, tag="delete", reload=False)

    def run_test(self, draft: ScriptTestDraft) -> bool:
        def work() -> Applier:
            agent_id, payload = draft.payload()
            if self.is_demo:
                result = demo.script_test_result()
            else:
                outcome = self._send(
                    "POST",
                    f"{SCRIPTS_PATH}{agent_id}/test/",
                    payload,
                    action="running script test",
                    forbidden="You do not have permission to run scripts.",
                    fallback="Script execution failed.",
                )
                result = self._decode(outcome, ScriptTestResult)
            return lambda: setattr(self, "test_result", result)

        return self._mutate(work, tag="test", error_attr="test_error", reload=False)
