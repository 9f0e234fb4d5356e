"""Agents screen: list, inspect and act on the agents of a server."""

import json
from typing import Any, Dict, List, Optional

from ..core.classifier import extract_message
from ..core.outcome import Success
from ..core.transport import ApiClient
from ..models import Agent, AgentNote, AgentPage, AgentProcess
from . import demo
from .base import Applier, DraftError, ScreenController, ScreenError

AGENTS_PATH = "/agents/"
POWER_ACTIONS = ("reboot", "shutdown")
COMMAND_SHELLS = ("cmd", "powershell", "bash")
DEFAULT_COMMAND_TIMEOUT_S = 30
AGENT_OFFLINE_HINT = "The agent might be offline."


def agent_path(agent_id: str, *parts: str) -> str:
    suffix = "".join(f"{p}/" for p in parts)
    return f"{AGENTS_PATH}{agent_id}/{suffix}"


def decode_agents(outcome: Success) -> List[Agent]:
    """Decode an agent listing, plain or paginated, sorted by hostname."""
    if outcome.body.lstrip().startswith(b"{"):
        agents = ApiClient.decode(outcome, AgentPage).results
    else:
        agents = ApiClient.decode(outcome, Agent, many=True)
    return sorted(agents, key=lambda a: a.hostname.lower())


def command_text(body: bytes) -> str:
    """Command output; the server wraps it in a JSON string."""
    try:
        value = json.loads(body or b"null")
    except ValueError:
        return extract_message(body)
    if isinstance(value, str):
        return value
    return extract_message(body)


class CommandDraft:
    def __init__(self, agent: Agent) -> None:
        self.agent = agent
        self.shell = "powershell" if "windows" in agent.operating_system.lower() else "bash"
        self.command = ""
        self.timeout = str(DEFAULT_COMMAND_TIMEOUT_S)
        self.run_as_user = False

    def payload(self) -> Dict[str, Any]:
        command = self.command.strip()
        if not command:
            raise DraftError("Command cannot be empty.")
        if self.shell not in COMMAND_SHELLS:
            raise DraftError(f"Unknown shell: {self.shell}")
        try:
            timeout = int(str(self.timeout).strip())
        except ValueError:
            timeout = 0
        if timeout <= 0:
            raise DraftError("Invalid timeout value.")
        return {
            "shell": self.shell,
            "cmd": command,
            "timeout": timeout,
            "custom_shell": None,
            "run_as_user": bool(self.run_as_user),
        }


class AgentsController(ScreenController):
    title = "Agents"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.agents: List[Agent] = []
        self.search_text = ""
        self.selected: Optional[Agent] = None
        self.detail_error: Optional[str] = None
        self.notes: List[AgentNote] = []
        self.notes_error: Optional[str] = None
        self.processes: List[AgentProcess] = []
        self.processes_error: Optional[str] = None
        self.command_output: Optional[str] = None
        self.command_error: Optional[str] = None

    @property
    def filtered_agents(self) -> List[Agent]:
        return [a for a in self.agents if a.matches(self.search_text)]

    @property
    def is_loading_detail(self) -> bool:
        return self.is_busy("detail")

    @property
    def is_loading_processes(self) -> bool:
        return self.is_busy("processes")

    @property
    def is_sending_command(self) -> bool:
        return self.mutation == "command"

    def counts(self) -> Dict[str, int]:
        online = sum(1 for a in self.agents if a.is_online)
        offline = sum(1 for a in self.agents if a.is_offline)
        return {"total": len(self.agents), "online": online, "offline": offline}

    def _fetch(self) -> Applier:
        outcome = self._send(
            "GET",
            AGENTS_PATH,
            action="loading agents",
            forbidden="You do not have permission to view agents.",
        )
        agents = decode_agents(outcome)
        return lambda: setattr(self, "agents", agents)

    def _demo_load(self) -> Applier:
        agents = demo.agents()
        return lambda: setattr(self, "agents", agents)

    def load_detail(self, agent: Agent, force: bool = False) -> bool:
        """Fetch the agent record and its notes; a notes failure keeps the record."""

        def work() -> Applier:
            notes_error: Optional[str] = None
            if self.is_demo:
                detail = agent
                notes = demo.agent_notes(agent.agent_id)
            else:
                outcome = self._send(
                    "GET",
                    agent_path(agent.agent_id),
                    action="loading agent details",
                    forbidden="You do not have permission to view this agent.",
                )
                detail = self._decode(outcome, Agent)
                notes = []
                try:
                    notes_outcome = self._send(
                        "GET",
                        agent_path(agent.agent_id, "notes"),
                        action="loading notes",
                        forbidden="You do not have permission to view notes.",
                    )
                    notes = self._decode(notes_outcome, AgentNote, many=True)
                except ScreenError as e:
                    notes_error = e.message

            def apply() -> None:
                if self.selected is None or self.selected.agent_id != detail.agent_id:
                    self.processes = []
                    self.processes_error = None
                    self.command_output = None
                    self.command_error = None
                self.selected = detail
                self.notes = notes
                self.notes_error = notes_error
                self.agents = [detail if a.agent_id == detail.agent_id else a for a in self.agents]

            return apply

        return self._run("detail", work, error_attr="detail_error", force=force)

    def load_processes(self, agent: Agent, force: bool = False) -> bool:
        def work() -> Applier:
            if self.is_demo:
                processes = demo.agent_processes()
            else:
                outcome = self._send(
                    "GET",
                    agent_path(agent.agent_id, "processes"),
                    action="loading processes",
                    forbidden="You do not have permission to view processes.",
                )
                processes = self._decode(outcome, AgentProcess, many=True)
            ordered = sorted(processes, key=lambda p: p.name.lower())
            return lambda: setattr(self, "processes", ordered)

        return self._run("processes", work, error_attr="processes_error", force=force)

    def kill_process(self, agent: Agent, process: AgentProcess) -> bool:
        def work() -> Applier:
            if not self.is_demo:
                self._send(
                    "DELETE",
                    agent_path(agent.agent_id, "processes", str(process.pid)),
                    action="killing process",
                    forbidden="You do not have permission to kill processes.",
                    fallback=f"Failed to kill process {process.pid}.",
                )

            def apply() -> None:
                self.processes = [p for p in self.processes if p.pid != process.pid]
                self.status_message = f"Process {process.pid} killed."

            return apply

        return self._mutate(work, tag=f"kill:{process.pid}", error_attr="processes_error", reload=False)

    def power_action(self, agent: Agent, action: str) -> bool:
        """Send a reboot or shutdown to an agent."""
        if action not in POWER_ACTIONS:
            raise ValueError(f"Unknown power action: {action}")

        def work() -> Applier:
            if self.is_demo:
                return lambda: setattr(self, "status_message", f"Demo mode does not send {action} commands.")
            self._send(
                "POST",
                agent_path(agent.agent_id, action),
                action=f"sending {action}",
                forbidden=f"You do not have permission to {action} agents.",
                fallback=AGENT_OFFLINE_HINT,
            )
            message = f"{action.capitalize()} command sent to {agent.hostname}."
            return lambda: setattr(self, "status_message", message)

        return self._mutate(work, tag=action, reload=False)

    def reboot(self, agent: Agent) -> bool:
        return self.power_action(agent, "reboot")

    def shutdown(self, agent: Agent) -> bool:
        return self.power_action(agent, "shutdown")

    def wake_on_lan(self, agent: Agent) -> bool:
        def work() -> Applier:
            message = "Wake-on-LAN sent (demo)."
            if not self.is_demo:
                outcome = self._send(
                    "POST",
                    agent_path(agent.agent_id, "wol"),
                    action="sending Wake-on-LAN",
                    forbidden="You do not have permission to wake agents.",
                )
                message = extract_message(outcome.body, "Wake-on-LAN sent.")
            return lambda: setattr(self, "status_message", message)

        return self._mutate(work, tag="wol", reload=False)

    def send_command(self, draft: CommandDraft) -> bool:
        """Run a shell command on the agent and keep its output."""

        def work() -> Applier:
            payload = draft.payload()
            if self.is_demo:
                output = demo.command_output(payload["cmd"])
            else:
                outcome = self._send(
                    "POST",
                    agent_path(draft.agent.agent_id, "cmd"),
                    payload,
                    action="sending command",
                    forbidden="You do not have permission to run commands.",
                )
                output = command_text(outcome.body)
            return lambda: setattr(self, "command_output", output)

        return self._mutate(work, tag="command", error_attr="command_error", reload=False)
