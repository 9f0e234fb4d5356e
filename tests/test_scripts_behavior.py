import unittest

from trmm_manager.models import ScriptDetail, ScriptEnvVar
from trmm_manager.screens.base import DraftError
from trmm_manager.screens.scripts import (
    CUSTOM_SHELL,
    ScriptEditDraft,
    ScriptTestDraft,
    ScriptsController,
    format_env_vars,
    parse_env_vars,
    parse_platforms,
    shell_label,
    shell_selection,
)
from tests.helpers import make_controller, response

SUMMARY = {"id": 5, "name": "Clear Temp", "script_type": "userdefined", "shell": "powershell", "category": "Maintenance"}
DETAIL = dict(SUMMARY, script_body="Remove-Item $env:TEMP\\*", default_timeout=90, args=["-Force"])
AGENTS = [
    {"agent_id": "AGENT-9", "hostname": "web01", "operating_system": "Windows Server 2022", "status": "online"},
    {"agent_id": "AGENT-2", "hostname": "Backup", "plat": "linux", "status": "offline"},
]


class ScriptParsingTests(unittest.TestCase):
    def test_shell_selection(self):
        """Validate scenario: known shells map to options, others to the custom slot."""
        self.assertEqual(shell_selection("PowerShell"), ("powershell", ""))
        self.assertEqual(shell_selection("cmd"), (CUSTOM_SHELL, "cmd"))
        self.assertEqual(shell_selection(""), ("python", ""))
        self.assertEqual(shell_label("nushell"), "NuShell")

    def test_env_vars_round_through_text(self):
        """Validate scenario: NAME=value lines parse, bare names send null."""
        parsed = parse_env_vars("A=1\n\nB\n=skip\n C = two ")
        self.assertEqual(parsed, [{"name": "A", "value": "1"}, {"name": "B", "value": None}, {"name": "C", "value": "two"}])
        text = format_env_vars([ScriptEnvVar(name="A", value="1"), ScriptEnvVar(name="B"), ScriptEnvVar(value="x")])
        self.assertEqual(text, "A=1\nB")

    def test_platforms_accept_commas_and_lines(self):
        """Validate scenario: platforms split on commas and newlines."""
        self.assertEqual(parse_platforms("windows, linux\ndarwin\n"), ["windows", "linux", "darwin"])

    def test_edit_draft_validation(self):
        """Validate scenario: required fields and positive timeouts are enforced."""
        detail = ScriptDetail.model_validate(DETAIL)
        draft = ScriptEditDraft(detail)
        draft.default_timeout = "-3"
        with self.assertRaises(DraftError):
            draft.payload(detail)
        draft.default_timeout = ""
        self.assertEqual(draft.payload(detail)["default_timeout"], 90)
        draft.script_body = "  "
        with self.assertRaises(DraftError):
            draft.payload(detail)

    def test_test_draft_requires_agent(self):
        """Validate scenario: a test run needs an agent id."""
        draft = ScriptTestDraft(ScriptDetail.model_validate(DETAIL))
        with self.assertRaises(DraftError):
            draft.payload()
        draft.agent_id = " AGENT-1 "
        agent, payload = draft.payload()
        self.assertEqual(agent, "AGENT-1")
        self.assertEqual(payload["timeout"], 90)
        self.assertEqual(payload["args"], ["-Force"])


class ScriptsControllerTests(unittest.TestCase):
    def test_search_filters_loaded_scripts(self):
        """Validate scenario: search matches name, description or category."""
        other = {"id": 6, "name": "Audit", "description": "Collect temp usage"}
        controller, _ = make_controller(ScriptsController, response(200, [SUMMARY, other]), response(200, AGENTS))
        controller.load()
        self.assertEqual([s.name for s in controller.scripts], ["Audit", "Clear Temp"])
        controller.search_text = "maint"
        self.assertEqual([s.id for s in controller.filtered_scripts], [5])
        controller.search_text = "TEMP"
        self.assertEqual(len(controller.filtered_scripts), 2)

    def test_load_fetches_agents_for_test_runs(self):
        """Validate scenario: the agent picker lists agents sorted by hostname."""
        controller, session = make_controller(ScriptsController, response(200, [SUMMARY]), response(200, AGENTS))
        controller.load()
        self.assertEqual(session.calls[1].url, "https://rmm.example.com/agents/")
        self.assertEqual([a.hostname for a in controller.agents], ["Backup", "web01"])
        self.assertEqual(controller.agents[0].operating_system, "linux")
        self.assertIsNone(controller.agents_error)
        draft = ScriptTestDraft(ScriptDetail.model_validate(DETAIL))
        self.assertEqual(controller.agent_choices(), {"Backup (Offline)": "AGENT-2", "web01 (Online)": "AGENT-9"})
        draft.select_agent(controller.agent_by_id("AGENT-9"))
        self.assertEqual(draft.payload()[0], "AGENT-9")
        draft.select_agent(None)
        with self.assertRaises(DraftError):
            draft.payload()

    def test_agents_failure_keeps_scripts(self):
        """Validate scenario: a forbidden agent list is reported beside the scripts."""
        controller, _ = make_controller(ScriptsController, response(200, [SUMMARY]), response(403))
        controller.load()
        self.assertEqual(len(controller.scripts), 1)
        self.assertEqual(controller.agents, [])
        self.assertEqual(controller.agents_error, "You do not have permission to view agents.")
        self.assertIsNone(controller.error_message)

    def test_builtin_scripts_are_read_only(self):
        """Validate scenario: begin_edit refuses built-in scripts."""
        controller, _ = make_controller(ScriptsController)
        builtin = ScriptDetail.model_validate(dict(DETAIL, script_type="builtin"))
        self.assertIsNone(controller.begin_edit(builtin))
        self.assertEqual(controller.alert_message, "Built-in scripts cannot be edited.")
        self.assertIsNotNone(controller.begin_edit(ScriptDetail.model_validate(DETAIL)))

    def test_save_puts_then_refreshes_detail_and_list(self):
        """Validate scenario: a saved script re-fetches its detail and the list."""
        controller, session = make_controller(
            ScriptsController,
            response(200, [SUMMARY]),
            response(200, AGENTS),
            response(200, DETAIL),
            response(200, '"Clear Temp was edited!"'),
            response(200, DETAIL),
            response(200, [SUMMARY]),
            response(200, AGENTS),
        )
        controller.load()
        controller.load_detail(controller.scripts[0])
        draft = controller.begin_edit(controller.detail)
        draft.description = "Empties the temp folder"
        controller.save(draft, controller.detail)
        self.assertEqual(
            [(c.method, c.url[len("https://rmm.example.com"):]) for c in session.calls],
            [
                ("GET", "/scripts/"),
                ("GET", "/agents/"),
                ("GET", "/scripts/5/"),
                ("PUT", "/scripts/5/"),
                ("GET", "/scripts/5/"),
                ("GET", "/scripts/"),
                ("GET", "/agents/"),
            ],
        )
        self.assertEqual(session.json_body(3)["description"], "Empties the temp folder")
        self.assertEqual(controller.status_message, "Clear Temp was edited!")
        self.assertIsNone(controller.edit_error)

    def test_test_run_posts_to_agent_path(self):
        """Validate scenario: test runs POST to the agent's test endpoint."""
        controller, session = make_controller(
            ScriptsController, response(200, {"stdout": "ok", "stderr": "", "retcode": 0, "execution_time": 0.5})
        )
        draft = ScriptTestDraft(ScriptDetail.model_validate(DETAIL), agent_id="AGENT-9")
        controller.run_test(draft)
        self.assertEqual(session.calls[0].url, "https://rmm.example.com/scripts/AGENT-9/test/")
        self.assertEqual(controller.test_result.stdout, "ok")
        self.assertIsNone(controller.test_error)

    def test_test_run_failure_keeps_previous_result(self):
        """Validate scenario: a failed test run reports into its own error slot."""
        controller, _ = make_controller(ScriptsController, response(500, b""))
        controller.run_test(ScriptTestDraft(ScriptDetail.model_validate(DETAIL), agent_id="A"))
        self.assertEqual(controller.test_error, "Script execution failed.")
        self.assertIsNone(controller.test_result)

    def test_delete_clears_selection(self):
        """Validate scenario: deleting the selected script clears the detail pane."""
        controller, session = make_controller(
            ScriptsController,
            response(200, [SUMMARY]),
            response(200, AGENTS),
            response(200, DETAIL),
            response(200, b""),
        )
        controller.load()
        controller.load_detail(controller.scripts[0])
        controller.delete(controller.scripts[0])
        self.assertEqual(session.calls[3].method, "DELETE")
        self.assertEqual(controller.scripts, [])
        self.assertIsNone(controller.detail)
        self.assertEqual(controller.status_message, "Script deleted.")

    def test_demo_edit_updates_locally(self):
        """Validate scenario: demo edits change the list without requests."""
        controller, session = make_controller(ScriptsController, base_url="demo", api_key=None)
        controller.load()
        controller.load_detail(controller.scripts[0])
        detail = controller.detail.model_copy(update={"script_type": "userdefined"})
        draft = controller.begin_edit(detail)
        draft.name = "Renamed"
        controller.save(draft, detail)
        self.assertEqual(controller.scripts[0].name, "Renamed")
        self.assertEqual(controller.status_message, "Script updated (demo).")
        self.assertEqual(session.calls, [])


if __name__ == "__main__":
    unittest.main()
