import unittest
from datetime import datetime, timezone

from trmm_manager.models import Deployment
from trmm_manager.screens.base import DraftError
from trmm_manager.screens.deployments import DeploymentDraft, DeploymentsController, install_link
from tests.helpers import DeferredSpawn, make_controller, response

CLIENTS = [
    {"id": 2, "name": "Zeta", "sites": [{"id": 21, "name": "Main", "client": 2}]},
    {"id": 1, "name": "acme", "sites": [{"id": 12, "name": "West", "client": 1}, {"id": 11, "name": "east", "client": 1}]},
]
DEPLOYMENTS = [{"id": 14, "uid": "UID-14", "client_name": "acme", "site_name": "east", "mon_type": "server", "goarch": "amd64"}]


class DeploymentDraftTests(unittest.TestCase):
    def test_payload_requires_site(self):
        """Validate scenario: a site must be chosen."""
        with self.assertRaises(DraftError):
            DeploymentDraft().payload()

    def test_power_only_for_workstations(self):
        """Validate scenario: the power flag is dropped for servers."""
        expires = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        draft = DeploymentDraft(site_id=11, expires_at=expires, power=True, rdp=True)
        payload = draft.payload()
        self.assertFalse(payload["power"])
        self.assertTrue(payload["rdp"])
        self.assertEqual(payload["expires"], "2024-06-01T12:00:00+00:00")
        draft.agent_type = "workstation"
        self.assertTrue(draft.payload()["power"])

    def test_unknown_architecture(self):
        """Validate scenario: unsupported architectures are rejected."""
        with self.assertRaises(DraftError):
            DeploymentDraft(site_id=1, goarch="arm64").payload()

    def test_install_link(self):
        """Validate scenario: links join the base URL and deployment uid."""
        dep = Deployment(id=1, uid="abc")
        self.assertEqual(install_link("https://rmm.example.com/", dep), "https://rmm.example.com/clients/abc/deploy/")


class DeploymentsControllerTests(unittest.TestCase):
    def test_load_picks_first_client_and_site(self):
        """Validate scenario: defaults are the alphabetically first client and site."""
        controller, _ = make_controller(DeploymentsController, response(200, CLIENTS), response(200, DEPLOYMENTS))
        controller.load()
        self.assertEqual(controller.selected_client_id, 1)
        self.assertEqual(controller.selected_site_id, 11)
        self.assertEqual([s.name for s in controller.sites_for(1)], ["east", "West"])
        self.assertEqual(len(controller.deployments), 1)

    def test_select_client_resets_site(self):
        """Validate scenario: switching client moves the site to that client's first site."""
        controller, _ = make_controller(DeploymentsController, response(200, CLIENTS), response(200, DEPLOYMENTS))
        controller.load()
        controller.select_client(2)
        self.assertEqual(controller.selected_site_id, 21)

    def test_clients_failure_keeps_deployments(self):
        """Validate scenario: a clients error is reported beside the deployments list."""
        controller, _ = make_controller(DeploymentsController, response(403), response(200, DEPLOYMENTS))
        controller.load()
        self.assertEqual(controller.client_error, "You do not have permission to view clients.")
        self.assertEqual(len(controller.deployments), 1)
        self.assertIsNone(controller.error_message)

    def test_create_posts_and_reloads(self):
        """Validate scenario: create POSTs the draft and refreshes the lists."""
        controller, session = make_controller(
            DeploymentsController,
            response(201, b""),
            response(200, CLIENTS),
            response(200, DEPLOYMENTS),
        )
        controller.create(DeploymentDraft(site_id=11))
        self.assertEqual((session.calls[0].method, session.calls[0].url), ("POST", "https://rmm.example.com/clients/deployments/"))
        self.assertEqual(session.json_body(0)["site"], 11)
        self.assertEqual(controller.status_message, "Deployment created.")
        self.assertIsNone(controller.create_error)

    def test_create_failure_sets_create_error(self):
        """Validate scenario: a rejected create reports into the create slot."""
        controller, _ = make_controller(DeploymentsController, response(400, b""))
        controller.create(DeploymentDraft(site_id=11))
        self.assertEqual(controller.create_error, "Deployment rejected by server.")

    def test_delete_missing_deployment_removes_row(self):
        """Validate scenario: a 404 on delete drops the row and explains why."""
        controller, session = make_controller(
            DeploymentsController, response(200, CLIENTS), response(200, DEPLOYMENTS), response(404)
        )
        controller.load()
        controller.delete(controller.deployments[0])
        self.assertTrue(session.calls[2].url.endswith("/clients/deployments/14/"))
        self.assertEqual(controller.deployments, [])
        self.assertEqual(controller.delete_error, "Deployment not found on server.")

    def test_create_and_delete_share_one_mutation_slot(self):
        """Validate scenario: a delete is refused while a create is outstanding."""
        spawn = DeferredSpawn()
        controller, session = make_controller(
            DeploymentsController,
            response(201, b""),
            response(200, CLIENTS),
            response(200, DEPLOYMENTS),
            response(204),
            spawn=spawn,
        )
        target = Deployment(id=5, uid="u")
        self.assertTrue(controller.create(DeploymentDraft(site_id=1)))
        self.assertTrue(controller.is_creating)
        self.assertFalse(controller.delete(target))
        self.assertFalse(controller.is_deleting(target))
        self.assertEqual(len(spawn.jobs), 1)
        spawn.run_all()
        self.assertFalse(controller.is_mutating)
        self.assertTrue(controller.delete(target))
        self.assertTrue(controller.is_deleting(target))
        spawn.run_all()
        self.assertEqual([c.method for c in session.calls], ["POST", "GET", "GET", "DELETE"])

    def test_demo_create_is_local(self):
        """Validate scenario: demo deployments are created in memory."""
        controller, session = make_controller(DeploymentsController, base_url="demo", api_key=None)
        controller.load()
        controller.create(DeploymentDraft(site_id=controller.selected_site_id, agent_type="workstation"))
        self.assertEqual(len(controller.deployments), 2)
        self.assertEqual(controller.deployments[0].mon_type, "workstation")
        self.assertEqual(controller.status_message, "Deployment created (demo).")
        self.assertEqual(session.calls, [])


if __name__ == "__main__":
    unittest.main()
