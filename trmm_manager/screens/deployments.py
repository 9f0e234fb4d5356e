import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from ..dates import to_iso_with_offset
from ..models import Client, ClientSite, Deployment, InstallFlags
from . import demo
from .base import Applier, DraftError, ScreenController, ScreenError

CLIENTS_PATH = "/clients/"
DEPLOYMENTS_PATH = "/clients/deployments/"
AGENT_TYPES = ("server", "workstation")
ARCHITECTURES = ("amd64", "386")
DEFAULT_EXPIRY_DAYS = 30


def _default_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=DEFAULT_EXPIRY_DAYS)


@dataclass
class DeploymentDraft:
    site_id: Optional[int] = None
    expires_at: datetime = field(default_factory=_default_expiry)
    agent_type: str = "server"
    goarch: str = "amd64"
    rdp: bool = False
    ping: bool = False
    power: bool = False

    def payload(self) -> Dict[str, Any]:
        if self.site_id is None:
            raise DraftError("Select a site before creating a deployment.")
        if self.agent_type not in AGENT_TYPES:
            raise DraftError(f"Unknown agent type: {self.agent_type}")
        if self.goarch not in ARCHITECTURES:
            raise DraftError(f"Unknown architecture: {self.goarch}")
        return {
            "site": self.site_id,
            "expires": to_iso_with_offset(self.expires_at),
            "agenttype": self.agent_type,
            # Power settings only apply to workstations.
            "power": bool(self.power) and self.agent_type == "workstation",
            "rdp": bool(self.rdp),
            "ping": bool(self.ping),
            "goarch": self.goarch,
        }


def install_link(base_url: str, deployment: Deployment) -> str:
    base = str(base_url or "").rstrip("/")
    return f"{base}/clients/{deployment.uid}/deploy/"


class DeploymentsController(ScreenController):
    title = "Deployments"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.deployments: List[Deployment] = []
        self.clients: List[Client] = []
        self.client_error: Optional[str] = None
        self.create_error: Optional[str] = None
        self.delete_error: Optional[str] = None
        self.selected_client_id: Optional[int] = None
        self.selected_site_id: Optional[int] = None

    @property
    def is_creating(self) -> bool:
        return self.mutation == "create"

    def is_deleting(self, deployment: Deployment) -> bool:
        return self.mutation == f"delete:{deployment.id}"

    def sites_for(self, client_id: Optional[int]) -> List[ClientSite]:
        for client in self.clients:
            if client.id == client_id:
                return sorted(client.sites, key=lambda s: s.name.lower())
        return []

    def select_client(self, client_id: Optional[int]) -> None:
        self.selected_client_id = client_id
        site_ids = [s.id for s in self.sites_for(client_id)]
        if self.selected_site_id not in site_ids:
            self.selected_site_id = site_ids[0] if site_ids else None

    def ensure_default_selections(self) -> None:
        """Pick the alphabetically first client and site when nothing is selected."""
        if self.selected_client_id is None and self.clients:
            first = sorted(self.clients, key=lambda c: c.name.lower())[0]
            self.selected_client_id = first.id
        self.select_client(self.selected_client_id)

    def install_link(self, deployment: Deployment) -> str:
        return install_link(self.profile.base_url, deployment)

    def _apply_lists(self, deployments: List[Deployment], clients: List[Client], client_error: Optional[str]) -> Applier:
        def apply() -> None:
            self.deployments = deployments
            self.clients = sorted(clients, key=lambda c: c.name.lower())
            self.client_error = client_error
            self.ensure_default_selections()

        return apply

    def _fetch(self) -> Applier:
        clients: List[Client] = []
        client_error: Optional[str] = None
        try:
            outcome = self._send(
                "GET",
                CLIENTS_PATH,
                action="loading clients",
                forbidden="You do not have permission to view clients.",
            )
            clients = self._decode(outcome, Client, many=True)
        except ScreenError as e:
            client_error = e.message
        outcome = self._send(
            "GET",
            DEPLOYMENTS_PATH,
            action="loading deployments",
            forbidden="You do not have permission to view deployments.",
        )
        deployments = self._decode(outcome, Deployment, many=True)
        return self._apply_lists(deployments, clients, client_error)

    def _demo_load(self) -> Applier:
        return self._apply_lists(demo.deployments(), demo.clients(), None)

    def create(self, draft: DeploymentDraft) -> bool:
        def work() -> Applier:
            payload = draft.payload()
            if self.is_demo:
                return lambda: self._add_demo_deployment(draft, payload)
            self._send(
                "POST",
                DEPLOYMENTS_PATH,
                payload,
                action="creating deployment",
                forbidden="You do not have permission to create deployments.",
                fallback="Deployment rejected by server.",
            )
            return lambda: setattr(self, "status_message", "Deployment created.")

        return self._mutate(work, tag="create", error_attr="create_error", reload=not self.is_demo)

    def delete(self, deployment: Deployment) -> bool:
        def remove() -> None:
            self.deployments = [d for d in self.deployments if d.id != deployment.id]

        def work() -> Applier:
            if not self.is_demo:
                try:
                    self._send(
                        "DELETE",
                        f"{DEPLOYMENTS_PATH}{deployment.id}/",
                        action="deleting deployment",
                        forbidden="You do not have permission to delete deployments.",
                    )
                except ScreenError as e:
                    if e.status_code == 404:
                        raise ScreenError("Deployment not found on server.", status_code=404, apply=remove)
                    raise
            return remove

        return self._mutate(work, tag=f"delete:{deployment.id}", error_attr="delete_error", reload=False)

    def _add_demo_deployment(self, draft: DeploymentDraft, payload: Dict[str, Any]) -> None:
        site = next((s for c in self.clients for s in c.sites if s.id == draft.site_id), None)
        client = next((c for c in self.clients if site is not None and c.id == site.client), None)
        created = Deployment(
            id=max((d.id for d in self.deployments), default=0) + 1,
            uid=str(uuid.uuid4()),
            client_id=client.id if client else 0,
            site_id=draft.site_id or 0,
            client_name=client.name if client else "Demo Client",
            site_name=site.name if site else "Demo Site",
            mon_type=payload["agenttype"],
            goarch=payload["goarch"],
            expiry=payload["expires"],
            install_flags=InstallFlags(rdp=payload["rdp"], ping=payload["ping"], power=payload["power"]),
            created=to_iso_with_offset(datetime.now(timezone.utc)),
        )
        self.deployments = [created] + self.deployments
        self.status_message = "Deployment created (demo)."
