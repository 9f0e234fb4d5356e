"""Records decoded from Tactical RMM server responses."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .dates import format_last_seen_timestamp


class ApiModel(BaseModel):
    """Base for server records; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class KeyStoreEntry(ApiModel):
    id: int
    name: str
    value: str = ""
    created_by: Optional[str] = None
    created_time: Optional[str] = None
    modified_by: Optional[str] = None
    modified_time: Optional[str] = None


class CodeSigningToken(ApiModel):
    token: Optional[str] = None


class GeneralSettings(ApiModel):
    id: int
    all_timezones: List[str] = []
    email_alert_recipients: Optional[List[str]] = None
    sms_alert_recipients: Optional[List[str]] = None
    twilio_number: Optional[str] = None
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    smtp_from_email: Optional[str] = None
    smtp_from_name: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_host_user: Optional[str] = None
    smtp_host_password: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_requires_auth: Optional[bool] = None
    default_time_zone: Optional[str] = None
    check_history_prune_days: Optional[int] = None
    resolved_alerts_prune_days: Optional[int] = None
    agent_history_prune_days: Optional[int] = None
    debug_log_prune_days: Optional[int] = None
    audit_log_prune_days: Optional[int] = None
    report_history_prune_days: Optional[int] = None
    agent_auto_update: bool = False
    date_format: Optional[str] = None
    agent_debug_level: str = "warning"
    clear_faults_days: Optional[int] = None
    mesh_token: Optional[str] = None
    mesh_username: Optional[str] = None
    mesh_site: Optional[str] = None
    mesh_device_group: Optional[str] = None
    mesh_company_name: Optional[str] = None
    sync_mesh_with_trmm: bool = False
    open_ai_token: Optional[str] = None
    open_ai_model: Optional[str] = None
    enable_server_scripts: bool = False
    enable_server_webterminal: bool = False
    notify_on_info_alerts: bool = False
    notify_on_warning_alerts: bool = False
    block_local_user_logon: bool = False
    sso_enabled: bool = False
    workstation_policy: Optional[int] = None
    server_policy: Optional[int] = None
    alert_template: Optional[int] = None


class ScriptEnvVar(ApiModel):
    id: Optional[int] = None
    name: Optional[str] = None
    value: Optional[str] = None


class ScriptSummary(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    script_type: Optional[str] = None
    shell: str = ""
    args: Optional[List[str]] = None
    category: Optional[str] = None
    favorite: Optional[bool] = None
    default_timeout: Optional[int] = None
    syntax: Optional[str] = None
    filename: Optional[str] = None
    hidden: Optional[bool] = None
    supported_platforms: Optional[List[str]] = None
    run_as_user: Optional[bool] = None
    env_vars: Optional[List[ScriptEnvVar]] = None

    def matches(self, query: str) -> bool:
        """Case-insensitive search over name, description and category."""
        q = str(query or "").strip().lower()
        if not q:
            return True
        for value in (self.name, self.description, self.category):
            if value and q in value.lower():
                return True
        return False

    @property
    def is_builtin(self) -> bool:
        return str(self.script_type or "").lower() == "builtin"


class ScriptDetail(ScriptSummary):
    script_body: Optional[str] = None
    script_hash: Optional[str] = None


class ScriptTestResult(ApiModel):
    stdout: str = ""
    stderr: str = ""
    retcode: int = 0
    execution_time: Optional[float] = None
    id: Optional[int] = None


class Role(ApiModel):
    id: int
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        name = str(self.name or "").strip()
        return name or f"Role {self.id}"


class User(ApiModel):
    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    is_active: bool = True
    last_login: Optional[str] = None
    last_login_ip: Optional[str] = None
    role: Optional[int] = None
    block_dashboard_login: Optional[bool] = None
    date_format: Optional[str] = None
    social_accounts: Optional[List[int]] = None

    @property
    def display_name(self) -> str:
        parts = [str(p).strip() for p in (self.first_name, self.last_name) if p and str(p).strip()]
        return " ".join(parts) if parts else self.username

    @property
    def status_label(self) -> str:
        return "Active" if self.is_active else "Disabled"

    @property
    def can_access_dashboard(self) -> bool:
        return not bool(self.block_dashboard_login)

    def last_login_display(self, fmt: Optional[str] = None) -> str:
        return format_last_seen_timestamp(self.last_login, fmt)


class UserSession(ApiModel):
    digest: str
    user: str = ""
    created: str = ""
    expiry: str = ""


class ClientSite(ApiModel):
    id: int
    name: str
    client: int = 0
    client_name: str = ""


class Client(ApiModel):
    id: int
    name: str
    sites: List[ClientSite] = []


class InstallFlags(ApiModel):
    rdp: Optional[bool] = None
    ping: Optional[bool] = None
    power: Optional[bool] = None


class Deployment(ApiModel):
    id: int
    uid: str
    client_id: int = 0
    site_id: int = 0
    client_name: str = ""
    site_name: str = ""
    mon_type: str = ""
    goarch: str = ""
    expiry: Optional[str] = None
    install_flags: Optional[InstallFlags] = None
    created: Optional[str] = None

    @property
    def display_title(self) -> str:
        if not self.site_name:
            return self.client_name
        return f"{self.client_name} · {self.site_name}"


AGENT_OFFLINE_STATUSES = ("offline", "overdue", "dormant")


class Agent(ApiModel):
    agent_id: str
    hostname: str
    operating_system: str = "Unknown OS"
    description: Optional[str] = None
    cpu_model: List[str] = []
    public_ip: Optional[str] = None
    local_ips: Optional[str] = None
    graphics: Optional[str] = None
    make_model: Optional[str] = None
    status: str = "unknown"
    client_name: Optional[str] = None
    site_name: Optional[str] = None
    last_seen: Optional[str] = None
    physical_disks: Optional[List[str]] = None
    serial_number: Optional[str] = None
    boot_time: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _os_aliases(cls, data):
        # Older servers send `os` or only the platform name.
        if isinstance(data, dict) and not data.get("operating_system"):
            alias = data.get("os") or data.get("plat")
            if alias:
                data = {**data, "operating_system": alias}
        return data

    @field_validator("cpu_model", mode="before")
    @classmethod
    def _cpu_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value else []
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _status_text(cls, value):
        return "unknown" if value is None else value

    @property
    def normalized_status(self) -> str:
        return str(self.status or "").strip().lower()

    @property
    def is_online(self) -> bool:
        return self.normalized_status == "online"

    @property
    def is_offline(self) -> bool:
        return self.normalized_status in AGENT_OFFLINE_STATUSES

    @property
    def status_label(self) -> str:
        status = self.normalized_status
        if status in ("", "unknown"):
            return "Unknown"
        return status.capitalize()

    @property
    def location(self) -> str:
        parts = [p for p in (self.client_name, self.site_name) if p]
        return " · ".join(parts)

    def matches(self, query: str) -> bool:
        """Case-insensitive search over hostname, site, OS and description."""
        q = str(query or "").strip().lower()
        if not q:
            return True
        for value in (self.hostname, self.client_name, self.site_name, self.operating_system, self.description):
            if value and q in value.lower():
                return True
        return False

    def last_seen_display(self, fmt: Optional[str] = None) -> str:
        return format_last_seen_timestamp(self.last_seen, fmt)


class AgentPage(ApiModel):
    """Paginated agent listing returned by some server versions."""

    count: Optional[int] = None
    results: List[Agent] = []


class AgentNote(ApiModel):
    pk: int
    note: str = ""
    username: str = ""
    entry_time: Optional[str] = None
    agent_id: Optional[str] = None


class AgentProcess(ApiModel):
    id: int
    name: str
    pid: int
    membytes: int = 0
    username: str = ""
    cpu_percent: str = ""
