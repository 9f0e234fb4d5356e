from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models import GeneralSettings
from . import demo
from .base import Applier, DraftError, ScreenController

SETTINGS_PATH = "/core/settings/"
RESET_PATCH_POLICY_PATH = "/core/settings/reset_patch_policy/"
AGENT_DEBUG_LEVELS = ("info", "warning", "error", "critical")
DEFAULT_CLEAR_FAULTS_DAYS = 20


def _clean(value: Any) -> str:
    return str(value or "").strip()


def _or_none(value: Any) -> Optional[str]:
    text = _clean(value)
    return text or None


def _clean_list(values: List[str]) -> List[str]:
    return [v for v in (_clean(x) for x in values or []) if v]


@dataclass
class GeneralSettingsForm:
    """Editable subset of the server settings."""

    settings_id: Optional[int] = None
    agent_auto_update: bool = False
    enable_server_scripts: bool = False
    enable_server_webterminal: bool = False
    default_time_zone: str = ""
    date_format: str = ""
    email_recipients: List[str] = field(default_factory=list)
    sms_recipients: List[str] = field(default_factory=list)
    smtp_from_email: str = ""
    smtp_from_name: str = ""
    smtp_host: str = ""
    smtp_port: str = ""
    smtp_requires_auth: bool = False
    smtp_username: str = ""
    smtp_password: str = ""
    twilio_number: str = ""
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    server_policy: Optional[int] = None
    workstation_policy: Optional[int] = None
    alert_template: Optional[int] = None
    notify_on_info_alerts: bool = False
    notify_on_warning_alerts: bool = True
    agent_debug_level: str = "warning"
    clear_faults_days: str = ""
    clear_faults_fallback: int = DEFAULT_CLEAR_FAULTS_DAYS

    @classmethod
    def from_settings(cls, s: GeneralSettings) -> "GeneralSettingsForm":
        return cls(
            settings_id=s.id,
            agent_auto_update=s.agent_auto_update,
            enable_server_scripts=s.enable_server_scripts,
            enable_server_webterminal=s.enable_server_webterminal,
            default_time_zone=s.default_time_zone or "",
            date_format=s.date_format or "",
            email_recipients=list(s.email_alert_recipients or []),
            sms_recipients=list(s.sms_alert_recipients or []),
            smtp_from_email=s.smtp_from_email or "",
            smtp_from_name=s.smtp_from_name or "",
            smtp_host=s.smtp_host or "",
            smtp_port="" if s.smtp_port is None else str(s.smtp_port),
            smtp_requires_auth=bool(s.smtp_requires_auth),
            smtp_username=s.smtp_host_user or "",
            smtp_password=s.smtp_host_password or "",
            twilio_number=s.twilio_number or "",
            twilio_account_sid=s.twilio_account_sid or "",
            twilio_auth_token=s.twilio_auth_token or "",
            server_policy=s.server_policy,
            workstation_policy=s.workstation_policy,
            alert_template=s.alert_template,
            notify_on_info_alerts=s.notify_on_info_alerts,
            notify_on_warning_alerts=s.notify_on_warning_alerts,
            agent_debug_level=s.agent_debug_level,
            clear_faults_days="" if s.clear_faults_days is None else str(s.clear_faults_days),
            clear_faults_fallback=s.clear_faults_days if s.clear_faults_days is not None else DEFAULT_CLEAR_FAULTS_DAYS,
        )

    def add_email_recipient(self, value: str) -> bool:
        return self._add_unique(self.email_recipients, value)

    def add_sms_recipient(self, value: str) -> bool:
        return self._add_unique(self.sms_recipients, value)

    @staticmethod
    def _add_unique(target: List[str], value: str) -> bool:
        text = _clean(value)
        if not text or text in target:
            return False
        target.append(text)
        return True


def _parse_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        return None


def build_settings_payload(last: GeneralSettings, form: GeneralSettingsForm) -> Dict[str, Any]:
    """Full PUT body: server values the form does not edit pass through unchanged."""
    port_text = _clean(form.smtp_port)
    if not port_text:
        smtp_port = None
    else:
        parsed = _parse_int(port_text)
        smtp_port = parsed if parsed is not None else last.smtp_port

    if form.smtp_requires_auth:
        smtp_user = _or_none(form.smtp_username)
        smtp_password = _or_none(form.smtp_password) or last.smtp_host_password
    else:
        smtp_user = None
        smtp_password = None

    clear_faults = _parse_int(_clean(form.clear_faults_days))
    if clear_faults is None:
        clear_faults = form.clear_faults_fallback

    return {
        "id": last.id,
        "email_alert_recipients": _clean_list(form.email_recipients),
        "sms_alert_recipients": _clean_list(form.sms_recipients),
        "twilio_number": _or_none(form.twilio_number),
        "twilio_account_sid": _or_none(form.twilio_account_sid),
        "twilio_auth_token": _or_none(form.twilio_auth_token),
        "smtp_from_email": _or_none(form.smtp_from_email),
        "smtp_from_name": _or_none(form.smtp_from_name),
        "smtp_host": _or_none(form.smtp_host),
        "smtp_host_user": smtp_user,
        "smtp_host_password": smtp_password,
        "smtp_port": smtp_port,
        "smtp_requires_auth": bool(form.smtp_requires_auth),
        "default_time_zone": _or_none(form.default_time_zone),
        "check_history_prune_days": last.check_history_prune_days,
        "resolved_alerts_prune_days": last.resolved_alerts_prune_days,
        "agent_history_prune_days": last.agent_history_prune_days,
        "debug_log_prune_days": last.debug_log_prune_days,
        "audit_log_prune_days": last.audit_log_prune_days,
        "report_history_prune_days": last.report_history_prune_days,
        "agent_debug_level": form.agent_debug_level,
        "clear_faults_days": clear_faults,
        "mesh_token": last.mesh_token,
        "mesh_username": last.mesh_username,
        "mesh_site": last.mesh_site,
        "mesh_device_group": last.mesh_device_group,
        "mesh_company_name": last.mesh_company_name,
        "sync_mesh_with_trmm": last.sync_mesh_with_trmm,
        "agent_auto_update": bool(form.agent_auto_update),
        "date_format": _or_none(form.date_format),
        "open_ai_token": last.open_ai_token,
        "open_ai_model": last.open_ai_model,
        "enable_server_scripts": bool(form.enable_server_scripts),
        "enable_server_webterminal": bool(form.enable_server_webterminal),
        "notify_on_info_alerts": bool(form.notify_on_info_alerts),
        "notify_on_warning_alerts": bool(form.notify_on_warning_alerts),
        "block_local_user_logon": last.block_local_user_logon,
        "sso_enabled": last.sso_enabled,
        "workstation_policy": form.workstation_policy,
        "server_policy": form.server_policy,
        "alert_template": form.alert_template,
    }


class GeneralSettingsController(ScreenController):
    title = "General Settings"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.settings: Optional[GeneralSettings] = None
        self.form = GeneralSettingsForm()
        self.all_timezones: List[str] = []

    @property
    def is_resetting(self) -> bool:
        return self.mutation == "reset"

    def _apply_settings(self, settings: GeneralSettings) -> Applier:
        def apply() -> None:
            self.settings = settings
            self.form = GeneralSettingsForm.from_settings(settings)
            self.all_timezones = list(settings.all_timezones)

        return apply

    def _fetch(self) -> Applier:
        outcome = self._send(
            "GET",
            SETTINGS_PATH,
            action="loading settings",
            forbidden="You do not have permission to view settings.",
        )
        return self._apply_settings(self._decode(outcome, GeneralSettings))

    def _demo_load(self) -> Applier:
        return self._apply_settings(demo.general_settings())

    def save(self, form: Optional[GeneralSettingsForm] = None) -> bool:
        """PUT the full settings object rebuilt from the last load and the form."""
        form = form or self.form
        last = self.settings

        def work() -> Applier:
            if last is None or form.settings_id is None:
                raise DraftError("Settings not loaded yet.")
            if self.is_demo:
                return lambda: setattr(self, "status_message", "Settings updated (demo).")
            self._send(
                "PUT",
                SETTINGS_PATH,
                build_settings_payload(last, form),
                action="saving settings",
                forbidden="You do not have permission to update settings.",
                fallback="Server rejected the update.",
            )
            return lambda: setattr(self, "status_message", "Settings updated successfully.")

        return self._mutate(work, tag="save", reload=not self.is_demo)

    def reset_patch_policies(self) -> bool:
        def work() -> Applier:
            if not self.is_demo:
                self._send(
                    "POST",
                    RESET_PATCH_POLICY_PATH,
                    action="resetting patch policy",
                    forbidden="You do not have permission to reset patch policies.",
                )
            suffix = " (demo)." if self.is_demo else " successfully."
            return lambda: setattr(self, "status_message", "Patch policies reset" + suffix)

        return self._mutate(work, tag="reset", reload=False)
