"""Canned records served to demo profiles instead of network calls."""

from datetime import datetime, timedelta, timezone
from typing import List

from ..dates import to_iso_with_offset
from ..models import (
    Agent,
    AgentNote,
    AgentProcess,
    Client,
    ClientSite,
    Deployment,
    GeneralSettings,
    InstallFlags,
    KeyStoreEntry,
    Role,
    ScriptDetail,
    ScriptSummary,
    ScriptTestResult,
    User,
    UserSession,
)

DEMO_CODESIGN_TOKEN = "DEMO-TOKEN-123"


def _iso(offset_s: int) -> str:
    return to_iso_with_offset(datetime.now(timezone.utc) + timedelta(seconds=offset_s))


def keystore_entries() -> List[KeyStoreEntry]:
    now = _iso(0)
    return [
        KeyStoreEntry(
            id=1,
            name="DemoKey",
            value="DemoValue",
            created_by="Demo",
            created_time=now,
            modified_by="Demo",
            modified_time=now,
        )
    ]


def general_settings() -> GeneralSettings:
    return GeneralSettings(
        id=1,
        all_timezones=["Europe/Oslo", "Europe/London", "America/New_York", "UTC"],
        email_alert_recipients=["demo@example.com"],
        sms_alert_recipients=["+47000000000"],
        twilio_number="+46000000000",
        twilio_account_sid="XXXXXXXXXXXXXXXXXX",
        twilio_auth_token="XXXXXXXXXXXXXXXXXX",
        smtp_from_email="smtp@example.com",
        smtp_from_name="Tactical RMM",
        smtp_host="mail.smtp2go.com",
        smtp_host_user="notify@example.com",
        smtp_host_password="smtp-password",
        smtp_port=2525,
        smtp_requires_auth=True,
        default_time_zone="Europe/Oslo",
        agent_auto_update=True,
        date_format="DD-MM-YYYY - HH:mm",
        agent_debug_level="warning",
        clear_faults_days=20,
        enable_server_scripts=True,
        enable_server_webterminal=True,
        notify_on_info_alerts=False,
        notify_on_warning_alerts=True,
    )


def scripts() -> List[ScriptSummary]:
    return [
        ScriptSummary(
            id=1,
            name="Demo Script",
            description="Example script entry for demo instances.",
            script_type="builtin",
            shell="powershell",
            args=["-demo"],
            category="Demo",
            favorite=True,
            default_timeout=120,
            syntax="demo [--flag]",
            filename="demo_script.ps1",
            hidden=False,
            supported_platforms=["windows"],
            run_as_user=False,
            env_vars=[],
        )
    ]


def script_detail(summary: ScriptSummary) -> ScriptDetail:
    return ScriptDetail(**summary.model_dump(), script_body="echo 'Demo script body'", script_hash=None)


def script_test_result() -> ScriptTestResult:
    return ScriptTestResult(stdout="[12:00:00] Demo run\n", stderr="", retcode=0, execution_time=1.0, id=0)


def users() -> List[User]:
    return [
        User(
            id=1,
            username="demo.user",
            first_name="Demo",
            last_name="User",
            email="demo@example.com",
            is_active=True,
            last_login=_iso(-3600),
            last_login_ip="203.0.113.1",
            role=3,
            block_dashboard_login=False,
            date_format="DD/MM/YYYY",
            social_accounts=[],
        )
    ]


def roles() -> List[Role]:
    return [Role(id=3, name="Super User")]


def user_sessions() -> List[UserSession]:
    return [UserSession(digest="demo-session-1", user="demo.user", created=_iso(-7200), expiry=_iso(7200))]


def clients() -> List[Client]:
    return [
        Client(
            id=1,
            name="Demo Client",
            sites=[
                ClientSite(id=1, name="Demo Site", client=1, client_name="Demo Client"),
                ClientSite(id=2, name="Testing", client=1, client_name="Demo Client"),
            ],
        )
    ]


def deployments() -> List[Deployment]:
    return [
        Deployment(
            id=14,
            uid="DEMO-UID-001",
            client_id=1,
            site_id=1,
            client_name="Demo Client",
            site_name="Demo Site",
            mon_type="server",
            goarch="amd64",
            expiry=_iso(86400),
            install_flags=InstallFlags(rdp=False, ping=True, power=False),
            created=_iso(-7200),
        )
    ]


def agents() -> List[Agent]:
    return [
        Agent(
            agent_id="demo1",
            hostname="Demo1",
            operating_system="Windows 11 Pro, 64 bit",
            description="Demo agent.",
            cpu_model=["Demo CPU"],
            public_ip="192.0.2.1",
            local_ips="10.0.0.1",
            graphics="Demo GPU",
            make_model="Demo Model",
            status="online",
            client_name="Demo Client",
            site_name="Demo Site",
            last_seen=_iso(-60),
            physical_disks=["Demo Disk1"],
            serial_number="Demo Serial 1",
        ),
        Agent(
            agent_id="demo2",
            hostname="Demo2",
            operating_system="Ubuntu 24.04 LTS",
            description="Second demo agent.",
            cpu_model=["Demo CPU"],
            public_ip="192.0.2.2",
            local_ips="10.0.0.2",
            status="offline",
            client_name="Demo Client",
            site_name="Testing",
            last_seen=_iso(-86400),
            physical_disks=["Demo Disk2"],
            serial_number="Demo Serial 2",
        ),
    ]


def agent_notes(agent_id: str) -> List[AgentNote]:
    return [AgentNote(pk=1, note="Demo note.", username="demo.user", entry_time=_iso(-3600), agent_id=agent_id)]


def agent_processes() -> List[AgentProcess]:
    return [
        AgentProcess(id=1, name="explorer.exe", pid=4120, membytes=104857600, username="demo.user", cpu_percent="0.4"),
        AgentProcess(id=2, name="tacticalrmm.exe", pid=2210, membytes=52428800, username="SYSTEM", cpu_percent="0.1"),
    ]


def command_output(command: str) -> str:
    return f"Demo output for: {command}"
