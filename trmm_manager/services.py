"""Wiring between persistence, credentials and screen controllers."""

from dataclasses import dataclass
from typing import Callable, Optional

from . import config
from .config import ClientConfig
from .core.credentials import CredentialResolver, FileSecretStore
from .logging_config import get_logger
from .preferences import Preferences
from .profiles import ProfileManager, ProfileStore, ServerProfile
from .screens import SCREENS, ScreenController

log = get_logger("services")


class NoActiveProfile(LookupError):
    """No server instance is configured yet."""


@dataclass
class Services:
    preferences: Preferences
    profiles: ProfileManager
    resolver: CredentialResolver
    client_config: ClientConfig

    def open_screen(
        self,
        name: str,
        profile: Optional[ServerProfile] = None,
        dispatch: Optional[Callable] = None,
        spawn: Optional[Callable] = None,
    ) -> ScreenController:
        """Create the controller for one screen, bound to a profile read once here."""
        controller_cls = SCREENS.get(name)
        if controller_cls is None:
            raise KeyError(f"Unknown screen: {name}")
        target = profile or self.profiles.active()
        if target is None:
            raise NoActiveProfile("No server instance configured.")
        log.debug("Opening %s screen for %s", name, target.display_name)
        return controller_cls(
            target,
            self.resolver,
            client_config=self.client_config,
            dispatch=dispatch,
            spawn=spawn,
            date_format=str(self.preferences.get("last_seen_format") or ""),
        )


def build_services() -> Services:
    """Create services from the current configuration."""
    preferences = Preferences(config.SETTINGS_FILE)
    secrets = FileSecretStore(config.SECRET_STORE_FILE)
    manager = ProfileManager(ProfileStore(config.PROFILE_DB_FILE), secrets, preferences)
    return Services(
        preferences=preferences,
        profiles=manager,
        resolver=CredentialResolver(secrets),
        client_config=ClientConfig.from_env(),
    )
