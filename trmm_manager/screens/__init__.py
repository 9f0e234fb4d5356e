"""Per-screen controllers built on the authenticated-request core."""

from .agents import AgentsController
from .base import DraftError, ScreenController, ScreenError
from .codesign import CodeSigningController
from .deployments import DeploymentsController
from .general_settings import GeneralSettingsController
from .keystore import KeyStoreController
from .scripts import ScriptsController
from .users import UsersController

SCREENS = {
    "agents": AgentsController,
    "general": GeneralSettingsController,
    "keystore": KeyStoreController,
    "codesign": CodeSigningController,
    "scripts": ScriptsController,
    "users": UsersController,
    "deployments": DeploymentsController,
}

__all__ = [
    "AgentsController",
    "CodeSigningController",
    "DeploymentsController",
    "DraftError",
    "GeneralSettingsController",
    "KeyStoreController",
    "SCREENS",
    "ScreenController",
    "ScreenError",
    "ScriptsController",
    "UsersController",
]
