import json
from types import SimpleNamespace

from trmm_manager.core.credentials import CredentialResolver, MemorySecretStore
from trmm_manager.core.transport import ApiClient
from trmm_manager.profiles import ServerProfile

API_KEY = "abcd1234efgh5678"
BASE_URL = "https://rmm.example.com"
KEY_ID = "apiKey_PROFILE-1"


def response(status_code=200, body=b""):
    """Minimal stand-in for requests.Response."""
    if not isinstance(body, (bytes, str)):
        body = json.dumps(body)
    if isinstance(body, str):
        body = body.encode("utf-8")
    return SimpleNamespace(status_code=status_code, content=body)


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append(SimpleNamespace(method=method, url=url, **kwargs))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self):
        self.closed = True

    def json_body(self, index=-1):
        return json.loads(self.calls[index].data)


def run_now(fn):
    fn()


class DeferredSpawn:
    """Collects background jobs so tests decide when they run."""

    def __init__(self):
        self.jobs = []

    def __call__(self, fn):
        self.jobs.append(fn)

    def run_all(self):
        while self.jobs:
            self.jobs.pop(0)()


def make_profile(base_url=BASE_URL, name="Production"):
    return ServerProfile(uuid="PROFILE-1", display_name=name, base_url=base_url, secret_key_identifier=KEY_ID)


def make_controller(cls, *responses, base_url=BASE_URL, api_key=API_KEY, spawn=None):
    session = FakeSession(*responses)
    store = MemorySecretStore({KEY_ID: api_key} if api_key is not None else {})
    controller = cls(
        make_profile(base_url),
        CredentialResolver(store),
        api_client=ApiClient(session=session),
        dispatch=run_now,
        spawn=spawn or run_now,
    )
    return controller, session
