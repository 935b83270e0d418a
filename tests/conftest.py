import asyncio
import threading

import httpx
import pytest

from charger_alerts.exceptions import DispatchError
from charger_alerts.pipeline import ChargerAlertPipeline, PipelineServices
from charger_alerts.services.notifications import ChargerAlertDispatcher
from charger_alerts.services.plate_recognizer import PlateRecognizerClient
from charger_alerts.services.storage import AddressResolver, StorageClient


def run(coro):
    return asyncio.run(coro)


class StaticToken:
    """Stands in for GoogleAccessToken"""
    def __init__(self, token: str = "test-token"):
        self.token = token
        self.calls = 0
        self.thread_ids = []

    def get_token(self) -> str:
        self.calls += 1
        self.thread_ids.append(threading.get_ident())
        return self.token


class FakeRegistry:
    def __init__(self, owners: dict = None):
        self.owners = owners or {}
        self.lookups = []
        self.alerts = []
        self.unregistered = []
        self.failed = []

    async def find_owner(self, plate):
        self.lookups.append(plate)
        return self.owners.get(plate)

    async def add_alert(self, record):
        self.alerts.append(record)
        return f"alert-{len(self.alerts)}"

    async def add_unregistered_plate(self, record):
        self.unregistered.append(record)
        return f"unregistered-{len(self.unregistered)}"

    async def add_failed_detection(self, record):
        self.failed.append(record)
        return f"failed-{len(self.failed)}"

    @property
    def audit_count(self):
        return len(self.alerts) + len(self.unregistered) + len(self.failed)


class FakeFirebase:
    def __init__(self, error: Exception = None):
        self.error = error
        self.sent = []

    async def send_message(self, message):
        self.sent.append(message)
        if self.error:
            raise self.error
        return f"projects/test/messages/{len(self.sent)}"


class FakeDetector:
    def __init__(self, detection=None, error: Exception = None, has_credential: bool = True):
        self.detection = detection
        self.error = error
        self.has_credential = has_credential
        self.calls = []

    async def detect(self, image_url):
        self.calls.append(image_url)
        if self.error:
            raise self.error
        return self.detection


class FakeResolver:
    def __init__(self, error: Exception = None):
        self.error = error
        self.calls = []

    async def resolve(self, image_url):
        self.calls.append(image_url)
        if self.error:
            raise self.error
        return image_url


def storage_transport(exists: bool = True, acl_status: int = 200, calls: list = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if request.method == "GET":
            if not exists:
                return httpx.Response(404, json={"error": {"code": 404, "message": "No such object"}})
            return httpx.Response(200, json={"name": "x.jpg", "bucket": "bucket"})
        return httpx.Response(acl_status, json={"entity": "allUsers", "role": "READER"})
    return httpx.MockTransport(handler)


def recognizer_transport(results=None, status_code: int = 200, body=None, error: Exception = None,
                         calls: list = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if error is not None:
            raise error
        if status_code != 200:
            return httpx.Response(status_code, json=body)
        return httpx.Response(200, json={"results": results or []})
    return httpx.MockTransport(handler)


def build_pipeline(registry=None, firebase=None, recognizer_results=None, recognizer_error=None,
                   recognizer_status=200, recognizer_body=None, storage_exists=True, api_key="test-key"):
    """Pipeline with real resolver/detector/dispatcher over mocked HTTP and fake registry/FCM"""
    registry = registry if registry is not None else FakeRegistry()
    firebase = firebase if firebase is not None else FakeFirebase()
    services = PipelineServices(
        resolver=AddressResolver(StorageClient(access_token=StaticToken(),
                                               transport=storage_transport(exists=storage_exists))),
        detector=PlateRecognizerClient(
            api_key=api_key,
            transport=recognizer_transport(results=recognizer_results, status_code=recognizer_status,
                                           body=recognizer_body, error=recognizer_error)
        ),
        registry=registry,
        dispatcher=ChargerAlertDispatcher(firebase)
    )
    return ChargerAlertPipeline(services), registry, firebase


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def rejecting_firebase():
    return FakeFirebase(error=DispatchError("FCM rejected message with status 500", status_code=500))
