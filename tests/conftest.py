"""
Pytest configuration and fixtures for spring-init-cli tests.
"""

import io
import json
import zipfile
from collections.abc import Callable

import httpx
import pytest
from rich.console import Console
from typer.testing import CliRunner

from spring_init_cli import InitializrMetadata, Settings


SAMPLE_METADATA = {
    "_links": {
        "maven-project": {"href": "https://start.spring.io/starter.zip?type=maven-project"},
        "gradle-project": {"href": "https://start.spring.io/starter.zip?type=gradle-project"},
        "dependencies": {"href": "https://start.spring.io/dependencies"},
    },
    "name": {"type": "text", "default": "demo"},
    "groupId": {"type": "text", "default": "com.example"},
    "artifactId": {"type": "text", "default": "demo"},
    "description": {"type": "text", "default": "Demo project for Spring Boot"},
    "javaVersion": {
        "type": "single-select",
        "default": "17",
        "values": [{"id": "17", "name": "17"}, {"id": "21", "name": "21"}],
    },
    "bootVersion": {
        "type": "single-select",
        "default": "3.3.4",
        "values": [
            {"id": "3.4.0-SNAPSHOT", "name": "3.4.0 (SNAPSHOT)"},
            {"id": "3.3.4", "name": "3.3.4"},
        ],
    },
    "dependencies": {
        "type": "hierarchical-multi-select",
        "values": [
            {
                "name": "Developer Tools",
                "values": [
                    {"id": "devtools", "name": "Spring Boot DevTools"},
                    {"id": "lombok", "name": "Lombok"},
                ],
            },
            {
                "name": "Web",
                "values": [
                    {"id": "web", "name": "Spring Web"},
                    {"id": "webflux", "name": "Spring Reactive Web"},
                    {"id": "graphql", "name": "Spring for GraphQL"},
                ],
            },
        ],
    },
}


def make_project_zip() -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("pom.xml", "<project/>")
        archive.writestr("src/main/java/com/example/demo/DemoApplication.java", "class DemoApplication {}")
    return buffer.getvalue()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def metadata_document() -> dict:
    return json.loads(json.dumps(SAMPLE_METADATA))


@pytest.fixture
def metadata(metadata_document) -> InitializrMetadata:
    return InitializrMetadata.from_json(metadata_document)


@pytest.fixture
def settings() -> Settings:
    return Settings(service_url="https://initializr.test")


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def quiet_console(output) -> Console:
    """A console that records into ``output`` instead of the terminal."""
    return Console(file=output, width=120)


@pytest.fixture
def feed_input(monkeypatch) -> Callable[..., None]:
    """Script the lines returned by ``input()``; running out raises EOFError."""

    def _feed(*lines: str) -> None:
        answers = iter(lines)

        def fake_input(prompt: str = "") -> str:
            try:
                return next(answers)
            except StopIteration:
                raise EOFError("no more scripted input") from None

        monkeypatch.setattr("builtins.input", fake_input)

    return _feed


class FakeInitializr:
    """httpx transport handler standing in for start.spring.io."""

    def __init__(self, metadata: dict, *, metadata_status: int = 200, starter_status: int = 200, archive: bytes | None = None):
        self.metadata = metadata
        self.metadata_status = metadata_status
        self.starter_status = starter_status
        self.archive = make_project_zip() if archive is None else archive
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            if self.metadata_status != 200:
                return httpx.Response(self.metadata_status, text="unavailable")
            return httpx.Response(200, json=self.metadata)
        if request.method == "POST" and request.url.path == "/starter.zip":
            if self.starter_status != 200:
                return httpx.Response(self.starter_status, json={"message": "Invalid dependency"})
            return httpx.Response(200, content=self.archive, headers={"Content-Type": "application/zip"})
        return httpx.Response(404)

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def initializr(metadata_document) -> FakeInitializr:
    return FakeInitializr(metadata_document)
