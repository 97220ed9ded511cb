"""
Tests for reading the Spring Initializr metadata document.
"""

import httpx
import pytest

from spring_init_cli import (
    BootVersion,
    InitializrMetadata,
    MetadataFetchError,
    ProjectConfig,
    Settings,
    load_metadata,
)

from conftest import FakeInitializr


def test_project_types_exclude_dependencies_link(metadata: InitializrMetadata) -> None:
    assert metadata.project_types == ("maven-project", "gradle-project")


def test_defaults_are_read(metadata: InitializrMetadata) -> None:
    assert metadata.name_default == "demo"
    assert metadata.group_id_default == "com.example"
    assert metadata.artifact_id_default == "demo"
    assert metadata.description_default == "Demo project for Spring Boot"
    assert metadata.java_version_default == "17"
    assert metadata.boot_version_default == "3.3.4"


def test_boot_version_id_and_name_are_not_swapped(metadata: InitializrMetadata) -> None:
    assert metadata.boot_versions[0] == BootVersion(id="3.4.0-SNAPSHOT", name="3.4.0 (SNAPSHOT)")


def test_dependencies_are_flattened_in_group_order(metadata: InitializrMetadata) -> None:
    assert [d.id for d in metadata.dependencies] == ["devtools", "lombok", "web", "webflux", "graphql"]
    assert metadata.dependencies[2].group == "Web"


def test_missing_key_is_a_fetch_error(metadata_document: dict) -> None:
    del metadata_document["bootVersion"]
    with pytest.raises(MetadataFetchError, match="bootVersion"):
        InitializrMetadata.from_json(metadata_document)


def test_empty_java_versions_are_rejected(metadata_document: dict) -> None:
    metadata_document["javaVersion"]["values"] = []
    with pytest.raises(MetadataFetchError, match="Java versions"):
        InitializrMetadata.from_json(metadata_document)


def test_load_metadata_sends_json_accept_header(initializr: FakeInitializr, settings: Settings) -> None:
    with initializr.client() as client:
        metadata = load_metadata(client, settings)

    request = initializr.requests[0]
    assert request.headers["Accept"] == "application/json"
    assert request.url.host == "initializr.test"
    assert metadata.java_versions == ("17", "21")


def test_load_metadata_fails_on_server_error(metadata_document: dict, settings: Settings) -> None:
    fake = FakeInitializr(metadata_document, metadata_status=503)
    with fake.client() as client:
        with pytest.raises(MetadataFetchError, match="503"):
            load_metadata(client, settings)
    assert len(fake.requests) == 1


def test_load_metadata_debug_includes_body(metadata_document: dict) -> None:
    fake = FakeInitializr(metadata_document, metadata_status=500)
    with fake.client() as client:
        with pytest.raises(MetadataFetchError) as excinfo:
            load_metadata(client, Settings(service_url="https://initializr.test", debug=True))
    assert "unavailable" in str(excinfo.value)


def test_load_metadata_rejects_invalid_json(settings: Settings) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    with httpx.Client(transport=transport) as client:
        with pytest.raises(MetadataFetchError, match="parse"):
            load_metadata(client, settings)


def test_load_metadata_wraps_transport_errors(settings: Settings) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(refuse)) as client:
        with pytest.raises(MetadataFetchError, match="Could not reach"):
            load_metadata(client, settings)


def test_project_config_form_fields() -> None:
    config = ProjectConfig(
        project_type="maven-project",
        name="shop",
        group_id="com.acme",
        artifact_id="shop",
        java_version="21",
        boot_version="3.3.4",
        description="Shop",
        dependencies=["web", "lombok"],
    )
    assert config.to_form() == {
        "type": "maven-project",
        "javaVersion": "21",
        "bootVersion": "3.3.4",
        "name": "shop",
        "groupId": "com.acme",
        "artifactId": "shop",
        "description": "Shop",
        "dependencies": "web,lombok",
    }


def test_settings_urls() -> None:
    settings = Settings(service_url="https://start.example.org/")
    assert settings.metadata_url == "https://start.example.org"
    assert settings.starter_url == "https://start.example.org/starter.zip"
