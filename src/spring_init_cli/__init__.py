#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "typer",
#     "rich",
#     "readchar",
#     "httpx",
#     "truststore",
# ]
# ///
"""
Spring Init CLI - Interactive Spring Boot project generator

Talks to the Spring Initializr API: fetches the available project types,
Java versions, Spring Boot versions and dependencies, walks you through
choosing them, lets you review the result and finally downloads and unpacks
the generated project.

Usage:
    uvx --from . spring-init
    spring-init check

Or install globally:
    uv tool install --from . spring-init-cli
    spring-init
"""

import subprocess
import sys
import zipfile
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Optional, Sequence

import typer
import httpx
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.live import Live
from rich.align import Align
from rich.table import Table
from rich.tree import Tree
from rich.columns import Columns
from rich.prompt import Prompt
from rich.markup import escape
from typer.core import TyperGroup

# For cross-platform keyboard input
import readchar
import ssl
import truststore

ssl_context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

DEFAULT_SERVICE_URL = "https://start.spring.io"
DEFAULT_TIMEOUT = 60.0

BANNER = r"""
 ___ ___ ___ ___ _  _  ___   ___ _  _ ___ _____
/ __| _ \ _ \_ _| \| |/ __| |_ _| \| |_ _|_   _|
\__ \  _/   /| || .` | (_ |  | || .` || |  | |
|___/_| |_|_\___|_|\_|\___| |___|_|\_|___| |_|
"""

TAGLINE = "Spring Boot projects from the command line"


class InitializrError(RuntimeError):
    """Base class for fatal errors talking to Spring Initializr."""

    title = "Error"


class MetadataFetchError(InitializrError):
    title = "Fetch Error"


class DownloadError(InitializrError):
    title = "Download Error"


class ExtractionError(InitializrError):
    title = "Extraction Error"


@dataclass
class Settings:
    """Runtime options shared by every command."""

    service_url: str = DEFAULT_SERVICE_URL
    timeout: Optional[float] = DEFAULT_TIMEOUT
    verify_tls: bool = True
    debug: bool = False
    plain: bool = False

    @property
    def metadata_url(self) -> str:
        return self.service_url.rstrip("/")

    @property
    def starter_url(self) -> str:
        return f"{self.service_url.rstrip('/')}/starter.zip"


@dataclass(frozen=True)
class BootVersion:
    id: str
    name: str


@dataclass(frozen=True)
class DependencyOption:
    id: str
    name: str
    group: str


@dataclass(frozen=True)
class InitializrMetadata:
    """Snapshot of the Spring Initializr metadata document."""

    project_types: tuple[str, ...]
    name_default: str
    group_id_default: str
    artifact_id_default: str
    description_default: str
    java_versions: tuple[str, ...]
    java_version_default: str
    boot_versions: tuple[BootVersion, ...]
    boot_version_default: str
    dependencies: tuple[DependencyOption, ...]

    @classmethod
    def from_json(cls, data: dict) -> "InitializrMetadata":
        try:
            project_types = tuple(key for key in data["_links"] if key != "dependencies")
            java_versions = tuple(str(v["name"]) for v in data["javaVersion"]["values"])
            # id is what the generator expects, name is the human label
            boot_versions = tuple(
                BootVersion(id=str(v["id"]), name=str(v["name"]))
                for v in data["bootVersion"]["values"]
            )
            dependencies = tuple(
                DependencyOption(id=str(dep["id"]), name=str(dep["name"]), group=str(group.get("name", "")))
                for group in data["dependencies"]["values"]
                for dep in group["values"]
            )
            metadata = cls(
                project_types=project_types,
                name_default=str(data["name"]["default"]),
                group_id_default=str(data["groupId"]["default"]),
                artifact_id_default=str(data["artifactId"]["default"]),
                description_default=str(data["description"]["default"]),
                java_versions=java_versions,
                java_version_default=str(data["javaVersion"]["default"]),
                boot_versions=boot_versions,
                boot_version_default=str(data["bootVersion"]["default"]),
                dependencies=dependencies,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise MetadataFetchError(f"Unexpected metadata format (missing {e})") from e

        for label, values in (
            ("project types", metadata.project_types),
            ("Java versions", metadata.java_versions),
            ("Spring Boot versions", metadata.boot_versions),
        ):
            if not values:
                raise MetadataFetchError(f"Metadata lists no {label}")
        return metadata


@dataclass
class ProjectConfig:
    """The values that end up in the generation request."""

    project_type: str = ""
    name: str = ""
    group_id: str = ""
    artifact_id: str = ""
    java_version: str = ""
    boot_version: str = ""
    description: str = ""
    dependencies: list[str] = field(default_factory=list)

    def to_form(self) -> dict[str, str]:
        return {
            "type": self.project_type,
            "javaVersion": self.java_version,
            "bootVersion": self.boot_version,
            "name": self.name,
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "description": self.description,
            "dependencies": ",".join(self.dependencies),
        }


class Mode(Enum):
    INITIAL = "initial"
    REVIEW = "review"


class ProjectField(Enum):
    """Wizard fields; values are the matching ProjectConfig attributes."""

    PROJECT_TYPE = "project_type"
    NAME = "name"
    GROUP_ID = "group_id"
    ARTIFACT_ID = "artifact_id"
    JAVA_VERSION = "java_version"
    BOOT_VERSION = "boot_version"
    DESCRIPTION = "description"
    DEPENDENCIES = "dependencies"


FIELD_LABELS = {
    ProjectField.NAME: "Name",
    ProjectField.GROUP_ID: "Group ID",
    ProjectField.ARTIFACT_ID: "Artifact ID",
    ProjectField.JAVA_VERSION: "Java Version",
    ProjectField.BOOT_VERSION: "Spring Boot",
    ProjectField.DESCRIPTION: "Description",
    ProjectField.PROJECT_TYPE: "Type",
    ProjectField.DEPENDENCIES: "Dependencies",
}

INITIAL_ORDER = [
    ProjectField.PROJECT_TYPE,
    ProjectField.NAME,
    ProjectField.GROUP_ID,
    ProjectField.ARTIFACT_ID,
    ProjectField.JAVA_VERSION,
    ProjectField.BOOT_VERSION,
    ProjectField.DESCRIPTION,
    ProjectField.DEPENDENCIES,
]

# Numbering used by the "change a field" menu
REVIEW_ORDER = [
    ProjectField.NAME,
    ProjectField.GROUP_ID,
    ProjectField.ARTIFACT_ID,
    ProjectField.JAVA_VERSION,
    ProjectField.BOOT_VERSION,
    ProjectField.DESCRIPTION,
    ProjectField.PROJECT_TYPE,
    ProjectField.DEPENDENCIES,
]

# (initial prompt, review prompt, metadata default attribute)
TEXT_FIELDS = {
    ProjectField.NAME: ("Project name", "New project name", "name_default"),
    ProjectField.GROUP_ID: ("Group ID (e.g., com.example)", "New Group ID", "group_id_default"),
    ProjectField.ARTIFACT_ID: ("Artifact ID (e.g., my-project)", "New Artifact ID", "artifact_id_default"),
    ProjectField.DESCRIPTION: ("Project description", "New description", "description_default"),
}


class StepTracker:
    """Track and render a flat list of steps as a rich tree.
    Supports live auto-refresh via an attached refresh callback.
    """
    def __init__(self, title: str):
        self.title = title
        self.steps = []  # list of dicts: {key, label, status, detail}
        self._refresh_cb = None

    def attach_refresh(self, cb):
        self._refresh_cb = cb

    def add(self, key: str, label: str):
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label, "status": "pending", "detail": ""})
            self._maybe_refresh()

    def start(self, key: str, detail: str = ""):
        self._update(key, status="running", detail=detail)

    def complete(self, key: str, detail: str = ""):
        self._update(key, status="done", detail=detail)

    def error(self, key: str, detail: str = ""):
        self._update(key, status="error", detail=detail)

    def skip(self, key: str, detail: str = ""):
        self._update(key, status="skipped", detail=detail)

    def status(self, key: str) -> Optional[str]:
        for s in self.steps:
            if s["key"] == key:
                return s["status"]
        return None

    def _update(self, key: str, status: str, detail: str):
        for s in self.steps:
            if s["key"] == key:
                s["status"] = status
                if detail:
                    s["detail"] = detail
                self._maybe_refresh()
                return
        self.steps.append({"key": key, "label": key, "status": status, "detail": detail})
        self._maybe_refresh()

    def _maybe_refresh(self):
        if self._refresh_cb:
            try:
                self._refresh_cb()
            except Exception:
                pass

    def render(self):
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        symbols = {
            "done": "[green]●[/green]",
            "pending": "[green dim]○[/green dim]",
            "running": "[cyan]○[/cyan]",
            "error": "[red]●[/red]",
            "skipped": "[yellow]○[/yellow]",
        }
        for step in self.steps:
            label = step["label"]
            detail_text = step["detail"].strip() if step["detail"] else ""
            symbol = symbols.get(step["status"], " ")
            if step["status"] == "pending":
                suffix = f" ({detail_text})" if detail_text else ""
                line = f"{symbol} [bright_black]{label}{suffix}[/bright_black]"
            elif detail_text:
                line = f"{symbol} [white]{label}[/white] [bright_black]({detail_text})[/bright_black]"
            else:
                line = f"{symbol} [white]{label}[/white]"
            tree.add(line)
        return tree


console = Console()
err_console = Console(stderr=True)


def ask(console: Console, label: str, default: Optional[str] = None) -> str:
    """Read one stripped line; an empty line yields ``default`` when one is given."""
    if default:
        answer = Prompt.ask(label, console=console, default=default)
    else:
        answer = Prompt.ask(label, console=console)
    return (answer or "").strip()


def parse_index(text: str, count: int) -> Optional[int]:
    """Return the 0-based index for a 1-based ``text``, or None when it is out of range."""
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    number = int(text)
    if 1 <= number <= count:
        return number - 1
    return None


class InvalidSelection(ValueError):
    def __init__(self, tokens: list[str]):
        super().__init__(f"Invalid index: {', '.join(tokens)}")
        self.tokens = tokens


def parse_index_list(text: str, count: int) -> list[int]:
    """Parse a comma separated list of 1-based indices into 0-based ones.

    Every token has to be a valid index, otherwise the whole line is rejected
    with InvalidSelection listing the offending tokens. A blank line means an
    empty selection and one trailing comma is ignored. Duplicates are kept;
    callers collapse them.
    """
    if not text.strip():
        return []
    tokens = [token.strip() for token in text.split(",")]
    if len(tokens) > 1 and tokens[-1] == "":
        tokens.pop()
    picked: list[int] = []
    invalid: list[str] = []
    for token in tokens:
        index = parse_index(token, count)
        if index is None:
            invalid.append(token)
        else:
            picked.append(index)
    if invalid:
        raise InvalidSelection(invalid)
    return picked


def project_name_problem(name: str) -> Optional[str]:
    """Return why ``name`` cannot be used as a directory in the working directory, or None."""
    if not name:
        return "it is empty"
    if "/" in name or "\\" in name:
        return "it must not contain path separators"
    if name in (".", ".."):
        return "it must not be '.' or '..'"
    return None


def unique_ids(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def fuzzy_match(query: str, text: str) -> bool:
    """Case-insensitive subsequence match, the way fzf matches by default."""
    remaining = iter(text.lower())
    return all(ch in remaining for ch in query.lower() if not ch.isspace())


def get_key():
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    if key == readchar.key.UP:
        return 'up'
    if key == readchar.key.DOWN:
        return 'down'
    if key in (readchar.key.ENTER, readchar.key.CR, readchar.key.LF):
        return 'enter'
    if key == readchar.key.ESC:
        return 'escape'
    if key in (readchar.key.SPACE, readchar.key.TAB):
        return 'toggle'
    if key == readchar.key.BACKSPACE:
        return 'backspace'
    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key


class DependencySelector(ABC):
    """Strategy for picking dependencies out of the flattened metadata list."""

    label = "dependency selector"

    def __init__(self, console: Console):
        self.console = console

    @abstractmethod
    def select(self, options: Sequence[DependencyOption], previous: Sequence[int], mode: Mode) -> list[int]:
        """Return 0-based indices into ``options`` in selection order.

        ``previous`` holds the indices chosen last time; in review mode it is
        what the user keeps when they submit nothing or cancel.
        """


class PlainDependencySelector(DependencySelector):
    label = "numbered list"

    def select(self, options, previous, mode):
        lines = [f"{number:3d}) {escape(option.name)}" for number, option in enumerate(options, 1)]
        if lines:
            self.console.print(Columns(lines, column_first=True, padding=(0, 2)))
        self.console.print("Select dependencies (comma-separated indices):")

        default = None
        if mode is Mode.REVIEW and previous:
            default = ",".join(str(i + 1) for i in previous)

        while True:
            answer = ask(self.console, "Dependencies", default)
            try:
                return parse_index_list(answer, len(options))
            except InvalidSelection as e:
                for token in e.tokens:
                    self.console.print(f"[red]Invalid index:[/red] {escape(token) or '(empty)'}")


class FzfDependencySelector(DependencySelector):
    label = "fzf"

    def select(self, options, previous, mode):
        items = "\n".join(
            f"{number}\t{option.name}\t[{option.group}]" for number, option in enumerate(options, 1)
        )
        header = "↑↓ navigate | TAB select | ENTER confirm"
        if mode is Mode.REVIEW:
            # fzf cannot start with items marked, so the new picks replace the old ones
            prompt_msg = "Review dependencies (TAB for multiple) > "
            header += " | ESC keep current selection"
            if previous:
                header += "\nCurrent: " + ", ".join(options[i].name for i in previous)
                header += "\nPicking replaces the current selection"
        else:
            prompt_msg = "Select dependencies (TAB for multiple) > "

        result = subprocess.run(
            [
                "fzf", "--multi",
                "--height", "60%",
                "--border",
                "--header", header,
                "--prompt", prompt_msg,
                "--bind", "ctrl-a:select-all,ctrl-d:deselect-all",
                "--delimiter", "\t",
                "--with-nth", "2..",
            ],
            input=items,
            stdout=subprocess.PIPE,
            text=True,
        )
        if result.returncode != 0 or not result.stdout.strip():
            self.console.print("[yellow]Selection cancelled[/yellow]")
            return list(previous)

        picked = []
        for line in result.stdout.splitlines():
            number, _, _ = line.partition("\t")
            index = parse_index(number, len(options))
            if index is not None:
                picked.append(index)
        return picked


class ArrowDependencySelector(DependencySelector):
    label = "interactive list"
    page_size = 15

    def select(self, options, previous, mode):
        chosen: list[int] = list(previous) if mode is Mode.REVIEW else []
        query = ""
        cursor = 0

        def visible() -> list[int]:
            return [
                i for i, option in enumerate(options)
                if fuzzy_match(query, f"{option.name} {option.group} {option.id}")
            ]

        def create_selection_panel():
            matches = visible()
            start = max(0, min(cursor - self.page_size // 2, len(matches) - self.page_size))
            table = Table.grid(padding=(0, 1))
            table.add_column(style="cyan", width=1)
            table.add_column(width=3)
            table.add_column(style="white")
            table.add_column(style="dim")
            for row, index in enumerate(matches[start:start + self.page_size], start):
                option = options[index]
                pointer = "▶" if row == cursor else " "
                mark = "[green][x][/green]" if index in chosen else "[ ]"
                table.add_row(pointer, mark, escape(option.name), escape(option.group))
            if not matches:
                table.add_row("", "", "[yellow]no matches[/yellow]", "")

            table.add_row("", "", "", "")
            table.add_row("", "", f"[dim]Filter:[/dim] {escape(query)}", f"{len(chosen)} selected")
            table.add_row("", "", "[dim]Type to filter, ↑/↓ move, Space/Tab toggle, Enter confirm, Esc cancel[/dim]", "")
            title = "Review dependencies" if mode is Mode.REVIEW else "Select dependencies"
            return Panel(table, title=f"[bold]{title}[/bold]", border_style="cyan", padding=(1, 2))

        self.console.print()
        with Live(create_selection_panel(), console=self.console, transient=True, auto_refresh=False) as live:
            while True:
                try:
                    key = get_key()
                except KeyboardInterrupt:
                    self.console.print("\n[yellow]Selection cancelled[/yellow]")
                    raise typer.Exit(1)

                matches = visible()
                if key == 'up' and matches:
                    cursor = (cursor - 1) % len(matches)
                elif key == 'down' and matches:
                    cursor = (cursor + 1) % len(matches)
                elif key == 'toggle' and matches:
                    index = matches[cursor]
                    if index in chosen:
                        chosen.remove(index)
                    else:
                        chosen.append(index)
                elif key == 'enter':
                    return chosen
                elif key == 'escape':
                    self.console.print("[yellow]Selection cancelled[/yellow]")
                    return list(previous)
                elif key == 'backspace':
                    query = query[:-1]
                    cursor = 0
                elif len(key) == 1 and key.isprintable():
                    query += key
                    cursor = 0

                live.update(create_selection_panel(), refresh=True)


def choose_dependency_selector(console: Console, plain: bool = False) -> DependencySelector:
    """Pick the richest dependency selector the current terminal supports."""
    if plain or not sys.stdin.isatty():
        return PlainDependencySelector(console)
    if shutil.which("fzf"):
        return FzfDependencySelector(console)
    return ArrowDependencySelector(console)


def build_client(settings: Settings) -> httpx.Client:
    verify = ssl_context if settings.verify_tls else False
    return httpx.Client(verify=verify)


def _response_details(response: httpx.Response) -> str:
    return f"\nResponse headers: {response.headers}\nBody (truncated 400): {response.text[:400]}"


def load_metadata(client: httpx.Client, settings: Settings) -> InitializrMetadata:
    """Fetch the metadata document once; any failure is fatal."""
    url = settings.metadata_url
    try:
        response = client.get(
            url,
            headers={"Accept": "application/json"},
            timeout=settings.timeout,
            follow_redirects=True,
        )
    except httpx.HTTPError as e:
        raise MetadataFetchError(f"Could not reach {url}: {e}") from e

    if response.status_code != 200:
        msg = f"Spring Initializr returned {response.status_code} for {url}"
        if settings.debug:
            msg += _response_details(response)
        raise MetadataFetchError(msg)
    try:
        data = response.json()
    except ValueError as je:
        raise MetadataFetchError(f"Failed to parse metadata JSON: {je}\nRaw (truncated 400): {response.text[:400]}") from je
    return InitializrMetadata.from_json(data)


def download_and_extract_project(
    config: ProjectConfig,
    *,
    client: httpx.Client,
    settings: Settings,
    target_dir: Optional[Path] = None,
    tracker: StepTracker | None = None,
) -> Path:
    """Generate the project, unpack it into ``<name>/`` and remove the archive.
    Returns the project path. Uses tracker if provided (keys: request, download, extract, cleanup)
    """
    problem = project_name_problem(config.name)
    if problem:
        raise ExtractionError(f"Invalid project name '{config.name}': {problem}")

    target_dir = target_dir or Path.cwd()
    project_path = target_dir / config.name
    zip_path = target_dir / f"{config.name}.zip"

    # Both paths must be new; everything removed below was created by this run
    for existing, kind in ((project_path, "Directory"), (zip_path, "File")):
        if existing.exists():
            raise ExtractionError(
                f"{kind} '{existing.name}' already exists. "
                "Choose a different project name or remove it."
            )

    if tracker:
        tracker.start("request", settings.starter_url)
    try:
        with client.stream(
            "POST",
            settings.starter_url,
            data=config.to_form(),
            timeout=settings.timeout,
            follow_redirects=True,
        ) as response:
            if response.status_code != 200:
                response.read()
                msg = f"Spring Initializr returned {response.status_code} for {settings.starter_url}"
                if settings.debug:
                    msg += _response_details(response)
                raise DownloadError(msg)
            if tracker:
                tracker.complete("request", f"HTTP {response.status_code}")
                tracker.start("download")
            downloaded = 0
            with open(zip_path, 'wb') as f:
                for chunk in response.iter_bytes(chunk_size=8192):
                    f.write(chunk)
                    downloaded += len(chunk)
    except (httpx.HTTPError, OSError) as e:
        if zip_path.exists():
            zip_path.unlink()
        if tracker:
            tracker.error("request" if tracker.status("request") == "running" else "download", str(e))
        raise DownloadError(f"Failed to download project: {e}") from e
    except DownloadError as e:
        if zip_path.exists():
            zip_path.unlink()
        if tracker:
            tracker.error("request", str(e).splitlines()[0])
        raise

    if tracker:
        tracker.complete("download", f"{zip_path.name}, {downloaded:,} bytes")
        tracker.start("extract")

    created = False
    try:
        project_path.mkdir(parents=True)
        created = True
        with zipfile.ZipFile(zip_path, 'r') as zip_ref:
            zip_ref.extractall(project_path)
            entries = len(zip_ref.namelist())
    except (zipfile.BadZipFile, OSError) as e:
        if tracker:
            tracker.error("extract", str(e))
        if created and project_path.exists():
            shutil.rmtree(project_path)
        raise ExtractionError(f"Failed to extract {zip_path.name}: {e}") from e
    else:
        if tracker:
            tracker.complete("extract", f"{entries} entries")
    finally:
        if zip_path.exists():
            zip_path.unlink()
            if tracker:
                tracker.complete("cleanup", f"removed {zip_path.name}")

    return project_path


class WizardState(Enum):
    INIT = auto()
    COLLECTING = auto()
    ACTION_MENU = auto()
    REVIEWING = auto()
    DOWNLOADING = auto()
    TERMINAL = auto()


class Wizard:
    """Collects a ProjectConfig from the user and submits it.

    The flow is a small state machine: ``run()`` looks up the handler for
    the current WizardState and moves to whatever state it returns until it
    reaches TERMINAL. Fatal errors (InitializrError) are left to the caller.
    """

    def __init__(
        self,
        *,
        client: httpx.Client,
        settings: Settings | None = None,
        console: Console = console,
        metadata: InitializrMetadata | None = None,
        selector: DependencySelector | None = None,
    ):
        self.client = client
        self.settings = settings or Settings()
        self.console = console
        self.metadata = metadata
        self.selector = selector
        self.config = ProjectConfig()
        self._handlers = {
            WizardState.INIT: self._init,
            WizardState.COLLECTING: self._collecting,
            WizardState.ACTION_MENU: self._action_menu,
            WizardState.REVIEWING: self._reviewing,
            WizardState.DOWNLOADING: self._downloading,
        }
        self._collectors = {
            ProjectField.PROJECT_TYPE: self.collect_project_type,
            ProjectField.JAVA_VERSION: self.collect_java_version,
            ProjectField.BOOT_VERSION: self.collect_boot_version,
            ProjectField.DEPENDENCIES: self.collect_dependencies,
        }

    def run(self, state: WizardState = WizardState.INIT) -> WizardState:
        while state is not WizardState.TERMINAL:
            state = self._handlers[state]()
        return state

    # state handlers

    def _init(self) -> WizardState:
        if self.selector is None:
            self.selector = choose_dependency_selector(self.console, plain=self.settings.plain)
        self.console.print(f"[dim]Dependency selection:[/dim] {self.selector.label}")
        if self.metadata is None:
            self.console.print("[cyan]Fetching Spring Initializr metadata...[/cyan]")
            self.metadata = load_metadata(self.client, self.settings)
        return WizardState.COLLECTING

    def _collecting(self) -> WizardState:
        self.run_initial_collection()
        return WizardState.ACTION_MENU

    def _action_menu(self) -> WizardState:
        self.console.clear()
        self.console.print("\n==================================")
        self.console.print("Select an action:")
        self.console.print("1) Download project\n2) Review settings\n3) Exit\n")
        choice = self._choose_option(1, 3)
        return {1: WizardState.DOWNLOADING, 2: WizardState.REVIEWING, 3: WizardState.TERMINAL}[choice]

    def _reviewing(self) -> WizardState:
        self.show_summary()
        self.console.print("\n1) Change a field\n2) Continue\n3) Exit\n")
        choice = self._choose_option(1, 3)
        if choice == 1:
            self.console.clear()
            self.console.print("Which field would you like to change?")
            for number, project_field in enumerate(REVIEW_ORDER, 1):
                self.console.print(f"  {number}) {FIELD_LABELS[project_field]}")
            self.console.print("  0) Back\n")
            selector = self._choose_option(0, len(REVIEW_ORDER))
            if selector:
                self.revise_field(selector)
            return WizardState.REVIEWING
        if choice == 2:
            return WizardState.ACTION_MENU
        return WizardState.TERMINAL

    def _downloading(self) -> WizardState:
        self.submit(self.config)
        return WizardState.TERMINAL

    def _choose_option(self, low: int, high: int) -> int:
        while True:
            answer = ask(self.console, "Choice")
            if answer.isascii() and answer.isdigit() and low <= int(answer) <= high:
                return int(answer)
            self.console.print(f"[red]Invalid option![/red] Choose between {low} and {high}.")

    # field collection

    def select_from_list(
        self,
        options: Sequence[str],
        label: str,
        prior: Optional[str] = None,
        mode: Mode = Mode.INITIAL,
    ) -> int:
        """Show a numbered list and return the 0-based index the user picked."""
        for number, option in enumerate(options, 1):
            self.console.print(f"  {number:2d}) {escape(option)}")

        default = None
        if mode is Mode.REVIEW and prior in options:
            default = str(list(options).index(prior) + 1)

        while True:
            index = parse_index(ask(self.console, label, default), len(options))
            if index is not None:
                return index
            self.console.print(f"[red]Invalid index![/red] Select between 1 and {len(options)}")

    def collect_field(self, project_field: ProjectField, mode: Mode = Mode.INITIAL) -> None:
        collector = self._collectors.get(project_field)
        if collector is not None:
            collector(mode)
        else:
            self._collect_text(project_field, mode)

    def _collect_text(self, project_field: ProjectField, mode: Mode) -> None:
        initial_label, review_label, default_attr = TEXT_FIELDS[project_field]
        if mode is Mode.REVIEW:
            label = review_label
            fallback = getattr(self.config, project_field.value)
        else:
            label = initial_label
            fallback = getattr(self.metadata, default_attr)

        while True:
            value = ask(self.console, label, fallback) or fallback
            problem = project_name_problem(value) if project_field is ProjectField.NAME else None
            if problem is None:
                break
            self.console.print(f"[red]Invalid project name![/red] {escape(problem).capitalize()}")
        setattr(self.config, project_field.value, value)

    def collect_project_type(self, mode: Mode = Mode.INITIAL) -> None:
        types = self.metadata.project_types
        self.console.print("Choose project type:")
        label = "New project type" if mode is Mode.REVIEW else "Select"
        index = self.select_from_list(types, label, self.config.project_type, mode)
        self.config.project_type = types[index]

    def collect_java_version(self, mode: Mode = Mode.INITIAL) -> None:
        versions = self.metadata.java_versions
        self.console.print(f"Available Java versions [dim](service default {self.metadata.java_version_default})[/dim]:")
        label = "New Java version" if mode is Mode.REVIEW else "Select"
        index = self.select_from_list(versions, label, self.config.java_version, mode)
        self.config.java_version = versions[index]

    def collect_boot_version(self, mode: Mode = Mode.INITIAL) -> None:
        versions = self.metadata.boot_versions
        names = [v.name for v in versions]
        prior = next((v.name for v in versions if v.id == self.config.boot_version), None)
        self.console.print(f"Choose Spring Boot version [dim](service default {self.metadata.boot_version_default})[/dim]:")
        label = "New Spring Boot version" if mode is Mode.REVIEW else "Select"
        index = self.select_from_list(names, label, prior, mode)
        self.config.boot_version = versions[index].id

    def collect_dependencies(self, mode: Mode = Mode.INITIAL) -> None:
        options = self.metadata.dependencies
        position = {option.id: i for i, option in enumerate(options)}
        previous = [position[dep] for dep in self.config.dependencies if dep in position]
        picked = self.selector.select(options, previous, mode)
        self.config.dependencies = unique_ids(options[i].id for i in picked)

    def run_initial_collection(self) -> None:
        for project_field in INITIAL_ORDER:
            self.collect_field(project_field, Mode.INITIAL)

    def revise_field(self, selector: int) -> None:
        """Re-run one collector in review mode; ``selector`` is the 1-based menu number."""
        self.collect_field(REVIEW_ORDER[selector - 1], Mode.REVIEW)

    def show_summary(self) -> None:
        self.console.clear()
        table = Table.grid(padding=(0, 1))
        table.add_column(justify="left", style="yellow", width=14)
        table.add_column(justify="left", style="white")
        for project_field in REVIEW_ORDER:
            value = getattr(self.config, project_field.value)
            if project_field is ProjectField.DEPENDENCIES:
                value = ",".join(value) or "(none)"
            table.add_row(FIELD_LABELS[project_field], escape(value))
        self.console.print(Panel(table, title="Project summary", border_style="cyan", padding=(1, 2)))

    def submit(self, config: ProjectConfig) -> Path:
        tracker = StepTracker(f"Generate {config.name}")
        for key, label in [
            ("request", "Request project"),
            ("download", "Download archive"),
            ("extract", "Extract archive"),
            ("cleanup", "Remove archive"),
        ]:
            tracker.add(key, label)

        # Use transient so the live tree is replaced by the final static render
        try:
            with Live(tracker.render(), console=self.console, refresh_per_second=8, transient=True) as live:
                tracker.attach_refresh(lambda: live.update(tracker.render()))
                project_path = download_and_extract_project(
                    config, client=self.client, settings=self.settings, tracker=tracker
                )
        finally:
            tracker.attach_refresh(None)
            self.console.print(tracker.render())

        self.console.print(f"\n[bold green]Project '{config.name}' downloaded and extracted successfully![/bold green]")
        return project_path


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="spring-init",
    help="Interactive Spring Boot project generator backed by Spring Initializr",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


def show_banner():
    """Display the ASCII art banner."""
    banner_lines = BANNER.strip('\n').split('\n')
    colors = ["bright_green", "green", "bright_green", "green"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        styled_banner.append(line + "\n", style=colors[i % len(colors)])

    console.print(Align.center(styled_banner))
    console.print(Align.center(Text(TAGLINE, style="italic bright_yellow")))
    console.print()


def _print_failure(error: InitializrError, settings: Settings) -> None:
    err_console.print(Panel(str(error), title=f"[red]{error.title}[/red]", border_style="red", padding=(1, 2)))
    if settings.debug:
        _env_pairs = [
            ("Python", sys.version.split()[0]),
            ("Platform", sys.platform),
            ("CWD", str(Path.cwd())),
            ("Service", settings.service_url),
        ]
        _label_width = max(len(k) for k, _ in _env_pairs)
        env_lines = [f"{k.ljust(_label_width)} → [bright_black]{v}[/bright_black]" for k, v in _env_pairs]
        err_console.print(Panel("\n".join(env_lines), title="Debug Environment", border_style="magenta"))


def run_wizard(settings: Settings) -> None:
    client = build_client(settings)
    try:
        Wizard(client=client, settings=settings).run()
    except InitializrError as e:
        _print_failure(e, settings)
        raise typer.Exit(1)
    finally:
        client.close()


@app.callback()
def callback(
    ctx: typer.Context,
    service_url: str = typer.Option(DEFAULT_SERVICE_URL, "--service-url", envvar="SPRING_INITIALIZR_URL", help="Base URL of the Spring Initializr service"),
    timeout: float = typer.Option(DEFAULT_TIMEOUT, "--timeout", envvar="SPRING_INIT_TIMEOUT", min=0, help="Network timeout in seconds (0 waits forever)"),
    skip_tls: bool = typer.Option(False, "--skip-tls", help="Skip SSL/TLS verification (not recommended)"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose diagnostic output for network and extraction failures"),
    plain: bool = typer.Option(False, "--plain", help="Always pick dependencies from a numbered list"),
):
    """Run the project wizard when no subcommand is given."""
    settings = Settings(
        service_url=service_url,
        timeout=timeout or None,
        verify_tls=not skip_tls,
        debug=debug,
        plain=plain,
    )
    ctx.obj = settings
    if ctx.invoked_subcommand is None:
        show_banner()
        run_wizard(settings)


@app.command()
def check(ctx: typer.Context):
    """Check the terminal features and that Spring Initializr is reachable."""
    settings: Settings = ctx.obj or Settings()
    show_banner()
    console.print("[bold]Checking environment...[/bold]\n")

    tracker = StepTracker("Check Environment")
    tracker.add("tty", "Interactive terminal")
    tracker.add("fzf", "fzf fuzzy finder")
    tracker.add("service", "Spring Initializr service")

    if sys.stdin.isatty():
        tracker.complete("tty", "available")
    else:
        tracker.skip("tty", "stdin is not a terminal, numbered lists only")

    if shutil.which("fzf"):
        tracker.complete("fzf", "available")
    else:
        tracker.skip("fzf", "not found, using built-in list")

    client = build_client(settings)
    try:
        metadata = load_metadata(client, settings)
    except MetadataFetchError as e:
        tracker.error("service", str(e).splitlines()[0])
        metadata = None
    else:
        tracker.complete(
            "service",
            f"{len(metadata.boot_versions)} Spring Boot versions, {len(metadata.dependencies)} dependencies",
        )
    finally:
        client.close()

    console.print(tracker.render())
    if metadata is None:
        console.print(f"\n[red]Spring Initializr at {settings.service_url} is not reachable.[/red]")
        raise typer.Exit(1)

    console.print("\n[bold green]Spring Init CLI is ready to use![/bold green]")
    if tracker.status("fzf") != "done":
        console.print("[dim]Tip: Install fzf for fuzzy dependency search[/dim]")


def main():
    app()


if __name__ == "__main__":
    main()
