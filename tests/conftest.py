"""Shared fixtures for node manager tests.

Provides an in-memory ContainerRuntime, a console with scripted answers,
and factory fixtures for Settings / NodeManager instances. No real
subprocesses are started.
"""

import io
import sys
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# Ensure project root is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from glacier.config import Settings
from glacier.core.console import Console
from glacier.core.errors import CommandError
from glacier.models.container import ContainerInfo, ContainerSpec
from glacier.services.container_runtime import ContainerRuntime
from glacier.services.host import EngineState, HostSystem
from glacier.services.node_manager import NodeManager


VALID_KEY = "ab" * 32


# ---------------------------------------------------------------------------
# Scripted operator input
# ---------------------------------------------------------------------------

class ScriptedInput:
    """Callable standing in for input()/getpass(); EOFError once exhausted."""

    def __init__(self, answers: Optional[List[str]] = None):
        self.answers = list(answers or [])
        self.prompts: List[str] = []

    def __call__(self, prompt: str = "") -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


class ScriptedConsole(Console):
    """Console with captured output and scripted answers."""

    def __init__(self, answers=None, secrets=None):
        self.stdin = ScriptedInput(answers)
        self.secrets = ScriptedInput(secrets)
        self.buffer = io.StringIO()
        super().__init__(
            color_enabled=False,
            input_func=self.stdin,
            secret_func=self.secrets,
            out=self.buffer,
        )

    @property
    def output(self) -> str:
        return self.buffer.getvalue()


# ---------------------------------------------------------------------------
# In-memory container runtime
# ---------------------------------------------------------------------------

class FakeRuntime(ContainerRuntime):
    """ContainerRuntime that keeps containers in a dict."""

    def __init__(self, installed: bool = True):
        self.installed = installed
        self.containers: Dict[str, ContainerInfo] = {}
        self.pulled: List[str] = []
        self.launched: List[tuple] = []
        self.removed: List[str] = []
        self.removed_images: List[str] = []
        self.followed: List[str] = []
        self.fail_image_removal = False
        self.follow_status = 0
        self._next_id = 1

    def add(self, name: str, image: str = "img", running: bool = True) -> ContainerInfo:
        info = ContainerInfo(
            id=f"{self._next_id:012x}",
            image=image,
            names=name,
            state="running" if running else "exited",
            status="Up 5 minutes" if running else "Exited (0) 1 minute ago",
            created_at="2026-10-19 10:00:00 +0000 UTC",
        )
        self._next_id += 1
        self.containers[name] = info
        return info

    def is_installed(self) -> bool:
        return self.installed

    def find(self, name: str) -> Optional[ContainerInfo]:
        return self.containers.get(name)

    def pull(self, image: str) -> None:
        self.pulled.append(image)

    def run(self, spec: ContainerSpec, env=None) -> str:
        if spec.name in self.containers:
            raise CommandError(["docker", "run", "--name", spec.name], 125, "name already in use")
        self.launched.append((spec, env))
        return self.add(spec.name, image=spec.image).id

    def stop(self, name: str) -> None:
        info = self.containers[name]
        self.containers[name] = info.model_copy(update={"state": "exited", "status": "Exited (0)"})

    def remove(self, name: str, force: bool = True) -> None:
        self.removed.append(name)
        self.containers.pop(name, None)

    def remove_image(self, image: str) -> None:
        if self.fail_image_removal:
            raise CommandError(["docker", "rmi", image], 1, "No such image")
        self.removed_images.append(image)

    def follow_logs(self, name: str, tail: str = "all") -> int:
        self.followed.append(name)
        return self.follow_status


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings_factory():
    """Settings without .env lookup; keyword overrides only."""
    def _factory(**overrides) -> Settings:
        return Settings(_env_file=None, **overrides)
    return _factory


@pytest.fixture
def settings(settings_factory):
    return settings_factory()


@pytest.fixture
def runtime():
    return FakeRuntime()


@pytest.fixture
def host():
    """HostSystem mock reporting a running engine."""
    mock_host = MagicMock(spec=HostSystem)
    mock_host.engine_state.return_value = EngineState.RUNNING
    mock_host.ensure_supported.return_value = "ubuntu"
    return mock_host


@pytest.fixture
def manager_factory(runtime, host, settings):
    """Factory that creates a NodeManager with scripted console answers.

    Usage:
        manager, console = manager_factory(secrets=["0x" + key])
    """
    def _factory(answers=None, secrets=None, settings_override=None):
        console = ScriptedConsole(answers=answers, secrets=secrets)
        manager = NodeManager(runtime, host, console, settings_override or settings)
        return manager, console
    return _factory
