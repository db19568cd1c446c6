"""The five menu actions: install, logs, status, sidecar logs, remove."""

import logging
from typing import Dict, Optional

from glacier.config import Settings, settings as default_settings
from glacier.core.console import Color, Console
from glacier.core.errors import CommandError
from glacier.core.private_key import mask_private_key, normalize_private_key
from glacier.core.steps import StepRunner
from glacier.models.container import ContainerInfo, ContainerSpec
from glacier.services.command_runner import CommandRunner
from glacier.services.container_runtime import ContainerRuntime, DockerCLI
from glacier.services.host import EngineState, HostSystem

logger = logging.getLogger(__name__)

VERIFIER_LABEL = "Glacier node"
WATCHTOWER_LABEL = "Watchtower"


class NodeManager:
    """Installs, inspects and tears down the verifier and its sidecar."""

    def __init__(
        self,
        runtime: ContainerRuntime,
        host: HostSystem,
        console: Console,
        settings: Optional[Settings] = None,
    ):
        self.runtime = runtime
        self.host = host
        self.console = console
        self.settings = settings or default_settings

    # ------------------------------------------------------------------
    # Container specs
    # ------------------------------------------------------------------

    def verifier_spec(self) -> ContainerSpec:
        return ContainerSpec(
            name=self.settings.verifier_container,
            image=self.settings.verifier_image,
            env_names=["PRIVATE_KEY"],
        )

    def watchtower_spec(self) -> ContainerSpec:
        return ContainerSpec(
            name=self.settings.watchtower_container,
            image=self.settings.watchtower_image,
            volumes=[f"{self.settings.docker_socket}:/var/run/docker.sock"],
            args=[
                "--interval", str(self.settings.watchtower_interval),
                "--cleanup",
                self.settings.verifier_container,
            ],
        )

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    def install(self) -> None:
        """Prepare the host and start both containers.

        Every step is critical: the first failure raises StepError and
        nothing is rolled back.
        """
        steps = StepRunner(self.console)
        self.console.info("Starting Glacier node installation...")
        steps.run("Host check", self.host.ensure_supported)

        self.console.info("Updating system packages...")
        steps.run("Refresh package index", self.host.refresh_packages)
        steps.run("Upgrade packages", self.host.upgrade_packages)

        self._ensure_engine(steps)

        key = steps.run("Private key", self.read_private_key)

        self.console.info("Starting Glacier verifier...")
        steps.run("Pull verifier image", self.runtime.pull, self.settings.verifier_image)
        steps.run("Start verifier", self._launch, self.verifier_spec(), {"PRIVATE_KEY": key})

        self.console.info("Installing Watchtower for automatic updates...")
        steps.run("Start watchtower", self._launch, self.watchtower_spec())

        self.console.info("Installation completed successfully!")
        self.console.pause()

    def _ensure_engine(self, steps: StepRunner) -> None:
        state = steps.run("Docker check", self.host.engine_state)
        if state == EngineState.RUNNING:
            self.console.info("Docker is already installed and running")
        elif state == EngineState.STOPPED:
            self.console.warn("Docker is installed but not running. Starting Docker...")
            steps.run("Start Docker", self.host.start_service, "docker")
        else:
            self.console.info("Docker not found. Installing Docker...")
            steps.run("Install Docker", self.host.install_docker)

    def read_private_key(self) -> str:
        """Validated key from settings or the operator; no retry on mismatch."""
        if self.settings.private_key is not None:
            raw = self.settings.private_key.get_secret_value()
        else:
            try:
                raw = self.console.ask_secret("Please enter your private key: ")
            except EOFError:
                raw = ""
        key = normalize_private_key(raw)
        logger.info("Private key accepted (%s)", mask_private_key(key))
        return key

    def _launch(self, spec: ContainerSpec, env: Optional[Dict[str, str]] = None) -> str:
        # A leftover container from an earlier or partial install is replaced
        if self.runtime.exists(spec.name):
            logger.info("Replacing existing container %s", spec.name)
            self.runtime.remove(spec.name, force=True)
        return self.runtime.run(spec, env=env)

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    def show_logs(self) -> None:
        self._follow(self.settings.verifier_container, VERIFIER_LABEL)

    def show_watchtower_logs(self) -> None:
        self._follow(self.settings.watchtower_container, WATCHTOWER_LABEL)

    def _follow(self, name: str, label: str) -> None:
        if self._is_running(name):
            self.console.info(f"Showing {label} logs (Ctrl+C to exit):")
            status = self.runtime.follow_logs(name, tail=self.settings.log_tail)
            # 130 is Ctrl+C; anything else non-zero means docker logs gave up
            if status not in (0, 130):
                logger.warning("Log stream for %s ended with status %d", name, status)
                self.console.warn(f"{label} log stream ended unexpectedly (exit status {status})")
                self.console.pause()
        else:
            self.console.error(f"{label} is not running!")
            self.console.pause()

    def _find(self, name: str) -> Optional[ContainerInfo]:
        try:
            return self.runtime.find(name)
        except CommandError as e:
            # No engine (or no daemon) means nothing is running
            logger.warning("Could not query container %s: %s", name, e)
            return None

    def _is_running(self, name: str) -> bool:
        info = self._find(name)
        return info is not None and info.running

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def check_status(self) -> None:
        self.console.info("Checking node status...")
        for index, (label, name) in enumerate(self._targets()):
            if index:
                self.console.print()
            info = self._find(name)
            running = info is not None and info.running
            self.console.status_line(label, running)
            if running:
                self.console.print(f"ID: {info.id}")
                self.console.print(f"Image: {info.image}")
                self.console.print(f"Status: {info.status}")
                self.console.print(f"Created: {info.created_at}")
        self.console.pause()

    def _targets(self):
        return [
            (VERIFIER_LABEL, self.settings.verifier_container),
            (WATCHTOWER_LABEL, self.settings.watchtower_container),
        ]

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def remove(self) -> None:
        """Best-effort teardown; failures are reported and skipped."""
        steps = StepRunner(self.console)
        self.console.warn("Removing Glacier node components...")

        # Sidecar first so it cannot recreate the verifier mid-teardown
        for label, name in reversed(self._targets()):
            if self._find(name) is None:
                continue
            self.console.print(f"Stopping and removing {label} container...")
            steps.best_effort(f"Stop {name}", self.runtime.stop, name)
            steps.best_effort(f"Remove {name}", self.runtime.remove, name, force=True)

        self.console.print("Removing Docker images...")
        for image in (self.settings.verifier_image, self.settings.watchtower_image):
            steps.best_effort(f"Remove image {image}", self.runtime.remove_image, image)

        self.console.print("Cleaning up container directories...")
        for _, name in self._targets():
            steps.best_effort(f"Clean up {name} state", self.host.remove_container_state, name)

        if steps.warnings:
            logger.warning("Removal finished with %d skipped step(s)", len(steps.warnings))
        self.console.print("Node removal completed", Color.GREEN)
        self.console.pause()


def create_node_manager(console: Console, settings: Optional[Settings] = None) -> NodeManager:
    """Factory: wire the docker client and host services together."""
    settings = settings or default_settings
    runner = CommandRunner(timeout=settings.command_timeout)
    runtime = DockerCLI(runner)
    host = HostSystem(runner, runtime, settings)
    return NodeManager(runtime, host, console, settings)
