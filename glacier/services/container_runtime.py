"""Container runtime access by container name.

ContainerRuntime is the capability the node manager needs (create, stop,
remove, inspect by name). DockerCLI implements it by shelling out to the
docker client; tests substitute an in-memory fake.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from glacier.core.errors import CommandError
from glacier.models.container import ContainerInfo, ContainerSpec
from glacier.services.command_runner import CommandRunner

logger = logging.getLogger(__name__)


class ContainerRuntime(ABC):
    """Operations on containers, addressed by exact name."""

    @abstractmethod
    def is_installed(self) -> bool: ...

    @abstractmethod
    def find(self, name: str) -> Optional[ContainerInfo]:
        """Container with exactly this name in any state, or None."""

    @abstractmethod
    def pull(self, image: str) -> None: ...

    @abstractmethod
    def run(self, spec: ContainerSpec, env: Optional[Dict[str, str]] = None) -> str:
        """Create and start a container, return its id."""

    @abstractmethod
    def stop(self, name: str) -> None: ...

    @abstractmethod
    def remove(self, name: str, force: bool = True) -> None: ...

    @abstractmethod
    def remove_image(self, image: str) -> None: ...

    @abstractmethod
    def follow_logs(self, name: str, tail: str = "all") -> int:
        """Stream logs until the operator interrupts; return the exit status."""

    def exists(self, name: str) -> bool:
        return self.find(name) is not None

    def is_running(self, name: str) -> bool:
        info = self.find(name)
        return info is not None and info.running


class DockerCLI(ContainerRuntime):
    """ContainerRuntime backed by the ``docker`` command."""

    def __init__(self, runner: CommandRunner, binary: str = "docker"):
        self.runner = runner
        self.binary = binary

    def _docker(self, *args: str) -> List[str]:
        return [self.binary, *args]

    def is_installed(self) -> bool:
        return self.runner.succeeds(["which", self.binary])

    def find(self, name: str) -> Optional[ContainerInfo]:
        # The name filter is a regex over all names; anchor it so
        # "glacier-verifier" does not match "glacier-verifier-old".
        output = self.runner.output(
            self._docker("ps", "-a", "--filter", f"name=^/?{name}$", "--format", "{{json .}}")
        )
        for line in output.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                info = ContainerInfo.model_validate_json(line)
            except ValidationError as e:
                logger.warning("Unreadable docker ps line for %s: %s", name, e)
                continue
            if name in (n.strip().lstrip("/") for n in info.names.split(",")):
                return info
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        retry=retry_if_exception_type(CommandError),
        reraise=True,
    )
    def pull(self, image: str) -> None:
        logger.info("Pulling image %s", image)
        self.runner.run(self._docker("pull", image))

    def run(self, spec: ContainerSpec, env: Optional[Dict[str, str]] = None) -> str:
        cmd = self._docker("run")
        if spec.detach:
            cmd.append("-d")
        for var in spec.env_names:
            # Name only: the value travels in the child environment
            cmd.extend(["-e", var])
        cmd.extend(["--name", spec.name])
        for volume in spec.volumes:
            cmd.extend(["-v", volume])
        cmd.append(spec.image)
        cmd.extend(spec.args)
        result = self.runner.run(cmd, capture=True, env=env)
        container_id = (result.stdout or "").strip()
        logger.info("Started container %s (%s)", spec.name, container_id[:12])
        return container_id

    def stop(self, name: str) -> None:
        self.runner.run(self._docker("stop", name), capture=True)

    def remove(self, name: str, force: bool = True) -> None:
        cmd = self._docker("rm")
        if force:
            cmd.append("-f")
        cmd.append(name)
        self.runner.run(cmd, capture=True)

    def remove_image(self, image: str) -> None:
        self.runner.run(self._docker("rmi", image), capture=True)

    def follow_logs(self, name: str, tail: str = "all") -> int:
        return self.runner.stream(self._docker("logs", "-f", "--tail", tail, name))
