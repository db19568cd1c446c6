"""Host package and service management (apt + systemd).

Only Debian/Ubuntu-family hosts are supported. Docker is installed from the
vendor's apt repository, the same way the upstream install guide does it.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from glacier.config import Settings
from glacier.core.errors import CommandError, UnsupportedHost
from glacier.services.command_runner import CommandRunner
from glacier.services.container_runtime import ContainerRuntime

logger = logging.getLogger(__name__)

OS_RELEASE = Path('/etc/os-release')

DEBIAN_IDS = {'debian', 'raspbian', 'devuan'}
UBUNTU_IDS = {'ubuntu', 'pop', 'linuxmint', 'elementary', 'zorin', 'neon'}


class EngineState(str, Enum):
    """State of the container engine on this host."""
    RUNNING = 'running'
    STOPPED = 'stopped'
    MISSING = 'missing'


def parse_os_release(text: str) -> Dict[str, str]:
    info: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if '=' in line and not line.startswith('#'):
            key, value = line.split('=', 1)
            info[key] = value.strip('"\'')
    return info


class HostSystem:
    """apt, systemd and Docker engine installation on the local host."""

    def __init__(self, runner: CommandRunner, runtime: ContainerRuntime, settings: Settings):
        self.runner = runner
        self.runtime = runtime
        self.settings = settings
        self._distro: Optional[str] = None

    # ------------------------------------------------------------------
    # Platform detection
    # ------------------------------------------------------------------

    def detect_distro(self) -> Optional[str]:
        """Return 'debian' or 'ubuntu' (the Docker repo path), or None."""
        if self._distro is not None:
            return self._distro

        if not OS_RELEASE.exists():
            return None
        with open(OS_RELEASE) as f:
            info = parse_os_release(f.read())

        distro_id = info.get('ID', '').lower()
        id_like = info.get('ID_LIKE', '').lower().split()

        if distro_id in UBUNTU_IDS or 'ubuntu' in id_like:
            self._distro = 'ubuntu'
        elif distro_id in DEBIAN_IDS or 'debian' in id_like:
            self._distro = 'debian'
        return self._distro

    # ------------------------------------------------------------------
    # Packages
    # ------------------------------------------------------------------

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        retry=retry_if_exception_type(CommandError),
        reraise=True,
    )
    def refresh_packages(self) -> None:
        self.runner.run(['apt-get', 'update'], sudo=True)

    def upgrade_packages(self) -> None:
        self.runner.run(['apt-get', 'upgrade', '-y'], sudo=True)

    def install_packages(self, packages: List[str]) -> None:
        self.runner.run(['apt-get', 'install', '-y', *packages], sudo=True)

    # ------------------------------------------------------------------
    # systemd
    # ------------------------------------------------------------------

    def is_service_active(self, service: str) -> bool:
        return self.runner.succeeds(['systemctl', 'is-active', '--quiet', service])

    def start_service(self, service: str) -> None:
        self.runner.run(['systemctl', 'start', service], sudo=True)

    def enable_service(self, service: str) -> None:
        self.runner.run(['systemctl', 'enable', service], sudo=True)

    # ------------------------------------------------------------------
    # Leftover container state
    # ------------------------------------------------------------------

    def remove_container_state(self, name: str) -> None:
        """Delete runtime state directories whose name contains ``name``."""
        self.runner.run(
            ['find', self.settings.containers_dir, '-mindepth', '1', '-maxdepth', '1',
             '-name', f'*{name}*', '-exec', 'rm', '-rf', '{}', '+'],
            sudo=True,
            capture=True,
        )

    # ------------------------------------------------------------------
    # Docker engine
    # ------------------------------------------------------------------

    def engine_state(self) -> EngineState:
        if not self.runtime.is_installed():
            return EngineState.MISSING
        if self.is_service_active('docker'):
            return EngineState.RUNNING
        return EngineState.STOPPED

    def ensure_supported(self) -> str:
        distro = self.detect_distro()
        if distro is None:
            raise UnsupportedHost(
                "Only Debian or Ubuntu hosts are supported (apt + systemd)"
            )
        return distro

    def docker_repo_line(self) -> str:
        distro = self.ensure_supported()
        arch = self.runner.output(['dpkg', '--print-architecture'])
        codename = self.runner.output(['lsb_release', '-cs'])
        return (
            f"deb [arch={arch} signed-by={self.settings.docker_keyring}] "
            f"{self.settings.docker_repo_url}/{distro} {codename} stable"
        )

    def add_docker_repository(self) -> None:
        """Install the vendor signing key and the apt source entry."""
        distro = self.ensure_supported()
        self.runner.run(['mkdir', '-p', self.settings.docker_keyring_dir], sudo=True)
        armored_key = self.runner.run(
            ['curl', '-fsSL', f"{self.settings.docker_repo_url}/{distro}/gpg"],
            capture=True,
        ).stdout
        self.runner.run(
            ['gpg', '--batch', '--yes', '--dearmor', '-o', self.settings.docker_keyring],
            sudo=True,
            input=armored_key,
            capture=True,
        )
        self.runner.run(
            ['tee', self.settings.docker_sources_list],
            sudo=True,
            input=self.docker_repo_line() + '\n',
            capture=True,
        )
        logger.info("Docker apt repository configured for %s", distro)

    def install_docker(self) -> None:
        """Install Docker Engine and its plugins, then enable and start it."""
        self.install_packages(self.settings.docker_prerequisites)
        self.add_docker_repository()
        self.refresh_packages()
        self.install_packages(self.settings.docker_packages)
        self.enable_service('docker')
        self.start_service('docker')
        logger.info("Docker installed and started")
