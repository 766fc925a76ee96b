"""URL launchers that hand payment links to the OS or a device."""

import asyncio
import shlex
import webbrowser
from abc import ABC, abstractmethod

from walletwise.config import LauncherKind, UpiSettings, get_settings
from walletwise.exceptions import ErrorCode, UpiDispatchError
from walletwise.logging_config import get_logger

logger = get_logger(__name__)

VIEW_ACTION = "android.intent.action.VIEW"
FLAG_ACTIVITY_NEW_TASK = 0x10000000


class UrlLauncher(ABC):
    """Abstract base class for URL dispatch mechanisms.

    A launcher either can or cannot check in advance whether a handler
    exists for a URL. Launchers that can pre-check also offer a secondary
    launch path used when no default handler is registered.
    """

    @property
    @abstractmethod
    def supports_precheck(self) -> bool:
        """Whether `can_open` gives a meaningful answer."""
        ...

    @abstractmethod
    async def open(self, url: str) -> None:
        """Hand the URL to its default handler.

        Raises:
            UpiDispatchError: If the handoff fails.
        """
        ...

    async def can_open(self, url: str) -> bool:
        """Check whether a handler exists for the URL."""
        raise UpiDispatchError(
            f"{type(self).__name__} cannot pre-check URL handlers",
            details={"url": url},
        )

    async def start_activity(self, action: str, data: str, flags: int = 0) -> None:
        """Launch an explicit activity for the URL.

        Raises:
            UpiDispatchError: If the launch fails or is unsupported.
        """
        raise UpiDispatchError(
            f"{type(self).__name__} cannot start activities",
            details={"action": action, "url": data},
        )


class SystemUrlLauncher(UrlLauncher):
    """Launcher using the host's registered URL handler."""

    @property
    def supports_precheck(self) -> bool:
        return False

    async def open(self, url: str) -> None:
        opened = await asyncio.to_thread(webbrowser.open, url)
        if not opened:
            raise UpiDispatchError(
                "No application accepted the payment URL",
                code=ErrorCode.UPI_NO_HANDLER,
                details={"url": url},
            )


class AdbIntentLauncher(UrlLauncher):
    """Launcher that fires Android intents on a device through adb."""

    def __init__(self, settings: UpiSettings | None = None) -> None:
        """Initialize the adb launcher.

        Args:
            settings: UPI configuration. Uses defaults if not provided.
        """
        self._settings = settings or get_settings().upi

    @property
    def supports_precheck(self) -> bool:
        return True

    def _shell_command(self, *args: str) -> list[str]:
        command = [self._settings.adb_path]
        if self._settings.adb_serial:
            command.extend(["-s", self._settings.adb_serial])
        # adb joins the remote arguments into one shell line
        command.extend(["shell", " ".join(shlex.quote(arg) for arg in args)])
        return command

    async def _run(self, *args: str) -> tuple[int, str]:
        command = self._shell_command(*args)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            logger.error(f"Failed to run adb: {e}")
            raise UpiDispatchError(
                f"Failed to run adb: {e}",
                details={"adb_path": self._settings.adb_path},
            ) from e

        stdout, _ = await process.communicate()
        output = stdout.decode(errors="replace")
        return process.returncode or 0, output

    async def can_open(self, url: str) -> bool:
        returncode, output = await self._run(
            "cmd", "package", "resolve-activity", "--brief", "-a", VIEW_ACTION, "-d", url
        )
        if returncode != 0 or "No activity found" in output:
            return False
        return bool(output.strip())

    async def _am_start(self, *args: str) -> None:
        returncode, output = await self._run("am", "start", *args)
        if returncode != 0 or "Error" in output:
            logger.error(
                "Activity launch failed",
                extra={"returncode": returncode, "output": output.strip()},
            )
            raise UpiDispatchError(
                "Activity launch failed",
                details={"returncode": returncode, "output": output.strip()},
            )

    async def open(self, url: str) -> None:
        await self._am_start("-a", VIEW_ACTION, "-d", url)

    async def start_activity(self, action: str, data: str, flags: int = 0) -> None:
        await self._am_start("-a", action, "-d", data, "-f", str(flags))


def build_launcher(settings: UpiSettings | None = None) -> UrlLauncher:
    """Create the launcher selected in configuration."""
    settings = settings or get_settings().upi
    if settings.launcher == LauncherKind.ADB:
        return AdbIntentLauncher(settings=settings)
    return SystemUrlLauncher()
