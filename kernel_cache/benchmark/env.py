import functools
import importlib.metadata
import platform
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import psutil

# Libraries whose version changes what a measured kernel costs.
INTERESTING_LIBS = ("numpy", "torch")


@dataclass(frozen=True)
class EnvironmentContext:
    """
    Identifies the hardware and software stack measurements were taken on.
    Cache files hold one partition per distinct context.
    """

    hardware_name: str
    memory_bytes: int
    os: str
    os_release: str
    machine: str
    python_version: str
    libs: Tuple[Tuple[str, str], ...] = ()

    def __repr__(self):
        libs = ", ".join(f"{k}={v}" for k, v in self.libs)
        return (
            f"<Env {self.hardware_name} | {self.os}-{self.machine} "
            f"| py{self.python_version} | {libs}>"
        )


class EnvironmentSniffer:
    @staticmethod
    def get_hardware_name() -> str:
        # Basic CPU info as fallback hardware name
        cpu_name = platform.processor() or platform.machine() or "Unknown CPU"

        # Try to get GPU name if torch is available
        try:
            import torch

            if torch.cuda.is_available():
                return torch.cuda.get_device_name(0)
        except ImportError:
            pass

        return cpu_name

    @staticmethod
    def get_memory_bytes() -> int:
        return psutil.virtual_memory().total

    @staticmethod
    def get_platform_info() -> Dict[str, Any]:
        return {
            "os": platform.system(),
            "os_release": platform.release(),
            "machine": platform.machine(),
            "python_version": platform.python_version(),
        }

    @staticmethod
    def get_libs_info() -> Dict[str, str]:
        libs = {}
        for lib in INTERESTING_LIBS:
            try:
                libs[lib] = importlib.metadata.version(lib)
            except importlib.metadata.PackageNotFoundError:
                libs[lib] = "not_installed"

        # Accelerator runtime versions decide which algorithms exist.
        try:
            import torch

            if torch.cuda.is_available():
                libs["cuda"] = str(torch.version.cuda)
                libs["cudnn"] = str(torch.backends.cudnn.version())
        except ImportError:
            pass

        return libs

    @classmethod
    def sniff(cls) -> Dict[str, Any]:
        return {
            "hardware_name": cls.get_hardware_name(),
            "memory_bytes": cls.get_memory_bytes(),
            "platform_info": cls.get_platform_info(),
            "libs_info": cls.get_libs_info(),
        }

    @classmethod
    def context(cls) -> EnvironmentContext:
        info = cls.sniff()
        return EnvironmentContext(
            hardware_name=info["hardware_name"],
            memory_bytes=int(info["memory_bytes"]),
            libs=tuple(sorted(info["libs_info"].items())),
            **info["platform_info"],
        )


@functools.lru_cache(maxsize=None)
def current_environment_context() -> EnvironmentContext:
    """The context of this process. Computed once and reused."""
    return EnvironmentSniffer.context()
