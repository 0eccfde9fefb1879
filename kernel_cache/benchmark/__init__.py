from .env import EnvironmentContext, EnvironmentSniffer, current_environment_context
from .profiler import KernelProfiler, ProfilingSession, time_kernel

__all__ = [
    "EnvironmentContext",
    "EnvironmentSniffer",
    "current_environment_context",
    "KernelProfiler",
    "ProfilingSession",
    "time_kernel",
]
