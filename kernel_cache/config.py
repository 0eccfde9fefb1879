import os

# Print cache open/save and profiler activity.
DEBUG_CACHE = os.environ.get("KERNEL_CACHE_DEBUG", "0") == "1"

# Directory holding the per-kind cache files.
CACHE_DIR = os.path.expanduser(
    os.environ.get("KERNEL_CACHE_DIR", os.path.join("~", ".cache", "kernel_cache"))
)

# Bump when the pickled layout of a cache file changes.
CACHE_FORMAT_VERSION = 1

# Profiler Configuration
PROFILER_WARMUPS = 3
PROFILER_REPEATS = 10
