import contextlib
import os
import pickle
import stat
import tempfile
from typing import Any, Dict, Hashable, Type, TypeVar

from ..benchmark.env import current_environment_context
from ..config import CACHE_DIR, CACHE_FORMAT_VERSION, DEBUG_CACHE
from .errors import FormatMismatchError
from .store import KernelCache

C = TypeVar("C", bound=KernelCache)


def default_cache_path(kind: str) -> str:
    return os.path.join(CACHE_DIR, f"{kind}_kernel_cache.pkl")


def load_partitions(file) -> Dict[Hashable, Any]:
    """
    Reads the partition map (environment context -> store payload) of a cache
    file. A missing file is an empty map.
    """
    if not os.path.exists(file):
        return {}

    with open(file, "rb") as f:
        try:
            cache_db = pickle.load(f)
        except (
            pickle.UnpicklingError,
            EOFError,
            ValueError,
            IndexError,
            TypeError,
            AttributeError,
            ImportError,
        ) as e:
            raise FormatMismatchError(f"{file} is not a kernel cache file: {e}") from e

    if not isinstance(cache_db, dict) or not isinstance(cache_db.get("partitions"), dict):
        raise FormatMismatchError(f"{file} is not a kernel cache file")
    if cache_db.get("version") != CACHE_FORMAT_VERSION:
        raise FormatMismatchError(
            f"{file} has cache format version {cache_db.get('version')!r}, "
            f"expected {CACHE_FORMAT_VERSION}"
        )
    return cache_db["partitions"]


def open_cache(
    cache_cls: Type[C], file, force_new: bool = False, context: Hashable = None
) -> C:
    """
    Returns the store for the current environment from `file`, or an empty
    store bound to `file` if there is none (or `force_new` is set).
    """
    file = os.fspath(file)
    if not force_new and os.path.exists(file):
        ctx = context if context is not None else current_environment_context()
        partitions = load_partitions(file)
        if ctx in partitions:
            cache = cache_cls.from_snapshot(partitions[ctx], file=file)
            if DEBUG_CACHE:
                print(f"[KernelCache] Loaded {len(cache)} {cache.kind} entries from {file}")
            return cache
        if DEBUG_CACHE:
            print(f"[KernelCache] No partition for {ctx} in {file}, starting empty")

    return cache_cls(file)


def save(cache: KernelCache, context: Hashable = None) -> None:
    """
    Writes `cache` into its environment partition of `cache.file`.

    The whole partition map is serialized to a temporary file next to the
    target and then renamed over it, so an interrupted save leaves the
    previous file intact. Concurrent saves from several processes are not
    coordinated: the last rename wins.
    """
    ctx = context if context is not None else current_environment_context()

    # Make the directory for this cache if needed.
    directory = os.path.dirname(os.path.abspath(cache.file))
    os.makedirs(directory, exist_ok=True)

    partitions = load_partitions(cache.file)
    partitions[ctx] = cache.snapshot()
    cache_db = {"version": CACHE_FORMAT_VERSION, "partitions": partitions}

    fd, path = tempfile.mkstemp(
        dir=directory, prefix=f".{os.path.basename(cache.file)}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            # Keep the permissions of the file being replaced.
            if os.path.exists(cache.file):
                os.chmod(path, stat.S_IMODE(os.stat(cache.file).st_mode))
            pickle.dump(cache_db, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(path, cache.file)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(path)
        raise

    if DEBUG_CACHE:
        print(f"[KernelCache] Saved {len(cache)} {cache.kind} entries to {cache.file}")
