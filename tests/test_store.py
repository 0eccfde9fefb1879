import pytest
from kernel_cache.cache.errors import MissingKeyError
from kernel_cache.cache.results import (
    AlgorithmCandidate,
    AlgorithmCandidates,
    MeasuredCost,
)
from kernel_cache.cache.store import CacheKey, CPUKernelCache, GPUKernelCache, KernelCache
from kernel_cache.ir.dtypes import DType
from kernel_cache.ir.signature import CPUKernelSignature


def test_insert_lookup_remove(conv_cpu, dram_io, pmem_io):
    cache = CPUKernelCache("unused.pkl")
    key = (conv_cpu, dram_io)

    assert cache.lookup(key) is None
    assert not cache.contains(key)
    cache.remove(key)  # Missing key is fine

    cache.insert_or_update(key, 1.5)
    assert cache.lookup(key) == 1.5
    assert cache.contains(key)
    assert not cache.contains((conv_cpu, pmem_io))
    assert len(cache) == 1

    # Last write wins
    cache.insert_or_update(key, 0.75)
    assert cache.lookup(key) == 0.75
    assert len(cache) == 1

    cache.remove(key)
    assert len(cache) == 0
    assert cache.lookup(key) is None


def test_lookup_with_equal_signature(conv_cpu, dram_io):
    cache = CPUKernelCache("unused.pkl")
    cache[conv_cpu, dram_io] = 2.0

    rebuilt = CPUKernelSignature(
        "Convolution",
        [[8, 3, 32, 32], [16, 3, 3, 3]],
        [[8, 16, 30, 30]],
        ["float32", "float32"],
        ["float32"],
        is_hardware_optimized=True,
        input_layout_formats=["nChw16c", "OIhw16i16o"],
    )
    assert cache[rebuilt, dram_io] == 2.0
    assert CacheKey(rebuilt, dram_io) in cache


def test_mapping_protocol(conv_cpu, dram_io, pmem_io):
    cache = CPUKernelCache("unused.pkl")
    cache[conv_cpu, dram_io] = 1
    cache[conv_cpu, pmem_io] = 3

    assert isinstance(cache[conv_cpu, dram_io], float)
    assert set(cache) == {(conv_cpu, dram_io), (conv_cpu, pmem_io)}
    assert all(isinstance(k, CacheKey) for k in cache.keys())
    assert dict(cache.items())[(conv_cpu, pmem_io)] == 3.0

    del cache[conv_cpu, pmem_io]
    del cache[conv_cpu, pmem_io]
    assert len(cache) == 1


def test_missing_key_raises(conv_cpu, dram_io):
    cache = CPUKernelCache("unused.pkl")
    with pytest.raises(MissingKeyError):
        cache[conv_cpu, dram_io]
    # Still usable where a KeyError is expected
    with pytest.raises(KeyError):
        cache[conv_cpu, dram_io]


def test_rejects_wrong_signature_variant(conv_gpu, dram_io):
    cache = CPUKernelCache("unused.pkl")
    with pytest.raises(TypeError):
        cache[conv_gpu, dram_io] = 1.0
    with pytest.raises(TypeError):
        cache.lookup(conv_gpu)


def test_cpu_rejects_non_cost_results(conv_cpu, dram_io):
    cache = CPUKernelCache("unused.pkl")
    with pytest.raises(TypeError):
        cache[conv_cpu, dram_io] = [AlgorithmCandidate(1, 0.5)]
    with pytest.raises(TypeError):
        cache[conv_cpu, dram_io] = True


def test_unhashable_io_config(conv_cpu):
    cache = CPUKernelCache("unused.pkl")
    with pytest.raises(TypeError):
        cache[conv_cpu, ["dram"]] = 1.0


def test_gpu_result_variants(conv_gpu, dram_io, pmem_io):
    cache = GPUKernelCache("unused.pkl")
    candidates = [
        AlgorithmCandidate("implicit_gemm", 2.0, 0),
        AlgorithmCandidate("winograd", 0.5, 1 << 20),
        AlgorithmCandidate("fft", 0.5, 1 << 10),
    ]
    cache[conv_gpu, dram_io] = candidates
    cache[conv_gpu, pmem_io] = 4.25

    assert cache.can_select_algorithm((conv_gpu, dram_io))
    assert not cache.can_select_algorithm((conv_gpu, pmem_io))

    assert cache[conv_gpu, dram_io] == AlgorithmCandidates(tuple(candidates))
    assert cache[conv_gpu, pmem_io] == MeasuredCost(4.25)
    assert cache.best_algorithm((conv_gpu, dram_io)).algo == "fft"

    with pytest.raises(ValueError):
        cache.best_algorithm((conv_gpu, pmem_io))


def test_gpu_overwrite_switches_variant(conv_gpu, dram_io):
    cache = GPUKernelCache("unused.pkl")
    cache[conv_gpu, dram_io] = [AlgorithmCandidate(0, 1.0)]
    cache[conv_gpu, dram_io] = 1.0
    assert not cache.can_select_algorithm((conv_gpu, dram_io))


def test_can_select_algorithm_missing_key(conv_gpu, dram_io):
    cache = GPUKernelCache("unused.pkl")
    with pytest.raises(MissingKeyError):
        cache.can_select_algorithm((conv_gpu, dram_io))


def test_gpu_rejects_empty_candidate_list(conv_gpu, dram_io):
    cache = GPUKernelCache("unused.pkl")
    with pytest.raises(ValueError):
        cache[conv_gpu, dram_io] = []
    with pytest.raises(TypeError):
        cache[conv_gpu, dram_io] = [1.0, 2.0]
    assert len(cache) == 0


def test_snapshot_is_detached(conv_cpu, dram_io, pmem_io):
    cache = CPUKernelCache("some/dir/cpu.pkl")
    cache[conv_cpu, dram_io] = 1.0
    payload = cache.snapshot()

    cache[conv_cpu, pmem_io] = 2.0
    assert payload["kind"] == "cpu"
    assert payload["file"] == "some/dir/cpu.pkl"
    assert len(payload["entries"]) == 1


def test_from_snapshot_roundtrip(conv_cpu, dram_io):
    cache = CPUKernelCache("a.pkl")
    cache[conv_cpu, dram_io] = 1.0
    restored = CPUKernelCache.from_snapshot(cache.snapshot(), file="b.pkl")
    assert restored.file == "b.pkl"
    assert restored[conv_cpu, dram_io] == 1.0


def test_signature_key_with_other_io_types(conv_cpu):
    cache = CPUKernelCache("unused.pkl")
    cache[conv_cpu, ("dram", "dram", "pmem")] = 1.0
    assert cache.lookup((conv_cpu, ("dram", "dram", "pmem"))) == 1.0
    assert cache.lookup((conv_cpu, ("dram", "pmem", "dram"))) is None


def test_types_with_same_shapes_are_distinct_keys(dram_io):
    cache = CPUKernelCache("unused.pkl")
    fp32 = CPUKernelSignature("Relu", [(4,)], [(4,)], [DType.FP32], [DType.FP32])
    fp16 = CPUKernelSignature("Relu", [(4,)], [(4,)], [DType.FP16], [DType.FP16])
    cache[fp32, dram_io] = 1.0
    assert cache.lookup((fp16, dram_io)) is None


def test_unknown_layouts_do_not_share_results(dram_io):
    def conv(layout):
        return CPUKernelSignature(
            "Convolution",
            [(8, 3, 32, 32)],
            [(8, 16, 30, 30)],
            [DType.FP32],
            [DType.FP32],
            is_hardware_optimized=True,
            input_layout_formats=[layout],
        )

    cache = CPUKernelCache("unused.pkl")
    cache[conv("mkldnn:OIhw4i16o4i"), dram_io] = 1.0
    assert cache.lookup((conv("mkldnn:gOIhw8i16o2i"), dram_io)) is None
    assert cache.lookup((conv("mkldnn:OIhw4i16o4i"), dram_io)) == 1.0

    cache[conv(117), dram_io] = 2.0
    assert cache.lookup((conv(118), dram_io)) is None


def test_base_cache_is_abstract():
    with pytest.raises(TypeError):
        KernelCache("unused.pkl")
