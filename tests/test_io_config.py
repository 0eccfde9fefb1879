import pytest
from kernel_cache.ir.io_config import IOConfig, TensorLocation


def test_io_config_value_semantics():
    a = IOConfig(["dram", "pmem"], ["dram"])
    b = IOConfig((TensorLocation.DRAM, TensorLocation.PMEM), (TensorLocation.DRAM,))
    assert a == b
    assert hash(a) == hash(b)
    assert a != IOConfig(["pmem", "dram"], ["dram"])


def test_uniform():
    io = IOConfig.uniform(3, 1, TensorLocation.DEVICE)
    assert io.inputs == (TensorLocation.DEVICE,) * 3
    assert repr(io) == "<IO (device,device,device) -> (device)>"


def test_rejects_unknown_location():
    with pytest.raises(ValueError):
        IOConfig(["disk"], [])
