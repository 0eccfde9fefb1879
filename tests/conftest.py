import pytest
from kernel_cache.ir.dtypes import DType
from kernel_cache.ir.io_config import IOConfig, TensorLocation
from kernel_cache.ir.signature import CPUKernelSignature, GPUKernelSignature


class FakeNode:
    """Stands in for an operator-graph node adapter."""

    def __init__(
        self,
        description,
        inputs,
        outputs,
        hardware_optimized=False,
        layouts=None,
    ):
        self._description = description
        self._inputs = list(inputs)
        self._outputs = list(outputs)
        self._hardware_optimized = hardware_optimized
        self._layouts = list(layouts or [])
        self.layout_calls = 0

    def description(self):
        return self._description

    def input_port_count(self):
        return len(self._inputs)

    def output_port_count(self):
        return len(self._outputs)

    def input_shape(self, port):
        return self._inputs[port][0]

    def output_shape(self, port):
        return self._outputs[port][0]

    def input_element_type(self, port):
        return self._inputs[port][1]

    def output_element_type(self, port):
        return self._outputs[port][1]

    def is_hardware_optimized(self):
        return self._hardware_optimized

    def layout_format(self, port):
        self.layout_calls += 1
        return self._layouts[port]


@pytest.fixture
def conv_cpu():
    return CPUKernelSignature(
        "Convolution",
        [(8, 3, 32, 32), (16, 3, 3, 3)],
        [(8, 16, 30, 30)],
        [DType.FP32, DType.FP32],
        [DType.FP32],
        is_hardware_optimized=True,
        input_layout_formats=["mkldnn:nChw16c", "mkldnn:OIhw16i16o"],
    )


@pytest.fixture
def conv_gpu():
    return GPUKernelSignature(
        "Convolution",
        [(8, 3, 32, 32), (16, 3, 3, 3)],
        [(8, 16, 30, 30)],
        [DType.FP16, DType.FP16],
        [DType.FP16],
    )


@pytest.fixture
def dram_io():
    return IOConfig.uniform(2, 1, TensorLocation.DRAM)


@pytest.fixture
def pmem_io():
    return IOConfig((TensorLocation.PMEM, TensorLocation.DRAM), (TensorLocation.DRAM,))


@pytest.fixture
def cache_file(tmp_path):
    return str(tmp_path / "caches" / "cpu_kernel_cache.pkl")
