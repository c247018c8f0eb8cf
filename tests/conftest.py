"""Shared fixtures for GPU Sizer tests."""

import pytest

from gpu_sizer.types import DeviceProfile, WorkloadRequirement


@pytest.fixture
def device_a() -> DeviceProfile:
    """24 GB, 300 tokens/s, no NVLink."""
    return DeviceProfile(id="A", memory_gb=24, throughput=300)


@pytest.fixture
def device_b() -> DeviceProfile:
    """48 GB, 600 tokens/s, no NVLink."""
    return DeviceProfile(id="B", memory_gb=48, throughput=600)


@pytest.fixture
def device_c() -> DeviceProfile:
    """24 GB, 300 tokens/s, NVLink up to 4."""
    return DeviceProfile(id="C", memory_gb=24, throughput=300, group_capable=True, max_group_size=4)


@pytest.fixture
def device_c8() -> DeviceProfile:
    """24 GB, 300 tokens/s, NVLink up to 8."""
    return DeviceProfile(id="C", memory_gb=24, throughput=300, group_capable=True, max_group_size=8)


@pytest.fixture
def requirement_40_500() -> WorkloadRequirement:
    return WorkloadRequirement(required_memory_gb=40, required_throughput=500)


@pytest.fixture
def raw_gpu_rows():
    """Catalog rows as served by the /gpus endpoint."""
    return [
        {"GPU Type": "L4", "VRAM (GB)": 24, "TFLOPs (FP16)": 121, "Tokens/s": 300, "NVLink": False},
        {"GPU Type": "A100-80GB", "VRAM (GB)": 80, "TFLOPs (FP16)": 312, "Tokens/s": 1400,
         "NVLink": True, "Max NVLink GPUs": 8},
        {"GPU Type": "H100-80GB", "VRAM (GB)": 80, "TFLOPs (FP16)": 989, "Tokens/s": 3000,
         "NVLink": True, "Max NVLink GPUs": 8},
        {"GPU Type": "L40S", "VRAM (GB)": "48", "TFLOPs (FP16)": 362, "Tokens/s": "900"},
    ]
