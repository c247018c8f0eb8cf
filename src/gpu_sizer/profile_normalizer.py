"""Profile normalizer for heterogeneous catalog rows.

Catalog rows for the same concept arrive under several historical field
spellings (``"VRAM (GB)"``, ``vram_gb``, ``memory_gb`` ...). This module maps
them once, at the system boundary, into ``DeviceProfile`` and ``ModelProfile``
so nothing downstream has to guess field names again.
"""

import json
import math
from typing import Any, Dict, List, Mapping, Optional

from .types import DeviceProfile, ModelProfile


class ProfileNormalizer:
    """Normalize raw device and model rows to canonical profiles.

    Every field has an ordered list of source keys; the first key holding a
    usable value wins. Capacity fields fall back to ``0`` and display fields
    to ``None``. Normalization never raises.
    """

    DEVICE_ID_KEYS = ['GPU Type', 'gpu_type', 'name', 'id']
    DEVICE_MEMORY_KEYS = ['VRAM (GB)', 'vram_gb', 'memory_gb', 'Memory_size']
    DEVICE_THROUGHPUT_KEYS = ['Tokens/s', 'tokens_per_second', 'tokensPerSecond']
    DEVICE_GROUP_KEYS = ['NVLink', 'nvlink', 'group_capable']
    DEVICE_MAX_GROUP_KEYS = ['Max NVLink GPUs', 'max_nvlink_gpus', 'nvlink_max', 'max_group_size']
    DEVICE_TFLOPS_KEYS = ['TFLOPs (FP16)', 'tflops_fp16']
    DEVICE_MANUFACTURER_KEYS = ['manufacturer', 'Manufacturer', 'vendor']

    MODEL_ID_KEYS = ['model_id', 'Model', 'id', 'name']
    MODEL_MEMORY_KEYS = [
        'minimal_gpu_memory_gb',
        'base_vram_gb',
        'min_vram_gb',
        'VRAM Required (GB)',
    ]
    MODEL_LATENCY_S_KEYS = [
        'base_latency_s',
        'Base Latency (s)',
        'base_latency',
        'baseLatency',
        'first_token_latency_s',
    ]
    MODEL_LATENCY_MS_KEYS = [
        'first_token_latency_ms',
        'base_latency_ms',
        'first_time_to_token_latency_ms',
    ]
    MODEL_KV_CACHE_KEYS = ['kv_cache_fp16_gb', 'kv_cache_bf16_gb', 'kv_cache_fp32_gb']
    MODEL_SIZE_KEYS = ['Size', 'size']

    TRUE_STRINGS = {'true', 'yes', 'y', '1', 'on'}

    @staticmethod
    def to_number(value: Any) -> Optional[float]:
        """Coerce a number or numeric string; anything else is ``None``."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                return None
        if not isinstance(value, (int, float)):
            return None
        value = float(value)
        return value if math.isfinite(value) else None

    @staticmethod
    def to_flag(value: Any) -> Optional[bool]:
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ProfileNormalizer.TRUE_STRINGS
        number = ProfileNormalizer.to_number(value)
        if number is None:
            return None
        return number != 0

    @staticmethod
    def first_number(raw: Mapping[str, Any], keys: List[str]) -> Optional[float]:
        for key in keys:
            number = ProfileNormalizer.to_number(raw.get(key))
            if number is not None:
                return number
        return None

    @staticmethod
    def first_flag(raw: Mapping[str, Any], keys: List[str]) -> Optional[bool]:
        for key in keys:
            flag = ProfileNormalizer.to_flag(raw.get(key))
            if flag is not None:
                return flag
        return None

    @staticmethod
    def first_text(raw: Mapping[str, Any], keys: List[str]) -> Optional[str]:
        for key in keys:
            value = raw.get(key)
            if value is None or isinstance(value, bool):
                continue
            text = str(value).strip()
            if text:
                return text
        return None

    @staticmethod
    def parse_config(raw_config: Any) -> Optional[Dict[str, Any]]:
        """Parse a ``config_json`` value that may be a dict or a JSON string."""
        if raw_config is None:
            return None
        if isinstance(raw_config, Mapping):
            return dict(raw_config)
        if isinstance(raw_config, str):
            try:
                parsed = json.loads(raw_config)
            except ValueError:
                return None
            return parsed if isinstance(parsed, dict) else None
        return None

    @staticmethod
    def normalize_device(raw: Mapping[str, Any], default_max_group_size: int = 0) -> DeviceProfile:
        """Normalize a raw device row.

        Args:
            raw: Catalog row with any of the known field spellings.
            default_max_group_size: Group-size cap used when the row has none.

        Returns:
            DeviceProfile with capacity fields defaulted to zero.
        """
        n = ProfileNormalizer
        if not isinstance(raw, Mapping):
            raw = {}
        memory_gb = n.first_number(raw, n.DEVICE_MEMORY_KEYS)
        throughput = n.first_number(raw, n.DEVICE_THROUGHPUT_KEYS)
        max_group = n.first_number(raw, n.DEVICE_MAX_GROUP_KEYS)
        if max_group is None:
            max_group = default_max_group_size

        return DeviceProfile(
            id=n.first_text(raw, n.DEVICE_ID_KEYS) or '',
            memory_gb=max(memory_gb or 0.0, 0.0),
            throughput=max(throughput or 0.0, 0.0),
            group_capable=bool(n.first_flag(raw, n.DEVICE_GROUP_KEYS)),
            max_group_size=max(int(max_group), 0),
            tflops_fp16=n.first_number(raw, n.DEVICE_TFLOPS_KEYS),
            manufacturer=n.first_text(raw, n.DEVICE_MANUFACTURER_KEYS),
        )

    @staticmethod
    def normalize_model(raw: Mapping[str, Any]) -> ModelProfile:
        """Normalize a raw model row."""
        n = ProfileNormalizer
        if not isinstance(raw, Mapping):
            raw = {}
        min_memory = n.first_number(raw, n.MODEL_MEMORY_KEYS)

        latency_s = n.first_number(raw, n.MODEL_LATENCY_S_KEYS)
        if latency_s is None:
            latency_ms = n.first_number(raw, n.MODEL_LATENCY_MS_KEYS)
            if latency_ms is not None:
                latency_s = latency_ms / 1000.0

        return ModelProfile(
            id=n.first_text(raw, n.MODEL_ID_KEYS),
            min_memory_gb=max(min_memory or 0.0, 0.0),
            base_latency_s=latency_s,
            kv_cache_gb=n.first_number(raw, n.MODEL_KV_CACHE_KEYS),
            size=n.first_text(raw, n.MODEL_SIZE_KEYS),
            missing_kv_cache=bool(n.to_flag(raw.get('missing_kv_cache'))),
            config=n.parse_config(raw.get('config_json')),
        )


def normalize_device(raw: Mapping[str, Any], default_max_group_size: int = 0) -> DeviceProfile:
    """Module-level shortcut for ``ProfileNormalizer.normalize_device``."""
    return ProfileNormalizer.normalize_device(raw, default_max_group_size)


def normalize_model(raw: Mapping[str, Any]) -> ModelProfile:
    """Module-level shortcut for ``ProfileNormalizer.normalize_model``."""
    return ProfileNormalizer.normalize_model(raw)


def normalize_devices(rows, default_max_group_size: int = 0) -> List[DeviceProfile]:
    return [normalize_device(row, default_max_group_size) for row in rows]
