"""KV cache sizing helpers for model configs."""

from typing import Any, Dict, Mapping, Optional

from .profile_normalizer import ProfileNormalizer

BYTES_PER_GIB = 1024 ** 3


def _config_number(config: Mapping[str, Any], fallbacks: Mapping[str, Any], key: str) -> Optional[float]:
    value = ProfileNormalizer.to_number(config.get(key))
    if value is None:
        value = ProfileNormalizer.to_number(fallbacks.get(key))
    return value


def estimate_kv_cache_gb(config: Optional[Mapping[str, Any]],
                         context_length: Optional[int],
                         fallbacks: Optional[Dict[str, Any]] = None,
                         bytes_per_element: float = 2) -> Optional[float]:
    """Estimate KV cache per session in GiB.

    Uses ``num_key_value_heads`` when present (GQA/MQA), otherwise the
    attention head count. ``head_dim`` falls back to
    ``hidden_size // num_attention_heads``.

    Args:
        config: Model config (HuggingFace ``config.json`` layout).
        context_length: Tokens held per session.
        fallbacks: Values from the model row used when the config lacks
            ``num_hidden_layers``, ``hidden_size`` or ``num_attention_heads``.
        bytes_per_element: 2 for fp16/bf16.

    Returns:
        GiB per session, or None when the config is missing a dimension.
    """
    config = config or {}
    fallbacks = fallbacks or {}

    layers = _config_number(config, fallbacks, 'num_hidden_layers')
    if not layers or not context_length:
        return None

    attention_heads = _config_number(config, fallbacks, 'num_attention_heads') or 0
    kv_heads = ProfileNormalizer.to_number(config.get('num_key_value_heads'))
    if kv_heads is None:
        kv_heads = attention_heads
    if not kv_heads:
        return None

    head_dim = ProfileNormalizer.to_number(config.get('head_dim'))
    if not head_dim:
        hidden_size = _config_number(config, fallbacks, 'hidden_size') or 0
        head_dim = hidden_size // attention_heads if attention_heads else 0
    if not head_dim:
        return None

    # K and V
    total_bytes = layers * context_length * kv_heads * head_dim * 2 * bytes_per_element
    return total_bytes / BYTES_PER_GIB
