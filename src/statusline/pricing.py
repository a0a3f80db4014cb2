"""Cost and context-window estimates from reported token usage.

Output tokens are not reported to the status line, so they are estimated
from input tokens with a per-tier ratio.
"""

import logging
import math
from dataclasses import dataclass

from statusline.models import UsageEstimate, UsageSnapshot

logger = logging.getLogger("statusline.pricing")


@dataclass
class TierPricing:
    input_per_million: float
    output_per_million: float
    cache_write_markup: float = 0.25
    cache_read_discount: float = 0.9


PRICING: dict[str, TierPricing] = {
    "haiku": TierPricing(0.8, 4),
    "sonnet": TierPricing(3, 15),
    "opus": TierPricing(15, 75),
}
DEFAULT_PRICING_TIER = "sonnet"

OUTPUT_RATIOS: dict[str, float] = {"haiku": 0.3, "sonnet": 0.4, "opus": 0.5}
DEFAULT_OUTPUT_RATIO = 0.4


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _counter(usage: dict | None, key: str):
    if not usage:
        return 0
    value = usage.get(key)
    if value is None:
        return 0
    if not _is_number(value):
        raise TypeError(f"{key} is not a number: {value!r}")
    return value


def total_tokens(usage: dict | None) -> int:
    """Input + cache creation + cache read tokens; missing counters are 0."""
    return (
        _counter(usage, "input_tokens")
        + _counter(usage, "cache_creation_input_tokens")
        + _counter(usage, "cache_read_input_tokens")
    )


def context_percent(context_window: dict | None) -> int:
    """Share of the context window in use, 0-100.

    A percentage reported by the host wins over the computed one.
    """
    context_window = context_window or {}
    native = context_window.get("used_percentage")
    if _is_number(native) and (isinstance(native, int) or math.isfinite(native)):
        return _clamp_percent(native)

    size = context_window.get("context_window_size")
    if not _is_number(size) or not size > 0:
        return 0
    tokens = total_tokens(context_window.get("current_usage"))
    return _clamp_percent(tokens / size * 100)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _clamp_percent(value: float) -> int:
    if isinstance(value, float) and math.isnan(value):
        return 0
    return round_half_up(min(100.0, max(0.0, value)))


def model_name(model: dict | None) -> str:
    model = model or {}
    for key in ("display_name", "id"):
        value = model.get(key)
        if isinstance(value, str) and value:
            return value
    return "Unknown"


def detect_output_ratio(name: str) -> float:
    normalized = name.lower()
    for tier, ratio in OUTPUT_RATIOS.items():
        if tier in normalized:
            return ratio
    return DEFAULT_OUTPUT_RATIO


def estimate_output_tokens(input_tokens: int, name: str) -> int:
    if input_tokens == 0:
        return 0
    return round_half_up(input_tokens * detect_output_ratio(name))


def pricing_for_model(name: str) -> TierPricing:
    normalized = name.lower()
    if "haiku" in normalized:
        return PRICING["haiku"]
    if "opus" in normalized:
        return PRICING["opus"]
    return PRICING[DEFAULT_PRICING_TIER]


def calculate_cost(name: str, input_tokens: int,
                   cache_creation_tokens: int, cache_read_tokens: int) -> float:
    """Estimated USD cost of the current context."""
    pricing = pricing_for_model(name)
    output_tokens = estimate_output_tokens(input_tokens, name)

    input_cost = input_tokens / 1e6 * pricing.input_per_million
    output_cost = output_tokens / 1e6 * pricing.output_per_million
    cache_write_cost = (
        cache_creation_tokens / 1e6 * pricing.input_per_million
        * (1 + pricing.cache_write_markup)
    )
    cache_read_cost = (
        cache_read_tokens / 1e6 * pricing.input_per_million
        * (1 - pricing.cache_read_discount)
    )
    return input_cost + output_cost + cache_write_cost + cache_read_cost


def estimate_usage(snapshot: UsageSnapshot) -> UsageEstimate:
    """Compute every estimate; a malformed field zeroes only its own figure."""
    estimate = UsageEstimate(model_name=model_name(snapshot.model))

    try:
        estimate.total_tokens = total_tokens(snapshot.current_usage)
    except (TypeError, ValueError, OverflowError) as e:
        logger.debug("Unusable token counters: %s", e)

    try:
        estimate.context_percent = context_percent(snapshot.context_window)
    except (TypeError, ValueError, OverflowError) as e:
        logger.debug("Unusable context window data: %s", e)

    usage = snapshot.current_usage
    if usage is not None:
        try:
            estimate.cost = calculate_cost(
                estimate.model_name,
                _counter(usage, "input_tokens"),
                _counter(usage, "cache_creation_input_tokens"),
                _counter(usage, "cache_read_input_tokens"),
            )
            estimate.has_usage = True
        except (TypeError, ValueError, OverflowError) as e:
            logger.debug("Cost estimate failed: %s", e)
            estimate.cost = 0.0
    return estimate
