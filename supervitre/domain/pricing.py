"""
Price estimate shown on the booking form.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class PriceRange:
    """
    A price bracket in whole dollars.

    Invariant: minimum <= maximum (swapped on construction if needed).
    """
    minimum: int
    maximum: int

    def __post_init__(self):
        if self.minimum > self.maximum:
            low, high = self.maximum, self.minimum
            object.__setattr__(self, "minimum", low)
            object.__setattr__(self, "maximum", high)

    def __add__(self, other: "PriceRange") -> "PriceRange":
        return PriceRange(self.minimum + other.minimum, self.maximum + other.maximum)

    def scaled(self, factor: int) -> "PriceRange":
        return PriceRange(self.minimum * factor, self.maximum * factor)

    def __str__(self) -> str:
        return f"${self.minimum} - ${self.maximum}"


@dataclass(frozen=True)
class PricingRates:
    """Per-window and per-floor rates."""
    small_window_exterior: PriceRange = PriceRange(5, 8)
    small_window_interior_exterior: PriceRange = PriceRange(8, 12)
    large_window_exterior: PriceRange = PriceRange(8, 12)
    large_window_interior_exterior: PriceRange = PriceRange(16, 20)
    extra_floor: PriceRange = PriceRange(20, 30)


class PriceEstimator:
    """
    Estimates the price bracket of a cleaning job.

    The low end assumes every window is small, the high end that every
    window is large. Each floor above the first adds the extra floor rate.
    """

    MAX_STORIES = 4  # "4+" on the form

    def __init__(self, rates: Optional[PricingRates] = None):
        self.rates = rates or PricingRates()

    def estimate(
        self,
        windows: Union[int, str],
        stories: Union[int, str],
        include_interior: bool = True,
    ) -> Optional[PriceRange]:
        """
        Return the estimated price range, or None if the input can't be priced.
        """
        window_count = _to_positive_int(windows)
        story_count = self._parse_stories(stories)
        if window_count is None or story_count is None:
            return None

        if include_interior:
            low_rate = self.rates.small_window_interior_exterior.minimum
            high_rate = self.rates.large_window_interior_exterior.maximum
        else:
            low_rate = self.rates.small_window_exterior.minimum
            high_rate = self.rates.large_window_exterior.maximum

        total = PriceRange(window_count * low_rate, window_count * high_rate)

        if story_count > 1:
            total = total + self.rates.extra_floor.scaled(story_count - 1)

        return total

    def _parse_stories(self, stories: Union[int, str]) -> Optional[int]:
        if isinstance(stories, str) and stories.strip().endswith("+"):
            return self.MAX_STORIES
        return _to_positive_int(stories)


def _to_positive_int(value: Union[int, str]) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number > 0 else None
