class WeightConverter:
    """Utility for converting between the stored pound value and a display unit."""

    LB_TO_KG = 0.453592
    KG_TO_LB = 2.20462

    @staticmethod
    def factors(unit: str) -> tuple[float, float]:
        """Return ``(from_lbs, to_lbs)`` factors for ``unit``."""
        if unit == "lbs":
            return 1.0, 1.0
        if unit == "kg":
            return WeightConverter.LB_TO_KG, WeightConverter.KG_TO_LB
        raise ValueError(f"unknown weight unit: {unit}")

    @staticmethod
    def to_lbs(value: float, unit: str) -> float:
        return value * WeightConverter.factors(unit)[1]

    @staticmethod
    def from_lbs(value: float, unit: str) -> float:
        return value * WeightConverter.factors(unit)[0]

    @staticmethod
    def format_weight(weight_lbs: float, unit: str) -> str:
        """Render ``weight_lbs`` in ``unit`` with one decimal unless integral."""
        return WeightConverter.format_value(WeightConverter.from_lbs(weight_lbs, unit))

    @staticmethod
    def format_value(value: float) -> str:
        if value == int(value):
            return f"{value:.0f}"
        return f"{value:.1f}"
