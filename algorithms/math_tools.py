class MathTools:
    """Provides essential mathematical utilities for workout calculations."""

    BRZYCKI_NUMERATOR: float = 36.0
    BRZYCKI_DENOMINATOR: float = 37.0
    BRZYCKI_MAX_REPS: int = 12

    @classmethod
    def brzycki_1rm(cls, weight: float, reps: int) -> float:
        """Return the estimated one-rep max using the Brzycki formula.

        The formula is only applied for 2 to 12 reps. A single rep is its own
        max and any rep count outside 1..12 falls back to the raw weight.
        """
        if reps <= 0 or reps > cls.BRZYCKI_MAX_REPS:
            return weight
        if reps == 1:
            return weight
        return weight * (cls.BRZYCKI_NUMERATOR / (cls.BRZYCKI_DENOMINATOR - reps))

    @staticmethod
    def format_duration(seconds: float) -> str:
        """Return ``"1h 5m"`` style text, or ``"45 min"`` below one hour."""
        total = int(seconds)
        hours = total // 3600
        minutes = (total % 3600) // 60
        if hours > 0:
            return f"{hours}h {minutes}m"
        return f"{minutes} min"

    @staticmethod
    def format_volume(volume: float) -> str:
        """Abbreviate volumes of 1000 and above as ``"1.3k"``."""
        if volume >= 1000:
            return f"{volume / 1000:.1f}k"
        return f"{volume:.0f}"
