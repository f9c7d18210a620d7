from dataclasses import dataclass

from domain.errors import UnknownDrumError


@dataclass(frozen=True)
class DrumProfile:
    """
    Banda de frecvențe caracteristică unei tobe.

    :param id: identificatorul tobei (ex: 'kick', 'hiHat')
    :param low: limita inferioară a benzii (Hz)
    :param high: limita superioară a benzii (Hz)
    :param peak: frecvența ideală din interiorul benzii (Hz)
    :param label: numele afișat în interfață
    :param color: culoarea zonei tobei în interfață
    """
    id: str
    low: float
    high: float
    peak: float
    label: str = ""
    color: str = "#ffffff"

    def __post_init__(self):
        if not self.low < self.peak < self.high:
            raise ValueError(
                f"Profil invalid pentru {self.id}: trebuie low < peak < high "
                f"({self.low}, {self.peak}, {self.high})"
            )

    @property
    def width(self):
        return self.high - self.low

    def contains(self, frequency_hz):
        return self.low <= frequency_hz <= self.high


# Benzile de frecvență pentru fiecare tobă (Hz)
DRUM_PROFILES = {
    "kick": DrumProfile("kick", 40, 100, 60, "Kick", "#ef4444"),
    "snare": DrumProfile("snare", 150, 300, 200, "Snare", "#f97316"),
    "hiTom": DrumProfile("hiTom", 250, 400, 300, "Hi Tom", "#eab308"),
    "midTom": DrumProfile("midTom", 150, 280, 200, "Mid Tom", "#22c55e"),
    "floorTom": DrumProfile("floorTom", 80, 150, 100, "Floor Tom", "#06b6d4"),
    "hiHat": DrumProfile("hiHat", 6000, 12000, 8000, "Hi-Hat", "#8b5cf6"),
    "crash": DrumProfile("crash", 4000, 10000, 6000, "Crash", "#ec4899"),
    "ride": DrumProfile("ride", 3000, 8000, 5000, "Ride", "#14b8a6"),
}

DRUM_IDS = tuple(DRUM_PROFILES)

# Zonele atingibile peste setul de tobe, în procente din suprafața desenului: (x, y, lățime, înălțime).
# Ordinea contează: tobele desenate ultimele sunt deasupra.
DRUM_HOTSPOTS = {
    "hiHat": (2, 43, 20, 22),
    "crash": (15, 12, 23, 20),
    "ride": (59, 7, 25, 25),
    "hiTom": (33, 26, 14, 15),
    "midTom": (50, 25, 16, 18),
    "snare": (25, 52, 18, 23),
    "floorTom": (58, 53, 18, 23),
    "kick": (43, 50, 10, 40),
}


def get_profile(drum_id):
    try:
        return DRUM_PROFILES[drum_id]
    except KeyError:
        raise UnknownDrumError(drum_id) from None
