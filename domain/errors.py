class DrumMatchError(Exception):
    """Eroare de bază pentru jocul de potrivire a tobelor."""


class PermissionDeniedError(DrumMatchError):
    """Înregistrarea nu poate porni (permisiune sau dispozitiv indisponibil)."""


class RecordingUnavailableError(DrumMatchError):
    """Oprirea înregistrării nu a produs niciun clip utilizabil."""


class AnalysisFailureError(DrumMatchError):
    """Decodarea sau analiza spectrală a eșuat."""


class UnknownDrumError(DrumMatchError, KeyError):
    def __init__(self, drum_id):
        super().__init__(drum_id)
        self.drum_id = drum_id

    def __str__(self):
        return f"Tobă necunoscută: {self.drum_id!r}"
