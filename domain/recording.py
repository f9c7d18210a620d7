# /homedrummer/domain/recording.py

from dataclasses import dataclass


class Recording:
    def __init__(self, data, sample_rate):
        """
        Clasa Recording surprinde un clip audio decodat, mono.

        :param data: un vector de tip numpy array cu amplitudinile în [-1, 1]
        :param sample_rate: rata de eșantionare (Hz)
        """
        self.data = data
        self.sample_rate = sample_rate

    @property
    def duration_seconds(self):
        if not self.sample_rate:
            return 0.0
        return len(self.data) / self.sample_rate


@dataclass(frozen=True)
class RecordingHandle:
    """Rezultatul unei opriri reușite: calea clipului și durata lui în milisecunde."""
    uri: str
    duration_ms: int = 0
