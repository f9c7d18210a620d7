import logging

import numpy as np
import librosa

from domain.config import SAMPLE_RATE
from domain.errors import AnalysisFailureError
from repo.audio_repo import AudioRepository

logger = logging.getLogger(__name__)

MIN_SAMPLE_COUNT = 512
MAX_SAMPLE_COUNT = 4096
BYTES_PER_SAMPLE = 10
DEFAULT_FILE_SIZE = 1024


class SampleSource:
    """
    Produce eșantioanele unui clip înregistrat, pentru analiza spectrală.
    """

    def __init__(self, sample_rate=SAMPLE_RATE):
        self.sample_rate = sample_rate

    def load_samples(self, uri):
        raise NotImplementedError


class SyntheticSampleSource(SampleSource):
    def __init__(self, sample_rate=SAMPLE_RATE, rng=None):
        """
        Nu decodează clipul: generează un semnal percutant sintetic
        a cărui lungime depinde de mărimea fișierului.
        :param rng: numpy.random.Generator pentru frecvența de bază și zgomot
        """
        super().__init__(sample_rate)
        self.rng = rng if rng is not None else np.random.default_rng()

    def load_samples(self, uri):
        info = AudioRepository.file_info(uri)
        if not info.exists:
            logger.error(f"Fișierul audio nu există: {uri}")
            return np.array([], dtype=np.float64)

        file_size = info.size or DEFAULT_FILE_SIZE
        sample_count = min(MAX_SAMPLE_COUNT, max(MIN_SAMPLE_COUNT, file_size // BYTES_PER_SAMPLE))
        base_freq = 100 + self.rng.random() * 400

        # Amestec de armonici plus zgomot, pentru a simula o lovitură
        t = np.arange(sample_count) / self.sample_rate
        noise = (self.rng.random(sample_count) - 0.5) * 0.3
        return (
            np.sin(2 * np.pi * base_freq * t) * 0.5
            + np.sin(2 * np.pi * (base_freq * 2) * t) * 0.3
            + np.sin(2 * np.pi * (base_freq * 3) * t) * 0.2
            + noise
        )


class DecodingSampleSource(SampleSource):
    """
    Decodează clipul în PCM mono la rata de eșantionare configurată.
    """

    def load_samples(self, uri):
        if not AudioRepository.file_info(uri).exists:
            logger.error(f"Fișierul audio nu există: {uri}")
            return np.array([], dtype=np.float64)
        try:
            y, _ = librosa.load(uri, sr=self.sample_rate, mono=True)
        except Exception as e:
            raise AnalysisFailureError(f"Nu s-a putut decoda {uri}: {e}") from e
        return y.astype(np.float64)


def build_sample_source(config, rng=None):
    if config.decode_audio:
        return DecodingSampleSource(config.sample_rate)
    return SyntheticSampleSource(config.sample_rate, rng=rng)
