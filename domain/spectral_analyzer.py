import logging
import math
from typing import NamedTuple

import numpy as np

from domain.config import SAMPLE_RATE, MIN_FFT_SIZE, MIN_AUDIBLE_HZ, MAX_AUDIBLE_HZ

logger = logging.getLogger(__name__)


class SpectralBin(NamedTuple):
    frequency_hz: float
    magnitude: float


def next_power_of_two(n, minimum=MIN_FFT_SIZE):
    """
    Cea mai mică putere a lui 2 >= n, dar nu mai mică decât `minimum`.
    """
    if n <= minimum:
        return minimum
    return 2 ** math.ceil(math.log2(n))


class SpectralAnalyzer:
    def __init__(self, sample_rate=SAMPLE_RATE, min_fft_size=MIN_FFT_SIZE,
                 min_hz=MIN_AUDIBLE_HZ, max_hz=MAX_AUDIBLE_HZ):
        """
        Calculează spectrul unui clip și alege frecvența dominantă din banda audibilă.

        :param sample_rate: rata de eșantionare a clipului (Hz)
        :param min_fft_size: lungimea minimă a transformatei (putere a lui 2)
        :param min_hz, max_hz: banda audibilă în care se caută frecvența dominantă
        """
        self.sample_rate = sample_rate
        self.min_fft_size = min_fft_size
        self.min_hz = min_hz
        self.max_hz = max_hz

    @classmethod
    def from_config(cls, config):
        return cls(config.sample_rate, config.min_fft_size, config.min_audible_hz, config.max_audible_hz)

    def analyze(self, samples):
        """
        Aplică padding cu zerouri până la o putere a lui 2, fereastra Hann și FFT.
        :param samples: secvența de eșantioane (amplitudini în [-1, 1])
        :return: lista de SpectralBin în ordinea crescătoare a frecvenței;
        listă goală pentru semnal gol sau dacă transformata eșuează
        """
        samples = np.asarray(samples, dtype=np.float64).ravel()
        if samples.size == 0:
            return []

        fft_size = next_power_of_two(samples.size, self.min_fft_size)
        padded = np.zeros(fft_size)
        padded[:samples.size] = samples

        try:
            with np.errstate(over="raise", invalid="raise", divide="raise"):
                if not np.all(np.isfinite(padded)):
                    raise FloatingPointError("semnalul conține valori nefinite")
                # np.hanning: 0.5 * (1 - cos(2*pi*i / (N - 1)))
                windowed = padded * np.hanning(fft_size)
                magnitudes = np.abs(np.fft.rfft(windowed))
        except (FloatingPointError, ValueError) as e:
            logger.error(f"Eroare la calculul FFT: {e}")
            return []

        # Păstrăm doar binurile 0 .. N/2 - 1
        half = fft_size // 2
        frequencies = np.arange(half) * self.sample_rate / fft_size
        return [SpectralBin(float(f), float(m)) for f, m in zip(frequencies, magnitudes[:half])]

    def dominant_frequency(self, bins):
        """
        Frecvența binului cu magnitudinea maximă din banda audibilă.
        La egalitate câștigă primul bin. Returnează 0 dacă nu există semnal în bandă.
        """
        dominant = 0.0
        max_magnitude = 0.0
        for frequency, magnitude in bins:
            if self.min_hz <= frequency <= self.max_hz and magnitude > max_magnitude:
                max_magnitude = magnitude
                dominant = frequency
        return dominant

    def find_dominant_frequency(self, samples):
        return self.dominant_frequency(self.analyze(samples))
