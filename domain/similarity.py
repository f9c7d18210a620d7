import numpy as np

from domain.analysis_result import clamp_similarity
from domain.config import UNDETECTED_SIMILARITY_RANGE, ANALYSIS_FAILURE_SIMILARITY_RANGE

IN_RANGE_FLOOR = 70.0
IN_RANGE_SPAN = 30.0


class SimilarityScorer:
    def __init__(self, rng=None):
        """
        Transformă o frecvență dominantă într-un scor 0-100 față de banda unei tobe.
        :param rng: numpy.random.Generator; testele injectează unul cu sămânță fixă
        """
        self.rng = rng if rng is not None else np.random.default_rng()

    def score(self, dominant_frequency_hz, profile):
        """
        - 0 Hz (nedetectat): scor aleator în [20, 50)
        - în bandă: 70 la margini, 100 exact pe peak. Distanța față de peak se normalizează cu
          semibanda de aceeași parte (peak - low sau high - peak), nu cu (high - low) / 2,
          ca marginile să dea 70 și la profilele cu peak necentrat (kick la 80 Hz: 85, nu 80)
        - în afara benzii: scade liniar de la 70 spre 0, atins la o distanță egală cu lățimea benzii
        """
        if dominant_frequency_hz == 0:
            low, high = UNDETECTED_SIMILARITY_RANGE
            return clamp_similarity(low + self.rng.random() * (high - low))

        if profile.contains(dominant_frequency_hz):
            # Distanța se normalizează față de marginea aflată de aceeași parte a peak-ului
            if dominant_frequency_hz <= profile.peak:
                half_band = profile.peak - profile.low
            else:
                half_band = profile.high - profile.peak
            closeness = 1 - abs(dominant_frequency_hz - profile.peak) / half_band
            closeness = min(1.0, max(0.0, closeness))
            return clamp_similarity(IN_RANGE_FLOOR + closeness * IN_RANGE_SPAN)

        if dominant_frequency_hz < profile.low:
            distance = profile.low - dominant_frequency_hz
        else:
            distance = dominant_frequency_hz - profile.high
        normalized = distance / profile.width
        return clamp_similarity(max(0.0, IN_RANGE_FLOOR - normalized * IN_RANGE_FLOOR))

    def fallback_similarity(self):
        """Scor întreg plauzibil, folosit când analiza aruncă o excepție."""
        low, high = ANALYSIS_FAILURE_SIMILARITY_RANGE
        return int(self.rng.integers(low, high))
