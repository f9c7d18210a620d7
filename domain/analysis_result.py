from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisResult:
    """
    Rezultatul unei analize complete.

    :param similarity: scorul de similaritate, între 0 și 100
    :param dominant_frequency_hz: frecvența dominantă detectată (0 = nedetectată)
    :param target_frequency_hz: frecvența ideală a tobei țintă
    :param confidence: 0.8 pentru o analiză reală, 0.5 pentru rezultatele de rezervă
    """
    similarity: float
    dominant_frequency_hz: float
    target_frequency_hz: float
    confidence: float


def clamp_similarity(value):
    return min(100.0, max(0.0, float(value)))


def create_result(similarity, dominant_frequency_hz, profile, confidence):
    return AnalysisResult(
        similarity=clamp_similarity(similarity),
        dominant_frequency_hz=float(dominant_frequency_hz),
        target_frequency_hz=float(profile.peak),
        confidence=confidence,
    )
