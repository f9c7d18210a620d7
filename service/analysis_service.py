import logging

import numpy as np

from domain.analysis_result import create_result
from domain.config import (
    ANALYSIS_CONFIDENCE,
    FALLBACK_CONFIDENCE,
    NO_SIGNAL_CONFIDENCE,
    FAILED_RECORDING_SIMILARITY,
)
from domain.drum_profiles import get_profile
from domain.similarity import SimilarityScorer
from domain.spectral_analyzer import SpectralAnalyzer
from repo.sample_source import build_sample_source

logger = logging.getLogger(__name__)


class AnalysisService:
    def __init__(self, config, sample_source=None, analyzer=None, scorer=None):
        """
        Lanțul complet de analiză: eșantioane -> spectru -> frecvență dominantă -> scor.

        :param config: obiectul Config
        :param sample_source: sursa de eșantioane (implicit sintetică, sau decodare reală dacă
        config.decode_audio este True)
        :param analyzer: SpectralAnalyzer
        :param scorer: SimilarityScorer
        """
        self.config = config
        rng = np.random.default_rng(config.random_seed)
        self.sample_source = sample_source if sample_source is not None else build_sample_source(config, rng=rng)
        self.analyzer = analyzer if analyzer is not None else SpectralAnalyzer.from_config(config)
        self.scorer = scorer if scorer is not None else SimilarityScorer(rng=rng)

    def analyze_sound(self, uri, drum_id):
        """
        Analizează clipul și îl compară cu profilul tobei țintă.
        Nicio eroare de analiză nu se propagă: se întoarce un scor de rezervă plauzibil.
        :return: AnalysisResult cu încrederea 0.8 (analiză reală), 0.5 (rezervă) sau 0.0 când
        clipul nu are niciun eșantion (similaritate 0)
        """
        profile = get_profile(drum_id)
        try:
            samples = self.sample_source.load_samples(uri)
            if len(samples) == 0:
                logger.warning(f"Niciun eșantion pentru {uri}, scor minim.")
                return create_result(0, 0, profile, NO_SIGNAL_CONFIDENCE)

            bins = self.analyzer.analyze(samples)
            dominant = self.analyzer.dominant_frequency(bins)
            similarity = self.scorer.score(dominant, profile)
            logger.info(f"{drum_id}: frecvență dominantă {dominant:.1f} Hz, similaritate {similarity:.1f}")
            return create_result(similarity, dominant, profile, ANALYSIS_CONFIDENCE)
        except Exception:
            logger.exception(f"Analiza a eșuat pentru {uri}")
            return create_result(self.scorer.fallback_similarity(), profile.peak, profile, FALLBACK_CONFIDENCE)

    def recording_failed_result(self, drum_id):
        """
        Rezultatul folosit când oprirea înregistrării nu produce niciun clip.
        """
        profile = get_profile(drum_id)
        return create_result(FAILED_RECORDING_SIMILARITY, 0, profile, FALLBACK_CONFIDENCE)
