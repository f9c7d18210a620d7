import time
import unittest
from unittest.mock import MagicMock

import numpy as np

from domain.config import Config
from domain.errors import PermissionDeniedError, UnknownDrumError
from domain.recording import RecordingHandle
from domain.similarity import SimilarityScorer
from domain.spectral_analyzer import SpectralAnalyzer, SpectralBin
from service.analysis_service import AnalysisService
from service.drum_session import DrumSession, SessionState


class FakeTimer:
    def __init__(self, interval, function, args=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class PeakAnalyzer(SpectralAnalyzer):
    def __init__(self, frequency_hz):
        super().__init__()
        self.frequency_hz = frequency_hz

    def analyze(self, samples):
        return [SpectralBin(self.frequency_hz, 1.0)]


class TestDrumSession(unittest.TestCase):
    def setUp(self):
        self.config = Config(random_seed=11)
        self.recorder = MagicMock()
        self.recorder.start_recording.return_value = True
        self.recorder.stop_recording.return_value = RecordingHandle("clip.wav", 3000)
        self.recorder.is_recording.return_value = True

        self.sample_source = MagicMock()
        self.sample_source.load_samples.return_value = np.ones(1024)
        self.analysis_service = AnalysisService(
            self.config,
            sample_source=self.sample_source,
            analyzer=PeakAnalyzer(60.0),
            scorer=SimilarityScorer(rng=np.random.default_rng(11)),
        )

        self.timers = []
        self.tasks = []
        self.states = []
        self.errors = []
        self.session = DrumSession(
            self.config,
            self.recorder,
            self.analysis_service,
            timer_factory=self.make_timer,
            background_runner=self.tasks.append,
            on_change=lambda session: self.states.append(session.state),
            on_error=self.errors.append,
        )

    def make_timer(self, interval, function, args=None):
        timer = FakeTimer(interval, function, args)
        self.timers.append(timer)
        return timer

    def run_background_tasks(self):
        tasks = list(self.tasks)
        self.tasks.clear()
        for task in tasks:
            task()

    def complete_recording(self):
        self.timers[-1].fire()
        self.session.process_pending_events()
        self.run_background_tasks()
        self.session.process_pending_events()

    def test_initial_state(self):
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertIsNone(self.session.selected_drum)
        self.assertIsNone(self.session.last_result)
        self.assertIsNone(self.session.similarity)
        self.assertFalse(self.session.inputs_disabled)
        self.assertFalse(self.session.is_retry_available)

    def test_select_starts_recording_and_arms_timer(self):
        self.assertTrue(self.session.select("kick"))

        self.assertEqual(self.session.state, SessionState.RECORDING)
        self.assertEqual(self.session.selected_drum, "kick")
        self.assertTrue(self.session.inputs_disabled)
        self.recorder.start_recording.assert_called_once()
        self.assertEqual(len(self.timers), 1)
        self.assertEqual(self.timers[0].interval, 3.0)
        self.assertTrue(self.timers[0].started)
        self.assertTrue(self.timers[0].daemon)

    def test_timer_only_enqueues_event(self):
        self.session.select("kick")
        self.timers[0].fire()

        self.assertEqual(self.session.state, SessionState.RECORDING)
        self.recorder.stop_recording.assert_not_called()
        self.assertEqual(self.session.process_pending_events(), 1)
        self.assertEqual(self.session.state, SessionState.ANALYZING)

    def test_kick_at_peak_end_to_end(self):
        self.session.select("kick")
        self.complete_recording()

        result = self.session.last_result
        self.assertEqual(result.similarity, 100)
        self.assertEqual(result.dominant_frequency_hz, 60)
        self.assertEqual(result.target_frequency_hz, 60)
        self.assertEqual(self.session.similarity, 100)
        self.assertEqual(self.states, [SessionState.RECORDING, SessionState.ANALYZING, SessionState.RESULT])
        self.sample_source.load_samples.assert_called_once_with("clip.wav")
        self.assertFalse(self.session.inputs_disabled)
        self.assertTrue(self.session.is_retry_available)

    def test_hihat_out_of_band_end_to_end(self):
        self.analysis_service.analyzer = PeakAnalyzer(3000.0)
        self.session.select("hiHat")
        self.complete_recording()
        self.assertAlmostEqual(self.session.last_result.similarity, 35)

    def test_retry_same_drum_clears_previous_result(self):
        self.session.select("kick")
        self.complete_recording()
        self.assertIsNotNone(self.session.last_result)

        self.assertTrue(self.session.select("kick"))
        self.assertEqual(self.session.state, SessionState.RECORDING)
        self.assertIsNone(self.session.last_result)
        self.assertIsNone(self.session.similarity)
        self.assertEqual(self.recorder.start_recording.call_count, 2)

        self.complete_recording()
        self.assertEqual(self.session.last_result.similarity, 100)

    def test_select_different_drum_in_result(self):
        self.session.select("kick")
        self.complete_recording()

        self.session.select("snare")
        self.assertEqual(self.session.selected_drum, "snare")
        self.assertIsNone(self.session.last_result)
        self.complete_recording()
        self.assertEqual(self.session.last_result.target_frequency_hz, 200)

    def test_select_ignored_while_busy(self):
        self.session.select("kick")
        self.assertFalse(self.session.select("snare"))
        self.assertEqual(self.session.selected_drum, "kick")
        self.assertEqual(self.recorder.start_recording.call_count, 1)

    def test_start_failure_returns_to_idle(self):
        self.recorder.start_recording.return_value = False

        self.assertFalse(self.session.select("snare"))
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertEqual(self.timers, [])
        self.assertEqual(len(self.errors), 1)
        self.assertIsInstance(self.errors[0], PermissionDeniedError)
        self.assertEqual(self.states, [SessionState.RECORDING, SessionState.IDLE])

    def test_stop_failure_scores_30(self):
        self.recorder.stop_recording.return_value = None
        for drum_id in ("kick", "snare", "hiHat", "ride"):
            self.session.select(drum_id)
            self.complete_recording()
            self.assertEqual(self.session.state, SessionState.RESULT)
            self.assertEqual(self.session.last_result.similarity, 30)
        self.sample_source.load_samples.assert_not_called()
        self.assertEqual(self.errors, [])

    def test_reset_cancels_recording_and_timer(self):
        self.session.select("kick")
        timer = self.timers[0]

        self.session.reset()
        self.assertTrue(timer.cancelled)
        self.recorder.cancel_recording.assert_called_once()
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertIsNone(self.session.selected_drum)

        # Un temporizator care se declanșează totuși este ignorat
        timer.fire()
        self.assertEqual(self.session.process_pending_events(), 1)
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.recorder.stop_recording.assert_not_called()

    def test_reset_from_result(self):
        self.session.select("kick")
        self.complete_recording()
        self.recorder.is_recording.return_value = False

        self.session.reset()
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertIsNone(self.session.last_result)
        self.recorder.cancel_recording.assert_not_called()

    def test_stale_timer_does_not_stop_new_recording(self):
        self.session.select("kick")
        stale = self.timers[0]
        self.session.reset()
        self.session.select("snare")

        stale.fire()
        self.session.process_pending_events()
        self.assertEqual(self.session.state, SessionState.RECORDING)
        self.recorder.stop_recording.assert_not_called()

        self.complete_recording()
        self.assertEqual(self.session.state, SessionState.RESULT)
        self.assertEqual(self.recorder.stop_recording.call_count, 1)

    def test_analysis_runs_in_background(self):
        self.analysis_service.analyze_sound = MagicMock(wraps=self.analysis_service.analyze_sound)
        self.session.select("kick")
        self.timers[0].fire()
        self.session.process_pending_events()

        # Starea ANALYZING rămâne vizibilă până când firul de analiză termină
        self.assertEqual(self.session.state, SessionState.ANALYZING)
        self.assertTrue(self.session.inputs_disabled)
        self.assertEqual(len(self.tasks), 1)
        self.analysis_service.analyze_sound.assert_not_called()
        self.recorder.stop_recording.assert_called_once()

        self.run_background_tasks()
        self.assertEqual(self.session.state, SessionState.ANALYZING)
        self.analysis_service.analyze_sound.assert_called_once_with("clip.wav", "kick")

        self.assertEqual(self.session.process_pending_events(), 1)
        self.assertEqual(self.session.state, SessionState.RESULT)
        self.assertEqual(self.session.last_result.similarity, 100)

    def test_stale_analysis_result_is_ignored(self):
        self.session.select("kick")
        self.timers[0].fire()
        self.session.process_pending_events()
        self.session.reset()

        self.run_background_tasks()
        self.assertEqual(self.session.process_pending_events(), 1)
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertIsNone(self.session.last_result)
        self.assertEqual(self.states[-1], SessionState.IDLE)

    def test_analysis_result_from_previous_round_is_ignored(self):
        self.session.select("kick")
        self.timers[0].fire()
        self.session.process_pending_events()
        stale_tasks = list(self.tasks)
        self.tasks.clear()
        self.session.reset()

        self.session.select("snare")
        self.timers[-1].fire()
        self.session.process_pending_events()
        for task in stale_tasks:
            task()
        self.session.process_pending_events()
        self.assertEqual(self.session.state, SessionState.ANALYZING)

        self.run_background_tasks()
        self.session.process_pending_events()
        self.assertEqual(self.session.state, SessionState.RESULT)
        self.assertEqual(self.session.last_result.target_frequency_hz, 200)

    def test_background_analysis_error_resolves_to_result(self):
        self.analysis_service.analyze_sound = MagicMock(side_effect=RuntimeError("boom"))
        self.session.select("ride")
        self.complete_recording()
        self.assertEqual(self.session.state, SessionState.RESULT)
        self.assertEqual(self.session.last_result.similarity, 30)

    def test_unknown_drum_rejected(self):
        with self.assertRaises(UnknownDrumError):
            self.session.select("cowbell")
        self.assertEqual(self.session.state, SessionState.IDLE)

    def test_no_events_pending(self):
        self.assertEqual(self.session.process_pending_events(), 0)

    def test_shutdown_releases_recording(self):
        self.session.select("kick")
        self.session.shutdown()
        self.assertTrue(self.timers[0].cancelled)
        self.recorder.cancel_recording.assert_called_once()

    def test_real_timer_auto_stop(self):
        self.config.recording_duration_ms = 10
        session = DrumSession(self.config, self.recorder, self.analysis_service)
        session.select("kick")

        deadline = time.time() + 2.0
        while session.state in (SessionState.RECORDING, SessionState.ANALYZING) and time.time() < deadline:
            session.process_pending_events()
            time.sleep(0.01)

        self.assertEqual(session.state, SessionState.RESULT)
        self.assertEqual(session.last_result.similarity, 100)

if __name__ == '__main__':
    unittest.main()
