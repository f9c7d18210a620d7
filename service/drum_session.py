import logging
import queue
import threading
from enum import Enum

from domain.drum_profiles import get_profile
from domain.errors import PermissionDeniedError, RecordingUnavailableError

logger = logging.getLogger(__name__)

AUTO_STOP_EVENT = "auto_stop"
ANALYSIS_DONE_EVENT = "analysis_done"


def run_in_thread(task):
    threading.Thread(target=task, daemon=True).start()


class SessionState(Enum):
    IDLE = "idle"
    RECORDING = "recording"
    ANALYZING = "analyzing"
    RESULT = "result"


class DrumSession:
    def __init__(self, config, recorder, analysis_service, timer_factory=threading.Timer,
                 background_runner=run_in_thread, on_change=None, on_error=None):
        """
        Mașina de stări a unei sesiuni de joc: selectare -> înregistrare -> analiză -> rezultat.
        Există o singură instanță per aplicație, construită în main.py.

        :param config: obiectul Config (durata înregistrării)
        :param recorder: colaboratorul de înregistrare (start/stop/cancel/is_recording)
        :param analysis_service: AnalysisService
        :param timer_factory: fabrica temporizatorului de oprire automată, semnătura threading.Timer
        :param background_runner: rulează analiza în afara firului UI (implicit un thread daemon)
        :param on_change: callback apelat cu sesiunea după fiecare tranziție
        :param on_error: callback apelat cu erorile care trebuie arătate utilizatorului
        """
        self.config = config
        self.recorder = recorder
        self.analysis_service = analysis_service
        self.timer_factory = timer_factory
        self.background_runner = background_runner
        self.on_change = on_change
        self.on_error = on_error

        self.state = SessionState.IDLE
        self.selected_drum = None
        self.last_result = None

        self.events = queue.Queue()
        self._timer = None
        self._generation = 0

    @property
    def inputs_disabled(self):
        return self.state in (SessionState.RECORDING, SessionState.ANALYZING)

    @property
    def similarity(self):
        if self.state is SessionState.RESULT and self.last_result is not None:
            return self.last_result.similarity
        return None

    @property
    def is_retry_available(self):
        return self.state is SessionState.RESULT and self.selected_drum is not None

    def select(self, drum_id):
        """
        Selectează o tobă și pornește imediat înregistrarea.
        Reselectarea aceleiași tobe în starea RESULT este o reîncercare.
        :return: True dacă înregistrarea a pornit
        """
        get_profile(drum_id)
        if self.inputs_disabled:
            logger.info(f"Selecție ignorată în starea {self.state.value}: {drum_id}")
            return False

        if self.selected_drum == drum_id and self.state is SessionState.RESULT:
            logger.info(f"Reîncercare pentru {drum_id}")
        self.selected_drum = drum_id
        return self._start_recording(drum_id)

    def reset(self):
        """
        Revine în IDLE: anulează temporizatorul și înregistrarea în curs, șterge selecția și rezultatul.
        """
        self._cancel_timer()
        if self.recorder.is_recording():
            self.recorder.cancel_recording()
        self.selected_drum = None
        self.last_result = None
        self._set_state(SessionState.IDLE)

    def shutdown(self):
        self._cancel_timer()
        if self.recorder.is_recording():
            self.recorder.cancel_recording()

    def process_pending_events(self):
        """
        Consumă evenimentele puse în coadă de temporizator și de firul de analiză.
        Se apelează din firul principal (bucla UI); evenimentele unei generații depășite sunt ignorate.
        :return: numărul de evenimente procesate
        """
        processed = 0
        while True:
            try:
                event, generation, payload = self.events.get_nowait()
            except queue.Empty:
                break
            processed += 1
            if generation != self._generation:
                logger.debug(f"Eveniment expirat ignorat: {event} ({generation})")
            elif event == AUTO_STOP_EVENT and self.state is SessionState.RECORDING:
                self._stop_and_analyze()
            elif event == ANALYSIS_DONE_EVENT and self.state is SessionState.ANALYZING:
                self._show_result(payload)
            else:
                logger.debug(f"Eveniment ignorat în starea {self.state.value}: {event}")
        return processed

    def _start_recording(self, drum_id):
        self._cancel_timer()
        self.last_result = None
        self._set_state(SessionState.RECORDING)

        if not self.recorder.start_recording():
            logger.error("Înregistrarea nu a putut porni.")
            self._set_state(SessionState.IDLE)
            self._report_error(PermissionDeniedError(
                "Înregistrarea nu a putut porni. Verificați permisiunile microfonului."
            ))
            return False

        self._generation += 1
        self._timer = self.timer_factory(
            self.config.recording_duration_seconds, self._on_timer_elapsed, args=(self._generation,)
        )
        self._timer.daemon = True
        self._timer.start()
        logger.info(f"Înregistrare pornită pentru {drum_id}")
        return True

    def _on_timer_elapsed(self, generation):
        # Rulează pe firul temporizatorului: doar pune evenimentul în coadă
        self.events.put((AUTO_STOP_EVENT, generation, None))

    def _stop_and_analyze(self):
        self._timer = None
        drum_id = self.selected_drum
        generation = self._generation
        self._set_state(SessionState.ANALYZING)

        try:
            handle = self._stop_recording()
        except RecordingUnavailableError as e:
            logger.warning(f"{e} Se folosește scorul pentru înregistrare eșuată.")
            self._show_result(self.analysis_service.recording_failed_result(drum_id))
            return

        def task():
            try:
                result = self.analysis_service.analyze_sound(handle.uri, drum_id)
            except Exception:
                logger.exception(f"Analiza a eșuat pentru {handle.uri}")
                result = self.analysis_service.recording_failed_result(drum_id)
            self.events.put((ANALYSIS_DONE_EVENT, generation, result))

        self.background_runner(task)

    def _show_result(self, result):
        self.last_result = result
        self._set_state(SessionState.RESULT)

    def _stop_recording(self):
        handle = self.recorder.stop_recording()
        if handle is None:
            raise RecordingUnavailableError("Oprirea înregistrării nu a produs niciun clip.")
        return handle

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        # Orice eveniment deja pus în coadă devine expirat
        self._generation += 1

    def _set_state(self, state):
        self.state = state
        if self.on_change:
            self.on_change(self)

    def _report_error(self, error):
        if self.on_error:
            self.on_error(error)
