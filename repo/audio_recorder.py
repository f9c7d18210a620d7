import logging
import os
import queue
import datetime

import numpy as np

from domain.recording import Recording, RecordingHandle
from repo.audio_repo import AudioRepository

logger = logging.getLogger(__name__)


def _sounddevice():
    # PortAudio se încarcă doar la prima atingere a dispozitivului
    import sounddevice as sd
    return sd


class AudioRecorder:
    def __init__(self, config):
        """
        Captează sunet de la microfon și îl salvează ca WAV.
        Fluxul de intrare este o resursă deținută exclusiv: se închide la stop, la anulare și la eroare.
        :param config: obiectul Config (rată de eșantionare, dispozitiv, director de salvare)
        """
        self.config = config
        self.permission_granted = False
        self.stream = None
        self.audio_queue = queue.Queue()

    def request_permission(self):
        """
        Pe desktop „permisiunea” înseamnă un dispozitiv de intrare disponibil.
        """
        try:
            sd = _sounddevice()
            device = sd.query_devices(self.config.input_device, kind='input')
            self.permission_granted = device is not None and device['max_input_channels'] > 0
        except Exception as e:
            logger.error(f"Eroare la verificarea dispozitivului de intrare: {e}")
            self.permission_granted = False
        return self.permission_granted

    def check_permission(self):
        return self.permission_granted

    def _audio_callback(self, indata, frames, time, status):
        if status:
            logger.warning(f"Stare flux audio: {status}")
        self.audio_queue.put(indata.copy())

    def start_recording(self):
        if self.stream is not None:
            logger.error("O înregistrare este deja în curs.")
            return False

        if not self.permission_granted and not self.request_permission():
            logger.error("Permisiunea audio nu a fost acordată.")
            return False

        self._drain_queue()
        try:
            sd = _sounddevice()
            self.stream = sd.InputStream(
                samplerate=self.config.sample_rate,
                channels=self.config.channels,
                dtype='float32',
                device=self.config.input_device,
                blocksize=self.config.buffer_size,
                callback=self._audio_callback,
            )
            self.stream.start()
        except Exception as e:
            logger.error(f"Eroare la pornirea înregistrării: {e}")
            self.cancel_recording()
            return False

        logger.info("Începere înregistrare...")
        return True

    def stop_recording(self):
        """
        Oprește captura și scrie clipul pe disc.
        :return: RecordingHandle sau None dacă nu există un clip utilizabil
        """
        if self.stream is None:
            logger.error("Nu există nicio înregistrare activă.")
            return None

        try:
            self._close_stream()
            data = self._drain_queue()
            if data.size == 0:
                logger.error("Înregistrarea nu conține date.")
                return None

            recording = Recording(data, self.config.sample_rate)
            os.makedirs(self.config.save_directory, exist_ok=True)
            stamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S-%f")
            filename = os.path.join(self.config.save_directory, f"inregistrare-{stamp}.wav")
            AudioRepository.save(recording, filename)
        except Exception as e:
            logger.error(f"Eroare la oprirea înregistrării: {e}")
            return None
        finally:
            self.stream = None

        logger.info(f"Înregistrare salvată în {filename}")
        return RecordingHandle(filename, int(round(recording.duration_seconds * 1000)))

    def cancel_recording(self):
        if self.stream is None:
            return
        try:
            self._close_stream()
        except Exception as e:
            logger.error(f"Eroare la anularea înregistrării: {e}")
        finally:
            self.stream = None
            self._drain_queue()
        logger.info("Înregistrare anulată.")

    def is_recording(self):
        return self.stream is not None

    def _close_stream(self):
        stream = self.stream
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()

    def _drain_queue(self):
        blocks = []
        while True:
            try:
                blocks.append(self.audio_queue.get_nowait())
            except queue.Empty:
                break
        if not blocks:
            return np.array([], dtype=np.float64)
        data = np.concatenate(blocks).astype(np.float64)
        # Mai multe canale -> mono prin mediere
        if data.ndim > 1:
            data = data.mean(axis=1)
        return data
