# /homedrummer/repo/audio_repo.py

import os
from typing import NamedTuple

import scipy.io.wavfile as wav
import numpy as np
from domain.recording import Recording


class FileInfo(NamedTuple):
    exists: bool
    size: int = 0


class AudioRepository:
    @staticmethod
    def load(filename):
        sr, data = wav.read(filename)
        data = data.astype(np.float64) / 32768.0
        # Stereo -> mono prin mediere
        if data.ndim > 1:
            data = data.mean(axis=1)
        return Recording(data.flatten(), sr)

    @staticmethod
    def save(recording, filename):
        data = np.clip(recording.data, -1.0, 1.0)
        wav.write(filename, recording.sample_rate, np.int16(data * 32767))

    @staticmethod
    def file_info(filename):
        """
        Metadatele unui clip: dacă există și mărimea în bytes.
        """
        if not filename or not os.path.isfile(filename):
            return FileInfo(False, 0)
        return FileInfo(True, os.path.getsize(filename))
