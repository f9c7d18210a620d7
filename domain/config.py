import os
import tempfile

# Constante expuse la granița aplicației
SAMPLE_RATE = 44100
RECORDING_DURATION_MS = 3000
MIN_AUDIBLE_HZ = 20.0
MAX_AUDIBLE_HZ = 20000.0
MIN_FFT_SIZE = 512

ANALYSIS_CONFIDENCE = 0.8
FALLBACK_CONFIDENCE = 0.5
NO_SIGNAL_CONFIDENCE = 0.0

FAILED_RECORDING_SIMILARITY = 30
UNDETECTED_SIMILARITY_RANGE = (20, 50)
ANALYSIS_FAILURE_SIMILARITY_RANGE = (50, 100)


class Config:
    def __init__(self, sample_rate=SAMPLE_RATE, recording_duration_ms=RECORDING_DURATION_MS,
                 save_directory=None, decode_audio=False, random_seed=None):
        '''
        Clasa Config centralizează parametrii de configurare ai jocului.
        Se instanțiază o singură dată în main.py și se transmite prin referință.
        :param sample_rate: rata de eșantionare în Hz (implicit 44100 Hz), stocată ca un int.
        :param recording_duration_ms: durata unei înregistrări până la oprirea automată (ms).
        :param save_directory: directorul în care se scriu clipurile înregistrate.
        :param decode_audio: False = eșantioane sintetice derivate din mărimea fișierului,
        True = decodare PCM reală a clipului.
        :param random_seed: sămânța generatorului aleator (None = nedeterminist).
        :param: input_device, channels și buffer_size: parametrii dispozitivului de captare.
        '''
        self.sample_rate = sample_rate
        self.recording_duration_ms = recording_duration_ms
        self.save_directory = save_directory or os.path.join(tempfile.gettempdir(), "drum_recordings")
        self.decode_audio = decode_audio
        self.random_seed = random_seed
        self.input_device = None
        self.channels = 1
        self.buffer_size = 1024
        self.min_fft_size = MIN_FFT_SIZE
        self.min_audible_hz = MIN_AUDIBLE_HZ
        self.max_audible_hz = MAX_AUDIBLE_HZ
        self.event_poll_ms = 50

    @property
    def recording_duration_seconds(self):
        return self.recording_duration_ms / 1000.0
