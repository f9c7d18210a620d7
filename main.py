import logging
import tkinter as tk

from domain.config import Config
from repo.audio_recorder import AudioRecorder
from service.analysis_service import AnalysisService
from service.drum_session import DrumSession
from ui.main_window import MainWindow


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = Config()
    recorder = AudioRecorder(config)
    session = DrumSession(config, recorder, AnalysisService(config))

    # Cererea de permisiune se face la pornire, ca înainte de prima selecție
    if not recorder.request_permission():
        logging.getLogger(__name__).warning("Nu s-a găsit niciun microfon disponibil.")

    root = tk.Tk()
    MainWindow(root, config, session)

    def on_close():
        session.shutdown()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_close)
    root.mainloop()


if __name__ == "__main__":
    main()
