# --- /homedrummer/ui/main_window.py ---

import tkinter as tk
from tkinter import ttk, messagebox

from domain.drum_profiles import DRUM_PROFILES, DRUM_HOTSPOTS
from service.drum_session import SessionState

BACKGROUND = "#1a1a2e"
KIT_WIDTH = 640
KIT_HEIGHT = 400
METER_WIDTH = 520
METER_HEIGHT = 60

INSTRUCTIONS = {
    SessionState.IDLE: "Selectați o tobă",
    SessionState.RECORDING: "Loviți obiectul acum!",
    SessionState.ANALYZING: "Se analizează...",
    SessionState.RESULT: "Atingeți din nou toba pentru a reîncerca",
}


def instruction_text(state):
    return INSTRUCTIONS.get(state, INSTRUCTIONS[SessionState.IDLE])


def meter_color(similarity):
    """
    Culoarea indicatorului: roșu sub 40, galben sub 70, verde de la 70 în sus.
    """
    if similarity is None:
        return "#6b7280"
    if similarity < 40:
        return "#ef4444"
    if similarity < 70:
        return "#eab308"
    return "#22c55e"


def hotspot_bounds(drum_id, width=KIT_WIDTH, height=KIT_HEIGHT):
    x, y, w, h = DRUM_HOTSPOTS[drum_id]
    return (x * width / 100, y * height / 100, (x + w) * width / 100, (y + h) * height / 100)


class MainWindow:
    def __init__(self, root, config, session):
        self.root = root
        self.root.title("HomeDrummer")
        self.root.configure(bg=BACKGROUND)

        self.config = config
        self.session = session
        self.session.on_change = lambda _session: self.refresh()
        self.session.on_error = self.show_error
        self.hotspot_items = {}

        self.setup_ui()
        self.refresh()
        self.root.after(self.config.event_poll_ms, self.poll_session)

    def setup_ui(self):
        style = ttk.Style()
        style.configure("TButton", font=("Helvetica", 12))

        self.title_label = tk.Label(self.root, text="HomeDrummer", font=("Helvetica", 28, "italic"),
                                    fg="#ffffff", bg=BACKGROUND)
        self.title_label.pack(pady=(20, 0))

        self.status_label = tk.Label(self.root, text="", font=("Helvetica", 12), fg="#9ca3af", bg=BACKGROUND)
        self.status_label.pack(pady=(4, 10))

        # Setul de tobe: fiecare zonă este o țintă de atingere
        self.kit_canvas = tk.Canvas(self.root, width=KIT_WIDTH, height=KIT_HEIGHT, bg=BACKGROUND,
                                    highlightthickness=0)
        self.kit_canvas.pack(padx=16)
        for drum_id in DRUM_HOTSPOTS:
            profile = DRUM_PROFILES[drum_id]
            x0, y0, x1, y1 = hotspot_bounds(drum_id)
            oval = self.kit_canvas.create_oval(x0, y0, x1, y1, outline=profile.color, width=2)
            text = self.kit_canvas.create_text((x0 + x1) / 2, (y0 + y1) / 2, text=profile.label,
                                               fill="#ffffff", font=("Helvetica", 10))
            for item in (oval, text):
                self.kit_canvas.tag_bind(item, "<Button-1>", lambda _event, d=drum_id: self.on_drum_pressed(d))
            self.hotspot_items[drum_id] = oval

        # Indicatorul de similaritate
        self.meter_canvas = tk.Canvas(self.root, width=METER_WIDTH, height=METER_HEIGHT, bg=BACKGROUND,
                                      highlightthickness=0)
        self.meter_canvas.pack(pady=(20, 4))

        self.reset_button = ttk.Button(self.root, text="Resetare", command=self.on_reset)
        self.reset_button.pack(pady=(4, 20))

    def on_drum_pressed(self, drum_id):
        if self.session.inputs_disabled:
            return
        self.session.select(drum_id)

    def on_reset(self):
        self.session.reset()

    def poll_session(self):
        """
        Procesează evenimentele temporizatorului pe firul UI.
        """
        self.session.process_pending_events()
        self.root.after(self.config.event_poll_ms, self.poll_session)

    def show_error(self, error):
        messagebox.showerror("Eroare", str(error))

    def refresh(self):
        state = self.session.state
        self.status_label.config(text=instruction_text(state))
        self.reset_button.config(state="disabled" if self.session.inputs_disabled else "normal")

        for drum_id, item in self.hotspot_items.items():
            selected = drum_id == self.session.selected_drum
            self.kit_canvas.itemconfigure(
                item,
                width=4 if selected else 2,
                fill=DRUM_PROFILES[drum_id].color if selected else "",
                stipple="gray50" if selected else "",
            )

        self.draw_meter(self.session.similarity, state is SessionState.RECORDING)

    def draw_meter(self, similarity, is_recording):
        canvas = self.meter_canvas
        canvas.delete("all")
        bar_top, bar_bottom = 20, 36
        canvas.create_rectangle(0, bar_top, METER_WIDTH, bar_bottom, fill="#374151", outline="")

        if is_recording:
            canvas.create_text(METER_WIDTH / 2, 8, text="● live", fill="#ef4444", font=("Helvetica", 10))
            return
        if similarity is None:
            canvas.create_text(METER_WIDTH / 2, 8, text="--", fill="#9ca3af", font=("Helvetica", 10))
            return

        x = similarity / 100 * METER_WIDTH
        color = meter_color(similarity)
        canvas.create_rectangle(0, bar_top, x, bar_bottom, fill=color, outline="")
        canvas.create_polygon(x - 6, bar_bottom + 12, x + 6, bar_bottom + 12, x, bar_bottom, fill="#ffffff")
        canvas.create_text(METER_WIDTH / 2, 8, text=f"{similarity:.0f}%", fill=color, font=("Helvetica", 12, "bold"))
