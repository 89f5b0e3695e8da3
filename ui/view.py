from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import QLabel

from api.render_api import RenderAPI, ViewerConfig
from rendering.events import LogEvent
from utils.image_helpers import ndarray_to_qimage


# =============================================================================
# Main Window
# =============================================================================
class MandelbrotWindow(QLabel):
    """
    Fixed-size window showing the latest complete frame.

    A QTimer drives the display loop: each tick launches a pending
    generation (if the orchestrator is idle) and presents the latest
    complete frame. Key presses only touch the view state.
    """

    # ---------- Construction ----------
    def __init__(self, api: RenderAPI, config: ViewerConfig, parent=None):
        super().__init__(parent)
        self.api = api
        self.config = config
        self.shown_seq = -1
        self.last_status = ""

        self.setFixedSize(config.width, config.height)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self._update_title()

        self.api.on_log(self._on_log)

        self.frame_timer = QTimer(self)
        self.frame_timer.setInterval(config.frame_interval_ms)
        self.frame_timer.timeout.connect(self.tick)
        self.frame_timer.start()

    # ---------- Display loop ----------
    def tick(self):
        self.api.tick()
        image, seq = self.api.latest_frame()
        # present every tick, changed or not
        self.setPixmap(QPixmap.fromImage(ndarray_to_qimage(image)))
        if seq != self.shown_seq:
            self.shown_seq = seq
            self._update_title()

    def _update_title(self):
        vp = self.api.view.snapshot()
        self.setWindowTitle(
            f"Mandelbrot  x={vp.offset_x:.12g}  y={vp.offset_y:.12g}  "
            f"zoom={vp.zoom:.6g}  frame={max(self.shown_seq, 0)}  {self.last_status}")

    def _on_log(self, evt: LogEvent):
        # Worker thread; only stash the text, the next tick shows it
        self.last_status = evt.message

    # ---------- Qt events ----------
    def keyPressEvent(self, event):
        if self.api.navigate_key(event.text()):
            self._update_title()
            event.accept()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event):
        self.frame_timer.stop()
        self.api.shutdown()
        event.accept()
