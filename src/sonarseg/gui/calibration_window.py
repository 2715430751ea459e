from PyQt5 import QtWidgets, QtGui, QtCore
import numpy as np
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from ..utils.sonar_viz import plot_beam_trace, render_calibration_mask

_CLOSE_QT_KEYS = {
    QtCore.Qt.Key_Return: "\r",
    QtCore.Qt.Key_Enter: "\n",
    QtCore.Qt.Key_Escape: "\x1b",
}

def _to_pixmap(img):
    img = np.ascontiguousarray(img, dtype=np.uint8)
    h, w = img.shape[:2]
    qimg = QtGui.QImage(img.data, w, h, 3 * w, QtGui.QImage.Format_RGB888).copy()
    return QtGui.QPixmap.fromImage(qimg)

class CalibrationWindow(QtWidgets.QWidget):
    """
    Annotated image (left) and beam chart (right) for one CalibrationSession.
      a / d : bearing +1 / -1 deg
      w / s : Hmin +2 / -2
      r / f : background window +1 / -1
      p     : export both views as PNG
      Enter / Esc : close
    """
    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session
        self.setFocusPolicy(QtCore.Qt.StrongFocus)
        self.setToolTip("a/d: bearing  |  w/s: Hmin  |  r/f: window  |  p: save  |  Esc: close")

        lay = QtWidgets.QHBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.setSpacing(4)

        self._label = QtWidgets.QLabel("")
        self._label.setAlignment(QtCore.Qt.AlignCenter)
        self._label.setStyleSheet("QLabel { background: #111; }")
        lay.addWidget(self._label, 1)

        self.fig = Figure(figsize=(6, 4), facecolor="white")
        self.canvas = FigureCanvas(self.fig)
        self.canvas.setFocusPolicy(QtCore.Qt.NoFocus)
        self.ax = self.fig.add_subplot(111)
        lay.addWidget(self.canvas, 1)

        self.refresh()

    def refresh(self):
        result = self.session.run()
        self._label.setPixmap(_to_pixmap(render_calibration_mask(self.session.image, result)))
        self.ax.clear()
        plot_beam_trace(self.ax, result.trace)
        self.ax.set_title(f"bearing {result.bearing_deg:.1f} deg  Hmin {result.h_min}  "
                          f"window {result.window_size}", fontsize=9)
        self.canvas.draw_idle()

    def keyPressEvent(self, ev: QtGui.QKeyEvent):
        key = _CLOSE_QT_KEYS.get(ev.key(), ev.text().lower())
        if not key:
            super().keyPressEvent(ev)
            return
        if not self.session.handle_key(key):
            self.close()
            return
        self.refresh()
