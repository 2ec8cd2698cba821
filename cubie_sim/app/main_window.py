# cubie_sim/app/main_window.py
from __future__ import annotations

import logging

from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QMainWindow,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from cubie_sim import config
from cubie_sim.logic.session import CubeSession
from cubie_sim.render.cube_gl_widget import CubeGLWidget

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Ventana principal del simulador 3D del cubo.

    Esta clase coordina:
    - La sesión del cubo (`CubeSession`: modelo, giros y mezcla)
    - La visualización y animación 3D (`CubeGLWidget`)
    - El panel lateral (reset, mezcla, estado e historial)
    """

    def __init__(self) -> None:
        """Inicializa la ventana principal, crea la UI y conecta señales."""
        super().__init__()
        self.setWindowTitle("Cubo 3x3x3 - PySide6")

        # --- Núcleo + render ---
        self.session: CubeSession = CubeSession()
        self.gl_widget: CubeGLWidget = CubeGLWidget(self.session, self)

        # --- UI ---
        root = QWidget()
        root_layout = QHBoxLayout(root)
        root_layout.addWidget(self.gl_widget, 1)

        panel = QWidget()
        panel_layout = QVBoxLayout(panel)
        panel.setFixedWidth(280)

        self.lbl_state = QLabel("")
        panel_layout.addWidget(self.lbl_state)

        panel_layout.addWidget(QLabel("Teclas: R L U D F B (Shift = inverso)"))

        self.btn_reset = QPushButton("Reset")
        panel_layout.addWidget(self.btn_reset)

        # Scramble
        panel_layout.addWidget(QLabel("Scramble (mezclar)"))
        row_scr = QHBoxLayout()
        self.spin_scramble = QSpinBox()
        self.spin_scramble.setRange(1, 200)
        self.spin_scramble.setValue(config.SCRAMBLE_DEFAULT_MOVES)
        self.btn_scramble = QPushButton("Scramble")
        row_scr.addWidget(self.spin_scramble, 1)
        row_scr.addWidget(self.btn_scramble, 1)
        panel_layout.addLayout(row_scr)

        row_delay = QHBoxLayout()
        self.spin_delay = QSpinBox()
        self.spin_delay.setRange(0, 2000)
        self.spin_delay.setSingleStep(50)
        self.spin_delay.setSuffix(" ms")
        self.spin_delay.setValue(int(config.SCRAMBLE_DEFAULT_INTERVAL_MS))
        row_delay.addWidget(QLabel("Pausa por giro"), 0)
        row_delay.addWidget(self.spin_delay, 1)
        panel_layout.addLayout(row_delay)

        # Historial
        panel_layout.addWidget(QLabel("Historial de movimientos"))
        self.list_history = QListWidget()
        panel_layout.addWidget(self.list_history, 1)

        root_layout.addWidget(panel)
        self.setCentralWidget(root)

        # --- Conexiones ---
        self.btn_reset.clicked.connect(self.on_reset)
        self.btn_scramble.clicked.connect(self.on_scramble)
        self.gl_widget.turn_committed.connect(self.on_turn_committed)
        self.gl_widget.frame_ticked.connect(self._on_frame)

        self.btn_reset.setShortcut("Ctrl+R")

        self._scramble_seen: int = 0
        self._refresh_state_label()

    # -------------------
    # Helpers UI
    # -------------------
    def _refresh_state_label(self) -> None:
        """Actualiza el label de estado y la disponibilidad de botones."""
        busy = self.session.is_busy()
        if busy:
            text = "Estado: girando..."
        elif self.session.is_solved():
            text = "Estado: resuelto ✅"
        else:
            text = "Estado: mezclado 🔄"
        self.lbl_state.setText(text)

        self.btn_reset.setEnabled(not busy)
        self.btn_scramble.setEnabled(not busy)
        self.spin_scramble.setEnabled(not busy)
        self.spin_delay.setEnabled(not busy)

    def _push_history(self, move: str) -> None:
        """Agrega un movimiento a la lista visual del historial."""
        self.list_history.addItem(move)
        self.list_history.scrollToBottom()

    # -------------------
    # Callbacks
    # -------------------
    def on_turn_committed(self, move: str) -> None:
        """Callback cuando el GL widget confirma un giro animado del usuario."""
        self._push_history(move)
        self._refresh_state_label()

    def _on_frame(self) -> None:
        """Sigue el avance de una mezcla temporizada y refresca el estado."""
        history = self.session.scrambler.history
        while self._scramble_seen < len(history):
            self._push_history(str(history[self._scramble_seen]))
            self._scramble_seen += 1
        self._refresh_state_label()

    def on_reset(self) -> None:
        """Resetea el cubo y el historial (solo con el cubo en reposo)."""
        if not self.session.reset():
            return
        self.list_history.clear()
        self._scramble_seen = len(self.session.scrambler.history)
        self.gl_widget.update()
        self._refresh_state_label()

    def on_scramble(self) -> None:
        """Mezcla el cubo con N giros aleatorios instantáneos."""
        n = int(self.spin_scramble.value())
        delay = float(self.spin_delay.value())

        if not self.session.scramble(n, interval=delay or None):
            logger.debug("Scramble ignorado: cubo ocupado")
            return

        self._scramble_seen = 0
        self._on_frame()
        self.gl_widget.update()
