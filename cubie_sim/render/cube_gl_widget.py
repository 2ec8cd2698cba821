# cubie_sim/render/cube_gl_widget.py
from __future__ import annotations

import math
from typing import List, Tuple

from PySide6.QtCore import QPoint, QTimer, Qt, Signal
from PySide6.QtGui import QKeyEvent, QMouseEvent, QQuaternion, QWheelEvent
from PySide6.QtOpenGLWidgets import QOpenGLWidget

from OpenGL.GL import (
    glBegin,
    glClear,
    glClearColor,
    glColor3f,
    glEnable,
    glEnd,
    glLoadIdentity,
    glMatrixMode,
    glPopMatrix,
    glPushMatrix,
    glRotatef,
    glTranslatef,
    glVertex3f,
    glViewport,
    GL_COLOR_BUFFER_BIT,
    GL_DEPTH_BUFFER_BIT,
    GL_DEPTH_TEST,
    GL_MODELVIEW,
    GL_PROJECTION,
    GL_QUADS,
)
from OpenGL.GLU import gluPerspective

from cubie_sim import config
from cubie_sim.logic.moves import turn_from_key
from cubie_sim.logic.session import CubeSession
from cubie_sim.logic.turn_controller import PieceSnapshot

Vec3i = Tuple[int, int, int]
Vec3f = Tuple[float, float, float]


class CubeGLWidget(QOpenGLWidget):
    """Widget OpenGL que dibuja las 26 piezas y traduce el teclado a giros.

    Características:
    - Render OpenGL clásico (sin shaders): cuerpo de plástico + stickers.
    - Cada pieza se dibuja en su posición visible y con su orientación viva,
      leídas de `CubeSession.current_state()`.
    - Orbit con botón derecho y zoom con la rueda.
    - Teclas R L U D F B giran la cara; con Shift, en sentido inverso.
    - Un `QTimer` (~60fps) avanza la animación con `CubeSession.tick()` y
      emite `frame_ticked` en cada frame.
    """

    turn_committed = Signal(str)
    frame_ticked = Signal()

    def __init__(self, session: CubeSession, parent=None) -> None:
        """Crea el widget OpenGL y arranca el timer de animación.

        Args:
            session: Sesión del cubo (núcleo lógico).
            parent: Widget padre (Qt), opcional.
        """
        super().__init__(parent)
        self.session: CubeSession = session

        # Cámara / orbit
        self.yaw: float = 35.0
        self.pitch: float = -20.0
        self.distance: float = 8.0

        self._last_mouse_pos: QPoint = QPoint()
        self._orbiting: bool = False

        self.sticker_margin: float = 0.08
        self.sticker_offset: float = 0.005

        self._anim_timer: QTimer = QTimer(self)
        self._anim_timer.setInterval(config.FRAME_INTERVAL_MS)
        self._anim_timer.timeout.connect(self._on_anim_tick)
        self._anim_timer.start()

        self.setFocusPolicy(Qt.StrongFocus)

    # --------------------------
    # OpenGL lifecycle
    # --------------------------
    def initializeGL(self) -> None:
        """Inicializa parámetros OpenGL (clear color y depth test)."""
        glClearColor(*config.BACKGROUND_RGB, 1.0)
        glEnable(GL_DEPTH_TEST)

    def resizeGL(self, w: int, h: int) -> None:
        """Ajusta viewport y proyección cuando cambia el tamaño del widget."""
        if h == 0:
            h = 1

        dpr = self.devicePixelRatioF()
        fb_w = int(w * dpr)
        fb_h = int(h * dpr)

        glViewport(0, 0, fb_w, fb_h)

        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        gluPerspective(45.0, fb_w / float(fb_h), 0.1, 100.0)

        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()

    def paintGL(self) -> None:
        """Dibuja el frame actual (todas las piezas, incluida la capa animada)."""
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        self._apply_camera()
        for snap in self.session.current_state():
            self._draw_piece(snap)

    def _apply_camera(self) -> None:
        """Aplica la transformación de cámara (orbit) al modelo."""
        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()
        glTranslatef(0.0, 0.0, -self.distance)
        glRotatef(self.pitch, 1.0, 0.0, 0.0)
        glRotatef(self.yaw, 0.0, 1.0, 0.0)

    # --------------------------
    # Animación
    # --------------------------
    def _on_anim_tick(self) -> None:
        """Tick del timer: avanza la sesión y repinta si algo se mueve."""
        busy_before = self.session.is_busy()
        committed = self.session.tick()
        if committed is not None:
            self.turn_committed.emit(str(committed))
        if busy_before or committed is not None:
            self.update()
        self.frame_ticked.emit()

    # --------------------------
    # Interacción
    # --------------------------
    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Traduce la tecla a un giro; las teclas que no son caras se ignoran."""
        shift = bool(event.modifiers() & Qt.ShiftModifier)
        turn = turn_from_key(event.text(), shift)
        if turn is None:
            super().keyPressEvent(event)
            return

        if self.session.request_turn(turn.face, turn.direction):
            self.update()
        event.accept()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Botón derecho: empieza a orbitar."""
        if event.button() == Qt.RightButton:
            self._orbiting = True
            self._last_mouse_pos = event.pos()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Orbita la cámara mientras el botón derecho está presionado."""
        if self._orbiting:
            dx = event.position().x() - self._last_mouse_pos.x()
            dy = event.position().y() - self._last_mouse_pos.y()
            self._last_mouse_pos = event.pos()

            sens = 0.4
            self.yaw += dx * sens
            self.pitch += dy * sens
            self.pitch = max(-89.0, min(89.0, self.pitch))

            self.update()
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Finaliza el orbit al soltar el botón derecho."""
        if event.button() == Qt.RightButton and self._orbiting:
            self._orbiting = False
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Zoom in/out con la rueda del mouse."""
        delta = event.angleDelta().y() / 120.0
        self.distance -= delta * 0.3
        self.distance = max(3.5, min(20.0, self.distance))
        self.update()
        event.accept()

    # --------------------------
    # Render helpers
    # --------------------------
    @staticmethod
    def _axis_angle(q: QQuaternion) -> Tuple[float, Vec3f]:
        """Convierte un cuaternión unitario a (ángulo en grados, eje)."""
        w = max(-1.0, min(1.0, q.scalar()))
        s = math.sqrt(max(0.0, 1.0 - w * w))
        if s < 1e-6:
            return 0.0, (1.0, 0.0, 0.0)
        angle = math.degrees(2.0 * math.acos(w))
        return angle, (q.x() / s, q.y() / s, q.z() / s)

    @staticmethod
    def _face_quad(normal: Vec3i, half: float, offset: float) -> List[Vec3f]:
        """Cuatro vértices de un cuadrado de lado 2*half sobre la cara `normal`.

        Args:
            normal: Normal de la cara en el marco de la pieza.
            half: Mitad del lado del cuadrado.
            offset: Distancia del cuadrado al centro de la pieza.
        """
        i = [abs(c) for c in normal].index(1)
        j, k = [a for a in range(3) if a != i]
        quad: List[Vec3f] = []
        for u, v in ((-half, -half), (half, -half), (half, half), (-half, half)):
            p = [0.0, 0.0, 0.0]
            p[i] = normal[i] * offset
            p[j] = u
            p[k] = v
            quad.append((p[0], p[1], p[2]))
        return quad

    def _draw_piece(self, snap: PieceSnapshot) -> None:
        """Dibuja una pieza: cuerpo de plástico y stickers en sus caras exteriores."""
        half = config.CUBE_SIZE / 2.0
        x, y, z = snap.display_position

        glPushMatrix()
        glTranslatef(x * config.STEP, y * config.STEP, z * config.STEP)
        angle, axis = self._axis_angle(snap.orientation)
        glRotatef(angle, *axis)

        glBegin(GL_QUADS)
        normals: List[Vec3i] = [(1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1)]
        glColor3f(*config.PLASTIC_RGB)
        for n in normals:
            for v in self._face_quad(n, half, half):
                glVertex3f(*v)

        for n, color in snap.stickers.items():
            glColor3f(*self._color_rgb(color))
            for v in self._face_quad(n, half - self.sticker_margin, half + self.sticker_offset):
                glVertex3f(*v)
        glEnd()

        glPopMatrix()

    # --------------------------
    # Color map
    # --------------------------
    def _color_rgb(self, c: str) -> Vec3f:
        """Convierte la letra de color a RGB; gris si no existe."""
        return config.PALETTE.get(c, (0.8, 0.8, 0.8))
