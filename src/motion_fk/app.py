from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
from PySide6 import QtCore, QtWidgets
import pyqtgraph.opengl as gl

from .acclaim.amc import load_amc
from .acclaim.asf import load_asf
from .acclaim.errors import AcclaimError
from .acclaim.kinematics import FKEngine
from .acclaim.types import MotionFrames, PositionCache, Skeleton
from .preprocess import (
    PreprocessConfig,
    load_axis_presets,
    preprocess,
    transform_positions,
)

logger = logging.getLogger(__name__)


class MotionViewer(QtWidgets.QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Acclaim Skeleton Viewer")

        self.skeleton: Optional[Skeleton] = None
        self.engine: Optional[FKEngine] = None
        self.frames: MotionFrames = {}
        self.frame_numbers: List[int] = []
        self.state = None
        self.frame = 0
        self.segment_items: Dict[str, gl.GLLinePlotItem] = {}

        self.axis_presets = load_axis_presets()

        central = QtWidgets.QWidget()
        self.setCentralWidget(central)
        layout = QtWidgets.QVBoxLayout(central)

        top = QtWidgets.QHBoxLayout()
        layout.addLayout(top)

        self.btn_asf = QtWidgets.QPushButton("Load ASF")
        self.btn_amc = QtWidgets.QPushButton("Load AMC")
        self.btn_play = QtWidgets.QPushButton("Play")
        self.btn_pause = QtWidgets.QPushButton("Pause")
        self.spn_fps = QtWidgets.QSpinBox()
        self.spn_fps.setRange(1, 240)
        self.spn_fps.setValue(30)
        self.spn_fps.setSuffix(" fps")
        self.lbl = QtWidgets.QLabel("No skeleton loaded")

        top.addWidget(self.btn_asf)
        top.addWidget(self.btn_amc)
        top.addWidget(self.btn_play)
        top.addWidget(self.btn_pause)
        top.addWidget(self.spn_fps)
        top.addWidget(self.lbl, 1)

        prep = QtWidgets.QHBoxLayout()
        layout.addLayout(prep)

        self.cmb_axis = QtWidgets.QComboBox()
        for pid, p in self.axis_presets.items():
            self.cmb_axis.addItem(str(p.get("label") or pid), pid)

        self.chk_fx = QtWidgets.QCheckBox("Flip X")
        self.chk_fy = QtWidgets.QCheckBox("Flip Y")
        self.chk_fz = QtWidgets.QCheckBox("Flip Z")

        self.cmb_scale = QtWidgets.QComboBox()
        self.cmb_scale.addItem("Scale: Auto", "auto")
        self.cmb_scale.addItem("Scale: None", "none")
        self.cmb_scale.addItem("Scale: Factor", "factor")
        self.spn_factor = QtWidgets.QDoubleSpinBox()
        self.spn_factor.setRange(1e-6, 1e6)
        self.spn_factor.setDecimals(6)
        self.spn_factor.setSingleStep(0.01)
        self.spn_factor.setValue(1.0)

        self.btn_apply = QtWidgets.QPushButton("Apply")

        prep.addWidget(QtWidgets.QLabel("Axis:"))
        prep.addWidget(self.cmb_axis)
        prep.addWidget(self.chk_fx)
        prep.addWidget(self.chk_fy)
        prep.addWidget(self.chk_fz)
        prep.addSpacing(12)
        prep.addWidget(self.cmb_scale)
        prep.addWidget(self.spn_factor)
        prep.addWidget(self.btn_apply)
        prep.addStretch(1)

        self.slider = QtWidgets.QSlider(QtCore.Qt.Orientation.Horizontal)
        layout.addWidget(self.slider)

        self.view = gl.GLViewWidget()
        self.view.setCameraPosition(distance=60)
        layout.addWidget(self.view, 1)

        grid = gl.GLGridItem()
        self.view.addItem(grid)

        self.timer = QtCore.QTimer(self)
        self.timer.timeout.connect(self._on_tick)

        self.btn_asf.clicked.connect(self._on_load_asf)
        self.btn_amc.clicked.connect(self._on_load_amc)
        self.btn_play.clicked.connect(self._on_play)
        self.btn_pause.clicked.connect(self._on_pause)
        self.slider.valueChanged.connect(self._on_slider)
        self.btn_apply.clicked.connect(self._apply_preprocess)

        self._set_enabled(False)

    def _set_enabled(self, enabled: bool) -> None:
        has_motion = enabled and bool(self.frame_numbers)
        self.btn_amc.setEnabled(enabled)
        self.btn_play.setEnabled(has_motion)
        self.btn_pause.setEnabled(has_motion)
        self.slider.setEnabled(has_motion)
        self.btn_apply.setEnabled(enabled)

    def _ask_path(self, title: str, pattern: str) -> str:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, title, str(Path.cwd()), pattern)
        return path

    def _on_load_asf(self) -> None:
        path = self._ask_path("Open ASF", "ASF files (*.asf);;All files (*.*)")
        if path:
            self.load_skeleton(path)

    def _on_load_amc(self) -> None:
        path = self._ask_path("Open AMC", "AMC files (*.amc);;All files (*.*)")
        if path:
            self.load_motion(path)

    def _show_error(self, e: Exception) -> None:
        logger.error("%s", e)
        QtWidgets.QMessageBox.critical(self, "Load failed", str(e))

    def load_skeleton(self, path: str) -> None:
        try:
            skeleton = load_asf(path)
            engine = FKEngine(skeleton)
        except (OSError, AcclaimError) as e:
            self._show_error(e)
            return

        self.skeleton = skeleton
        self.engine = engine
        self.frames = {}
        self.frame_numbers = []
        self.timer.stop()

        for it in self.segment_items.values():
            self.view.removeItem(it)
        self.segment_items = {}
        for name in engine.static_pose():
            item = gl.GLLinePlotItem(pos=np.zeros((2, 3)), width=2, antialias=True, mode="lines")
            self.segment_items[name] = item
            self.view.addItem(item)

        self.lbl.setText(f"{skeleton.name or Path(path).name} | {len(skeleton.bones)} bones")
        self._set_enabled(True)
        self._apply_preprocess()

    def load_motion(self, path: str) -> None:
        if self.skeleton is None:
            return
        try:
            frames = load_amc(path, self.skeleton)
        except (OSError, AcclaimError) as e:
            self._show_error(e)
            return

        self.frames = frames
        self.frame_numbers = sorted(frames)
        self.frame = 0
        self.slider.blockSignals(True)
        self.slider.setMinimum(0)
        self.slider.setMaximum(max(0, len(self.frame_numbers) - 1))
        self.slider.setValue(0)
        self.slider.blockSignals(False)

        self.lbl.setText(f"{self.skeleton.name} | {len(self.frame_numbers)} frames")
        self._set_enabled(True)
        self._render_frame(0)

    def _current_preprocess_config(self) -> PreprocessConfig:
        return PreprocessConfig(
            scale_mode=str(self.cmb_scale.currentData()),
            scale_factor=float(self.spn_factor.value()),
            axis_preset_id=str(self.cmb_axis.currentData() or "none"),
            flip_x=bool(self.chk_fx.isChecked()),
            flip_y=bool(self.chk_fy.isChecked()),
            flip_z=bool(self.chk_fz.isChecked()),
        )

    def _apply_preprocess(self) -> None:
        if self.skeleton is None:
            return
        self.state = preprocess(self.skeleton, self._current_preprocess_config(), self.axis_presets)
        self._render_frame(self.frame)

    def _pose(self, frame_idx: int) -> PositionCache:
        assert self.engine is not None
        if not self.frame_numbers:
            return self.engine.static_pose()
        return self.engine.evaluate(self.frames[self.frame_numbers[frame_idx]])

    def _render_frame(self, frame_idx: int) -> None:
        if self.engine is None or self.state is None:
            return
        pose = transform_positions(self._pose(frame_idx), self.state)
        for name, item in self.segment_items.items():
            seg = pose.get(name)
            if seg is None:
                item.setData(pos=np.zeros((2, 3)))
            else:
                item.setData(pos=np.array([seg.start, seg.end], dtype=np.float64))

    def _on_play(self) -> None:
        if not self.frame_numbers:
            return
        self.timer.start(max(1, int(1000 / self.spn_fps.value())))

    def _on_pause(self) -> None:
        self.timer.stop()

    def _on_tick(self) -> None:
        if not self.frame_numbers:
            return
        self.frame = (self.frame + 1) % len(self.frame_numbers)
        self.slider.blockSignals(True)
        self.slider.setValue(self.frame)
        self.slider.blockSignals(False)
        self._render_frame(self.frame)

    def _on_slider(self, v: int) -> None:
        self.frame = v
        self._render_frame(self.frame)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="motion-fk-viewer", description="View an ASF skeleton and AMC motion.")
    parser.add_argument("asf_path", nargs="?", type=str)
    parser.add_argument("amc_path", nargs="?", type=str)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    app = QtWidgets.QApplication(sys.argv[:1])
    w = MotionViewer()
    w.resize(1100, 800)
    w.show()
    if args.asf_path:
        w.load_skeleton(args.asf_path)
        if args.amc_path:
            w.load_motion(args.amc_path)
    sys.exit(app.exec())
