from __future__ import annotations

import logging
import sys
import tkinter as tk
from tkinter import ttk
from typing import Optional, Sequence

from PIL import Image, ImageTk
from ttkthemes import ThemedTk

from typstmath.clipboard import ClipboardBridge
from typstmath.config import FONT_SIZE, WINDOW_SIZE, WINDOW_TITLE, AppConfig, parse_args
from typstmath.converter import PandocConverter
from typstmath.logging_config import setup_logging
from typstmath.rasterizer import FormulaRasterizer
from typstmath.state import (
    AppController,
    AppState,
    Cleared,
    CopyRequested,
    InputEdited,
    OutputEdited,
    Services,
)

log = logging.getLogger(__name__)

DARK_BG = "#3c3f41"
DARK_FG = "#e0e0e0"


# -----------------------------
# Helpers
# -----------------------------
def fit_to_width(size: tuple[int, int], available: int) -> tuple[int, int]:
    """Preview size: 90% of the available width at most, never enlarged."""
    w, h = size
    scale = min(available / w * 0.9, 1.0)
    return max(1, int(w * scale)), max(1, int(h * scale))


def build_services(config: AppConfig) -> Services:
    return Services(
        converter=PandocConverter(config.pandoc, timeout=config.timeout),
        rasterizer=FormulaRasterizer(usetex=config.usetex),
        clipboard=ClipboardBridge(),
        dark_mode=config.dark_mode,
    )


# -----------------------------
# GUI
# -----------------------------
class App(ThemedTk):
    def __init__(self, controller: AppController, config: AppConfig):
        super().__init__(theme=config.theme)
        self.controller = controller
        self.title(WINDOW_TITLE)
        self.geometry("{}x{}".format(*WINDOW_SIZE))
        self.resizable(False, False)
        self.option_add("*Font", ("Segoe UI", -FONT_SIZE))

        self.preview_photo = None
        colors = {"background": DARK_BG, "foreground": DARK_FG, "insertbackground": DARK_FG} if config.dark_mode else {}

        main_frame = ttk.Frame(self, padding=(10, 10))
        main_frame.pack(fill=tk.BOTH, expand=True)

        self.txt_in = self._scrolled_text(main_frame, colors)
        ttk.Separator(main_frame).pack(fill=tk.X, pady=(8, 5))

        btns_frame = ttk.Frame(main_frame)
        btns_frame.pack()
        self.btn_copy = ttk.Button(btns_frame, text="Copy LaTeX", state=tk.DISABLED,
                                   command=lambda: self.controller.dispatch(CopyRequested()))
        self.btn_copy.pack(side=tk.LEFT, padx=4)
        ttk.Button(btns_frame, text="Clear",
                   command=lambda: self.controller.dispatch(Cleared())).pack(side=tk.LEFT, padx=4)

        self.txt_out = self._scrolled_text(main_frame, colors, pady=(10, 0))

        self.preview = ttk.Label(main_frame, anchor="center")
        self.preview.pack(fill=tk.BOTH, expand=True, pady=(10, 0))

        self.txt_in.bind("<<Modified>>", self.on_input_modified)
        self.txt_out.bind("<<Modified>>", self.on_output_modified)
        controller.subscribe(self.show_state)

    def _scrolled_text(self, parent, colors: dict, pady=(0, 0)) -> tk.Text:
        frame = ttk.Frame(parent)
        frame.pack(fill=tk.X, pady=pady)
        txt = tk.Text(frame, wrap="none", height=4, undo=True, relief=tk.FLAT, borderwidth=4, **colors)
        scroll = ttk.Scrollbar(frame, orient=tk.VERTICAL, command=txt.yview)
        txt.configure(yscrollcommand=scroll.set)
        scroll.pack(side=tk.RIGHT, fill=tk.Y)
        txt.pack(side=tk.LEFT, fill=tk.X, expand=True)
        return txt

    @staticmethod
    def get_text(widget: tk.Text) -> str:
        return widget.get("1.0", "end-1c")

    @staticmethod
    def set_text(widget: tk.Text, text: str) -> None:
        widget.delete("1.0", tk.END)
        widget.insert("1.0", text)

    def _modified(self, widget: tk.Text, current: str) -> Optional[str]:
        # <<Modified>> fires once per flag change, so reset the flag every time
        if not widget.edit_modified():
            return None
        widget.edit_modified(False)
        text = self.get_text(widget)
        # Programmatic updates from show_state already match the state
        return None if text == current else text

    def on_input_modified(self, _event=None):
        text = self._modified(self.txt_in, self.controller.state.input_text)
        if text is not None:
            self.controller.dispatch(InputEdited(text))

    def on_output_modified(self, _event=None):
        text = self._modified(self.txt_out, self.controller.state.output_text)
        if text is not None:
            self.controller.dispatch(OutputEdited(text))

    def show_state(self, state: AppState):
        if self.get_text(self.txt_in) != state.input_text:
            self.set_text(self.txt_in, state.input_text)
        if self.get_text(self.txt_out) != state.output_text:
            self.set_text(self.txt_out, state.output_text)
        self.btn_copy.configure(state=tk.NORMAL if state.copy_enabled else tk.DISABLED)
        self.show_preview(state.bitmap)

    def show_preview(self, bitmap: Optional[Image.Image]):
        if bitmap is None:
            self.preview_photo = None
            self.preview.configure(image="")
            return
        available = self.preview.winfo_width()
        if available <= 1:
            available = WINDOW_SIZE[0] - 20
        disp = bitmap.resize(fit_to_width(bitmap.size, available), Image.LANCZOS)
        self.preview_photo = ImageTk.PhotoImage(disp)
        self.preview.configure(image=self.preview_photo)


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = parse_args(argv)
    setup_logging(config.log_level)
    controller = AppController(build_services(config))
    try:
        app = App(controller, config)
    except tk.TclError as e:
        log.critical("Could not start the user interface: %s", e)
        return 1
    app.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
