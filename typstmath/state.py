"""Application state and the reducer that drives the convert/render pipeline.

Every user action is an event. ``reduce`` takes the current state and an event
and returns the next state, calling out to the converter, rasterizer and
clipboard through a ``Services`` bundle so tests can swap in fakes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Protocol, Union

from PIL import Image

from typstmath.converter import TextConverter
from typstmath.errors import ConversionError, RenderError
from typstmath.rasterizer import Rasterizer

log = logging.getLogger(__name__)

ERROR_PREFIX = "Error"


class Clipboard(Protocol):
    def copy(self, text: str) -> bool: ...


@dataclass(frozen=True)
class AppState:
    input_text: str = ""
    output_text: str = ""
    bitmap: Optional[Image.Image] = None

    @property
    def copy_enabled(self) -> bool:
        return self.bitmap is not None


@dataclass(frozen=True)
class InputEdited:
    text: str


@dataclass(frozen=True)
class OutputEdited:
    text: str


@dataclass(frozen=True)
class Cleared:
    pass


@dataclass(frozen=True)
class CopyRequested:
    pass


Event = Union[InputEdited, OutputEdited, Cleared, CopyRequested]


@dataclass
class Services:
    converter: TextConverter
    rasterizer: Rasterizer
    clipboard: Clipboard
    dark_mode: bool = False


def render_output(state: AppState, services: Services) -> AppState:
    """Render ``output_text`` into a bitmap; leave it absent when that is not possible."""
    latex = state.output_text
    if not latex or latex.startswith(ERROR_PREFIX):
        return state
    try:
        bitmap = services.rasterizer.render(latex, services.dark_mode)
    except RenderError as e:
        log.error("%s: %s", type(e).__name__, e)
        return state
    return replace(state, bitmap=bitmap)


def reduce(state: AppState, event: Event, services: Services) -> AppState:
    if isinstance(event, InputEdited):
        state = replace(state, input_text=event.text, bitmap=None)
        try:
            latex = services.converter.convert(event.text)
        except ConversionError as e:
            return replace(state, output_text=f"Error: {e}")
        return render_output(replace(state, output_text=latex), services)

    if isinstance(event, OutputEdited):
        state = replace(state, output_text=event.text, bitmap=None)
        return render_output(state, services)

    if isinstance(event, Cleared):
        return AppState()

    if isinstance(event, CopyRequested):
        if state.copy_enabled:
            services.clipboard.copy(state.output_text)
        return state

    raise TypeError(f"Unknown event: {event!r}")


class AppController:
    """Holds the current state and tells listeners when it changes."""

    def __init__(self, services: Services, state: Optional[AppState] = None):
        self.services = services
        self.state = state or AppState()
        self._listeners: list[Callable[[AppState], None]] = []

    def subscribe(self, listener: Callable[[AppState], None]) -> None:
        self._listeners.append(listener)

    def dispatch(self, event: Event) -> AppState:
        self.state = reduce(self.state, event, self.services)
        for listener in self._listeners:
            listener(self.state)
        return self.state
