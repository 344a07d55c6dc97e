import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional

from src.core.models import AnalysisResult, NoIngredientsFound
from src.services.capture import CapturedImage

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Sorry, there was an error analyzing the image. Please try again."

class ViewState(Enum):
    IDLE = "idle"
    PREVIEWING = "previewing"
    ANALYZING = "analyzing"
    RESULTED = "resulted"
    FAILED = "failed"

class InvalidTransition(RuntimeError):
    pass

@dataclass(frozen=True)
class ScannerState:
    """
    Everything the scanner screen renders from. Transitions return a new state.

    `generation` increases on every capture and reset; an analysis started under
    one generation can only settle the state if nothing replaced the image since.
    """
    view: ViewState = ViewState.IDLE
    image: Optional[CapturedImage] = None
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None
    generation: int = 0

    def __post_init__(self):
        if self.view == ViewState.IDLE and (self.image is not None or self.result is not None or self.error):
            raise InvalidTransition("Idle state cannot carry an image, result or error")
        if self.view != ViewState.IDLE and self.image is None:
            raise InvalidTransition(f"{self.view.name} requires a captured image")
        if self.view == ViewState.RESULTED and (self.result is None or self.error):
            raise InvalidTransition("Resulted state requires a result and no error")
        if self.view == ViewState.FAILED and (self.result is not None or not self.error):
            raise InvalidTransition("Failed state requires an error and no result")
        if self.view in (ViewState.PREVIEWING, ViewState.ANALYZING) and (self.result is not None or self.error):
            raise InvalidTransition(f"{self.view.name} cannot carry a result or error")

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @property
    def can_analyze(self) -> bool:
        return self.view in (ViewState.PREVIEWING, ViewState.FAILED)

    @property
    def is_analyzing(self) -> bool:
        return self.view == ViewState.ANALYZING

    @property
    def show_results(self) -> bool:
        return self.view == ViewState.RESULTED

    @property
    def show_error(self) -> bool:
        return self.view == ViewState.FAILED

    def captured(self, image: CapturedImage) -> 'ScannerState':
        return ScannerState(view=ViewState.PREVIEWING, image=image, generation=self.generation + 1)

    def start_analysis(self) -> 'ScannerState':
        if not self.can_analyze:
            raise InvalidTransition(f"Cannot analyze from {self.view.name}")
        return replace(self, view=ViewState.ANALYZING, error=None)

    def analysis_succeeded(self, generation: int, result: AnalysisResult) -> 'ScannerState':
        if not self._accepts(generation):
            return self
        return replace(self, view=ViewState.RESULTED, result=result)

    def analysis_failed(self, generation: int, message: str = GENERIC_ERROR_MESSAGE) -> 'ScannerState':
        if not self._accepts(generation):
            return self
        return replace(self, view=ViewState.FAILED, error=message)

    def reset(self) -> 'ScannerState':
        return ScannerState(generation=self.generation + 1)

    def _accepts(self, generation: int) -> bool:
        if generation != self.generation or self.view != ViewState.ANALYZING:
            logger.warning(f"Discarding stale analysis result (generation {generation}, current {self.generation}, view {self.view.name})")
            return False
        return True

NO_INGREDIENTS_MESSAGE = "No ingredients found in this image."

@dataclass
class IngredientEntry:
    position: int
    name: str
    explanation: str

@dataclass
class ResultsView:
    """What the results card shows: either a banner or the ingredient entries."""
    banner: Optional[str]
    entries: List[IngredientEntry]

def build_results_view(result: AnalysisResult) -> ResultsView:
    if isinstance(result, NoIngredientsFound) or not result.ingredients:
        return ResultsView(banner=getattr(result, 'message', None) or NO_INGREDIENTS_MESSAGE, entries=[])

    entries = [
        IngredientEntry(position=i + 1, name=ing.name, explanation=ing.explanation)
        for i, ing in enumerate(result.ingredients)
    ]
    return ResultsView(banner=None, entries=entries)
