# jobrisk/services/state.py
from __future__ import annotations

import logging, threading, uuid
from collections import OrderedDict
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from .assessment import AssessmentCancelled, AssessmentError, CancelToken
from .models import AssessmentRequest, AssessmentResult, ImageUpload
from .validation import ValidationError, validate_profile_url

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = (
    "Analysis failed. The profile might be private or unreachable. Try uploading a screenshot."
)
CANCELLED_MESSAGE = "Analysis cancelled."
RESULT_ANCHOR = "result-section"


class Mode(str, Enum):
    INPUT = "input"
    ANALYZING = "analyzing"
    RESULTS = "results"


@dataclass(frozen=True)
class ViewState:
    mode: Mode = Mode.INPUT
    profile_url: str = ""
    image: Optional[ImageUpload] = None
    last_error: Optional[str] = None
    last_result: Optional[AssessmentResult] = None
    exporting: bool = False
    scroll_target: Optional[str] = None

    @property
    def analyzing(self) -> bool:
        return self.mode is Mode.ANALYZING

    @property
    def busy(self) -> bool:
        return self.analyzing or self.exporting

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "profileUrl": self.profile_url,
            "hasImage": self.image is not None,
            "analyzing": self.analyzing,
            "exporting": self.exporting,
            "error": self.last_error,
            "result": self.last_result.to_dict() if self.last_result else None,
        }


class AssessmentController:
    """
    Owns one browser session's view state. Transitions happen under a lock;
    the remote call itself runs outside it so cancel() and reads stay live.
    """

    def __init__(self, client, strict_host_match: bool = False) -> None:
        self._client = client
        self._strict = strict_host_match
        self._lock = threading.Lock()
        self._state = ViewState()
        self._token: Optional[CancelToken] = None

    @property
    def state(self) -> ViewState:
        return self._state

    # ---- input mode ----
    def select_image(self, image: ImageUpload) -> ViewState:
        with self._lock:
            if self._state.mode is Mode.INPUT:
                self._state = replace(self._state, image=image)
            return self._state

    def clear_image(self) -> ViewState:
        with self._lock:
            if self._state.mode is Mode.INPUT:
                self._state = replace(self._state, image=None)
            return self._state

    def submit(self, url: str | None, image: ImageUpload | None = None) -> ViewState:
        with self._lock:
            if self._state.busy:
                return self._state
            draft_image = image or self._state.image
            draft_url = url if isinstance(url, str) else ""
            self._state = replace(self._state, profile_url=draft_url, image=draft_image, scroll_target=None)
            try:
                clean_url = validate_profile_url(url, strict=self._strict)
            except ValidationError as e:
                # back in INPUT, so a previous result no longer applies
                self._state = replace(self._state, mode=Mode.INPUT, last_result=None, last_error=e.message)
                return self._state
            token = CancelToken()
            self._token = token
            self._state = replace(self._state, mode=Mode.ANALYZING, last_error=None, last_result=None)

        request = AssessmentRequest(profile_url=clean_url, image=draft_image)
        result: AssessmentResult | None = None
        error: str | None = None
        try:
            result = self._client.analyze(request, cancel_token=token)
        except AssessmentCancelled:
            logger.info("assessment cancelled for %s", clean_url)
            error = CANCELLED_MESSAGE
        except AssessmentError as e:
            logger.warning("assessment failed for %s: %s", clean_url, e, exc_info=True)
            error = ANALYSIS_FAILED_MESSAGE
        except Exception:
            logger.exception("unexpected error while assessing %s", clean_url)
            error = ANALYSIS_FAILED_MESSAGE

        with self._lock:
            if self._token is not token:
                # reset() or cancel() already moved on
                return self._state
            self._token = None
            if result is not None:
                self._state = replace(
                    self._state, mode=Mode.RESULTS, last_result=result,
                    last_error=None, scroll_target=RESULT_ANCHOR,
                )
            else:
                self._state = replace(self._state, mode=Mode.INPUT, last_result=None, last_error=error)
            return self._state

    def cancel(self) -> ViewState:
        with self._lock:
            if self._state.mode is Mode.ANALYZING and self._token is not None:
                self._token.cancel()
                self._token = None
                self._state = replace(self._state, mode=Mode.INPUT, last_error=CANCELLED_MESSAGE)
            return self._state

    def consume_scroll_target(self) -> Optional[str]:
        with self._lock:
            target = self._state.scroll_target
            if target:
                self._state = replace(self._state, scroll_target=None)
            return target

    # ---- results mode ----
    def reset(self) -> ViewState:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
                self._token = None
            self._state = ViewState()
            return self._state

    def export_requested(self, exporter: Callable[[AssessmentResult], object]):
        """
        Run `exporter` on the current result. Returns None when there is no
        result or an export is already running. Exporter errors propagate to
        the caller untouched and leave the stored result and error alone.
        """
        with self._lock:
            if self._state.mode is not Mode.RESULTS or self._state.exporting:
                return None
            result = self._state.last_result
            self._state = replace(self._state, exporting=True)
        try:
            return exporter(result)
        finally:
            with self._lock:
                self._state = replace(self._state, exporting=False)


class ViewStateRegistry:
    """In-memory controllers keyed by an opaque per-browser session id."""

    def __init__(self, factory: Callable[[], AssessmentController], max_sessions: int = 500) -> None:
        self._factory = factory
        self._max = max(1, max_sessions)
        self._lock = threading.Lock()
        self._controllers: "OrderedDict[str, AssessmentController]" = OrderedDict()

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    def get(self, session_id: str) -> AssessmentController:
        with self._lock:
            ctl = self._controllers.get(session_id)
            if ctl is None:
                ctl = self._factory()
                self._controllers[session_id] = ctl
                while len(self._controllers) > self._max:
                    evicted, _ = self._controllers.popitem(last=False)
                    logger.info("view state evicted for session %s", evicted[:8])
            else:
                self._controllers.move_to_end(session_id)
            return ctl

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._controllers.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._controllers)
