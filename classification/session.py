"""
Training session: dataset, classifier selection and re-fit orchestration.

The session replaces the implicit "current classifier / current dataset"
globals of an interactive app with one explicit object driven by a state
machine:

    IDLE -> PARAMETERS_CHANGED -> FITTING -> EVALUATING -> RENDERED
                 ^                   |            |
                 +---- new change ---+------------+   (in-flight request cancelled)

Every change bumps a generation counter. Requests snapshot the session
inputs; their execution (execute_request) is a pure function of that
snapshot, so it can run on an executor. complete() surfaces an outcome
only if its request is still the latest one ("latest request wins").
"""

import threading
from collections import deque
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from config import MeshConfig
from ml_from_scratch import ClassifierError, SampleSet
from .classifier_comparison import ClassifierComparison, ComparisonResult, fit_and_evaluate
from .registry import (
    ClassifierId,
    Hyperparameters,
    default_hyperparameter_table,
    parse_classifier_id,
    update_hyperparameters,
)


class SessionState(Enum):
    IDLE = 'idle'
    PARAMETERS_CHANGED = 'parameters_changed'
    FITTING = 'fitting'
    EVALUATING = 'evaluating'
    RENDERED = 'rendered'


class Mode(Enum):
    SINGLE = 'single'
    COMPARISON = 'comparison'


@dataclass(frozen=True, eq=False)
class EvaluationRequest:
    """Immutable snapshot of everything a fit + evaluate cycle needs."""
    generation: int
    mode: Mode
    classifier_id: ClassifierId
    samples: SampleSet
    hyperparameters: Mapping[ClassifierId, Hyperparameters]
    mesh: MeshConfig
    max_workers: Optional[int] = None


@dataclass
class EvaluationOutcome:
    """Results of one request, keyed by classifier."""
    request: EvaluationRequest
    results: Dict[ClassifierId, ComparisonResult]

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results.values())

    @property
    def single(self) -> ComparisonResult:
        """Result of the request's selected classifier."""
        return self.results[self.request.classifier_id]


@dataclass
class DisplayState:
    """
    What the renderer should show for one classifier.

    result is the fresh result when it succeeded, otherwise the last
    known good one (stale=True), or None when nothing ever trained.
    """
    result: Optional[ComparisonResult]
    error: Optional[ClassifierError]
    stale: bool = False

    @property
    def could_not_train(self) -> bool:
        return self.result is None and self.error is not None


def execute_request(request: EvaluationRequest, on_fitted=None) -> EvaluationOutcome:
    """
    Run the fit + evaluate cycle described by `request`.

    Pure function of the request: it touches no session state, so stale
    executions can simply be discarded.
    """
    if request.mode == Mode.SINGLE:
        cid = request.classifier_id
        result = fit_and_evaluate(cid, request.samples, request.hyperparameters[cid],
                                  request.mesh, on_fitted)
        results = {cid: result}
    else:
        comparison = ClassifierComparison(request.samples, request.hyperparameters, request.mesh)
        results = comparison.run(max_workers=request.max_workers, on_fitted=on_fitted)
    return EvaluationOutcome(request=request, results=results)


class TrainingSession:
    """
    Owns the current dataset, the active classifier, per-classifier
    hyperparameters, the mesh and the display mode.

    Usage:
        session = TrainingSession(samples)
        session.update_hyperparameters('knn', k=7)
        outcome = session.refresh()
        display = session.display()
    """

    def __init__(self,
                 samples: Optional[SampleSet] = None,
                 classifier_id: Union[str, ClassifierId] = ClassifierId.LINEAR,
                 mode: Mode = Mode.SINGLE,
                 mesh: Optional[MeshConfig] = None,
                 max_workers: Optional[int] = None):
        self._lock = threading.RLock()
        self._samples = samples
        self._classifier_id = parse_classifier_id(classifier_id)
        self._mode = Mode(mode)
        self._mesh = mesh if mesh is not None else MeshConfig()
        self._hyperparameters: Dict[ClassifierId, Hyperparameters] = default_hyperparameter_table()
        self.max_workers = max_workers

        self._generation = 0
        self._state = SessionState.IDLE
        self._in_flight: Optional[EvaluationRequest] = None
        self._in_flight_future: Optional[Future] = None

        self.last_outcome: Optional[EvaluationOutcome] = None
        self.last_good: Dict[ClassifierId, ComparisonResult] = {}
        self.last_exception: Optional[BaseException] = None
        self.cancelled_requests = 0
        self.discarded_outcomes = 0
        self.transitions = deque([self._state], maxlen=100)

        if samples is not None:
            self._changed()

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def samples(self) -> Optional[SampleSet]:
        return self._samples

    @property
    def classifier_id(self) -> ClassifierId:
        return self._classifier_id

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def mesh(self) -> MeshConfig:
        return self._mesh

    @property
    def hyperparameters(self) -> Mapping[ClassifierId, Hyperparameters]:
        return MappingProxyType(dict(self._hyperparameters))

    # =========================================================================
    # State machine
    # =========================================================================

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        self.transitions.append(state)

    def _changed(self) -> None:
        """Any input change: invalidate in-flight work and wait for a request."""
        with self._lock:
            self._generation += 1
            if self._in_flight is not None:
                self.cancelled_requests += 1
                if self._in_flight_future is not None:
                    self._in_flight_future.cancel()
                self._in_flight = None
                self._in_flight_future = None
            self._set_state(SessionState.PARAMETERS_CHANGED)

    def is_current(self, request: EvaluationRequest) -> bool:
        return request.generation == self._generation

    def _mark_evaluating(self, request: EvaluationRequest, _classifier_id=None) -> None:
        with self._lock:
            if self.is_current(request) and self._state == SessionState.FITTING:
                self._set_state(SessionState.EVALUATING)

    # =========================================================================
    # Inputs
    # =========================================================================

    def set_samples(self, samples: SampleSet) -> None:
        """Replace the dataset wholesale."""
        if not isinstance(samples, SampleSet):
            raise TypeError(f"Expected SampleSet, got {type(samples).__name__}")
        with self._lock:
            self._samples = samples
            self._changed()

    def select_classifier(self, classifier_id: Union[str, ClassifierId]) -> None:
        cid = parse_classifier_id(classifier_id)
        with self._lock:
            self._classifier_id = cid
            self._changed()

    def set_mode(self, mode: Union[str, Mode]) -> None:
        with self._lock:
            self._mode = Mode(mode)
            self._changed()

    def set_mesh(self, mesh: MeshConfig) -> None:
        with self._lock:
            self._mesh = mesh
            self._changed()

    def update_hyperparameters(self, classifier_id: Union[str, ClassifierId], **changes) -> Hyperparameters:
        """
        Change hyperparameters of one classifier.

        Validated before anything else happens: an invalid value raises
        InvalidHyperparameterError and leaves the session untouched.
        """
        cid = parse_classifier_id(classifier_id)
        with self._lock:
            updated = update_hyperparameters(cid, self._hyperparameters[cid], **changes)
            self._hyperparameters[cid] = updated
            self._changed()
        return updated

    # =========================================================================
    # Requests
    # =========================================================================

    def request_evaluation(self) -> EvaluationRequest:
        """
        Snapshot the inputs into a new request and mark it in flight.

        A previous in-flight request becomes stale and is cancelled.
        """
        with self._lock:
            if self._samples is None:
                raise ValueError("No dataset loaded. Call set_samples() first.")
            if self._in_flight is not None:
                self._changed()
            else:
                self._generation += 1
            request = EvaluationRequest(
                generation=self._generation,
                mode=self._mode,
                classifier_id=self._classifier_id,
                samples=self._samples,
                hyperparameters=MappingProxyType(dict(self._hyperparameters)),
                mesh=self._mesh,
                max_workers=self.max_workers,
            )
            self._in_flight = request
            self._set_state(SessionState.FITTING)
            return request

    def complete(self, request: EvaluationRequest, outcome: EvaluationOutcome) -> bool:
        """
        Surface an outcome if its request is still the latest.

        Returns:
            True if surfaced, False if discarded as stale
        """
        with self._lock:
            if not self.is_current(request):
                self.discarded_outcomes += 1
                return False

            self.last_outcome = outcome
            for cid, result in outcome.results.items():
                if result.ok:
                    self.last_good[cid] = result
            self._in_flight = None
            self._in_flight_future = None
            self._set_state(SessionState.RENDERED)
            return True

    def refresh(self) -> EvaluationOutcome:
        """Run a full fit + evaluate cycle synchronously."""
        request = self.request_evaluation()
        outcome = execute_request(request, on_fitted=lambda cid: self._mark_evaluating(request, cid))
        self.complete(request, outcome)
        return outcome

    def dispatch(self, executor: Executor) -> Future:
        """
        Run the cycle on `executor`; the outcome is surfaced from the
        future's callback if it is still current when it finishes.
        """
        request = self.request_evaluation()
        future = executor.submit(execute_request, request,
                                 lambda cid: self._mark_evaluating(request, cid))
        with self._lock:
            if self.is_current(request):
                self._in_flight_future = future

        def _done(f: Future):
            if f.cancelled():
                return
            error = f.exception()
            if error is not None:
                with self._lock:
                    self.last_exception = error
                    if self.is_current(request):
                        self._in_flight = None
                        self._in_flight_future = None
                        self._set_state(SessionState.PARAMETERS_CHANGED)
                return
            self.complete(request, f.result())

        future.add_done_callback(_done)
        return future

    # =========================================================================
    # Output
    # =========================================================================

    def display(self, classifier_id: Union[str, ClassifierId, None] = None) -> DisplayState:
        """
        Result to render for one classifier (defaults to the selected one),
        falling back to the last known good result after a failed fit.
        """
        cid = self._classifier_id if classifier_id is None else parse_classifier_id(classifier_id)
        with self._lock:
            fresh = None
            if self.last_outcome is not None:
                fresh = self.last_outcome.results.get(cid)

            if fresh is not None and fresh.ok:
                return DisplayState(result=fresh, error=None, stale=False)

            error = fresh.error if fresh is not None else None
            fallback = self.last_good.get(cid)
            return DisplayState(result=fallback, error=error, stale=fallback is not None)
