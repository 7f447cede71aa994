# lp_core/placement/engine.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from rest_framework.exceptions import ValidationError

from lp_core.common.exceptions import ConflictError
from lp_core.common.logging import get_logger
from lp_core.rulesets.defects import report_configuration_defect
from lp_core.rulesets.matching import first_match
from lp_core.rulesets.models import RuleSetDomain
from lp_core.rulesets.selectors import placement_snapshot, resolve_active
from lp_core.rulesets.types import NEXT_PHASES, Phase, PlacementBranch, PlacementConfig, QuestionSpec

log = get_logger(__name__)


class PlacementNotConfigured(ConflictError):
    default_detail = "Placement test is not available: no active placement rule set."
    default_code = "placement_not_configured"


class PhaseConflict(ValidationError):
    """
    advance() called out of order: wrong phase, finished session, or a retry
    whose correct_count differs from the one already recorded.
    """
    default_detail = "Phase does not match session state."
    default_code = "phase_conflict"


class AdvanceCode:
    TERMINAL = "TERMINAL"
    CONTINUATION = "CONTINUATION"
    NO_MATCHING_BRANCH = "NO_MATCHING_BRANCH"


class SessionStatus:
    IN_PROGRESS = "IN_PROGRESS"
    TERMINATED = "TERMINATED"
    FAILED = "FAILED"  # no branch matched; configuration defect


@dataclass(frozen=True)
class AdvanceResult:
    code: str
    phase: str
    correct_count: int
    branch_name: str = ""
    result_level: Optional[int] = None
    next_phase: Optional[str] = None
    question_spec: tuple[QuestionSpec, ...] = ()
    branch: Optional[PlacementBranch] = field(default=None, repr=False, compare=False)

    @property
    def is_terminal(self) -> bool:
        return self.code == AdvanceCode.TERMINAL

    @property
    def is_continuation(self) -> bool:
        return self.code == AdvanceCode.CONTINUATION


@dataclass
class PlacementSession:
    """
    Per-candidate runtime state. Never shared between candidates; not persisted here.
    `config` is the immutable snapshot the session started from. `track` is the
    branch whose continuation is being followed; its sub_branches are tried
    first for the current phase. `branch_path` names every branch taken.
    """
    config: PlacementConfig
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    current_phase: str = Phase.INITIAL.value
    current_questions: tuple[QuestionSpec, ...] = ()
    correct_counts_by_phase: dict[str, int] = field(default_factory=dict)
    questions_answered: int = 0
    status: str = SessionStatus.IN_PROGRESS
    result_level: Optional[int] = None
    outcomes: dict[str, AdvanceResult] = field(default_factory=dict)
    track: Optional[PlacementBranch] = None
    branch_path: list[str] = field(default_factory=list)

    @property
    def is_finished(self) -> bool:
        return self.status != SessionStatus.IN_PROGRESS


class PlacementEngine:
    """
    Multi-phase placement test: initial -> (followup) -> final -> result level.

    The phase graph is data: each branch names the phase it applies to and,
    unless it is terminal, the phase to continue with. The engine only knows
    the three phase names, not which transitions exist.
    """

    domain = RuleSetDomain.PLACEMENT

    # -----------------------------
    # Pure selection
    # -----------------------------
    @staticmethod
    def select_branch(
        config: PlacementConfig,
        *,
        phase: str,
        correct_count: int,
        track: Optional[PlacementBranch] = None,
    ) -> Optional[PlacementBranch]:
        """
        Sub-branches of the branch the session came through are tried first,
        then the top-level branches of the phase.
        """
        if track is not None:
            scoped = [b for b in track.sub_branches if b.from_phase == phase]
            branch = first_match(scoped, correct_count, lambda b: b.correct_range)
            if branch is not None:
                return branch

        candidates = [b for b in config.branches if b.from_phase == phase]
        return first_match(candidates, correct_count, lambda b: b.correct_range)

    @staticmethod
    def evaluate(
        config: PlacementConfig,
        *,
        phase: str,
        correct_count: int,
        track: Optional[PlacementBranch] = None,
    ) -> AdvanceResult:
        branch = PlacementEngine.select_branch(config, phase=phase, correct_count=correct_count, track=track)
        if branch is None:
            return AdvanceResult(code=AdvanceCode.NO_MATCHING_BRANCH, phase=phase, correct_count=correct_count)

        # terminal wins when a branch also carries next_phase/next_questions
        if branch.is_terminal:
            return AdvanceResult(
                code=AdvanceCode.TERMINAL,
                phase=phase,
                correct_count=correct_count,
                branch_name=branch.name,
                result_level=branch.result_level,
                branch=branch,
            )

        return AdvanceResult(
            code=AdvanceCode.CONTINUATION,
            phase=phase,
            correct_count=correct_count,
            branch_name=branch.name,
            next_phase=branch.next_phase,
            question_spec=branch.next_questions,
            branch=branch,
        )

    # -----------------------------
    # Session lifecycle
    # -----------------------------
    @staticmethod
    def start_session(
        config: Optional[PlacementConfig] = None,
        *,
        as_of: Optional[datetime] = None,
    ) -> tuple[PlacementSession, tuple[QuestionSpec, ...]]:
        """
        Seed a session at phase "initial" and return the initial question spec.
        Without an explicit config the active placement rule set is used.
        Drawing concrete questions and charging config.cost happen elsewhere.
        """
        if config is None:
            lookup = resolve_active(domain=PlacementEngine.domain, as_of=as_of)
            if not lookup.ok:
                log.warning("placement.not_configured", reason=lookup.reason)
                raise PlacementNotConfigured()
            config = placement_snapshot(lookup.ruleset)

        session = PlacementSession(config=config, current_questions=config.initial_questions)
        log.info(
            "placement.session_started",
            session_id=str(session.id),
            ruleset_id=str(config.ruleset_id),
            version=config.version,
        )
        return session, config.initial_questions

    @staticmethod
    def advance(session: PlacementSession, *, phase: str, correct_count: int) -> AdvanceResult:
        """
        Record the correct-answer count for the phase just completed and move on.

        Safe to retry: repeating the call for an already completed phase with
        the same correct_count returns the recorded result and changes nothing.
        """
        try:
            phase = Phase(phase).value
        except ValueError:
            raise ValidationError({"phase": f"Unknown phase '{phase}'."})
        if int(correct_count) < 0:
            raise ValidationError({"correct_count": "Must be >= 0."})
        correct_count = int(correct_count)

        recorded = session.outcomes.get(phase)
        if recorded is not None:
            if recorded.correct_count != correct_count:
                raise PhaseConflict(
                    f"Phase '{phase}' already completed with {recorded.correct_count} correct answers."
                )
            log.info("placement.advance_retry", session_id=str(session.id), phase=phase)
            return recorded

        if session.is_finished:
            raise PhaseConflict(f"Session is {session.status.lower()}.")
        if phase != session.current_phase:
            raise PhaseConflict(f"Session is in phase '{session.current_phase}', not '{phase}'.")

        result = PlacementEngine.evaluate(
            session.config, phase=phase, correct_count=correct_count, track=session.track
        )

        # rule sets are validated forward-only; only hand-built configs get here
        if result.is_continuation and result.next_phase not in NEXT_PHASES:
            raise PhaseConflict(f"Branch '{result.branch_name}' continues without a valid next phase.")
        if result.is_continuation and (result.next_phase == phase or result.next_phase in session.outcomes):
            raise PhaseConflict(f"Branch '{result.branch_name}' re-enters completed phase '{result.next_phase}'.")

        session.correct_counts_by_phase[phase] = correct_count
        session.questions_answered += sum(q.count for q in session.current_questions)
        session.outcomes[phase] = result
        if result.branch is not None:
            session.branch_path.append(result.branch_name)

        if result.is_terminal:
            session.status = SessionStatus.TERMINATED
            session.result_level = result.result_level
            session.current_questions = ()
            log.info(
                "placement.terminated",
                session_id=str(session.id),
                phase=phase,
                branch=result.branch_name,
                result_level=result.result_level,
            )
        elif result.is_continuation:
            session.current_phase = result.next_phase
            session.current_questions = result.question_spec
            session.track = result.branch
            log.info(
                "placement.continued",
                session_id=str(session.id),
                phase=phase,
                branch=result.branch_name,
                next_phase=result.next_phase,
                path=list(session.branch_path),
            )
        else:
            session.status = SessionStatus.FAILED
            session.current_questions = ()
            report_configuration_defect(
                domain=PlacementEngine.domain,
                code=AdvanceCode.NO_MATCHING_BRANCH,
                ruleset_id=session.config.ruleset_id,
                phase=phase,
                correct_count=correct_count,
                session_id=str(session.id),
            )

        return result

    @staticmethod
    def walk(config: PlacementConfig, correct_counts: Iterable[int]) -> list[AdvanceResult]:
        """
        Drive a fresh session with one correct count per phase until it stops
        continuing. Phases only move forward, so at most one transition per phase
        is taken.
        """
        session, _questions = PlacementEngine.start_session(config)
        results: list[AdvanceResult] = []
        limit = len(Phase.choices)

        for correct_count in correct_counts:
            if session.is_finished or len(results) >= limit:
                break
            results.append(PlacementEngine.advance(session, phase=session.current_phase, correct_count=correct_count))
        return results
