"""State machine for the eight-step health eligibility questionnaire.

Each wizard step is its own frozen variant. A variant can only be built when
every earlier step's gate is satisfied, so a wizard sitting on the attestation
step always carries diagnosed and preventing conditions. ``transition`` is a
pure function from ``(state, action)`` to the next state.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, ClassVar, Union

TOTAL_STEPS = 8

MAX_ANSWER_LENGTH = 500

CONDITION_FIELDS = ("diagnosed_conditions", "conditions_preventing")

_WIRE_KEYS = {
    "age": "age",
    "hsa_provider": "hsaProvider",
    "state_of_residence": "stateOfResidence",
    "diagnosed_conditions": "diagnosedConditions",
    "other_diagnosed_conditions": "otherDiagnosedConditions",
    "risk_factors": "riskFactors",
    "conditions_preventing": "conditionsPreventing",
    "other_conditions_preventing": "otherConditionsPreventing",
    "attestation": "attestation",
}


class InvalidStepError(ValueError):
    """Raised when a wizard state would violate an earlier step's gate."""


class InvalidTransitionError(ValueError):
    """Raised when an action does not apply to the current wizard state."""


class AnswerTooLongError(InvalidTransitionError):
    """Raised when a free-text answer exceeds ``MAX_ANSWER_LENGTH``."""

    def __init__(self, field_name: str) -> None:
        super().__init__(
            f"Please keep your answer to {MAX_ANSWER_LENGTH} characters or fewer."
        )
        self.field_name = field_name


def _filled(value: str) -> bool:
    return bool(value and value.strip())


_GATES: dict[int, Callable[[Any], bool]] = {
    1: lambda answers: _filled(answers.age),
    2: lambda answers: _filled(answers.hsa_provider),
    3: lambda answers: _filled(answers.state_of_residence),
    4: lambda answers: True,
    5: lambda answers: len(answers.diagnosed_conditions) > 0,
    6: lambda answers: True,
    7: lambda answers: len(answers.conditions_preventing) > 0,
    8: lambda answers: answers.attestation is True,
}


def can_advance(step: int, answers: Any) -> bool:
    """Return whether ``answers`` satisfy the gate of ``step``."""

    try:
        gate = _GATES[step]
    except KeyError as exc:
        raise InvalidStepError(f"Step must be between 1 and {TOTAL_STEPS}.") from exc
    return gate(answers)


def toggle_condition(selection: tuple[str, ...], condition: str) -> tuple[str, ...]:
    """Add ``condition`` when absent, remove it when present."""

    if condition in selection:
        return tuple(item for item in selection if item != condition)
    return selection + (condition,)


def _answers_to_dict(answers: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for name, key in _WIRE_KEYS.items():
        value = getattr(answers, name)
        payload[key] = list(value) if name in CONDITION_FIELDS else value
    return payload


def _answers_from_dict(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError("Questionnaire data must be an object.")

    values: dict[str, Any] = {}
    for name, key in _WIRE_KEYS.items():
        if key not in data:
            continue
        value = data[key]
        if name in CONDITION_FIELDS:
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise ValueError(f"{key} must be a list of strings.")
            deduplicated: tuple[str, ...] = ()
            for item in value:
                if item not in deduplicated:
                    deduplicated += (item,)
            values[name] = deduplicated
        elif name == "attestation":
            if not isinstance(value, bool):
                raise ValueError("attestation must be a boolean.")
            values[name] = value
        else:
            if not isinstance(value, str):
                raise ValueError(f"{key} must be a string.")
            if len(value) > MAX_ANSWER_LENGTH:
                raise ValueError(f"{key} is longer than {MAX_ANSWER_LENGTH} characters.")
            values[name] = value
    return values


@dataclass(frozen=True)
class Draft:
    """Answers collected so far; persists across back and forward navigation."""

    age: str = ""
    hsa_provider: str = ""
    state_of_residence: str = ""
    diagnosed_conditions: tuple[str, ...] = ()
    other_diagnosed_conditions: str = ""
    risk_factors: str = ""
    conditions_preventing: tuple[str, ...] = ()
    other_conditions_preventing: str = ""
    attestation: bool = False

    def to_dict(self) -> dict[str, Any]:
        return _answers_to_dict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "Draft":
        return cls(**_answers_from_dict(data))


@dataclass(frozen=True)
class QuestionnaireResponse:
    """A completed questionnaire; every step gate holds by construction."""

    age: str
    hsa_provider: str
    state_of_residence: str
    diagnosed_conditions: tuple[str, ...]
    other_diagnosed_conditions: str = ""
    risk_factors: str = ""
    conditions_preventing: tuple[str, ...] = ()
    other_conditions_preventing: str = ""
    attestation: bool = False

    def __post_init__(self) -> None:
        for step in range(1, TOTAL_STEPS + 1):
            if not can_advance(step, self):
                raise InvalidStepError(f"Questionnaire step {step} is incomplete.")

    def to_dict(self) -> dict[str, Any]:
        return _answers_to_dict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "QuestionnaireResponse":
        values = _answers_from_dict(data)
        required = ("age", "hsa_provider", "state_of_residence", "diagnosed_conditions")
        missing = [_WIRE_KEYS[name] for name in required if name not in values]
        if missing:
            raise ValueError(f"Questionnaire data is missing: {', '.join(missing)}.")
        return cls(**values)


@dataclass(frozen=True)
class WizardStep:
    """Base for the eight step variants."""

    draft: Draft = field(default_factory=Draft)

    number: ClassVar[int] = 0
    title: ClassVar[str] = ""
    owned_fields: ClassVar[tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        for earlier in range(1, self.number):
            if not can_advance(earlier, self.draft):
                raise InvalidStepError(
                    f"Step {self.number} cannot be reached before step {earlier} is complete."
                )

    @property
    def can_advance(self) -> bool:
        return can_advance(self.number, self.draft)

    @property
    def percent_complete(self) -> int:
        return int(self.number * 100 / TOTAL_STEPS + 0.5)

    @property
    def is_last(self) -> bool:
        return self.number == TOTAL_STEPS


class AgeStep(WizardStep):
    number = 1
    title = "Age"
    owned_fields = ("age",)


class ProviderStep(WizardStep):
    number = 2
    title = "HSA Provider"
    owned_fields = ("hsa_provider",)


class ResidenceStep(WizardStep):
    number = 3
    title = "State of Residence"
    owned_fields = ("state_of_residence",)


class HistoryIntroStep(WizardStep):
    number = 4
    title = "Medical History Information"


class DiagnosedStep(WizardStep):
    number = 5
    title = "Diagnosed Conditions"
    owned_fields = ("diagnosed_conditions", "other_diagnosed_conditions")


class RiskFactorsStep(WizardStep):
    number = 6
    title = "Risk Factors"
    owned_fields = ("risk_factors",)


class PreventingStep(WizardStep):
    number = 7
    title = "Conditions I am Trying to Prevent"
    owned_fields = ("conditions_preventing", "other_conditions_preventing")


class AttestationStep(WizardStep):
    number = 8
    title = "Attestation"
    owned_fields = ("attestation",)


STEPS: tuple[type[WizardStep], ...] = (
    AgeStep,
    ProviderStep,
    ResidenceStep,
    HistoryIntroStep,
    DiagnosedStep,
    RiskFactorsStep,
    PreventingStep,
    AttestationStep,
)


@dataclass(frozen=True)
class Completed:
    """Terminal state carrying the emitted response."""

    response: QuestionnaireResponse


@dataclass(frozen=True)
class Cancelled:
    """Terminal state; the wizard was discarded."""


WizardState = Union[WizardStep, Completed, Cancelled]


@dataclass(frozen=True)
class Edit:
    field: str
    value: str | bool


@dataclass(frozen=True)
class Toggle:
    field: str
    condition: str


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


Action = Union[Edit, Toggle, Next, Back, Cancel]


def start() -> WizardStep:
    """Return a fresh wizard positioned on the first step."""

    return AgeStep()


def transition(state: WizardState, action: Action) -> WizardState:
    """Apply ``action`` to ``state`` and return the resulting state.

    A ``Next`` whose gate fails returns ``state`` unchanged. ``Back`` on the
    first step behaves like ``Cancel``.
    """

    if not isinstance(state, WizardStep):
        raise InvalidTransitionError("The questionnaire is already closed.")

    if isinstance(action, Cancel):
        return Cancelled()

    if isinstance(action, Back):
        if state.number == 1:
            return Cancelled()
        return STEPS[state.number - 2](draft=state.draft)

    if isinstance(action, Next):
        if not state.can_advance:
            return state
        if state.is_last:
            return Completed(response=QuestionnaireResponse(**asdict(state.draft)))
        return STEPS[state.number](draft=state.draft)

    if isinstance(action, Toggle):
        if action.field not in CONDITION_FIELDS or action.field not in state.owned_fields:
            raise InvalidTransitionError(
                f"{action.field} cannot be toggled on step {state.number}."
            )
        condition = (action.condition or "").strip()
        if not condition:
            raise InvalidTransitionError("Condition name cannot be blank.")
        current = getattr(state.draft, action.field)
        draft = replace(state.draft, **{action.field: toggle_condition(current, condition)})
        return type(state)(draft=draft)

    if isinstance(action, Edit):
        if action.field in CONDITION_FIELDS or action.field not in state.owned_fields:
            raise InvalidTransitionError(
                f"{action.field} cannot be edited on step {state.number}."
            )
        if action.field == "attestation":
            value: str | bool = bool(action.value)
        else:
            value = "" if action.value is None else str(action.value)
            if len(value) > MAX_ANSWER_LENGTH:
                raise AnswerTooLongError(action.field)
        draft = replace(state.draft, **{action.field: value})
        return type(state)(draft=draft)

    raise InvalidTransitionError(f"Unsupported action: {action!r}")


def state_to_dict(state: WizardStep) -> dict[str, Any]:
    """Serialize an open wizard so it can be carried between requests."""

    return {"step": state.number, "draft": state.draft.to_dict()}


def state_from_dict(data: Any) -> WizardStep:
    """Rebuild an open wizard; raises ``ValueError`` for malformed data."""

    if not isinstance(data, dict):
        raise ValueError("Wizard state must be an object.")
    step = data.get("step")
    if not isinstance(step, int) or isinstance(step, bool) or not 1 <= step <= TOTAL_STEPS:
        raise InvalidStepError(f"Step must be between 1 and {TOTAL_STEPS}.")
    return STEPS[step - 1](draft=Draft.from_dict(data.get("draft") or {}))
