"""
Synthesis orchestrator.

Decides, for one field, whether the inject action is unavailable, would
create a new injection method or would update the existing one, then
applies that decision to a SourceText snapshot. Detection failures never
raise to the caller: they come back as UNAVAILABLE with a reason, and the
original text is preserved.
"""

import logging

from injectsynth.backends.base import StructureBackend
from injectsynth.backends.registry import get_backend
from injectsynth.config.models import SynthConfig, SynthesisState
from injectsynth.synth.merger import has_assignment, merge
from injectsynth.synth.model import (
    MalformedSourceError,
    SourceText,
    SynthesisError,
    SynthesisPlan,
    SynthesisResult,
)
from injectsynth.synth.naming import parameter_name_for
from injectsynth.synth.synthesizer import closing_brace_stands_alone, insert_method, synthesize

logger = logging.getLogger(__name__)


class InjectionSynthesizer:
    """Creates or extends the injection method for a private field."""

    def __init__(
        self,
        config: SynthConfig | None = None,
        backend: StructureBackend | None = None,
    ):
        self.config = config or SynthConfig()
        self.backend = backend or get_backend(self.config)

    # =========================================================================
    # Decision
    # =========================================================================

    def evaluate(self, source: SourceText, field_name: str) -> SynthesisPlan:
        """Decide create vs. update for ``field_name`` without touching the text."""
        plan = self._evaluate(source, field_name)
        logger.debug(
            f"evaluate field={field_name!r} backend={self.backend.backend_name} "
            f"state={plan.state.value} reason={plan.reason!r}"
        )
        return plan

    def is_available(self, source: SourceText, field_name: str) -> bool:
        """Availability predicate for the host."""
        return self._evaluate(source, field_name).is_available

    def _evaluate(self, source: SourceText, field_name: str) -> SynthesisPlan:
        try:
            return self._plan(source, field_name)
        except MalformedSourceError as e:
            return SynthesisPlan(SynthesisState.UNAVAILABLE, field_name, str(e))

    def _plan(self, source: SourceText, field_name: str) -> SynthesisPlan:
        if not field_name:
            return SynthesisPlan(SynthesisState.UNAVAILABLE, field_name, "empty field name")

        field_ref = self.backend.locate_field(source, field_name)
        if field_ref is None:
            return SynthesisPlan(
                SynthesisState.UNAVAILABLE,
                field_name,
                f"no {self.config.field_visibility} field declaration named '{field_name}'",
            )

        parameter = parameter_name_for(field_name)
        if not parameter:
            return SynthesisPlan(
                SynthesisState.UNAVAILABLE,
                field_name,
                "field name has nothing left after its prefix",
                field_ref=field_ref,
            )

        class_span = self.backend.locate_class(source, field_ref)
        if class_span is None:
            return SynthesisPlan(
                SynthesisState.UNAVAILABLE,
                field_name,
                f"field is not inside a balanced class deriving from {self.config.base_type}",
                field_ref=field_ref,
                parameter_name=parameter,
            )

        method = self.backend.find_injection_method(source, class_span)
        if method is None:
            if not closing_brace_stands_alone(source, class_span):
                return SynthesisPlan(
                    SynthesisState.UNAVAILABLE,
                    field_name,
                    "closing brace of the class is not on its own line",
                    field_ref=field_ref,
                    class_span=class_span,
                    parameter_name=parameter,
                )
            return SynthesisPlan(
                SynthesisState.WOULD_CREATE,
                field_name,
                f"class has no {self.config.method_name} method",
                field_ref=field_ref,
                class_span=class_span,
                parameter_name=parameter,
            )

        has_parameter = parameter in method.existing_parameter_names
        if has_parameter and has_assignment(source, method, field_name):
            return SynthesisPlan(
                SynthesisState.UNAVAILABLE,
                field_name,
                "field is already injected",
                field_ref=field_ref,
                class_span=class_span,
                method=method,
                parameter_name=parameter,
            )

        return SynthesisPlan(
            SynthesisState.WOULD_UPDATE,
            field_name,
            "parameter missing" if not has_parameter else "assignment missing",
            field_ref=field_ref,
            class_span=class_span,
            method=method,
            parameter_name=parameter,
        )

    # =========================================================================
    # Mutation
    # =========================================================================

    def apply(self, source: SourceText, field_name: str) -> SynthesisResult:
        """Apply the inject action, returning the new text and a change summary.

        The text is only changed when the plan is not UNAVAILABLE, and any
        failure while editing returns the original snapshot.
        """
        plan = self._evaluate(source, field_name)
        result = self._execute(source, plan)
        logger.info(
            f"inject field={field_name!r} backend={self.backend.backend_name} "
            f"lines={len(source)} decision={plan.state.value} "
            f"result={result.state.value} lines_after={len(result.source)} "
            f"reason={result.reason!r}"
        )
        return result

    def _execute(self, source: SourceText, plan: SynthesisPlan) -> SynthesisResult:
        if not plan.is_available:
            return SynthesisResult(
                SynthesisState.UNAVAILABLE, source, plan.field_name, plan.reason
            )

        try:
            if plan.state == SynthesisState.WOULD_CREATE:
                method_lines = synthesize(plan.field_ref, plan.class_span, source, self.config)
                new_source = insert_method(source, plan.class_span, method_lines)
            else:
                new_source = merge(plan.method, plan.field_ref, source, self.config.indent_unit)
        except SynthesisError as e:
            return SynthesisResult(SynthesisState.UNAVAILABLE, source, plan.field_name, str(e))

        return SynthesisResult(
            state=plan.state,
            source=new_source,
            field_name=plan.field_name,
            reason=plan.reason,
            declared_type=plan.field_ref.declared_type,
            parameter_name=plan.parameter_name,
        )

    # =========================================================================
    # Inspection
    # =========================================================================

    def inspect(self, source: SourceText) -> list[SynthesisPlan]:
        """Plans for every private field the action is available on."""
        plans: list[SynthesisPlan] = []
        seen: set[str] = set()

        for field_ref in self.backend.list_fields(source):
            if field_ref.name in seen:
                continue
            seen.add(field_ref.name)

            plan = self._evaluate(source, field_ref.name)
            if plan.is_available and plan.field_ref == field_ref:
                plans.append(plan)

        logger.info(
            f"inspect backend={self.backend.backend_name} lines={len(source)} "
            f"injectable={[plan.field_name for plan in plans]}"
        )
        return plans
