"""
Host extension points for the inject action.

Thin shims over ``InjectionSynthesizer``: a context action with an
availability predicate, and a whole-file inspection whose problems carry
the action as their quick fix.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from injectsynth.config.models import SynthConfig, SynthesisState
from injectsynth.host.document import HostDocument, write_action
from injectsynth.synth.model import SourceText, SynthesisResult
from injectsynth.synth.orchestrator import InjectionSynthesizer


@dataclass
class ActionContext:
    """Where an action is invoked: a document and, optionally, a field name."""

    document: HostDocument
    field_name: str | None = None

    def resolve_field(self) -> str | None:
        return self.field_name or self.document.get_caret_field_context()


@dataclass
class Edit:
    """New full text plus a summary for the host to show."""

    new_text: SourceText
    summary: str
    result: SynthesisResult

    @property
    def changed(self) -> bool:
        return self.result.changed


class CodeAction(ABC):
    """Capability interface every host adapter calls into."""

    @property
    @abstractmethod
    def text(self) -> str:
        """Label shown in the host's action menu."""
        pass

    @abstractmethod
    def is_available(self, context: ActionContext) -> bool:
        """Whether the action should be offered in this context."""
        pass

    @abstractmethod
    def apply(self, context: ActionContext) -> Edit:
        """Compute the edit against a snapshot without writing it."""
        pass

    def perform(self, context: ActionContext) -> Edit:
        """Compute the edit, then commit it as one write transaction.

        The edit is discarded if the document changed after the snapshot
        it was computed from.
        """
        snapshot = context.document.get_source_text()
        edit = self.apply(context)
        if not edit.changed:
            return edit

        with write_action():
            if context.document.get_source_text() != snapshot:
                stale = SynthesisResult(
                    SynthesisState.UNAVAILABLE,
                    snapshot,
                    edit.result.field_name,
                    "document changed while the edit was computed",
                )
                return Edit(snapshot, stale.summary(), stale)
            context.document.apply_transaction(edit.new_text)
        return edit


class InjectDependencyAction(CodeAction):
    """Creates or extends the injection method for the field under the caret."""

    family_name = "Unity Dependency Injection"

    def __init__(
        self,
        config: SynthConfig | None = None,
        synthesizer: InjectionSynthesizer | None = None,
    ):
        self.synthesizer = synthesizer or InjectionSynthesizer(config)
        self.config = self.synthesizer.config

    @property
    def text(self) -> str:
        return f"Inject dependency via {self.config.marker_annotation}"

    def is_available(self, context: ActionContext) -> bool:
        if not self.config.accepts_file(context.document.name):
            return False
        field_name = context.resolve_field()
        if not field_name:
            return False
        return self.synthesizer.is_available(context.document.get_source_text(), field_name)

    def apply(self, context: ActionContext) -> Edit:
        source = context.document.get_source_text()
        field_name = context.resolve_field() or ""

        if not self.config.accepts_file(context.document.name):
            result = SynthesisResult(
                SynthesisState.UNAVAILABLE,
                source,
                field_name,
                f"'{context.document.name}' is not one of {self.config.file_extensions}",
            )
        else:
            result = self.synthesizer.apply(source, field_name)

        return Edit(result.source, result.summary(self.config.method_name), result)


@dataclass
class Problem:
    """An injectable field reported by the inspection."""

    field_name: str
    line_index: int
    message: str
    state: SynthesisState
    quick_fix: InjectDependencyAction

    def fix(self, document: HostDocument) -> Edit:
        """Apply the quick fix to ``document``."""
        return self.quick_fix.perform(ActionContext(document, self.field_name))


class InjectableFieldInspection:
    """Reports every private field that the inject action can handle."""

    display_name = "Injectable dependency field"
    short_name = "InjectableDependencyField"

    def __init__(
        self,
        config: SynthConfig | None = None,
        synthesizer: InjectionSynthesizer | None = None,
    ):
        self.action = InjectDependencyAction(config, synthesizer)
        self.config = self.action.config

    def check(self, document: HostDocument) -> list[Problem]:
        if not self.config.accepts_file(document.name):
            return []

        problems = []
        for plan in self.action.synthesizer.inspect(document.get_source_text()):
            problems.append(
                Problem(
                    field_name=plan.field_name,
                    line_index=plan.field_ref.line_index,
                    message=f"Field '{plan.field_name}' can be injected as dependency",
                    state=plan.state,
                    quick_fix=self.action,
                )
            )
        return problems
