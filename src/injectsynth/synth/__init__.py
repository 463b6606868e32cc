"""
Structural code synthesizer.

Locates a private field and its containing class by brace scanning, then
creates or extends the [Inject] InjectDependencies method that assigns it.
The orchestrator lives in ``injectsynth.synth.orchestrator``.
"""

from injectsynth.synth.merger import merge
from injectsynth.synth.model import (
    ClassSpan,
    FieldRef,
    InjectionMethod,
    MalformedSourceError,
    SourceText,
    SynthesisError,
    SynthesisPlan,
    SynthesisResult,
)
from injectsynth.synth.naming import parameter_name_for
from injectsynth.synth.scanner import find_class_span, find_enclosing_block_end
from injectsynth.synth.synthesizer import insert_method, synthesize

__all__ = [
    "ClassSpan",
    "FieldRef",
    "InjectionMethod",
    "MalformedSourceError",
    "SourceText",
    "SynthesisError",
    "SynthesisPlan",
    "SynthesisResult",
    "find_class_span",
    "find_enclosing_block_end",
    "insert_method",
    "merge",
    "parameter_name_for",
    "synthesize",
]
