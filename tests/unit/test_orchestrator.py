"""
Tests for InjectionSynthesizer, run once per structure backend.
"""

import logging

import pytest

from conftest import CREATE_SAMPLE, MERGE_SAMPLE, UNBALANCED_SAMPLE, cs

from injectsynth.backends.registry import BackendRegistry, get_backend
from injectsynth.backends.text import TextBackend
from injectsynth.config.models import BackendType, SynthConfig, SynthesisState
from injectsynth.synth.model import SourceText
from injectsynth.synth.orchestrator import InjectionSynthesizer

CREATED = cs(
    """
    using UnityEngine;

    public class Player : MonoBehaviour
    {
        private IFooService _foo;

        void Start()
        {
            Debug.Log("start");
        }

        [Inject]
        private void InjectDependencies(IFooService foo)
        {
            _foo = foo;
        }
    }
    """
)

MERGED = cs(
    """
    public class Enemy : MonoBehaviour
    {
        private IBarService _bar;
        private IFooService _foo;

        [Inject]
        private void InjectDependencies(IBarService bar, IFooService foo)
        {
            bar = bar;
            _foo = foo;
        }
    }
    """
)

INSPECT_SAMPLE = cs(
    """
    public class Hero : MonoBehaviour
    {
        private IFooService _foo;
        private IBarService m_bar;
        private readonly ILog _log;
        public IBaz _baz;

        [Inject]
        private void InjectDependencies(IFooService foo)
        {
            _foo = foo;
        }
    }

    public class Plain
    {
        private IQux _qux;
    }
    """
)

PROPERTY_SAMPLE = cs(
    """
    public class Hud : MonoBehaviour
    {
        private IScore _bar;
        private IScore _foo => _bar;
        private IScore _baz { get; set; }
    }
    """
)

BODILESS_SAMPLE = cs(
    """
    public abstract class Unit : MonoBehaviour
    {
        private IFooService _foo;

        [Inject]
        protected abstract void InjectDependencies(IBarService bar);

        void Start()
        {
        }
    }
    """
)


# =========================================================================
# Decision
# =========================================================================


class TestEvaluate:
    """Test the tri-state decision."""

    def test_would_create(self, synthesizer):
        plan = synthesizer.evaluate(SourceText.from_text(CREATE_SAMPLE), "_foo")
        assert plan.state == SynthesisState.WOULD_CREATE
        assert plan.parameter_name == "foo"
        assert plan.field_ref.declared_type == "IFooService"
        assert plan.class_span.end_line == 10

    def test_would_update_parameter_missing(self, synthesizer):
        plan = synthesizer.evaluate(SourceText.from_text(MERGE_SAMPLE), "_foo")
        assert plan.state == SynthesisState.WOULD_UPDATE
        assert plan.reason == "parameter missing"
        assert plan.method.signature_line == 6

    def test_would_update_assignment_missing(self, synthesizer):
        plan = synthesizer.evaluate(SourceText.from_text(MERGE_SAMPLE), "_bar")
        assert plan.state == SynthesisState.WOULD_UPDATE
        assert plan.reason == "assignment missing"

    @pytest.mark.parametrize("field_name", ["", "_missing", "bar"])
    def test_unknown_field(self, synthesizer, field_name):
        plan = synthesizer.evaluate(SourceText.from_text(MERGE_SAMPLE), field_name)
        assert plan.state == SynthesisState.UNAVAILABLE
        assert not plan.is_available

    def test_field_outside_eligible_class(self, synthesizer):
        source = SourceText.from_text(CREATE_SAMPLE.replace(" : MonoBehaviour", ""))
        plan = synthesizer.evaluate(source, "_foo")
        assert plan.state == SynthesisState.UNAVAILABLE
        assert "MonoBehaviour" in plan.reason

    def test_unbalanced_class(self, synthesizer):
        assert not synthesizer.is_available(SourceText.from_text(UNBALANCED_SAMPLE), "_foo")

    def test_already_injected(self, synthesizer):
        plan = synthesizer.evaluate(SourceText.from_text(MERGED), "_foo")
        assert plan.state == SynthesisState.UNAVAILABLE
        assert plan.reason == "field is already injected"

    def test_is_available(self, synthesizer):
        assert synthesizer.is_available(SourceText.from_text(CREATE_SAMPLE), "_foo")
        assert synthesizer.is_available(SourceText.from_text(MERGE_SAMPLE), "_foo")
        assert not synthesizer.is_available(SourceText.from_text(MERGED), "_foo")


# =========================================================================
# Mutation
# =========================================================================


class TestApply:
    """Test the create, merge and unavailable scenarios end to end."""

    def test_create(self, synthesizer):
        result = synthesizer.apply(SourceText.from_text(CREATE_SAMPLE), "_foo")
        assert result.state == SynthesisState.WOULD_CREATE
        assert result.created
        assert result.source.to_text() == CREATED

    def test_merge(self, synthesizer):
        result = synthesizer.apply(SourceText.from_text(MERGE_SAMPLE), "_foo")
        assert result.state == SynthesisState.WOULD_UPDATE
        assert result.source.to_text() == MERGED

    def test_unbalanced_returns_original(self, synthesizer):
        source = SourceText.from_text(UNBALANCED_SAMPLE)
        result = synthesizer.apply(source, "_foo")
        assert result.state == SynthesisState.UNAVAILABLE
        assert not result.changed
        assert result.source is source

    def test_apply_twice_is_idempotent(self, synthesizer):
        first = synthesizer.apply(SourceText.from_text(CREATE_SAMPLE), "_foo")
        second = synthesizer.apply(first.source, "_foo")

        assert second.state == SynthesisState.UNAVAILABLE
        assert second.reason == "field is already injected"
        assert second.source.to_text() == first.source.to_text()

    def test_second_field_merges_into_created_method(self, synthesizer):
        text = CREATE_SAMPLE.replace(
            "    private IFooService _foo;\n",
            "    private IFooService _foo;\n    private IBarService m_bar;\n",
        )
        first = synthesizer.apply(SourceText.from_text(text), "_foo")
        second = synthesizer.apply(first.source, "m_bar")

        assert second.state == SynthesisState.WOULD_UPDATE
        lines = second.source.lines
        assert "    private void InjectDependencies(IFooService foo, IBarService bar)" in lines
        assert lines.index("        m_bar = bar;") == lines.index("        _foo = foo;") + 1

    def test_crlf_round_trip(self, synthesizer):
        source = SourceText.from_text(CREATE_SAMPLE.replace("\n", "\r\n"))
        result = synthesizer.apply(source, "_foo")

        assert result.source.to_text() == CREATED.replace("\n", "\r\n")

    def test_summary(self, synthesizer):
        result = synthesizer.apply(SourceText.from_text(MERGE_SAMPLE), "_foo")
        assert result.summary() == (
            "Updated InjectDependencies method for '_foo'\n"
            "Field: _foo\n"
            "Type: IFooService\n"
            "Parameter: foo"
        )

        missing = synthesizer.apply(SourceText.from_text(MERGE_SAMPLE), "_nope")
        assert missing.summary().startswith("Cannot inject '_nope':")

    def test_single_line_body_is_unavailable(self, synthesizer):
        text = cs(
            """
            public class A : MonoBehaviour
            {
                private IFoo _foo;

                [Inject]
                private void InjectDependencies(IBar bar) { _bar = bar; }
            }
            """
        )
        source = SourceText.from_text(text)
        result = synthesizer.apply(source, "_foo")

        assert result.state == SynthesisState.UNAVAILABLE
        assert result.source is source

    def test_one_trace_line_per_apply(self, synthesizer, caplog):
        caplog.set_level(logging.INFO, logger="injectsynth.synth.orchestrator")
        synthesizer.apply(SourceText.from_text(CREATE_SAMPLE), "_foo")

        records = [r for r in caplog.records if r.name == "injectsynth.synth.orchestrator"]
        assert len(records) == 1
        message = records[0].getMessage()
        assert "field='_foo'" in message
        assert "decision=would_create" in message
        assert f"backend={synthesizer.backend.backend_name}" in message


class TestUnsupportedLayouts:
    """Test inputs the action must refuse while keeping the text."""

    @pytest.mark.parametrize(
        "text",
        [
            "public class A : MonoBehaviour { private IFoo _foo; }\n",
            cs(
                """
                public class A : MonoBehaviour
                {
                    private IFoo _foo;
                    void Update() { } }
                """
            ),
        ],
    )
    def test_closing_brace_shares_line(self, synthesizer, text):
        source = SourceText.from_text(text)

        assert not synthesizer.is_available(source, "_foo")
        result = synthesizer.apply(source, "_foo")
        assert result.state == SynthesisState.UNAVAILABLE
        assert "closing brace" in result.reason
        assert result.source is source

    @pytest.mark.parametrize("field_name", ["_foo", "_baz"])
    def test_properties_are_not_fields(self, synthesizer, field_name):
        source = SourceText.from_text(PROPERTY_SAMPLE)

        assert not synthesizer.is_available(source, field_name)
        assert [p.field_name for p in synthesizer.inspect(source)] == ["_bar"]

    def test_marked_method_without_body(self, synthesizer):
        source = SourceText.from_text(BODILESS_SAMPLE)
        result = synthesizer.apply(source, "_foo")

        assert result.state == SynthesisState.UNAVAILABLE
        assert "no block body" in result.reason
        assert result.source is source


# =========================================================================
# Inspection
# =========================================================================


class TestInspect:
    """Test listing the fields the action is available on."""

    def test_only_uninjected_fields_in_eligible_classes(self, synthesizer):
        plans = synthesizer.inspect(SourceText.from_text(INSPECT_SAMPLE))
        assert [(p.field_name, p.state) for p in plans] == [
            ("m_bar", SynthesisState.WOULD_UPDATE)
        ]

    def test_create_candidates(self, synthesizer):
        plans = synthesizer.inspect(SourceText.from_text(CREATE_SAMPLE))
        assert [(p.field_name, p.state) for p in plans] == [
            ("_foo", SynthesisState.WOULD_CREATE)
        ]
        assert plans[0].field_ref.line_index == 4

    def test_nothing_to_report(self, synthesizer):
        assert synthesizer.inspect(SourceText.from_text(MERGED)) == []


# =========================================================================
# Backend selection
# =========================================================================


class TestBackendSelection:
    """Test backend lookup through the registry."""

    def test_default_backend_is_text(self):
        assert isinstance(InjectionSynthesizer().backend, TextBackend)
        assert get_backend().backend_name == "text"

    def test_config_selects_backend(self):
        config = SynthConfig(backend=BackendType.TREE)
        assert get_backend(config).backend_name == "tree"

    def test_registry_builds_each_backend(self):
        config = SynthConfig(base_type="NetworkBehaviour")
        for backend_type in BackendType:
            backend = BackendRegistry.get_backend(backend_type, config)
            assert backend.backend_name == backend_type.value
            assert backend.config is config

    def test_register_rejects_non_backend(self):
        with pytest.raises(TypeError):
            BackendRegistry.register_backend(BackendType.TEXT, object)

    def test_backends_agree(self, backend):
        text_backend = BackendRegistry.get_backend(BackendType.TEXT)
        for sample in (CREATE_SAMPLE, MERGE_SAMPLE, INSPECT_SAMPLE):
            source = SourceText.from_text(sample)
            assert [f.name for f in backend.list_fields(source)] == [
                f.name for f in text_backend.list_fields(source)
            ]
