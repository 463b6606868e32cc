"""
Shared fixtures: C# samples and one synthesizer per structure backend.
"""

import textwrap

import pytest

from injectsynth.backends.registry import BackendRegistry
from injectsynth.config.models import BackendType, SynthConfig
from injectsynth.synth.orchestrator import InjectionSynthesizer


def cs(code: str) -> str:
    """Dedent a C# sample and drop the leading newline."""
    return textwrap.dedent(code).lstrip("\n")


CREATE_SAMPLE = cs(
    """
    using UnityEngine;

    public class Player : MonoBehaviour
    {
        private IFooService _foo;

        void Start()
        {
            Debug.Log("start");
        }
    }
    """
)

MERGE_SAMPLE = cs(
    """
    public class Enemy : MonoBehaviour
    {
        private IBarService _bar;
        private IFooService _foo;

        [Inject]
        private void InjectDependencies(IBarService bar)
        {
            bar = bar;
        }
    }
    """
)

UNBALANCED_SAMPLE = cs(
    """
    public class Broken : MonoBehaviour
    {
        private IFooService _foo;

        void Start()
        {
        }
    """
)


@pytest.fixture(params=["text", "tree"])
def backend_type(request) -> BackendType:
    """Run a test once per structure backend."""
    if request.param == "tree":
        pytest.importorskip("tree_sitter_c_sharp")
    return BackendType(request.param)


@pytest.fixture
def config(backend_type) -> SynthConfig:
    return SynthConfig(backend=backend_type)


@pytest.fixture
def backend(backend_type, config):
    return BackendRegistry.get_backend(backend_type, config)


@pytest.fixture
def synthesizer(config, backend) -> InjectionSynthesizer:
    return InjectionSynthesizer(config, backend)
