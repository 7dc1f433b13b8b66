import pytest

from fakes import FakeCompletion, upstream_json
from language_tutor.gateway.upstream import UpstreamError
from language_tutor.models.tutor import ProficiencyAnalysis, ProficiencyLevel


@pytest.fixture
def fake_completion():
    return FakeCompletion(text=upstream_json())


@pytest.fixture
def failing_completion():
    return FakeCompletion(error=UpstreamError("Upstream API error: 503"))


@pytest.fixture
def intermediate_analysis():
    return ProficiencyAnalysis(level=ProficiencyLevel.INTERMEDIATE, reasoning="Varied tenses")
