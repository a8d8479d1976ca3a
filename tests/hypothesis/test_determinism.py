import pytest
from hypothesis import given
from strategies import raw_site_configs

from sitegraph import ExternalIds, plan, render_template_json


@pytest.mark.hypothesis
@given(raw_site_configs())
def test_determinism_same_config_same_graph(raw):
    external_ids = ExternalIds(account_id="123456789012", stack_name="site")
    assert plan(raw, external_ids).to_json() == plan(dict(raw), external_ids).to_json()
    assert render_template_json(plan(raw)) == render_template_json(plan(raw))


@pytest.mark.hypothesis
@given(raw_site_configs())
def test_dependencies_are_created_first(raw):
    graph = plan(raw)
    created: set[str] = set()
    for resource in graph.resources:
        assert set(resource.depends_on) <= created
        created.add(resource.id)


@pytest.mark.hypothesis
@given(raw_site_configs())
def test_teardown_reverses_creation(raw):
    graph = plan(raw)
    assert graph.teardown_order() == list(reversed(graph.creation_order()))
    deleted: set[str] = set()
    for resource_id in graph.teardown_order():
        dependents = {r.id for r in graph.resources if resource_id in r.depends_on}
        assert dependents <= deleted
        deleted.add(resource_id)
