"""Tests for EnvironmentStore."""

from workbench.environments import DEFAULT_ENVIRONMENTS, EnvironmentStore
from workbench.schemas import Environment


class TestEnvironmentStore:
    def test_seeded_with_defaults(self):
        store = EnvironmentStore(active_id="local")
        assert [e.id for e in store.list()] == [e.id for e in DEFAULT_ENVIRONMENTS]
        assert store.active().name == "Local"

    def test_unknown_initial_active_id_means_none(self):
        store = EnvironmentStore(active_id="missing")
        assert store.active() is None

    def test_add_and_activate(self):
        store = EnvironmentStore([])
        store.add_environment(Environment(id="qa", name="QA", variables={"a": "1"}))
        store.set_active("qa")
        assert store.active().variables == {"a": "1"}

    def test_add_with_existing_id_replaces(self):
        store = EnvironmentStore([Environment(id="qa", name="QA")])
        store.add_environment(Environment(id="qa", name="QA 2"))
        assert len(store.list()) == 1
        assert store.get("qa").name == "QA 2"

    def test_set_active_none_clears(self):
        store = EnvironmentStore(active_id="local")
        store.set_active(None)
        assert store.active() is None
        assert store.active_id is None

    def test_set_active_unknown_is_noop(self):
        store = EnvironmentStore(active_id="local")
        store.set_active("nope")
        assert store.active_id == "local"

    def test_update_and_delete_variable(self):
        store = EnvironmentStore(active_id="local")
        store.update_variable("local", "token", "t1")
        assert store.get("local").variables["token"] == "t1"
        store.delete_variable("local", "token")
        assert "token" not in store.get("local").variables

    def test_unknown_env_mutations_are_noops(self):
        store = EnvironmentStore()
        before = store.list()
        store.update_variable("nope", "a", "b")
        store.delete_variable("nope", "a")
        store.update_environment("nope", name="x")
        assert store.list() == before

    def test_update_environment_partial(self):
        store = EnvironmentStore()
        store.update_environment("staging", name="Stage")
        env = store.get("staging")
        assert env.name == "Stage"
        assert "base_url" in env.variables

    def test_mutation_does_not_alter_previous_reads(self):
        store = EnvironmentStore()
        before = store.get("local")
        store.update_variable("local", "base_url", "http://changed")
        assert before.variables["base_url"] == "http://localhost:3000"

    def test_added_environment_is_copied(self):
        variables = {"a": "1"}
        store = EnvironmentStore([])
        store.add_environment(Environment(id="qa", name="QA", variables=variables))
        variables["a"] = "2"
        assert store.get("qa").variables == {"a": "1"}
