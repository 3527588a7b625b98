"""
Tests for the reconciliation planner and provider diffing.
"""

import pytest

from brewkeeper.core.engine.planner import incoming_deps, obsolete_names, preview
from brewkeeper.core.models.dependency import Category, DependencyCollection
from brewkeeper.core.providers.memory import InMemoryProvider


def _direct(category: Category, *notations: str) -> DependencyCollection:
    coll = DependencyCollection.from_notations(category, list(notations))
    coll.transitive = False
    return coll


class TestObsoleteAndIncoming:
    def test_scenario_formula(self):
        provider = InMemoryProvider({"brew": {"group:git:2.0", "group:curl:8.0"}})
        declared = _direct(Category.FORMULA, "group:git:2.0", "group:wget:1.21")

        assert obsolete_names(provider, declared) == {"group:curl:8.0"}
        assert {d.name for d in incoming_deps(provider, declared)} == {"wget"}

    def test_identity_ignores_version(self):
        provider = InMemoryProvider({"brew": {"group:git:1.0"}})
        declared = _direct(Category.FORMULA, "group:git:2.0")

        assert obsolete_names(provider, declared) == set()
        assert incoming_deps(provider, declared) == set()

    def test_empty_declared_set(self):
        provider = InMemoryProvider({"cask": {"group:firefox:120"}})
        declared = _direct(Category.CASK)

        assert obsolete_names(provider, declared) == {"group:firefox:120"}
        assert incoming_deps(provider, declared) == set()

    def test_everything_empty(self):
        provider = InMemoryProvider()
        declared = _direct(Category.FORMULA)
        assert obsolete_names(provider, declared) == set()
        assert incoming_deps(provider, declared) == set()

    def test_categories_do_not_mix(self):
        provider = InMemoryProvider({"brew": {"group:firefox:1"}})
        declared = _direct(Category.CASK, "firefox")

        assert obsolete_names(provider, declared) == set()
        assert {d.name for d in incoming_deps(provider, declared)} == {"firefox"}

    def test_malformed_record_is_obsolete(self):
        provider = InMemoryProvider({"brew": {"git"}})
        declared = _direct(Category.FORMULA, "git")
        assert obsolete_names(provider, declared) == {"git"}
        assert {d.name for d in incoming_deps(provider, declared)} == {"git"}

    def test_transitive_collection_rejected(self):
        provider = InMemoryProvider()
        coll = DependencyCollection.from_notations(Category.FORMULA, ["git"])
        with pytest.raises(ValueError, match="transitive"):
            obsolete_names(provider, coll)
        with pytest.raises(ValueError, match="transitive"):
            incoming_deps(provider, coll)


class TestPreview:
    def test_preview_disables_transitive_and_sorts(self):
        provider = InMemoryProvider(
            {"brew": {"g:zsh:1", "g:curl:1"}, "cask": {"g:zoom:1"}}
        )
        formula = DependencyCollection.from_notations(Category.FORMULA, ["wget", "bat"])
        cask = DependencyCollection.from_notations(Category.CASK, ["zoom"])

        plan = preview(provider, [formula, cask])

        assert formula.transitive is False
        assert cask.transitive is False
        assert plan.obsolete[Category.FORMULA] == ["g:curl:1", "g:zsh:1"]
        assert [d.name for d in plan.incoming[Category.FORMULA]] == ["bat", "wget"]
        assert plan.obsolete[Category.CASK] == []
        assert plan.incoming[Category.CASK] == []
        assert not plan.is_empty

    def test_to_dict_uses_names(self):
        provider = InMemoryProvider({"brew": {"g:curl:1"}})
        formula = DependencyCollection.from_notations(Category.FORMULA, ["wget"])
        cask = DependencyCollection.from_notations(Category.CASK, [])

        data = preview(provider, [formula, cask]).to_dict()

        assert data["obsolete"] == {"brew": ["curl"], "cask": []}
        assert data["incoming"] == {"brew": ["wget"], "cask": []}

    def test_empty_plan(self):
        plan = preview(
            InMemoryProvider(),
            [
                DependencyCollection.from_notations(Category.FORMULA, []),
                DependencyCollection.from_notations(Category.CASK, []),
            ],
        )
        assert plan.is_empty
