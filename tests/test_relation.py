"""Tests for visibility relations."""

import pytest

from pipegen.errors import ErrorList, TemplateDefinitionError
from pipegen.relation import Relation, RelationAction, is_visible, stringify


def relation(*items):
    return Relation.model_validate(list(items))


class TestStringify:
    def test_numbers_compare_by_text(self):
        assert stringify(3) == stringify(3.0) == stringify("3") == "3"

    def test_bool_and_none(self):
        assert stringify(True) == "true"
        assert stringify(None) == ""

    def test_list(self):
        assert stringify(["a", 1]) == "[a 1]"


class TestEvaluate:
    def test_empty_relation_is_visible(self):
        assert relation().evaluate({}) is True
        assert is_visible(None, {}) is True

    def test_show_when_matches(self):
        rel = relation({"action": "show", "when": {"name": "env", "value": "prod"}})
        assert rel.evaluate({"env": "prod"}) is True
        assert rel.evaluate({"env": "dev"}) is False
        assert rel.evaluate({}) is False

    def test_hidden_when_matches(self):
        rel = relation({"action": "hidden", "when": {"name": "env", "value": "prod"}})
        assert rel.evaluate({"env": "prod"}) is False
        assert rel.evaluate({"env": "dev"}) is True

    def test_bool_value_matches_string(self):
        rel = relation({"action": "show", "when": {"name": "deploy", "value": "true"}})
        assert rel.evaluate({"deploy": True}) is True

    def test_all(self):
        rel = relation(
            {
                "action": "show",
                "when": {"all": [{"name": "a", "value": 1}, {"name": "b", "value": 2}]},
            }
        )
        assert rel.evaluate({"a": 1, "b": 2}) is True
        assert rel.evaluate({"a": 1, "b": 3}) is False

    def test_any(self):
        rel = relation(
            {
                "action": "show",
                "when": {"any": [{"name": "a", "value": 1}, {"name": "b", "value": 2}]},
            }
        )
        assert rel.evaluate({"a": 0, "b": 2}) is True
        assert rel.evaluate({"a": 0, "b": 0}) is False

    def test_several_actions_use_show(self):
        rel = relation(
            {"action": "hidden", "when": {"name": "a", "value": 1}},
            {"action": "show", "when": {"name": "b", "value": 1}},
        )
        assert rel.evaluate({"a": 1, "b": 1}) is True
        assert rel.evaluate({"a": 1, "b": 0}) is False

    def test_empty_when_is_visible(self):
        """No condition means visible whatever the action."""
        assert relation({"action": "hidden", "when": {}}).evaluate({}) is True
        assert relation({"action": "hidden"}).evaluate({}) is True


class TestValidateDefinition:
    def test_valid(self):
        relation({"action": "show", "when": {"name": "a", "value": 1}}).validate_definition()

    def test_unknown_action(self):
        with pytest.raises(ErrorList) as exc_info:
            relation({"action": "toggle", "when": {"name": "a"}}).validate_definition()
        assert exc_info.value.contains(TemplateDefinitionError)
        assert "toggle" in str(exc_info.value)

    def test_missing_when(self):
        with pytest.raises(ErrorList, match="when should not be nil"):
            relation({"action": "show"}).validate_definition()

    def test_multiple_forms(self):
        with pytest.raises(ErrorList, match="not support multi relation when"):
            relation(
                {"action": "show", "when": {"name": "a", "all": [{"name": "b"}]}}
            ).validate_definition()

    def test_all_item_without_name(self):
        with pytest.raises(ErrorList, match=r"when\.all\[1\]\.name"):
            relation(
                {"action": "show", "when": {"all": [{"name": "a"}, {"value": 1}]}}
            ).validate_definition()

    def test_duplicated_action(self):
        with pytest.raises(ErrorList, match="duplicated relation action"):
            relation(
                {"action": "show", "when": {"name": "a"}},
                {"action": "show", "when": {"name": "b"}},
            ).validate_definition()


def test_unknown_action_fails_evaluation():
    rel = relation({"action": "toggle", "when": {"name": "a", "value": 1}})
    with pytest.raises(TemplateDefinitionError, match="not support relation action"):
        rel.evaluate({"a": 1})


def test_negate():
    assert RelationAction.SHOW.negate() is RelationAction.HIDDEN
    assert RelationAction.HIDDEN.negate() is RelationAction.SHOW
