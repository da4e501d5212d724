import pytest

from config_tree import environments
from config_tree.errors import AmbiguousEnvironmentError, NotFoundError, ParseError

from conftest import ENVS_YAML


@pytest.fixture
def doc():
    return environments.load(ENVS_YAML)


class TestLoad:
    def test_load_text(self, doc):
        assert sorted(doc) == ["dev", "prod", "qa"]
        assert doc["prod"]["web"]["db.host"] == "db1"

    def test_load_file(self, envs_file):
        doc = environments.load_file(envs_file)
        assert doc["prod"]["worker"]["db"]["host"] == "db2"

    def test_empty_document(self):
        assert environments.load("") == {}

    def test_yaml_syntax_error(self):
        with pytest.raises(ParseError, match="YAML parsing error"):
            environments.load("prod: [unclosed")

    def test_wrong_nesting_depth(self):
        with pytest.raises(ParseError, match="must be a mapping of settings"):
            environments.load("prod:\n  web: just-a-string\n")

    def test_non_string_key(self):
        with pytest.raises(ParseError, match="is not a string"):
            environments.load({"prod": {"web": {8080: "port"}}})

    def test_list_leaf(self):
        with pytest.raises(ParseError, match="must be a scalar"):
            environments.load("prod:\n  web:\n    hosts: [a, b]\n")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError, match="Unable to read"):
            environments.load_file(str(tmp_path / "missing.yaml"))

    def test_duplicate_deployment_is_not_a_load_error(self, doc):
        assert "shared" in doc["qa"] and "shared" in doc["dev"]


class TestResolve:
    def test_unique_deployment_without_env(self, doc):
        env = environments.resolve(doc, None, "web")
        assert env.env == "prod"
        assert env.deployment == "web"
        assert env.settings["db.host"] == "db1"

    def test_explicit_env(self, doc):
        env = environments.resolve(doc, "qa", "shared", app="myapp")
        assert env.settings["db"]["host"] == "qa-db"
        assert env.path == "myapp/qa/shared"
        assert env.dotted == "myapp.qa.shared"

    def test_ambiguous_deployment(self, doc):
        with pytest.raises(AmbiguousEnvironmentError) as exc_info:
            environments.resolve(doc, None, "shared")
        assert exc_info.value.environments == ["dev", "qa"]

    def test_unknown_deployment(self, doc):
        with pytest.raises(NotFoundError):
            environments.resolve(doc, None, "nope")

    def test_unknown_env(self, doc):
        with pytest.raises(NotFoundError, match="No environment named"):
            environments.resolve(doc, "nope", "web")

    def test_deployment_not_in_env(self, doc):
        with pytest.raises(NotFoundError, match="de.qa.web"):
            environments.resolve(doc, "qa", "web")

    def test_resolved_settings_are_read_only(self, doc):
        env = environments.resolve(doc, "prod", "worker")
        with pytest.raises(TypeError):
            env.settings["db"]["host"] = "other"
        assert doc["prod"]["worker"]["db"]["host"] == "db2"


class TestValidate:
    def test_clean_document(self):
        doc = {"prod": {"web": {"a": "1"}, "worker": {"a": "2"}}}
        assert environments.validate(doc) == []

    def test_duplicate_deployment_warning(self, doc):
        issues = [i for i in environments.validate(doc) if i.code == "duplicate-deployment"]
        assert len(issues) == 1
        assert issues[0].severity == "warning"
        assert issues[0].deployment == "shared"

    def test_empty_environment(self):
        issues = environments.validate({"prod": {}, "qa": None})
        assert [i.code for i in issues] == ["empty-environment", "empty-environment"]
        assert all(i.is_error for i in issues)

    def test_non_scalar_leaf(self):
        issues = environments.validate({"prod": {"web": {"db": {"hosts": ["a"], "port": None}}}})
        assert sorted(i.key for i in issues) == ["db.hosts", "db.port"]
        assert {i.code for i in issues} == {"non-scalar-leaf"}

    def test_inconsistent_keys(self):
        doc = {"prod": {"web": {"a": "1", "b": "2"}}, "qa": {"web2": {"a": "1"}}}
        issues = environments.validate(doc)
        assert len(issues) == 1
        assert issues[0].code == "inconsistent-keys"
        assert issues[0].key == "b"
        assert "qa.web2" in issues[0].message

    def test_dotted_and_nested_keys_are_equivalent(self):
        doc = {"prod": {"web": {"db.host": "x"}, "worker": {"db": {"host": "y"}}}}
        assert environments.validate(doc) == []

    def test_not_a_mapping(self):
        issues = environments.validate(["prod"])
        assert issues[0].code == "invalid-structure"

    def test_validate_file_reports_syntax_errors(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("prod: [unclosed")
        issues = environments.validate_file(str(path))
        assert issues[0].code == "yaml-syntax"


def test_list_environments(doc):
    assert environments.list_environments(doc) == ["dev", "prod", "qa"]


def test_list_deployments(doc):
    assert environments.list_deployments(doc) == [
        ("dev", "shared"), ("prod", "web"), ("prod", "worker"), ("qa", "shared"),
    ]


def test_flatten_settings():
    assert environments.flatten_settings({"a": {"b": 1, "c": {"d": "x"}}, "e": True}) == {
        "a.b": 1, "a.c.d": "x", "e": True,
    }
