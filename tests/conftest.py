import logging

import pytest

from config_tree.tree import InMemorySession

ENVS_YAML = """\
prod:
  web:
    db.host: db1
    db.port: "5432"
    feature:
      enabled: true
  worker:
    db:
      host: db2
      port: "5433"
    feature:
      enabled: false
qa:
  shared:
    db:
      host: qa-db
      port: "5432"
    feature:
      enabled: true
dev:
  shared:
    db:
      host: dev-db
      port: "5432"
    feature:
      enabled: true
"""

ACL_TEXT = """\
# administrators
admin = 10.0.0.5
de.prod.web = 10.0.1.0/24
de.prod.web@rw = 10.0.3.4
de.prod.worker = 10.0.2.7
"""

ADMIN_ADDRESS = "10.0.0.5"

ENV_VARS = [
    "CONFIG_TREE_ZK_HOST", "ZOOKEEPER_HOST", "CONFIG_TREE_ZK_PORT", "ZOOKEEPER_PORT",
    "CONFIG_TREE_ZK_URL", "CONFIG_TREE_ZK_TIMEOUT", "CONFIG_TREE_HOSTS_PATH",
    "CONFIG_TREE_APP", "CONFIG_TREE_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_log_level():
    yield
    log = logging.getLogger("config_tree")
    log.setLevel(logging.NOTSET)
    for handler in list(log.handlers):
        if getattr(handler, "_config_tree", False):
            log.removeHandler(handler)


@pytest.fixture
def envs_file(tmp_path):
    path = tmp_path / "envs.yaml"
    path.write_text(ENVS_YAML)
    return str(path)


@pytest.fixture
def acl_file(tmp_path):
    path = tmp_path / "acls.properties"
    path.write_text(ACL_TEXT)
    return str(path)


@pytest.fixture
def template_dir(tmp_path):
    root = tmp_path / "templates"
    (root / "nested").mkdir(parents=True)
    (root / "conn.txt").write_text("${db.host}:${db.port}")
    (root / "nested" / "feature.properties.tmpl").write_text("feature.enabled=${feature.enabled}\n")
    (root / ".hidden").write_text("ignored")
    return str(root)


@pytest.fixture
def session():
    return InMemorySession()
