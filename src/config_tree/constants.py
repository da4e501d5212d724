ENV_ZK_HOST = ["CONFIG_TREE_ZK_HOST", "ZOOKEEPER_HOST"]
ENV_ZK_PORT = ["CONFIG_TREE_ZK_PORT", "ZOOKEEPER_PORT"]
ENV_ZK_URL = "CONFIG_TREE_ZK_URL"
ENV_ZK_TIMEOUT = "CONFIG_TREE_ZK_TIMEOUT"
ENV_HOSTS_PATH = "CONFIG_TREE_HOSTS_PATH"
ENV_APP = "CONFIG_TREE_APP"
ENV_LOG_LEVEL = "CONFIG_TREE_LOG_LEVEL"
ENV_LOG_MASK = "CONFIG_TREE_LOG_MASK"

DEFAULT_ZK_PORT = 2181
DEFAULT_TIMEOUT = 10.0
DEFAULT_HOSTS_PATH = "/hosts"
DEFAULT_APP = "de"

TEMPLATE_SUFFIX = ".tmpl"
