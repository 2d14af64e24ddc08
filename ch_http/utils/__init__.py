# ch_http.utils: 通用工具（配置加载、.sql 文件读取）

from ch_http.utils.sql_loader import read_sql_file
from ch_http.utils.config_loader import load_client_config, load_yaml

__all__ = ["load_client_config", "load_yaml", "read_sql_file"]
