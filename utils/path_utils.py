from pathlib import Path


# 获取项目根目录
BASE_DIR = Path(__file__).resolve().parents[1]

# 常用子目录路径
CONFIG_DIR = BASE_DIR / 'config'
LOG_DIR = BASE_DIR / 'log'
DATA_DIR = BASE_DIR / 'data'

# 日志文件路径
LOG_FILE = LOG_DIR / 'sys.log'

# 环境变量文件
ENV_FILE = BASE_DIR / '.env'
