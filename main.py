"""
Main entry point for the quotes API.
Provides command-line interface and system initialization.
"""

import asyncio
import argparse
import json
import sys
from pathlib import Path
from typing import List, Dict, Any

import pandas as pd
import uvicorn

from utils import main_logger, config_manager, initialize_logging
from utils.exceptions import QuoteSystemError, ValidationError
from utils.validation import QuoteValidator
from database.connection import DatabaseManager
from database.operations import QuoteOperations


class QuoteSystem:
    """引言系统主类"""

    def __init__(self, db_path: str = None):
        self.config = config_manager
        self.db_path = db_path or self.config.get_db_path()
        self.quote_ops = None

    async def initialize(self):
        """打开数据库并建表"""
        main_logger.info("[Main] Initializing quote storage...")
        self.quote_ops = QuoteOperations(DatabaseManager(self.db_path))
        await self.quote_ops.initialize()
        main_logger.info("[Main] Quote storage initialized successfully")

    async def shutdown(self):
        if self.quote_ops:
            await self.quote_ops.close()

    async def import_quotes(self, file_path: str) -> Dict[str, Any]:
        """从 JSON 或 CSV 文件批量导入，与 POST /quotes 相同的验证和事务"""
        records = QuoteValidator.validate_quotes(load_quote_file(file_path))
        before = await self.quote_ops.count_quotes()

        result = await self.quote_ops.add_many_quotes(records)

        after = await self.quote_ops.count_quotes()
        main_logger.info(f"[Main] Quote count {before} -> {after}")
        return result


def load_quote_file(file_path: str) -> List[Dict[str, Any]]:
    """读取引言文件：.json 为数组，.csv 需要 quote,author,language 列"""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Import file not found: {file_path}")

    if path.suffix.lower() == '.csv':
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        return df.to_dict(orient='records')

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def create_parser():
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        description="Multilingual quotes API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve
  python main.py serve --port 8080
  python main.py init-db
  python main.py import quotes.json
  python main.py import quotes.csv
"""
    )
    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    serve_parser = subparsers.add_parser('serve', help='启动API服务')
    serve_parser.add_argument('--host', help='监听地址（默认读取配置）')
    serve_parser.add_argument('--port', type=int, help='监听端口（默认读取配置或 PORT 环境变量）')
    serve_parser.add_argument('--reload', action='store_true', help='开发模式自动重载')

    subparsers.add_parser('init-db', help='创建数据库表')

    import_parser = subparsers.add_parser('import', help='从 JSON/CSV 文件批量导入引言')
    import_parser.add_argument('file', help='引言文件路径')

    return parser


def run_server(host: str = None, port: int = None, reload: bool = False):
    """启动 uvicorn"""
    api_config = config_manager.get_api_config()
    host = host or api_config.host
    port = port or api_config.port

    main_logger.info(f"[Main] Starting API server on {host}:{port}")
    uvicorn.run(
        "api.app:app",
        host=host,
        port=port,
        reload=reload or api_config.reload,
        log_level="info"
    )


async def run_command(args) -> int:
    """执行数据库相关命令"""
    system = QuoteSystem()
    try:
        await system.initialize()

        if args.command == 'init-db':
            print(f"Database ready: {system.db_path}")
            return 0

        if args.command == 'import':
            result = await system.import_quotes(args.file)
            if result['success']:
                print(f"{result['count']} citations importées / quotes imported")
                return 0
            print(f"Échec de l'import / Import failed: {result['error']}")
            return 1

        return 1

    except ValidationError as e:
        main_logger.error(f"[Main] Invalid import file: {e.message}")
        print(f"{e.message}")
        return 1
    except (QuoteSystemError, FileNotFoundError, ValueError) as e:
        main_logger.error(f"[Main] Command {args.command} failed: {e}")
        print(f"Error: {e}")
        return 1
    finally:
        await system.shutdown()


def main():
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    initialize_logging()

    if args.command == 'serve':
        run_server(args.host, args.port, args.reload)
        return 0

    return asyncio.run(run_command(args))


if __name__ == "__main__":
    sys.exit(main())
