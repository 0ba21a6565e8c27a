#!/usr/bin/env python3
"""
演化搜尋框架 - 統一入口點

透過 JSON 配置文件選擇問題 (tsp / sat / sudoku)、提供問題實例並設定演化參數，
執行演化後輸出結果摘要。

使用方式:
    python main_evolution.py --config configs/tsp_example.json
    python main_evolution.py --config configs/sudoku_example.json --test -v
"""

import json
import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Any

from evosolve.evolution.components import ConfigurationError, create_evolution_engine
from evosolve.problems import create_problem

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ('experiment', 'evolution', 'problem')


def load_config(config_path: str) -> Dict[str, Any]:
    """
    載入配置文件

    Args:
        config_path: 配置文件路徑

    Returns:
        配置字典
    """
    logger.info(f"📄 載入配置文件: {config_path}")

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"配置文件不存在: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config = json.load(f)

    missing = [section for section in REQUIRED_SECTIONS if section not in config]
    if missing:
        raise ConfigurationError(f"配置文件缺少必要部分: {missing}")

    logger.info(f"✅ 配置載入成功: {config['experiment'].get('name', 'unnamed')}")
    return config


def log_experiment_info(config: Dict[str, Any]):
    """記錄實驗信息"""
    evolution = config['evolution']
    logger.info(f"📋 實驗名稱: {config['experiment'].get('name', 'unnamed')}")
    logger.info(f"🧩 問題類型: {config['problem']['type']}")
    logger.info(f"🔢 族群大小: {evolution['population_size']}")
    logger.info(f"🔄 演化世代: {evolution['generations']}")
    logger.info(f"👑 菁英數量: {evolution.get('elitism', 0)}")
    logger.info(f"🎲 隨機種子: {evolution.get('seed')}")


def main(argv=None):
    """主函數 - 演化計算入口點"""
    parser = argparse.ArgumentParser(
        description='演化搜尋框架',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用範例:
  python main_evolution.py --config configs/tsp_example.json
  python main_evolution.py --config configs/sat_example.json --test
        """
    )
    parser.add_argument('--config', required=True, help='配置文件路徑')
    parser.add_argument('--test', action='store_true', help='測試模式 (覆蓋為小規模參數)')
    parser.add_argument('--verbose', '-v', action='store_true', help='詳細輸出模式')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = load_config(args.config)

        if args.test:
            logger.info("🧪 測試模式啟用")
            config['evolution']['population_size'] = min(config['evolution']['population_size'], 50)
            config['evolution']['generations'] = min(config['evolution']['generations'], 10)
            config['evolution']['elitism'] = min(config['evolution'].get('elitism', 0),
                                                 config['evolution']['population_size'] // 2)

        log_experiment_info(config)

        problem = create_problem(config['problem'], max_generations=config['evolution']['generations'])
        engine = create_evolution_engine(config, problem)

        engine.run()
        result = engine.result

        summary = result.get_summary()
        logger.info(f"⏱️  總執行時間: {summary['execution_time']:.2f} 秒")
        logger.info(f"📈 完成世代: {summary['generations_completed']}")
        logger.info(f"🏆 最佳適應度: {summary['best_fitness']} (第 {summary['best_generation']} 世代)")
        logger.info(f"🧮 評估次數: {summary['total_evaluations']} (快取命中 {summary['cache_hits']})")
        logger.debug(f"最佳解: {result.best_solution}")

        return result

    except KeyboardInterrupt:
        logger.warning("⚠️ 用戶中斷實驗")
        sys.exit(1)
    except Exception as e:
        logger.error(f"❌ 實驗執行失敗: {e}", exc_info=args.verbose)
        sys.exit(1)


if __name__ == "__main__":
    main()
