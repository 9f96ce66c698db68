import argparse
import asyncio
import os
import sys
import logging
from datetime import datetime

# 兼容包路径，自动把 src 加入PYTHONPATH
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from ticket_12306.exceptions import Ticket12306Error
from ticket_12306.services.station_cache import StationCache
from ticket_12306.services.station_service import StationService
from ticket_12306.utils.config import get_settings


async def update_stations(lookup=None):
    settings = get_settings()
    print("🚀 12306车站信息更新工具")
    print("=" * 50)
    print(f"🌐 数据源: {settings.station_index_url}")
    print(f"💾 缓存文件: {settings.cache_path}")
    print(f"⏰ 更新时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 50)
    try:
        print("📡 正在连接12306官网...")
        directory = await StationCache.from_settings(settings).load(force_refresh=True)
    except Ticket12306Error as e:
        print(f"❌ 获取失败: {e}")
        sys.exit(1)
    print(f"✅ 共加载 {len(directory)} 个车站，示例：")
    for station in directory.stations[:10]:
        print(f"    - {station.name}（{station.code}，{station.city}）")

    if lookup:
        service = StationService(directory)
        try:
            station = service.resolve(lookup)
        except Ticket12306Error as e:
            print(f"❌ {e}")
            sys.exit(1)
        print(f"\n🔍 {lookup} => {station.name}（{station.code}）")
        print(f"{station.city}的全部车站:")
        for s in service.city_stations_of(station):
            print(f"    - {s.name}（{s.code}）")
    print("✨ 车站信息更新完成！")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="强制刷新12306车站缓存")
    parser.add_argument("--lookup", help="刷新后解析该车站/城市并列出同城车站")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(update_stations(args.lookup))
