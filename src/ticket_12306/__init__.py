"""12306余票查询：车站目录缓存与解析、余票记录解码与筛选"""

__version__ = "1.0.0"
