"""
新闻客户端数据层: 远程分页新闻源、本地缓存与列表/搜索状态管理。
"""

__version__ = "0.1.0"
