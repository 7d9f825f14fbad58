"""
Luma 设置后端

按用户保存设置和聊天记录的持久化 / 合并引擎
"""

__version__ = "1.0.0"
