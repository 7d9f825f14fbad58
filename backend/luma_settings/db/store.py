"""
存储句柄

Store 持有引擎和进程内唯一的写锁，所有写操作都通过 run_in_transaction
以一个事务为单位串行执行；文件库上的读操作不加锁，只会看到已提交的数据。
内存库（StaticPool）所有线程共用一个连接，读操作也必须持锁，
否则会读到未提交的行，且读会话归还连接时的 ROLLBACK 会冲掉写事务。
"""

import threading
from contextlib import nullcontext
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from luma_settings.db.init_db import get_engine, create_tables
from luma_settings.exceptions import StorageFailure

T = TypeVar("T")


class Store:
    """
    显式传递的存储句柄

    使用示例：
        store = Store(get_engine("sqlite:///luma_settings.db"))
        store.ensure_schema()
        store.run_in_transaction(lambda session: ..., "upsert_settings")
    """

    def __init__(self, engine=None):
        """
        Args:
            engine: SQLAlchemy 引擎（可选，不传则按环境变量创建）
        """
        self.engine = engine if engine is not None else get_engine()
        # 可重入：同一线程内嵌套的事务单元不会死锁
        self._write_lock = threading.RLock()
        # 单连接共享时读写必须互斥
        self._shared_connection = isinstance(self.engine.pool, StaticPool)

    def ensure_schema(self) -> None:
        """幂等地创建三张表"""
        with self._write_lock:
            try:
                create_tables(self.engine)
            except SQLAlchemyError as e:
                raise StorageFailure("ensure_schema", str(e)) from e

    def run_in_transaction(
        self,
        fn: Callable[[Session], T],
        operation: str = "transaction"
    ) -> T:
        """
        在写锁内以单个事务执行 fn

        fn 正常返回则提交；抛出任何异常都会整体回滚。
        SQLAlchemy 异常转换为 StorageFailure，其余异常原样抛出。

        Args:
            fn: 接收 Session 的回调，应返回与 Session 无关的普通数据
            operation: 操作名，用于错误信息

        Returns:
            fn 的返回值
        """
        with self._write_lock:
            try:
                with Session(self.engine, expire_on_commit=False) as session:
                    with session.begin():
                        return fn(session)
            except SQLAlchemyError as e:
                print(f"[Store] {operation} 失败，事务已回滚: {e}")
                raise StorageFailure(operation, str(e)) from e

    def read(
        self,
        fn: Callable[[Session], T],
        operation: str = "read"
    ) -> T:
        """
        只读访问；文件库不加写锁，共享单连接的内存库持写锁

        Args:
            fn: 接收 Session 的回调
            operation: 操作名，用于错误信息
        """
        guard = self._write_lock if self._shared_connection else nullcontext()
        with guard:
            try:
                with Session(self.engine) as session:
                    return fn(session)
            except SQLAlchemyError as e:
                print(f"[Store] {operation} 读取失败: {e}")
                raise StorageFailure(operation, str(e)) from e
