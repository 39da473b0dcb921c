"""
文件校验器

实现 SHA1 计算与文件有效性判断。文件缺失或读取失败都视为"无效"，
由调用方重新下载，而不是抛出异常。
"""

import hashlib
import os
from typing import Optional

import aiofiles

READ_SIZE = 64 * 1024


class FileVerifier:
    """文件校验器"""

    @staticmethod
    async def calc_sha1(file_path: str) -> Optional[str]:
        """
        计算文件的 SHA1 值

        Args:
            file_path: 文件路径

        Returns:
            SHA1 哈希值或 None（文件不存在或读取失败）
        """
        if not os.path.isfile(file_path):
            return None

        sha1 = hashlib.sha1()
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while True:
                    data = await f.read(READ_SIZE)
                    if not data:
                        break
                    sha1.update(data)
            return sha1.hexdigest()
        except OSError:
            return None

    @staticmethod
    async def verify_sha1(file_path: str, expected_sha1: Optional[str]) -> bool:
        """
        校验文件的 SHA1 是否匹配（不区分大小写）

        Returns:
            是否匹配（如果没有预期值则返回 True）
        """
        if not expected_sha1:
            return True

        current_sha1 = await FileVerifier.calc_sha1(file_path)
        if current_sha1 is None:
            return False

        return current_sha1.lower() == expected_sha1.lower()

    @staticmethod
    def exists(file_path: str) -> bool:
        """检查文件是否存在"""
        return os.path.isfile(file_path)

    @staticmethod
    async def is_valid(file_path: str, expected_sha1: Optional[str] = None) -> bool:
        """
        检查文件是否有效（存在且校验通过）

        Args:
            file_path: 文件路径
            expected_sha1: 预期的 SHA1 值，为空时只检查存在性

        Returns:
            是否有效
        """
        if not FileVerifier.exists(file_path):
            return False

        if expected_sha1:
            return await FileVerifier.verify_sha1(file_path, expected_sha1)

        return True
