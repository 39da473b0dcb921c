"""
McFetch 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
"""

from typing import Any, Dict, Optional
import aiohttp


class McFetchError(Exception):
    """McFetch 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(McFetchError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class APIError(McFetchError):
    """元数据接口相关错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response is not None:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E200"


class ReleaseNotFoundError(McFetchError):
    """版本不存在"""

    def _get_default_code(self) -> str:
        return "E404"


class DownloadError(McFetchError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class TransferError(DownloadError):
    """传输错误（网络、超时、HTTP 状态码）"""

    def _get_default_code(self) -> str:
        return "E301"


class IntegrityError(DownloadError):
    """下载校验错误"""

    def _get_default_code(self) -> str:
        return "E302"


class DownloadFileError(DownloadError):
    """下载文件操作错误"""

    def _get_default_code(self) -> str:
        return "E303"


class DownloadCancelledError(DownloadError):
    """下载被取消"""

    def _get_default_code(self) -> str:
        return "E304"


class PlanningError(McFetchError):
    """任务规划错误（版本描述不完整）"""

    def _get_default_code(self) -> str:
        return "E400"


class OrchestrationError(McFetchError):
    """
    下载流程错误

    由协调器包装，context 中的 stage 标明失败阶段，原始异常保存在 __cause__。
    """

    def _get_default_code(self) -> str:
        return "E500"


__all__ = [
    # 基础异常
    "McFetchError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # 接口异常
    "APIError",
    "ReleaseNotFoundError",
    # 下载异常
    "DownloadError",
    "TransferError",
    "IntegrityError",
    "DownloadFileError",
    "DownloadCancelledError",
    # 规划与流程异常
    "PlanningError",
    "OrchestrationError",
]
