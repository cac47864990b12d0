# -*- coding: utf-8 -*-
"""
FITS 解析与显示相关的异常。
解析阶段的异常直接抛给调用方，不做重试或自动修复。
"""


class FITSError(Exception):
    """所有 FITS 相关异常的基类。"""


class UnexpectedEnd(FITSError):
    """数据流比合法容器要求的更短（缺少完整块或 END 卡片）。"""

    def __init__(self, message: str = "FITS 文件意外结束"):
        super().__init__(message)


class WrongHeaderValue(FITSError):
    """头部取值无法转换为请求的类型。"""

    def __init__(self, key: str, value: str):
        super().__init__(f"头部关键字 {key} 的取值非法：{value!r}")
        self.key = key
        self.value = value


class UnsupportedBitpix(WrongHeaderValue):
    """BITPIX 不在支持的六种采样类型之内。"""

    def __init__(self, bitpix: str):
        super().__init__("BITPIX", bitpix)
        self.bitpix = bitpix


class NoImageInContainer(FITSError):
    """容器中所有 HDU 都不含图像数据。"""

    def __init__(self):
        super().__init__("文件中没有图像内容")


class PlanCreationError(FITSError):
    """当前采样类型没有可用的通道布局，无法交给渲染层。"""

    def __init__(self, sample_type):
        super().__init__(f"无法为采样类型 {sample_type} 创建显示方案")
        self.sample_type = sample_type
