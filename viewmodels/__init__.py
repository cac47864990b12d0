# -*- coding: utf-8 -*-
"""
ViewModel 层：连接 Model 与 View，暴露状态与命令，驱动渲染层更新。
- MainViewModel：FITS 加载、HDU 选择、窗口/颜色表、旋转翻转缩放与光标取值，通过信号通知 View 刷新。
"""

from .main_view_model import MainViewModel, find_first_image_hdu

__all__ = ["MainViewModel", "find_first_image_hdu"]
