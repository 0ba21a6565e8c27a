"""
演化框架例外類別
"""


class ConfigurationError(ValueError):
    """引擎或問題配置無效 (方向、族群大小、菁英數量、實例格式等)"""


class OperatorContractError(RuntimeError):
    """遺傳算子違反介面約定 (選擇數量錯誤、交配未回傳兩個子代等)"""
