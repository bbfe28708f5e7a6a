"""
应用配置模块
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode
from typing import Annotated, List
import json
import os
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler


class Settings(BaseSettings):
    """应用配置类"""

    # 应用基础配置
    app_name: str = "NFC Card API"
    app_version: str = "1.0.0"
    debug: bool = False

    # API配置
    api_prefix: str = "/api"

    # 数据库配置
    database_url: str = "sqlite:///./nfc_card.db"

    # CORS配置
    # 环境变量 ALLOWED_ORIGINS 可用逗号分隔（或 JSON 数组）覆盖默认值
    allowed_origins: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # 会话配置
    secret_key: str = "change-me-session-secret"
    session_cookie_name: str = "session"
    session_max_age: int = 60 * 60 * 24 * 14  # 14天
    session_https_only: bool = False

    # 身份接入：外部认证服务回调前的开发登录入口
    dev_login_enabled: bool = True
    admin_emails: Annotated[List[str], NoDecode] = []

    # QR 访问令牌有效期
    qr_token_ttl_seconds: int = 3600  # 1小时

    # 新建名片的默认值
    default_bio: str = "Welcome to my digital card!"
    default_theme_color: str = "#000000"
    default_background_color: str = "#ffffff"

    # 日志配置
    log_level: str = "INFO"
    log_file: str = "logs/app.log"

    @field_validator("allowed_origins", "admin_emails", mode="before")
    @classmethod
    def _split_list(cls, value):
        """环境变量中的列表：逗号分隔，兼容 JSON 数组写法"""
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [x.strip() for x in text.split(",") if x.strip()]
        return value

    @field_validator("admin_emails")
    @classmethod
    def _normalize_emails(cls, value: List[str]) -> List[str]:
        return [e.strip().lower() for e in value if e.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


# 创建全局配置实例
settings = Settings()


def ensure_directories():
    """确保必要的目录存在"""
    log_dir = os.path.dirname(settings.log_file or "logs/app.log")
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)


# 自定义日志格式化器（去除app前缀，添加毫秒）
class CustomFormatter(logging.Formatter):
    """去除logger name中的app.前缀，并添加毫秒精度"""
    def formatTime(self, record, datefmt=None):
        import time
        ct = time.localtime(record.created)
        if datefmt:
            s = time.strftime(datefmt, ct)
        else:
            s = time.strftime("%H:%M:%S", ct)
        return s + f".{int(record.msecs):03d}"

    def format(self, record):
        if record.name.startswith('app.'):
            record.name = record.name[4:]
        return super().format(record)


# 日志统一初始化（集中式）
def configure_logging():
    """
    依据 Settings 中的 log_level 与 log_file 统一配置日志：
    - 设置 root logger 等级
    - 标准输出与文件（可轮转）双通道输出
    - 第三方库降噪
    可重复调用，具备幂等性（会复用已有 handler 并更新其等级与格式）。
    """
    level_name = (settings.log_level or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = CustomFormatter(
        fmt="%(asctime)s [%(levelname)-5s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # 控制台输出（存在则更新，没有则添加）
    stream_handler = None
    for h in root_logger.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            stream_handler = h
            break
    if stream_handler is None:
        stream_handler = logging.StreamHandler()
        root_logger.addHandler(stream_handler)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)

    # 文件输出（轮转），存在则更新，没有则添加
    log_file_path = settings.log_file or "logs/app.log"
    ensure_directories()

    file_handler = None
    for h in root_logger.handlers:
        if isinstance(h, logging.FileHandler):
            file_handler = h
            break
    if file_handler is None:
        file_handler = RotatingFileHandler(log_file_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        root_logger.addHandler(file_handler)
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # 第三方库降噪
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
