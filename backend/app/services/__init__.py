"""
服务层入口：封装对关系型存储的读写。

约定：
- 函数接收 SQLAlchemy Session 作为第一个参数，由路由通过依赖注入提供
- 找不到资源、参数不合法时抛出 app.core.exceptions 中的异常
- 返回 ORM 对象或 serialize_* 生成的字典，由路由封装为响应模型
"""

__all__ = [
    "user_service",
    "profile_service",
    "link_service",
    "tag_service",
    "qr_service",
]
