"""Server error codes and their descriptions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServerError:
    id: int = 0
    name: str = ""
    descr: str = ""


_ERRORS = (
    ("SUCCESS", "成功。"),
    ("SERVER_ERR_SRV_NO_READY", "服务器没有准备好。"),
    ("SERVER_ERR_SRV_OVERLOAD", "服务器负载过重。"),
    ("SERVER_ERR_ILLEGAL_LOGIN", "非法登录。"),
    ("SERVER_ERR_NAME_PASSWORD", "用户名或者密码不正确。"),
    ("SERVER_ERR_NAME", "用户名不正确。"),
    ("SERVER_ERR_PASSWORD", "密码不正确。"),
    ("SERVER_ERR_ACCOUNT_CREATE_FAILED", "创建账号失败。"),
    ("SERVER_ERR_BUSY", "操作过于繁忙(例如：在服务器前一次请求未执行完毕的情况下连续N次创建账号)。"),
    ("SERVER_ERR_ACCOUNT_LOGIN_ANOTHER", "当前账号在另一处登录了。"),
    ("SERVER_ERR_ACCOUNT_IS_ONLINE", "账号已登陆。"),
    ("SERVER_ERR_PROXY_DESTROYED", "与客户端关联的proxy在服务器上已经销毁。"),
    ("SERVER_ERR_ENTITYDEFS_NOT_MATCH", "EntityDefs不匹配。"),
    ("SERVER_ERR_SERVER_IN_SHUTTINGDOWN", "服务器正在关闭中。"),
    ("SERVER_ERR_NAME_MAIL", "Email地址错误。"),
    ("SERVER_ERR_ACCOUNT_LOCK", "账号被冻结。"),
    ("SERVER_ERR_ACCOUNT_DEADLINE", "账号已过期。"),
    ("SERVER_ERR_ACCOUNT_NOT_ACTIVATED", "账号未激活。"),
    ("SERVER_ERR_VERSION_NOT_MATCH", "与服务端的版本不匹配。"),
    ("SERVER_ERR_OP_FAILED", "操作失败。"),
    ("SERVER_ERR_SRV_STARTING", "服务器正在启动中。"),
    ("SERVER_ERR_ACCOUNT_REGISTER_NOT_AVAILABLE", "未开放账号注册功能。"),
    ("SERVER_ERR_CANNOT_USE_MAIL", "不能使用email地址。"),
    ("SERVER_ERR_NOT_FOUND_ACCOUNT", "找不到此账号。"),
    ("SERVER_ERR_DB", "数据库错误(请检查dbmgr日志和DB)。"),
    ("SERVER_ERR_USER1", "用户自定义错误码1。"),
    ("SERVER_ERR_USER2", "用户自定义错误码2。"),
    ("SERVER_ERR_USER3", "用户自定义错误码3。"),
    ("SERVER_ERR_USER4", "用户自定义错误码4。"),
    ("SERVER_ERR_USER5", "用户自定义错误码5。"),
    ("SERVER_ERR_USER6", "用户自定义错误码6。"),
    ("SERVER_ERR_USER7", "用户自定义错误码7。"),
    ("SERVER_ERR_USER8", "用户自定义错误码8。"),
    ("SERVER_ERR_USER9", "用户自定义错误码9。"),
    ("SERVER_ERR_USER10", "用户自定义错误码10。"),
    ("SERVER_ERR_LOCAL_PROCESSING", "本地处理，通常为某件事情不由第三方处理而是由KBE服务器处理。"),
    ("SERVER_ERR_ACCOUNT_RESET_PASSWORD_NOT_AVAILABLE", "未开放账号重置密码功能。"),
    ("SERVER_ERR_ACCOUNT_LOGIN_ANOTHER_SERVER", "当前账号在其他服务器登陆了。"),
)


class ServerErrorDescrs:
    """Lookup table of server error codes."""

    def __init__(self) -> None:
        self._errors = {
            error_id: ServerError(error_id, name, descr)
            for error_id, (name, descr) in enumerate(_ERRORS)
        }

    def clear(self) -> None:
        self._errors.clear()

    def error(self, error_id: int) -> ServerError:
        """The error for `error_id`, or an empty ServerError if unknown."""
        return self._errors.get(error_id, ServerError())

    def describe(self, error_id: int) -> str:
        err = self.error(error_id)
        return f"{err.name}[{err.descr}]"