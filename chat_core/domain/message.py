"""会话中的单条消息实体。"""

from dataclasses import dataclass
from typing import Optional

from chat_core.domain.models import Role
from chat_core.domain.observable import Observable


@dataclass(eq=False)
class ChatMessage(Observable):
    """一条转录消息。

    - role: system/user/assistant，创建时确定。
    - content: 文本内容，仅在未发送时允许用户编辑。
    - format: 渲染提示，核心逻辑只透传。
    - is_sent: 已提交，不再作为“下一轮”输入槽。
    - is_awaiting: 仅 assistant 占位消息在等待响应时为 True。
    - is_error: 最近一次响应解析失败。
    - can_remove: 当前是否允许删除。
    - is_editing: UI 编辑开关，与发送协议无关。

    消息按身份比较（eq=False），同内容的两条消息互不相等。
    """

    _observed_fields = frozenset(
        {"role", "content", "format", "is_sent", "is_awaiting", "is_error", "can_remove", "is_editing"}
    )

    role: Role = "user"
    content: str = ""
    format: Optional[str] = None
    is_sent: bool = False
    is_awaiting: bool = False
    is_error: bool = False
    can_remove: bool = False
    is_editing: bool = False

    def clone(self) -> "ChatMessage":
        """返回独立副本，不复制监听器。"""

        return ChatMessage(
            role=self.role,
            content=self.content,
            format=self.format,
            is_sent=self.is_sent,
            is_awaiting=self.is_awaiting,
            is_error=self.is_error,
            can_remove=self.can_remove,
            is_editing=self.is_editing,
        )

    def __deepcopy__(self, memo) -> "ChatMessage":
        return self.clone()

    def __copy__(self) -> "ChatMessage":
        return self.clone()

    # ---- 编辑动作 ----

    def begin_edit(self) -> bool:
        """已发送的消息才能进入编辑态。"""

        if not self.is_editing and self.is_sent:
            self.is_editing = True
            return True
        return False

    def cancel_edit(self) -> None:
        if self.is_editing:
            self.is_editing = False

    def new_line(self) -> None:
        # 只能在未发送的输入槽中追加换行
        if not self.is_sent:
            self.content = (self.content or "") + "\n"

    def set_role(self, role: Optional[Role]) -> None:
        if role is not None:
            self.role = role

    def set_format(self, fmt: Optional[str]) -> None:
        if fmt is not None:
            self.format = fmt
